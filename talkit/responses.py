from typing import Any, Optional

from fastapi import Response
from fastapi.responses import JSONResponse, PlainTextResponse

FORBIDDEN_MESSAGE = "You are trying to access to this api with malformed or unhauthenticated user"
NOT_FOUND_MESSAGE = "User uid not found"


def error_response(error_code: str, status: int, message: str, data: Optional[Any] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={
            "error": error_code,
            "statusCode": status,
            "data": data,
            "message": message,
        },
    )


def forbidden_response() -> JSONResponse:
    return error_response("FORBIDDEN", 403, FORBIDDEN_MESSAGE)


def not_found_response() -> JSONResponse:
    return error_response("NOT_FOUND", 404, NOT_FOUND_MESSAGE)


def internal_error_response(message: str = "Internal server error") -> JSONResponse:
    return error_response("INTERNAL_ERROR", 500, message)


def bad_request_response() -> Response:
    return Response(status_code=400)


def unsupported_method_response() -> PlainTextResponse:
    return PlainTextResponse("UNSUPPORTED METHOD", status_code=404)
