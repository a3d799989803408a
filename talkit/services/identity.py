from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx
from jose import jwt
from jose.exceptions import JWTError

from talkit.config import Settings, get_settings


class VerificationError(Exception):
    """The presented token is missing, malformed, expired or not ours."""


class IdentityServiceError(Exception):
    """The verifier itself could not run (key endpoint down, no secret configured)."""


def clean_token(authorization: Optional[str]) -> str:
    """
    Normalize an Authorization header value to the bare token:
    - strips surrounding whitespace and quotes
    - drops a leading 'Bearer ' scheme (any case)
    """
    if not authorization:
        return ""

    token = authorization.strip().strip('"').strip("'")
    if token[:7].lower() == "bearer ":
        token = token[7:].strip()
    return token


def _require_subject(claims: Dict[str, Any]) -> Dict[str, Any]:
    if not claims.get("sub"):
        raise VerificationError("token has no subject")
    return claims


class IdentityVerifier(ABC):
    @abstractmethod
    async def verify(self, token: str) -> Dict[str, Any]:
        """Return the decoded claims of ``token`` or raise ``VerificationError``."""


class SharedSecretVerifier(IdentityVerifier):
    """HS256 tokens signed with a shared secret. Meant for local development."""

    algorithm = "HS256"

    def __init__(self, secret: str):
        self.secret = secret

    async def verify(self, token: str) -> Dict[str, Any]:
        if not self.secret:
            raise IdentityServiceError("JWT_SECRET is not set")
        if not token:
            raise VerificationError("missing token")

        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as e:
            raise VerificationError(str(e)) from e
        return _require_subject(claims)


class FirebaseTokenVerifier(IdentityVerifier):
    """
    Verifies Firebase Authentication ID tokens.

    ID tokens are RS256 JWTs signed by one of Google's rotating securetoken keys,
    published as x509 certificates keyed by ``kid``. The audience is the Firebase
    project id and the issuer is ``https://securetoken.google.com/<project id>``.
    """

    algorithm = "RS256"

    def __init__(
        self,
        project_id: str,
        certs_url: str,
        timeout: float = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.project_id = project_id
        self.certs_url = certs_url
        self.timeout = timeout
        self.transport = transport

    @property
    def issuer(self) -> str:
        return f"https://securetoken.google.com/{self.project_id}"

    async def _fetch_certificates(self) -> Dict[str, str]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                r = await client.get(self.certs_url)
        except httpx.HTTPError as e:
            raise IdentityServiceError(f"fetching signing certificates failed: {e}") from e
        if r.status_code != 200:
            raise IdentityServiceError(f"fetching signing certificates failed: HTTP {r.status_code}")
        try:
            certificates = r.json()
        except ValueError as e:
            raise IdentityServiceError(f"signing certificates are not JSON: {e}") from e
        if not isinstance(certificates, dict):
            raise IdentityServiceError("signing certificates are not a kid -> certificate map")
        return certificates

    async def verify(self, token: str) -> Dict[str, Any]:
        if not token:
            raise VerificationError("missing token")

        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise VerificationError(f"malformed token: {e}") from e

        if header.get("alg") != self.algorithm:
            raise VerificationError(f"unexpected algorithm {header.get('alg')!r}")

        certificates = await self._fetch_certificates()
        certificate = certificates.get(header.get("kid", ""))
        if not certificate:
            raise VerificationError("token signed with an unknown key")

        try:
            claims = jwt.decode(
                token,
                certificate,
                algorithms=[self.algorithm],
                audience=self.project_id,
                issuer=self.issuer,
            )
        except JWTError as e:
            raise VerificationError(str(e)) from e
        return _require_subject(claims)


def build_verifier(settings: Settings) -> IdentityVerifier:
    if settings.auth_backend == "jwt":
        return SharedSecretVerifier(settings.jwt_secret)
    return FirebaseTokenVerifier(settings.project_id, settings.firebase_certs_url)


def get_verifier() -> IdentityVerifier:
    return build_verifier(get_settings())
