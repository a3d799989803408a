def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "store": "ok"}


def test_version(client):
    body = client.get("/version").json()

    assert body["version"] == "1.0.0"
    assert body["app_name"] == "Talkit API"


def test_root_lists_endpoints(client):
    body = client.get("/").json()

    assert "POST /users" in body["endpoints"]


def test_unknown_path_keeps_default_404(client):
    response = client.get("/nowhere")

    assert response.status_code == 404
    assert response.json() == {"detail": "Not Found"}


def test_run_passes_request_timeout(monkeypatch):
    from talkit import main

    calls = {}
    monkeypatch.setattr(main.uvicorn, "run", lambda target, **options: calls.update(options, target=target))

    main.run()

    assert calls["target"] == "talkit.main:app"
    assert calls["timeout_keep_alive"] == 10
