from fastapi.testclient import TestClient

from backend.app.main import (
    LOCAL_DEVELOPMENT_ORIGIN,
    _load_allowed_origins_from_env,
    _resolve_allowed_origins,
    _split_raw_origins,
    app,
)


def test_split_raw_origins_accepts_commas_and_whitespace():
    raw = "http://localhost:3000, http://127.0.0.1:3000 http://frontend:3000"
    assert _split_raw_origins(raw) == [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://frontend:3000",
    ]


def test_load_allowed_origins_from_env_accepts_space_separated_values(monkeypatch):
    monkeypatch.setenv(
        "BACKEND_ALLOWED_ORIGINS",
        "http://localhost:3000/ http://127.0.0.1:3000",
    )

    origins = _load_allowed_origins_from_env()

    assert origins == [
        "http://127.0.0.1:3000",
        "http://localhost:3000",
    ]


def test_resolved_origins_always_include_local_dev_server(monkeypatch):
    monkeypatch.setenv("BACKEND_ALLOWED_ORIGINS", "https://expenses.example.com")

    origins = _resolve_allowed_origins()

    assert "https://expenses.example.com" in origins
    assert LOCAL_DEVELOPMENT_ORIGIN in origins


def test_expenses_endpoint_includes_cors_headers_for_local_dev_origin():
    client = TestClient(app)

    response = client.options(
        "/api/expenses",
        headers={
            "Origin": LOCAL_DEVELOPMENT_ORIGIN,
            "Access-Control-Request-Method": "GET",
        },
    )

    assert response.status_code == 200
    assert response.headers.get("access-control-allow-origin") == LOCAL_DEVELOPMENT_ORIGIN
