from fastapi import APIRouter
from fastapi.testclient import TestClient

from src.app import app


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_root(client):
    assert client.get("/").json()["status"] == "ok"


def test_unknown_route_uses_error_shape(client):
    response = client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


def test_unhandled_exception_is_generic_500():
    router = APIRouter()

    @router.get("/__boom")
    async def boom():
        raise RuntimeError("secret detail")

    app.include_router(router)
    try:
        with TestClient(app, raise_server_exceptions=False) as test_client:
            response = test_client.get("/__boom", headers={"Origin": "https://fynda.com"})
    finally:
        app.router.routes[:] = [r for r in app.router.routes if getattr(r, "path", None) != "/__boom"]

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert response.headers["Access-Control-Allow-Origin"] == "https://fynda.com"
