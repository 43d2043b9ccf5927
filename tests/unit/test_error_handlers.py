"""Unit tests for error responses and the CORS headers they carry."""

from typing import List

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from featherlearn.api import errors
from featherlearn.config import get_settings
from featherlearn.kernel.errors import NotFoundError


def _app() -> FastAPI:
    app = FastAPI()
    errors.register_exception_handlers(app)

    @app.get("/missing")
    async def missing():
        raise NotFoundError("Lesson not found")

    return app


def _use_origins(monkeypatch, origins: List[str]) -> None:
    settings = get_settings().model_copy(update={"cors_origins": origins})
    monkeypatch.setattr(errors, "get_settings", lambda: settings)


async def _get_missing(origin: str):
    async with AsyncClient(transport=ASGITransport(app=_app()), base_url="http://test") as ac:
        return await ac.get("/missing", headers={"Origin": origin})


@pytest.mark.asyncio
async def test_error_without_configured_origins(monkeypatch):
    _use_origins(monkeypatch, [])

    r = await _get_missing("http://elsewhere.example")

    assert r.status_code == 404
    assert r.json() == {"detail": "Lesson not found", "code": "not_found"}
    assert "access-control-allow-origin" not in r.headers


@pytest.mark.asyncio
async def test_error_echoes_allowed_origin(monkeypatch):
    _use_origins(monkeypatch, ["http://localhost:3000", "http://localhost:8081"])

    allowed = await _get_missing("http://localhost:8081")
    other = await _get_missing("http://elsewhere.example")

    assert allowed.headers["access-control-allow-origin"] == "http://localhost:8081"
    assert other.headers["access-control-allow-origin"] == "http://localhost:3000"
