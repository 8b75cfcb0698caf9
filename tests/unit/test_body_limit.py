"""Tests for the body size limit middleware."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route

from src.proxy.body_limit import BodySizeLimitMiddleware


def _create_app(max_bytes: int = 16) -> Starlette:
    async def echo(request: Request) -> PlainTextResponse:
        return PlainTextResponse(str(len(await request.body())))

    app = Starlette(routes=[Route("/", echo, methods=["POST"])])
    return BodySizeLimitMiddleware(app, max_bytes=max_bytes)  # type: ignore[return-value]


@pytest.mark.asyncio
async def test_body_within_limit_passes() -> None:
    app = _create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.post("/", content=b"x" * 16)
        assert resp.status_code == 200
        assert resp.text == "16"


@pytest.mark.asyncio
async def test_body_over_limit_returns_413() -> None:
    app = _create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.post("/", content=b"x" * 17)
        assert resp.status_code == 413
        assert resp.json() == {"error": "Payload too large"}


@pytest.mark.asyncio
async def test_chunked_body_within_limit_passes() -> None:
    async def chunks() -> AsyncIterator[bytes]:
        for _ in range(2):
            yield b"x" * 8

    app = _create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.post("/", content=chunks())
        assert resp.status_code == 200
        assert resp.text == "16"


@pytest.mark.asyncio
async def test_chunked_body_over_limit_stops_reading() -> None:
    sent = 0

    async def chunks() -> AsyncIterator[bytes]:
        nonlocal sent
        for _ in range(10):
            sent += 1
            yield b"x" * 8

    app = _create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.post("/", content=chunks())
        assert resp.status_code == 413
        assert resp.json() == {"error": "Payload too large"}
    assert sent < 10

