# tests/v1/test_concurrency.py
"""Blocking database work must not stall the event loop."""

import asyncio
import time
from collections.abc import Awaitable, Callable

import httpx
import pytest
from fastapi import FastAPI

from inkwell.services import auth_service, post_service

SLOW_CALL_SECONDS = 0.3
MAX_LOOP_STALL_SECONDS = 0.15


async def _worst_stall(
    app: FastAPI, send: Callable[[httpx.AsyncClient], Awaitable[httpx.Response]]
) -> tuple[httpx.Response, float]:
    """Run ``send`` beside a 10 ms ticker and return the longest gap between ticks."""
    gaps: list[float] = []
    done = asyncio.Event()

    async def ticker() -> None:
        last = time.perf_counter()
        while not done.is_set():
            await asyncio.sleep(0.01)
            now = time.perf_counter()
            gaps.append(now - last)
            last = now

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        ticks = asyncio.create_task(ticker())
        response = await send(client)
        done.set()
        await ticks
    return response, max(gaps)


def _slowed(func):
    def slow(*args, **kwargs):
        time.sleep(SLOW_CALL_SECONDS)
        return func(*args, **kwargs)

    return slow


@pytest.mark.asyncio
async def test_fetch_by_slug_runs_off_the_loop(app, author, make_post, monkeypatch) -> None:
    slug = make_post(author).slug
    monkeypatch.setattr(post_service, "get_post_by_slug", _slowed(post_service.get_post_by_slug))

    response, stall = await _worst_stall(app, lambda client: client.get(f"/api/posts/{slug}"))

    assert response.status_code == 200
    assert response.json()["data"]["views"] == 1
    assert stall < MAX_LOOP_STALL_SECONDS


@pytest.mark.asyncio
async def test_multipart_registration_runs_off_the_loop(app, monkeypatch) -> None:
    monkeypatch.setattr(auth_service, "register", _slowed(auth_service.register))
    form = {
        "username": "slow",
        "password": "pw123456",
        "userEmail": "slow@x.com",
        "roleName": "reader",
    }

    response, stall = await _worst_stall(
        app, lambda client: client.post("/api/auth/register", data=form)
    )

    assert response.status_code == 201
    assert stall < MAX_LOOP_STALL_SECONDS


@pytest.mark.asyncio
async def test_multipart_post_creation_runs_off_the_loop(app, author_headers, monkeypatch) -> None:
    monkeypatch.setattr(post_service, "create_post", _slowed(post_service.create_post))
    form = {"title": "Slow", "excerpt": "Takes a while", "content": "<p>Body</p>"}

    response, stall = await _worst_stall(
        app,
        lambda client: client.post("/api/posts/create", data=form, headers=author_headers),
    )

    assert response.status_code == 201
    assert stall < MAX_LOOP_STALL_SECONDS
