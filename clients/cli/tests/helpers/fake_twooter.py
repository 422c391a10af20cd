"""In-memory twooter service for integration tests."""

from __future__ import annotations

import json
import secrets
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from aiohttp import web

FEED_LIMIT = 30


@dataclass
class FakeTwooterState:
    tokens: Dict[str, str] = field(default_factory=dict)
    messages: List[Dict[str, str]] = field(default_factory=list)
    refreshed: List[str] = field(default_factory=list)
    requests: List[Dict[str, object]] = field(default_factory=list)
    raw_register_body: Optional[bytes] = None
    raw_messages_body: Optional[bytes] = None


def _invalid_request(message: str) -> web.Response:
    return web.json_response({"code": "invalid_request", "message": message}, status=400)


def _unauthorized(token: object) -> web.Response:
    return web.json_response({"code": "unauthorized", "message": "unknown credential", "token": token}, status=401)


async def _read_body(request: web.Request) -> Dict[str, object]:
    state: FakeTwooterState = request.app["state"]
    raw = await request.read()
    body = json.loads(raw.decode("utf-8")) if raw else {}
    state.requests.append(
        {
            "path": request.path,
            "method": request.method,
            "content_type": request.headers.get("Content-Type"),
            "user_agent": request.headers.get("User-Agent"),
            "body": body,
        }
    )
    return body if isinstance(body, dict) else {}


async def handle_register(request: web.Request) -> web.Response:
    state: FakeTwooterState = request.app["state"]
    body = await _read_body(request)
    if state.raw_register_body is not None:
        return web.Response(body=state.raw_register_body, content_type="text/plain")
    name = body.get("name")
    if not isinstance(name, str) or not name:
        return _invalid_request("name is required")
    if name in state.tokens:
        return web.json_response({"code": "name_taken", "message": f"{name} is registered"}, status=409)
    token = secrets.token_hex(8)
    state.tokens[name] = token
    return web.Response(text=token)


async def handle_refresh(request: web.Request) -> web.Response:
    state: FakeTwooterState = request.app["state"]
    body = await _read_body(request)
    if state.tokens.get(str(body.get("name"))) != body.get("token"):
        return _unauthorized(body.get("token"))
    state.refreshed.append(str(body["name"]))
    return web.Response(text="")


async def handle_post(request: web.Request) -> web.Response:
    state: FakeTwooterState = request.app["state"]
    body = await _read_body(request)
    name = str(body.get("name"))
    if state.tokens.get(name) != body.get("token"):
        return _unauthorized(body.get("token"))
    state.messages.append({"name": name, "message": str(body.get("message", ""))})
    return web.Response(text="")


async def handle_messages(request: web.Request) -> web.Response:
    state: FakeTwooterState = request.app["state"]
    await _read_body(request)
    if state.raw_messages_body is not None:
        return web.Response(body=state.raw_messages_body, content_type="application/json")
    return web.json_response(state.messages[-FEED_LIMIT:])


def create_app(state: FakeTwooterState | None = None) -> web.Application:
    app = web.Application()
    app["state"] = state or FakeTwooterState()
    app.router.add_post("/registerName", handle_register)
    app.router.add_post("/refreshName", handle_refresh)
    app.router.add_post("/postMessage", handle_post)
    app.router.add_post("/messages", handle_messages)
    return app
