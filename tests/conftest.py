from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
import pytest

from formassist.models import AuthSession

BASE_URL = "https://forms.example.com"


def run(coro: Any) -> Any:
    return asyncio.run(coro)


class FakeTableApi:
    """In-memory table API served through httpx.MockTransport."""

    def __init__(
        self,
        tables: list[dict[str, Any]] | None = None,
        rows: dict[str, list[dict[str, Any]]] | None = None,
        token: str = "tok-123",
    ):
        self.tables = tables if tables is not None else []
        self.rows = rows or {}
        self.token = token
        self.requests: list[httpx.Request] = []
        self.fail_paths: dict[str, httpx.Response] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path in self.fail_paths:
            return self.fail_paths[path]

        if request.headers.get("Authorization") != f"Bearer {self.token}":
            return httpx.Response(401, json={"message": "unauthorized"})

        if path == "/api/v1/tables":
            return httpx.Response(200, json={"items": self.tables})

        prefix = "/api/v1/tables/"
        if path.startswith(prefix) and path.endswith("/data"):
            table_id = path[len(prefix) : -len("/data")]
            if table_id in self.rows:
                return httpx.Response(200, json={"items": self.rows[table_id]})

        return httpx.Response(404, json={"message": "not found"})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


class FakeCompletionApi:
    """Chat completion endpoint returning a canned response."""

    def __init__(self, response: httpx.Response | None = None):
        self.response = response or httpx.Response(
            200,
            json={
                "choices": [{"message": {"role": "assistant", "content": "30"}}],
                "usage": {"prompt_tokens": 120, "completion_tokens": 2, "total_tokens": 122},
            },
        )
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def last_body(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)


def orders_table(table_id: str = "t-1") -> dict[str, Any]:
    return {
        "id": table_id,
        "name": "Orders",
        "displayName": "Customer Orders",
        "columns": [{"name": "amt", "displayName": "Amount", "type": "number"}],
    }


@pytest.fixture
def session() -> AuthSession:
    return AuthSession(base_url=BASE_URL, token="tok-123")


@pytest.fixture
def orders_api() -> FakeTableApi:
    return FakeTableApi(
        tables=[orders_table()],
        rows={"t-1": [{"amt": 10}, {"amt": 20}]},
    )
