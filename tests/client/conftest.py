import pytest
import httpx
from typing import Any, AsyncGenerator, Callable, Dict, List, Optional
from pytest_asyncio import fixture as async_fixture
from fastapi import Body, FastAPI, Query
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from very_httpx.client.request_client import RequestClient

BASE_URL = "http://test"


# --- Backend de test : répond avec l'enveloppe {errno, errmsg, data} ---

backend = FastAPI(title="very-httpx test backend")


def envelope(data: Any = None, errno: Any = 0, errmsg: str = "") -> Dict[str, Any]:
    return {"errno": errno, "errmsg": errmsg, "data": data}


@backend.get("/users")
async def list_users(id: Optional[int] = Query(None), name: Optional[str] = Query(None)):
    return envelope({"id": id, "name": name})


@backend.post("/users")
async def create_user(payload: Dict[str, Any] = Body(...)):
    return envelope({"created": payload})


@backend.put("/users/{user_id}")
async def update_user(user_id: int, payload: Dict[str, Any] = Body(...)):
    return envelope({"id": user_id, "updated": payload})


@backend.delete("/users/{user_id}")
async def delete_user(user_id: int, payload: Optional[Dict[str, Any]] = Body(None)):
    return envelope({"id": user_id, "deleted": True, "reason": (payload or {}).get("reason")})


@backend.get("/business-error")
async def business_error(errno: str = Query("1"), errmsg: str = Query("")):
    return envelope(None, errno=errno, errmsg=errmsg)


@backend.get("/status/{code}")
async def http_status(code: int):
    return JSONResponse(status_code=code, content=envelope(None, errno=code))


@backend.get("/empty")
async def empty():
    return Response(status_code=200)


@backend.get("/float-status")
async def float_status():
    return envelope({"ok": True}, errno=0.0)


@backend.get("/text")
async def text():
    return PlainTextResponse("pong")


@backend.get("/custom-envelope")
async def custom_envelope(code: str = Query("OK")):
    return {"code": code, "msg": "custom", "result": [1, 2, 3]}


# --- Fixtures ---

@async_fixture
async def make_client() -> AsyncGenerator[Callable[..., RequestClient], None]:
    """Factory de RequestClient branchés sur le backend ASGI ; fermés en fin de test."""
    clients: List[RequestClient] = []

    def factory(options: Optional[Dict[str, Any]] = None,
                transport_config: Optional[Dict[str, Any]] = None) -> RequestClient:
        config = {"base_url": BASE_URL, "transport": httpx.ASGITransport(app=backend)}
        config.update(transport_config or {})
        client = RequestClient(options, config)
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.aclose()


@pytest.fixture
def mock_transport_config():
    """Config transport avec un httpx.MockTransport piloté par `handler`."""

    def build(handler: Callable[[httpx.Request], httpx.Response]) -> Dict[str, Any]:
        return {"base_url": BASE_URL, "transport": httpx.MockTransport(handler)}

    return build
