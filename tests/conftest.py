"""
Shared fixtures: a freshly seeded dev API per test, reached through a
transport that can fail or hold back individual requests.
"""
import asyncio
from typing import Dict, List, Optional, Tuple

import httpx
import mongomock
import pytest

from admin_console import database, devserver
from admin_console.console import AdminConsole
from admin_console.devserver import ADMIN_EMAIL, ADMIN_PASSWORD, app, seed_demo_data
from admin_console.session import MemoryTokenStore, Session

BASE_URL = "http://testserver"


def _params_match(expected: Optional[Dict[str, str]], actual: Dict[str, str]) -> bool:
    return not expected or all(actual.get(k) == str(v) for k, v in expected.items())


class Fault:
    def __init__(self, method, path, status_code, detail, times, params):
        self.method = method
        self.path = path
        self.status_code = status_code
        self.detail = detail
        self.times = times
        self.params = params

    def matches(self, method, path, params) -> bool:
        return method == self.method and path == self.path and _params_match(self.params, params)


class Hold:
    """Parks a matching request until release() is called."""

    def __init__(self, method, path, params):
        self.method = method
        self.path = path
        self.params = params
        self.reached = asyncio.Event()
        self._release = asyncio.Event()

    def matches(self, method, path, params) -> bool:
        return method == self.method and path == self.path and _params_match(self.params, params)

    def release(self) -> None:
        self._release.set()

    async def wait_released(self) -> None:
        await self._release.wait()


class ScriptedTransport(httpx.AsyncBaseTransport):
    def __init__(self, asgi_app):
        self.inner = httpx.ASGITransport(app=asgi_app)
        self.calls: List[Tuple[str, str, Dict[str, str]]] = []
        self._faults: List[Fault] = []
        self._holds: List[Hold] = []

    def fail(self, method, path, status_code=500, detail="Internal Server Error", times=1, params=None) -> Fault:
        fault = Fault(method, path, status_code, detail, times, params)
        self._faults.append(fault)
        return fault

    def hold(self, method, path, params=None) -> Hold:
        hold = Hold(method, path, params)
        self._holds.append(hold)
        return hold

    def writes(self) -> List[Tuple[str, str, Dict[str, str]]]:
        return [call for call in self.calls if call[0] != "GET"]

    def count(self, method, path) -> int:
        return sum(1 for m, p, _ in self.calls if m == method and p == path)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        method, path = request.method, request.url.path
        params = dict(request.url.params)
        self.calls.append((method, path, params))

        hold = next((h for h in self._holds if h.matches(method, path, params)), None)
        if hold is not None:
            self._holds.remove(hold)
            hold.reached.set()
            await hold.wait_released()

        fault = next((f for f in self._faults if f.matches(method, path, params)), None)
        if fault is not None:
            fault.times -= 1
            if fault.times <= 0:
                self._faults.remove(fault)
            return httpx.Response(fault.status_code, json={"detail": fault.detail}, request=request)

        return await self.inner.handle_async_request(request)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def mongo(monkeypatch):
    """An in-memory MongoDB standing in for DATABASE_URL."""
    test_db = mongomock.MongoClient()["admin_console_test"]
    monkeypatch.setattr(database, "db", test_db)
    monkeypatch.setattr(devserver, "db", test_db)
    return test_db


@pytest.fixture
def backend(mongo):
    seed_demo_data()
    return app


@pytest.fixture
def transport(backend):
    return ScriptedTransport(backend)


@pytest.fixture
async def console(transport, anyio_backend):
    console = AdminConsole(session=Session(MemoryTokenStore()), base_url=BASE_URL, transport=transport)
    await console.login(ADMIN_EMAIL, ADMIN_PASSWORD)
    transport.calls.clear()
    yield console
    await console.aclose()


@pytest.fixture
async def loaded(console, transport, anyio_backend):
    await console.load()
    transport.calls.clear()
    return console