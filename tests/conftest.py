import asyncio
import re

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse, RedirectResponse

from request_logger import HttpClient

URL = "http://foo.bar/"
REDIRECT_URL = "http://bar.foo/"
UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$")


def create_upstream() -> FastAPI:
    app = FastAPI()

    @app.api_route("/", methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"])
    async def root():
        return PlainTextResponse("foo")

    @app.get("/redirect")
    async def redirect():
        return RedirectResponse(REDIRECT_URL, status_code=302)

    @app.get("/hop")
    async def hop():
        return RedirectResponse(f"{URL}redirect", status_code=302)

    @app.get("/loop")
    async def loop():
        return RedirectResponse(f"{URL}loop", status_code=302)

    @app.get("/slow")
    async def slow():
        await asyncio.sleep(0.05)
        return PlainTextResponse("foo")

    @app.get("/crash")
    async def crash():
        raise OSError("connection reset")

    @app.get("/broken")
    async def broken():
        return PlainTextResponse("nope", status_code=503)

    return app


class RecordingSink:
    def __init__(self):
        self.calls = []

    def __call__(self, record, operation):
        self.calls.append((record, operation))

    @property
    def records(self):
        return [record for record, _ in self.calls]

    @property
    def types(self):
        return [record.type for record in self.records]

    @property
    def last(self):
        return self.records[-1]

    def of_type(self, record_type):
        return [record for record in self.records if record.type == record_type]


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest_asyncio.fixture
async def http_client():
    client = HttpClient(httpx.AsyncClient(transport=httpx.ASGITransport(app=create_upstream())))
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def failing_client():
    def refuse(request: httpx.Request):
        raise httpx.ConnectError("foo", request=request)

    client = HttpClient(httpx.AsyncClient(transport=httpx.MockTransport(refuse)))
    yield client
    await client.aclose()
