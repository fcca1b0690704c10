"""HTTP client whose calls return observable operations."""
from __future__ import annotations

import time
from typing import Any

import httpx

from request_logger.config import Settings, settings as default_settings
from request_logger.observability.logging import get_logger
from request_logger.operation import Callback, Operation

log = get_logger("request_logger.transport")


def build_client(timeout: float | None = None, **kwargs: Any) -> httpx.AsyncClient:
    """Build an AsyncClient with transport-level debug traces."""

    async def on_request(request: httpx.Request):
        request.extensions["start_time"] = time.perf_counter()
        log.debug("out_req", extra={"method": request.method, "url": str(request.url)})

    async def on_response(response: httpx.Response):
        start = response.request.extensions.get("start_time")
        duration_ms = (time.perf_counter() - start) * 1000 if start else None
        log.debug(
            "out_res",
            extra={
                "method": response.request.method,
                "url": str(response.request.url),
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2) if duration_ms else None,
            },
        )

    if timeout is None:
        timeout = default_settings.timeout
    return httpx.AsyncClient(
        timeout=timeout,
        event_hooks={"request": [on_request], "response": [on_response]},
        **kwargs,
    )


class HttpClient:
    """Callable client with verb members, one ``Operation`` per call.

    ``client(url, callback, **options)`` builds the request right away and
    drives it on the running event loop. ``callback(error, response)`` is
    invoked once the call ends.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        defaults: dict[str, Any] | None = None,
        settings: Settings = default_settings,
    ):
        self.settings = settings
        self._client = client if client is not None else build_client(settings.timeout)
        self._defaults = dict(defaults or {})

    def __call__(self, url: httpx.URL | str | None = None, callback: Callback | None = None, **options: Any) -> Operation:
        if callback is not None and not callable(callback):
            raise TypeError("callback must be callable")
        options = {**self._defaults, **options}
        bound_url = options.pop("url", None)
        if url is None:
            url = bound_url
        if url is None:
            raise ValueError("A request URL is required")
        method = options.pop("method", "GET")
        follow_redirects = options.pop("follow_redirects", self.settings.follow_redirects)

        request = self._client.build_request(method, url, **options)
        operation = Operation(request, callback=callback)
        operation.start(self._drive, follow_redirects)
        return operation

    def get(self, url=None, callback=None, **options) -> Operation:
        return self._send_as("GET", url, callback, options)

    def post(self, url=None, callback=None, **options) -> Operation:
        return self._send_as("POST", url, callback, options)

    def put(self, url=None, callback=None, **options) -> Operation:
        return self._send_as("PUT", url, callback, options)

    def patch(self, url=None, callback=None, **options) -> Operation:
        return self._send_as("PATCH", url, callback, options)

    def delete(self, url=None, callback=None, **options) -> Operation:
        return self._send_as("DELETE", url, callback, options)

    def head(self, url=None, callback=None, **options) -> Operation:
        return self._send_as("HEAD", url, callback, options)

    def defaults(self, **options: Any) -> HttpClient:
        return HttpClient(self._client, defaults={**self._defaults, **options}, settings=self.settings)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HttpClient:
        await self._client.__aenter__()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self._client.__aexit__(*exc_info)

    def _send_as(self, method: str, url, callback, options: dict[str, Any]) -> Operation:
        return self(url, callback, **{**options, "method": method})

    async def _drive(self, operation: Operation, follow_redirects: bool) -> httpx.Response:
        try:
            return await self._exchange(operation, follow_redirects)
        except Exception as exc:
            # A failing observer still ends the call for callback callers.
            operation.settle(exc)
            raise

    async def _exchange(self, operation: Operation, follow_redirects: bool) -> httpx.Response:
        request = operation.request
        operation.emit("request")
        redirects = 0
        while True:
            try:
                response = await self._client.send(request, stream=True, follow_redirects=False)
            except Exception as exc:
                self._fail(operation, exc)
                raise
            try:
                if follow_redirects and response.next_request is not None:
                    if redirects >= self.settings.max_redirects:
                        error = httpx.TooManyRedirects("Exceeded maximum allowed redirects.", request=request)
                        self._fail(operation, error)
                        raise error
                    redirects += 1
                    request = response.next_request
                    operation.follow(request, response)
                    operation.emit("redirect")
                    continue
                operation.response = response
                operation.emit("response", response)
                try:
                    await response.aread()
                except Exception as exc:
                    self._fail(operation, exc)
                    raise
                try:
                    operation.emit("complete", response)
                finally:
                    operation.settle(None, response)
                return response
            finally:
                await response.aclose()

    @staticmethod
    def _fail(operation: Operation, error: Exception) -> None:
        operation.error = error
        try:
            operation.emit("error", error)
        finally:
            operation.settle(error)


# ``del`` is a keyword, so this alias is only reachable through getattr.
setattr(HttpClient, "del", HttpClient.delete)
