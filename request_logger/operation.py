"""In-flight HTTP operation observed by phase name."""
from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Generator
from typing import Any

import httpx

PHASES = ("request", "response", "redirect", "complete", "error")

Observer = Callable[..., Any]
Callback = Callable[[BaseException | None, httpx.Response | None], Any]


def _request_body(request: httpx.Request) -> bytes | None:
    try:
        return request.content
    except httpx.RequestNotRead:
        # Streaming uploads are never buffered.
        return None


class Operation:
    """Handle for one outbound call.

    Phase observers are invoked in subscription order on the event loop that
    drives the call. Awaiting the operation yields the final
    ``httpx.Response`` or raises the error that ended the call.
    """

    def __init__(self, request: httpx.Request, callback: Callback | None = None):
        self.request = request
        self.method = request.method
        self.uri = request.url
        self.headers = request.headers
        self.body = _request_body(request)
        self.callback = callback
        self.response: httpx.Response | None = None
        self.error: BaseException | None = None
        self._observers: dict[str, list[Observer]] = {phase: [] for phase in PHASES}
        self._task: asyncio.Task | None = None
        self._delivered = False
        self._delivered_error: BaseException | None = None

    def __repr__(self) -> str:
        return f"<Operation {self.method} {self.uri}>"

    def on(self, phase: str, observer: Observer) -> Operation:
        if phase not in self._observers:
            raise ValueError(f"Unknown phase {phase!r}, expected one of {', '.join(PHASES)}")
        self._observers[phase].append(observer)
        return self

    def emit(self, phase: str, *args: Any) -> None:
        for observer in list(self._observers[phase]):
            observer(*args)

    def follow(self, request: httpx.Request, response: httpx.Response) -> None:
        """Point the operation at the next hop of a redirect chain."""
        self.request = request
        self.method = request.method
        self.uri = request.url
        self.headers = request.headers
        self.body = _request_body(request)
        self.response = response

    def start(self, driver: Callable[..., Awaitable[httpx.Response]], *args: Any) -> None:
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(driver(self, *args))
        self._task.add_done_callback(self._on_task_done)

    def settle(self, error: BaseException | None = None, response: httpx.Response | None = None) -> None:
        """Hand the outcome of the call to the callback, at most once."""
        if self._delivered:
            return
        self._delivered = True
        self._delivered_error = error
        if self.callback is not None:
            self.callback(error, response)

    def __await__(self) -> Generator[Any, None, httpx.Response]:
        if self._task is None:
            raise RuntimeError("Operation has not been started")
        return self._task.__await__()

    def _on_task_done(self, task: asyncio.Task) -> None:
        if task.cancelled() or self.callback is None:
            return
        # Failures the callback already received are handled.
        error = task.exception()
        if error is not None and error is not self._delivered_error:
            task.get_loop().call_exception_handler(
                {"message": "Request operation failed", "exception": error, "task": task}
            )
