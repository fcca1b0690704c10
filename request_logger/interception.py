from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any

from request_logger.config import Settings, settings as default_settings
from request_logger.engine import CorrelationEngine
from request_logger.sinks import Sink

VERBS = frozenset({"get", "post", "put", "patch", "head", "delete", "del"})

ApplyHandler = Callable[[Callable[..., Any], tuple, dict], Any]


class Intercepted:
    """Stand-in for a callable that routes every call through ``apply``."""

    def __init__(self, target: Callable[..., Any], apply: ApplyHandler):
        self._target = target
        self._apply = apply
        functools.update_wrapper(self, target, updated=())

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._apply(self._target, args, kwargs)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._target, name)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._target!r}>"


class InstrumentedClient(Intercepted):
    """Client wrapper whose verb members are intercepted too."""

    def __getattr__(self, name: str) -> Any:
        member = getattr(self._target, name)
        if name in VERBS:
            return Intercepted(member, self._apply)
        return member

    async def __aenter__(self) -> InstrumentedClient:
        await self._target.__aenter__()
        return self

    async def __aexit__(self, *exc_info: Any) -> Any:
        return await self._target.__aexit__(*exc_info)


def instrument(client: Any, sink: Sink | None = None, *, settings: Settings = default_settings) -> InstrumentedClient:
    """Wrap ``client`` so every call made through it is logged to ``sink``.

    Raises ``SinkNotCallableError`` before wrapping when ``sink`` cannot be
    called.
    """
    engine = CorrelationEngine(sink, settings=settings)
    return InstrumentedClient(client, engine)
