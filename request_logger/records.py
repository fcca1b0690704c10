"""Log records emitted for each phase of an outbound call."""
from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_serializer


class FrozenHeaders(dict):
    """Read-only header mapping held by records."""

    def _read_only(self, *args: Any, **kwargs: Any) -> Any:
        raise TypeError("record headers are read-only")

    __setitem__ = __delitem__ = __ior__ = _read_only
    clear = pop = popitem = setdefault = update = _read_only

    def __reduce__(self):
        return (FrozenHeaders, (dict(self),))

    def __deepcopy__(self, memo: dict) -> FrozenHeaders:
        return FrozenHeaders(copy.deepcopy(dict(self), memo))


HeaderMap = Annotated[dict[str, Any], AfterValidator(FrozenHeaders)]


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class ResponseView(_Record):
    headers: HeaderMap
    status_code: int = Field(alias="statusCode")
    body: str | bytes | None = None


class RequestRecord(_Record):
    type: Literal["request"] = "request"
    id: str
    method: str
    uri: str
    headers: HeaderMap
    body: str | None = None


class ResponseRecord(_Record):
    type: Literal["response"] = "response"
    id: str
    uri: str
    response: ResponseView
    duration: float


class RedirectRecord(_Record):
    type: Literal["redirect"] = "redirect"
    id: str
    uri: str
    response: ResponseView
    duration: float


class ErrorRecord(_Record):
    type: Literal["error"] = "error"
    id: str
    method: str
    uri: str
    headers: HeaderMap
    error: BaseException
    duration: float

    @field_serializer("error", when_used="json")
    def _serialize_error(self, error: BaseException) -> str:
        return f"{type(error).__name__}: {error}"


Record = Union[RequestRecord, ResponseRecord, RedirectRecord, ErrorRecord]


def clone_headers(headers: Mapping[str, Any] | None) -> dict[str, Any]:
    # Records must never alias the live operation's headers.
    if not headers:
        return {}
    return copy.deepcopy({key: value for key, value in headers.items()})


def extract_uri(uri: Any) -> str:
    return str(uri)


def decode_body(body: str | bytes | None, encoding: str = "utf-8") -> str | None:
    if not body:
        return None
    if isinstance(body, str):
        return body
    return bytes(body).decode(encoding, errors="replace")
