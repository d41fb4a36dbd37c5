"""Response assembly: turn whatever a handler returned into a response triple."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, NamedTuple

if TYPE_CHECKING:
    from frankie.context import RequestContext


class Response(NamedTuple):
    """Finalized ``(status, headers, body)`` triple handed to the server adapter."""

    status: int
    headers: dict[str, str]
    body: str | bytes

    def body_bytes(self) -> bytes:
        if isinstance(self.body, bytes):
            return self.body
        return self.body.encode("utf-8")

    def raw_headers(self) -> list[tuple[bytes, bytes]]:
        """Headers as lowercase latin-1 byte pairs, the way ASGI wants them."""
        return [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in self.headers.items()]


@dataclass(frozen=True, slots=True)
class Halt:
    """Early-exit result returned by a handler.

    Wraps any of the shapes :func:`normalize` accepts. Returning
    ``context.halt(401, "go away")`` ends the handler with that response.
    """

    value: Any = None


def normalize(value: Any, context: RequestContext) -> None:
    """Apply a handler's return *value* to the response held by *context*.

    Accepted shapes:

    - ``None``: keep whatever the handler set on the context
    - ``str`` / ``bytes``: becomes the body
    - ``int``: overrides the status only
    - ``(status, headers, body)``: replaces status and body, merges headers
    - :class:`Halt`: its payload is applied using the rules above
    """
    if isinstance(value, Halt):
        value = value.value
        if isinstance(value, Halt):
            msg = "Halt payload must not be another Halt"
            raise TypeError(msg)

    if value is None:
        return
    if isinstance(value, str | bytes):
        context.body = value
    elif isinstance(value, int) and not isinstance(value, bool):
        context.set_status(value)
    elif isinstance(value, tuple) and len(value) == 3:
        status, headers, body = value
        if not isinstance(headers, Mapping):
            msg = f"Response headers must be a mapping, got {type(headers).__name__}"
            raise TypeError(msg)
        context.set_status(status)
        for key, header_value in headers.items():
            context.set_header(key, header_value)
        context.body = body
    else:
        msg = (
            f"Cannot build a response from {type(value).__name__!r}; "
            "return a str, bytes, an int status, a (status, headers, body) tuple or a Halt"
        )
        raise TypeError(msg)


def not_found(context: RequestContext, body: str | None = None) -> None:
    """Turn the response held by *context* into the default 404."""
    context.set_status(404)
    context.body = context.config.not_found_body if body is None else body
