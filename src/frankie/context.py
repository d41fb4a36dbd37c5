"""Per-request mutable state threaded through middleware and the handler."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qs

from frankie.response import Halt, Response, not_found

if TYPE_CHECKING:
    from frankie.config import FrankieConfig


class RequestContext:
    """Everything one request needs: what came in and the response being built.

    A context is created fresh for every dispatch and must not be kept
    around after the request finished.
    """

    __slots__ = (
        "_body",
        "config",
        "headers",
        "method",
        "params",
        "path",
        "query_string",
        "request_body",
        "response_headers",
        "state",
        "status",
    )

    def __init__(
        self,
        method: str,
        path: str,
        config: FrankieConfig,
        *,
        headers: dict[str, str] | None = None,
        query_string: bytes = b"",
        request_body: bytes = b"",
    ) -> None:
        self.method = method.upper()
        self.path = path
        self.config = config
        self.headers: dict[str, str] = headers or {}
        self.query_string = query_string
        self.request_body = request_body
        self.params: dict[str, str] = {}
        self.state: dict[str, Any] = {}
        self.status = config.default_status
        self.response_headers: dict[str, str] = dict(config.default_headers)
        self._body: str | bytes = ""

    # ------------------------------------------------------------------
    # Request side
    # ------------------------------------------------------------------

    @property
    def query_params(self) -> dict[str, list[str]]:
        return parse_qs(self.query_string.decode("latin-1"))

    # ------------------------------------------------------------------
    # Response side
    # ------------------------------------------------------------------

    @property
    def body(self) -> str | bytes:
        return self._body

    @body.setter
    def body(self, value: str | bytes) -> None:
        if not isinstance(value, str | bytes):
            msg = f"Response body must be str or bytes, got {type(value).__name__}"
            raise TypeError(msg)
        self._body = value

    def set_status(self, code: int) -> None:
        if isinstance(code, bool) or not isinstance(code, int) or not 100 <= code <= 599:
            msg = f"Invalid HTTP status code: {code!r}"
            raise ValueError(msg)
        self.status = code

    def set_header(self, key: str, value: str) -> None:
        value = str(value)
        try:
            key.encode("latin-1")
            value.encode("latin-1")
        except UnicodeEncodeError as exc:
            msg = f"Header {key!r} must be latin-1 encodable, got {value!r}"
            raise ValueError(msg) from exc
        self.response_headers[key] = value

    def halt(self, *args: Any) -> Halt:
        """Build an early-exit result; ``return context.halt(...)`` from a handler.

        ``halt()`` keeps the current response, ``halt(x)`` takes any single
        response shape, and ``halt(status, body)`` is shorthand for
        ``halt((status, {}, body))``.
        """
        if not args:
            return Halt()
        if len(args) == 1:
            return Halt(args[0])
        if len(args) == 2:
            status, body = args
            return Halt((status, {}, body))
        if len(args) == 3:
            return Halt(tuple(args))
        msg = f"halt() takes at most 3 arguments ({len(args)} given)"
        raise TypeError(msg)

    def not_found(self, body: str | None = None) -> Halt:
        """Switch the response to the default 404 and stop the handler."""
        not_found(self, body)
        return Halt()

    def redirect(self, location: str, status: int = 302) -> Halt:
        self.set_status(status)
        self.set_header("Location", location)
        self.body = ""
        return Halt()

    def to_response(self) -> Response:
        return Response(self.status, dict(self.response_headers), self._body)

    def __repr__(self) -> str:
        return f"RequestContext({self.method!r}, {self.path!r}, status={self.status})"
