"""ASGI and handler type definitions."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any

from frankie.context import RequestContext

Scope = MutableMapping[str, Any]
Receive = Callable[[], Awaitable[dict[str, Any]]]
Send = Callable[[dict[str, Any]], Awaitable[None]]
ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]

Handler = Callable[[RequestContext], Any]
Next = Callable[[], None]
Stage = Callable[[RequestContext, Next], None]
Terminal = Callable[[RequestContext], None]
ContextInit = Callable[[RequestContext], None]
