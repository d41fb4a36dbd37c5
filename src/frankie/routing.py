"""URL routing with ``:name`` path parameters.

Patterns are split on ``/``. A segment starting with ``:`` captures exactly
one non-empty path segment; every other segment must match verbatim::

    /albums/:album/songs/:song   matches   /albums/greatest-hits/songs/my-way

Lookup is a linear scan in registration order and the first match wins, so
``/a/:x`` registered before ``/a/fixed`` shadows it.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from frankie.errors import InvalidRoutePattern, RouterFrozenError

if TYPE_CHECKING:
    from frankie._types import Handler

logger = logging.getLogger("frankie.routing")

_SEGMENT_RE = r"([^/]+)"


@dataclass(frozen=True, slots=True)
class Matcher:
    """Compiled, fully anchored form of a route pattern."""

    regex: re.Pattern[str]
    segment_count: int

    def match(self, path: str) -> tuple[str, ...] | None:
        """Return the captured segments if *path* matches, else ``None``."""
        if path.count("/") + 1 != self.segment_count:
            return None
        m = self.regex.fullmatch(path)
        if m is None:
            return None
        return m.groups()


def compile_pattern(pattern: str) -> tuple[Matcher, tuple[str, ...]]:
    """Compile ``/users/:id`` into a :class:`Matcher` and its parameter names.

    Raises
    ------
    InvalidRoutePattern
        If *pattern* is empty, does not start with ``/``, has a bare ``:``
        segment, or repeats a parameter name.
    """
    if not pattern:
        raise InvalidRoutePattern(pattern, "pattern must not be empty")
    if not pattern.startswith("/"):
        raise InvalidRoutePattern(pattern, "pattern must start with '/'")

    segments = pattern.split("/")
    names: list[str] = []
    parts: list[str] = []

    for segment in segments:
        if not segment.startswith(":"):
            parts.append(re.escape(segment))
            continue

        name = segment[1:]
        if not name:
            raise InvalidRoutePattern(pattern, "parameter name must not be empty")
        if name in names:
            raise InvalidRoutePattern(pattern, f"duplicate parameter name {name!r}")
        names.append(name)
        parts.append(_SEGMENT_RE)

    regex = re.compile("/".join(parts))
    return Matcher(regex, len(segments)), tuple(names)


@dataclass(frozen=True, slots=True)
class Route:
    """A single route mapping a method + path pattern to a handler."""

    method: str
    pattern: str
    matcher: Matcher
    param_names: tuple[str, ...]
    handler: Handler

    @classmethod
    def create(cls, method: str, pattern: str, handler: Handler) -> Route:
        matcher, names = compile_pattern(pattern)
        return cls(method.upper(), pattern, matcher, names, handler)

    def match(self, path: str) -> dict[str, str] | None:
        """Return path params if *path* matches, else ``None``."""
        captures = self.matcher.match(path)
        if captures is None:
            return None
        return dict(zip(self.param_names, captures, strict=True))

    def __repr__(self) -> str:
        return f"Route({self.method!r}, {self.pattern!r})"


class Router:
    """Ordered collection of routes with first-match-wins lookup.

    The table is append-only until :meth:`freeze` is called; after that it is
    read-only and can be shared between concurrent requests without locking.
    """

    __slots__ = ("_frozen", "_routes")

    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._frozen = False

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(self._routes)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def register(self, method: str, pattern: str, handler: Handler) -> Route:
        """Compile *pattern* and append a new route.

        The table is only modified once compilation succeeded.
        """
        if self._frozen:
            msg = f"Cannot register {method.upper()} {pattern}: router is frozen"
            raise RouterFrozenError(msg)

        route = Route.create(method, pattern, handler)
        self._routes.append(route)
        logger.debug("Registered %s %s -> %s", route.method, pattern, _handler_name(handler))
        return route

    def lookup(self, method: str, path: str) -> Route | None:
        """Return the first route matching *method* and *path*, or ``None``."""
        result = self.match(method, path)
        return None if result is None else result[0]

    def match(self, method: str, path: str) -> tuple[Route, dict[str, str]] | None:
        """Return ``(route, params)`` for the first match, or ``None``."""
        method = method.upper()
        for route in self._routes:
            if route.method != method:
                continue
            params = route.match(path)
            if params is not None:
                return route, params
        return None

    def __len__(self) -> int:
        return len(self._routes)


def _handler_name(handler: Handler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)
