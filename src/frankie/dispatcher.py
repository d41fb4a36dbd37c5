"""Resolve a request to a route, run its handler and assemble the response."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from frankie.config import FrankieConfig
from frankie.context import RequestContext
from frankie.response import normalize, not_found

if TYPE_CHECKING:
    from frankie._types import ContextInit, Terminal
    from frankie.response import Response
    from frankie.routing import Router

logger = logging.getLogger("frankie.dispatch")


class Dispatcher:
    """Terminal stage of the middleware chain.

    Handler exceptions are not caught here; an error stage or the server
    adapter decides what to do with them.
    """

    __slots__ = ("config", "router")

    def __init__(self, router: Router, config: FrankieConfig | None = None) -> None:
        self.router = router
        self.config = config or FrankieConfig()

    def __call__(self, context: RequestContext) -> None:
        result = self.router.match(context.method, context.path)
        if result is None:
            logger.debug("No route for %s %s", context.method, context.path)
            not_found(context)
            return

        route, params = result
        context.params.update(params)
        normalize(route.handler(context), context)

    def new_context(self, method: str, path: str, init: ContextInit | None = None) -> RequestContext:
        context = RequestContext(method, path, self.config)
        if init is not None:
            init(context)
        return context

    def dispatch(
        self,
        method: str,
        path: str,
        init: ContextInit | None = None,
        *,
        chain: Terminal | None = None,
    ) -> Response:
        """Handle one request from start to finish and return its response.

        *chain* is the composed middleware pipeline ending in this
        dispatcher; without it only the dispatcher itself runs.
        """
        context = self.new_context(method, path, init)
        (chain or self)(context)
        return context.to_response()
