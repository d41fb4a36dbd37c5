"""Frankie application: route registration, middleware and the ASGI adapter."""

from __future__ import annotations

import asyncio
import html
import logging
import sys
import traceback
from pathlib import Path
from typing import TYPE_CHECKING, Any

from frankie.config import FrankieConfig
from frankie.dispatcher import Dispatcher
from frankie.errors import RouterFrozenError
from frankie.middleware import INTERNAL_ERROR_BODY, build
from frankie.response import Response
from frankie.routing import Route, Router
from frankie.validation import validate_handler_signature

if TYPE_CHECKING:
    from collections.abc import Callable

    from frankie._types import ContextInit, Handler, Receive, Scope, Send, Stage, Terminal
    from frankie.context import RequestContext

logger = logging.getLogger("frankie.server")


class Frankie:
    """A Sinatra-style application.

    Parameters
    ----------
    config:
        Response defaults and switches. Keyword *overrides* are applied on
        top of it, so ``Frankie(debug=True)`` works without building a
        :class:`FrankieConfig` by hand. Without a *config*, ``FRANKIE_DEBUG``
        and ``FRANKIE_STRICT`` are read from the environment first.

    Routes and stages are registered during setup. The first dispatch (or ASGI
    lifespan startup) freezes both; registering afterwards raises :class:`RouterFrozenError`.
    """

    def __init__(self, config: FrankieConfig | None = None, **overrides: Any) -> None:
        if config is None:
            config = FrankieConfig.from_env(**overrides)
        elif overrides:
            config = FrankieConfig(**{**config.model_dump(), **overrides})
        self.config = config
        self.router = Router()
        self.dispatcher = Dispatcher(self.router, self.config)
        self._stages: list[Stage] = []
        self._chain: Terminal | None = None

    # ------------------------------------------------------------------
    # Route registration
    # ------------------------------------------------------------------

    def register(self, method: str, pattern: str, handler: Handler) -> Route:
        if self.config.strict:
            validate_handler_signature(handler, pattern, method)
        return self.router.register(method, pattern, handler)

    def route(self, method: str, pattern: str) -> Callable[[Handler], Handler]:
        def decorator(handler: Handler) -> Handler:
            self.register(method, pattern, handler)
            return handler

        return decorator

    def get(self, pattern: str) -> Callable[[Handler], Handler]:
        return self.route("GET", pattern)

    def post(self, pattern: str) -> Callable[[Handler], Handler]:
        return self.route("POST", pattern)

    def put(self, pattern: str) -> Callable[[Handler], Handler]:
        return self.route("PUT", pattern)

    def delete(self, pattern: str) -> Callable[[Handler], Handler]:
        return self.route("DELETE", pattern)

    def patch(self, pattern: str) -> Callable[[Handler], Handler]:
        return self.route("PATCH", pattern)

    def options(self, pattern: str) -> Callable[[Handler], Handler]:
        return self.route("OPTIONS", pattern)

    def head(self, pattern: str) -> Callable[[Handler], Handler]:
        return self.route("HEAD", pattern)

    # ------------------------------------------------------------------
    # Middleware
    # ------------------------------------------------------------------

    def use(self, stage: Stage) -> Stage:
        """Append a middleware stage; usable as a decorator.

        Called as ``stage(context, next)`` for every request.
        """
        if self._chain is not None:
            msg = "Cannot add middleware after the app started serving"
            raise RouterFrozenError(msg)
        self._stages.append(stage)
        return stage

    @property
    def stages(self) -> tuple[Stage, ...]:
        return tuple(self._stages)

    def freeze(self) -> Terminal:
        """Freeze the route table and compose the middleware chain once."""
        if self._chain is None:
            self.router.freeze()
            self._chain = build(self._stages, self.dispatcher)
            logger.debug("Frozen with %d routes and %d stages", len(self.router), len(self._stages))
        return self._chain

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(self, method: str, path: str, init: ContextInit | None = None) -> Response:
        """Run one request through the middleware chain and return its response.

        *init* receives the fresh :class:`RequestContext` before any stage
        runs; server adapters use it to attach headers, query and body.
        """
        chain = self.freeze()
        return self.dispatcher.dispatch(method, path, init, chain=chain)

    # ------------------------------------------------------------------
    # ASGI interface
    # ------------------------------------------------------------------

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await _handle_lifespan(receive, send, on_startup=self.freeze)
            return
        if scope["type"] != "http":
            return

        body = await _read_body(receive)
        method: str = scope["method"]
        init = _scope_initializer(scope, body)
        self.freeze()

        loop = asyncio.get_running_loop()
        try:
            response = await loop.run_in_executor(None, lambda: self.dispatch(method, scope["path"], init))
        except Exception:
            logger.exception("Unhandled error in %s %s", method, scope["path"])
            body_text = INTERNAL_ERROR_BODY
            if self.config.debug:
                body_text += f"\n<pre>{html.escape(traceback.format_exc())}</pre>"
            response = Response(500, dict(self.config.default_headers), body_text)

        await _send_response(response, send, head=method.upper() == "HEAD")

    # ------------------------------------------------------------------
    # Granian convenience
    # ------------------------------------------------------------------

    def run(
        self,
        host: str = "127.0.0.1",
        port: int = 8000,
        *,
        dev: bool = False,
        reload: bool | None = None,
        workers: int = 1,
        log_level: str = "info",
        **granian_kwargs: Any,
    ) -> None:
        """Start the app with Granian.

        Parameters
        ----------
        dev:
            When ``True``, enables reload, debug logging, and access logs.
        reload:
            Auto-reload on code changes.  ``None`` follows *dev*.
        workers:
            Number of worker processes.
        log_level:
            Granian log level.
        """
        from frankie._server import serve

        target = _resolve_target(self)
        serve(
            target,
            host=host,
            port=port,
            dev=dev,
            reload=reload,
            workers=workers,
            log_level=log_level,
            granian_kwargs=granian_kwargs or None,
        )


# ------------------------------------------------------------------
# Module-level helpers
# ------------------------------------------------------------------


def _resolve_target(app: Frankie) -> str:
    """Name the ``__main__`` variable holding *app* as a Granian ``module:var`` target.

    Granian workers re-import the target, so a script run as
    ``python songs.py`` resolves to ``songs:<var>``.
    """
    main = sys.modules.get("__main__")
    names = [name for name, val in vars(main).items() if val is app] if main is not None else []
    if not names:
        msg = (
            "Frankie.run() needs the app bound to a global in the script it is started from; "
            "use `frankie run module:var` otherwise"
        )
        raise RuntimeError(msg)

    module_spec = getattr(main, "__spec__", None)
    if module_spec is not None and module_spec.name != "__main__":
        module = module_spec.name
    else:
        module = Path(getattr(main, "__file__", "__main__")).stem
    logger.debug("Resolved run() target %s:%s", module, names[0])
    return f"{module}:{names[0]}"


def _scope_initializer(scope: Scope, body: bytes) -> ContextInit:
    headers = {k.decode("latin-1"): v.decode("latin-1") for k, v in scope.get("headers", [])}
    query_string: bytes = scope.get("query_string", b"")

    def init(context: RequestContext) -> None:
        context.headers = headers
        context.query_string = query_string
        context.request_body = body

    return init


async def _read_body(receive: Receive) -> bytes:
    chunks: list[bytes] = []
    while True:
        message = await receive()
        chunk = message.get("body", b"")
        if chunk:
            chunks.append(chunk)
        if not message.get("more_body", False):
            break
    return b"".join(chunks)


async def _handle_lifespan(receive: Receive, send: Send, *, on_startup: Callable[[], object]) -> None:
    """Freeze the app on startup; shutdown needs no cleanup."""
    while True:
        message = await receive()
        if message["type"] == "lifespan.startup":
            on_startup()
            await send({"type": "lifespan.startup.complete"})
        elif message["type"] == "lifespan.shutdown":
            await send({"type": "lifespan.shutdown.complete"})
            return


async def _send_response(response: Response, send: Send, *, head: bool = False) -> None:
    body = response.body_bytes()
    headers = response.raw_headers()
    if not any(name == b"content-length" for name, _ in headers):
        headers.append((b"content-length", str(len(body)).encode("latin-1")))
    await send({"type": "http.response.start", "status": response.status, "headers": headers})
    await send({"type": "http.response.body", "body": b"" if head else body})
