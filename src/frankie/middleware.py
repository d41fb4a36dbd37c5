"""Middleware chain and built-in stages.

A stage is any callable of shape ``stage(context, next) -> None``::

    def require_token(context, next):
        if "authorization" not in context.headers:
            context.set_status(401)
            context.body = "Unauthorized"
            return  # short-circuit: later stages and the handler never run
        next()

    def powered_by(context, next):
        next()
        context.set_header("X-Powered-By", "frankie")  # runs on the way out

Stages run in registration order on the way in and in reverse order on
the way out.
"""

from __future__ import annotations

import html
import logging
import time
import traceback
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from frankie._types import Next, Stage, Terminal
    from frankie.context import RequestContext

logger = logging.getLogger("frankie.dispatch")

INTERNAL_ERROR_BODY = "<h1>Internal Server Error</h1>"


def build(stages: Iterable[Stage], terminal: Terminal) -> Terminal:
    """Compose *stages* around *terminal* into a single callable.

    The returned callable takes a :class:`RequestContext` and threads it
    through every stage. Each ``next`` may be called at most once.
    """
    chain = tuple(stages)

    def run(context: RequestContext, index: int = 0) -> None:
        if index == len(chain):
            terminal(context)
            return

        stage = chain[index]
        called = False

        def next_() -> None:
            nonlocal called
            if called:
                msg = f"next() called more than once by stage {_stage_name(stage)}"
                raise RuntimeError(msg)
            called = True
            run(context, index + 1)

        stage(context, next_)

    def handle(context: RequestContext) -> None:
        run(context)

    return handle


# ------------------------------------------------------------------
# Built-in stages
# ------------------------------------------------------------------


def error_stage(context: RequestContext, next: Next) -> None:  # noqa: A002
    """Turn any exception raised further down the chain into a 500.

    Register it first so it wraps every other stage.
    """
    try:
        next()
    except Exception:
        logger.exception("Unhandled error in %s %s", context.method, context.path)
        context.response_headers = dict(context.config.default_headers)
        context.set_status(500)
        body = INTERNAL_ERROR_BODY
        if context.config.debug:
            body += f"\n<pre>{html.escape(traceback.format_exc())}</pre>"
        context.body = body


def logging_stage(context: RequestContext, next: Next) -> None:  # noqa: A002
    """Log ``METHOD path -> status`` with the elapsed time."""
    start = time.perf_counter()
    try:
        next()
    finally:
        elapsed = (time.perf_counter() - start) * 1000
        logger.info("%s %s -> %d (%.2fms)", context.method, context.path, context.status, elapsed)


def header_stage(name: str, value: str) -> Stage:
    """Return a stage that sets *name* on every response on the way out."""

    def stage(context: RequestContext, next: Next) -> None:  # noqa: A002
        next()
        context.set_header(name, value)

    stage.__name__ = f"header_stage[{name}]"
    return stage


def _stage_name(stage: Stage) -> str:
    return getattr(stage, "__name__", None) or type(stage).__name__
