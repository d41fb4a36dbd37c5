"""Granian launcher used by ``Frankie.run`` and the CLI."""

from __future__ import annotations

import logging
import sys
from typing import Any

_LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_log_handler: logging.Handler | None = None


def configure_logging(level: str = "info") -> None:
    """Attach a stderr handler to the ``frankie`` logger tree once."""
    global _log_handler

    root = logging.getLogger("frankie")
    root.setLevel(level.upper())
    if _log_handler is None:
        _log_handler = logging.StreamHandler(sys.stderr)
        _log_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    if _log_handler not in root.handlers:
        root.addHandler(_log_handler)


def serve(
    target: str,
    *,
    host: str = "127.0.0.1",
    port: int = 8000,
    dev: bool = False,
    reload: bool | None = None,
    workers: int = 1,
    log_level: str = "info",
    log_access: bool = False,
    granian_kwargs: dict[str, Any] | None = None,
) -> None:
    """Serve the Frankie app at *target* (``"module:var"``) with Granian.

    *dev* turns on reload, debug logging and access logs unless they are
    set explicitly. Each worker imports the target itself, so routes are
    registered once per process and frozen on the first request.
    """
    from granian import Granian

    if dev:
        log_level = "debug"
        log_access = True
        if reload is None:
            reload = True
    reload = bool(reload)

    configure_logging(log_level)
    print(_banner(target, host=host, port=port, workers=workers, reload=reload, dev=dev), flush=True)

    server = Granian(
        target=target,
        address=host,
        port=port,
        interface="asgi",
        workers=workers,
        reload=reload,
        log_level=log_level,
        log_access=log_access,
        **(granian_kwargs or {}),
    )
    server.serve()


_BOLD_YELLOW = "\033[1;33m"
_DIM = "\033[2m"
_RESET = "\033[0m"


def _banner(target: str, *, host: str, port: int, workers: int, reload: bool, dev: bool) -> str:
    color = sys.stdout.isatty()

    def paint(code: str, text: str) -> str:
        return f"{code}{text}{_RESET}" if color else text

    rows = (
        ("app", target),
        ("listening", f"http://{host}:{port}"),
        ("workers", str(workers)),
        ("reload", "on" if reload else "off"),
    )
    head = f"{paint(_BOLD_YELLOW, 'Frankie')} taking the stage ({'dev' if dev else 'production'})"
    body = [f"  {paint(_DIM, label.ljust(10))}{value}" for label, value in rows]
    return "\n".join([head, *body, ""])
