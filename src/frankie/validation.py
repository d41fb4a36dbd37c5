"""Handler signature validation for strict mode."""

from __future__ import annotations

import inspect
import types
from typing import Any, Union, get_args, get_origin, get_type_hints

from frankie.response import Halt

_ALLOWED_RETURNS: tuple[Any, ...] = (str, bytes, int, tuple, Halt, type(None), None)
_ALLOWED_LABEL = "str, bytes, int, tuple, Halt or None"

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


def _is_allowed_return(tp: Any) -> bool:
    if tp in _ALLOWED_RETURNS:
        return True
    origin = get_origin(tp)
    if origin is tuple:
        return True
    if origin in (Union, types.UnionType):
        return all(_is_allowed_return(arg) for arg in get_args(tp))
    return False


def validate_handler_signature(func: Any, pattern: str, method: str) -> None:
    """Validate a handler at route registration time.

    Raises :class:`TypeError` with an actionable message when the handler
    cannot be called with a single request context or declares a return
    type the response assembly does not understand.
    """
    name = getattr(func, "__name__", type(func).__name__)
    where = f"handler '{name}' [{method.upper()} {pattern}]"

    if not callable(func):
        raise TypeError(f"\n\nStrict-mode violation in {where}\n  Problem: Handler is not callable.\n")

    target = func if inspect.isroutine(func) else func.__call__

    if inspect.iscoroutinefunction(target):
        raise TypeError(
            f"\n\nStrict-mode violation in {where}\n"
            f"  Problem: Handler is a coroutine function.\n"
            f"  Fix:     Handlers run synchronously; use a plain 'def'.\n"
        )

    # --- Rule 1: exactly one required positional parameter (the context) ---
    sig = inspect.signature(func)
    params = list(sig.parameters.values())
    positional = [p for p in params if p.kind in _POSITIONAL]
    required = [p for p in params if p.default is inspect.Parameter.empty and p.kind not in _VARIADIC]
    if not positional or len(required) > 1:
        raise TypeError(
            f"\n\nStrict-mode violation in {where}\n"
            f"  Current: ({', '.join(sig.parameters)})\n"
            f"  Problem: Handler must accept exactly one positional argument.\n"
            f"  Fix:     Declare it as def {name}(context): ... and read path "
            f"parameters from context.params.\n"
        )

    # --- Rule 2: declared return type must be a known response shape ---
    hints = get_type_hints(target)
    if "return" not in hints:
        return
    ret = hints["return"]
    if not _is_allowed_return(ret):
        label = ret.__name__ if isinstance(ret, type) else repr(ret)
        raise TypeError(
            f"\n\nStrict-mode violation in {where}\n"
            f"  Current: -> {label}\n"
            f"  Problem: Return type must be one of {_ALLOWED_LABEL}.\n"
            f"  Fix:     Return a body string, a status code, a "
            f"(status, headers, body) tuple or context.halt(...).\n"
        )
