"""Tests for strict-mode handler signature validation."""

from __future__ import annotations

import pytest

from frankie import Frankie, Halt, RequestContext
from frankie.validation import validate_handler_signature

# -- Rule 1: exactly one positional argument ------------------------------


def test_no_arguments_raises() -> None:
    def handler() -> str:
        return ""

    with pytest.raises(TypeError, match="exactly one positional argument"):
        validate_handler_signature(handler, "/x", "GET")


def test_two_required_arguments_raises() -> None:
    def handler(context: RequestContext, album: str) -> str:
        return album

    with pytest.raises(TypeError, match="context.params"):
        validate_handler_signature(handler, "/albums/:album", "GET")


def test_extra_argument_with_default_ok() -> None:
    def handler(context: RequestContext, greeting: str = "hi") -> str:
        return greeting

    validate_handler_signature(handler, "/x", "GET")


def test_coroutine_handler_raises() -> None:
    async def handler(context: RequestContext) -> str:
        return ""

    with pytest.raises(TypeError, match="coroutine function"):
        validate_handler_signature(handler, "/x", "GET")


def test_callable_object_ok() -> None:
    class Handler:
        def __call__(self, context: RequestContext) -> str:
            return "ok"

    validate_handler_signature(Handler(), "/x", "GET")


# -- Rule 2: declared return type must be a response shape ---------------


def test_missing_return_annotation_ok() -> None:
    def handler(context):
        return "fine"

    validate_handler_signature(handler, "/x", "GET")


@pytest.mark.parametrize("ret", [str, bytes, int, tuple, Halt, None])
def test_known_return_types_ok(ret: object) -> None:
    def handler(context: RequestContext): ...

    handler.__annotations__["return"] = ret
    validate_handler_signature(handler, "/x", "GET")


def test_parameterized_tuple_and_union_ok() -> None:
    def triple(context: RequestContext) -> tuple[int, dict[str, str], str]:
        return 200, {}, ""

    def either(context: RequestContext) -> str | Halt:
        return ""

    validate_handler_signature(triple, "/x", "GET")
    validate_handler_signature(either, "/x", "GET")


def test_dict_return_type_raises() -> None:
    def handler(context: RequestContext) -> dict:
        return {}

    with pytest.raises(TypeError, match="Return type must be one of"):
        validate_handler_signature(handler, "/x", "GET")


def test_union_with_unknown_member_raises() -> None:
    def handler(context: RequestContext) -> str | list:
        return ""

    with pytest.raises(TypeError, match="Return type must be one of"):
        validate_handler_signature(handler, "/x", "GET")


# -- Wiring through the app -----------------------------------------------


def test_strict_app_rejects_bad_handler() -> None:
    app = Frankie(strict=True)

    with pytest.raises(TypeError, match=r"\[GET /x\]"):

        @app.get("/x")
        def wrong(context: RequestContext) -> dict:
            return {}

    assert len(app.router.routes) == 0


def test_strict_app_accepts_good_handler() -> None:
    app = Frankie(strict=True)

    @app.get("/x")
    def ok(context: RequestContext) -> str:
        return "ok"

    assert len(app.router.routes) == 1


def test_lenient_app_skips_validation() -> None:
    app = Frankie()

    @app.get("/x")
    def anything(context: RequestContext) -> dict:
        return {}

    assert len(app.router.routes) == 1
