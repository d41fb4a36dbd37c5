"""Sinatra-style routing core: ordered routes, a middleware chain and a tiny ASGI adapter."""

__version__ = "0.1.0"

from frankie.app import Frankie
from frankie.config import FrankieConfig
from frankie.context import RequestContext
from frankie.errors import FrankieError, InvalidRoutePattern, RouterFrozenError
from frankie.middleware import build, error_stage, header_stage, logging_stage
from frankie.response import Halt, Response
from frankie.routing import Route, Router, compile_pattern

__all__ = [
    "Frankie",
    "FrankieConfig",
    "FrankieError",
    "Halt",
    "InvalidRoutePattern",
    "RequestContext",
    "Response",
    "Route",
    "Router",
    "RouterFrozenError",
    "build",
    "compile_pattern",
    "error_stage",
    "header_stage",
    "logging_stage",
]
