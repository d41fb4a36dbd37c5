"""Application configuration.

``FrankieConfig`` is immutable after creation. Override what you need::

    config = FrankieConfig(debug=True, default_headers={"Content-Type": "text/plain"})
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_HEADERS: dict[str, str] = {"Content-Type": "text/html"}
NOT_FOUND_BODY = "<h1>Not Found</h1>"

_TRUTHY = frozenset({"1", "true", "yes", "on"})


class FrankieConfig(BaseModel):
    """Response defaults and framework switches.

    Parameters
    ----------
    default_status:
        Status every response starts with before the handler runs.
    default_headers:
        Headers every response starts with.
    not_found_body:
        Body of the 404 produced when no route matches.
    debug:
        When ``True``, 500 responses from the server adapter include the
        full traceback.
    strict:
        When ``True``, handler signatures are validated at registration time.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    default_status: int = 200
    default_headers: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_HEADERS))
    not_found_body: str = NOT_FOUND_BODY
    debug: bool = False
    strict: bool = False

    @field_validator("default_status")
    @classmethod
    def _check_status(cls, value: int) -> int:
        if not 100 <= value <= 599:
            msg = f"default_status must be a valid HTTP status code, got {value}"
            raise ValueError(msg)
        return value

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None, **overrides: Any) -> FrankieConfig:
        """Build a config from ``FRANKIE_DEBUG`` / ``FRANKIE_STRICT``.

        Explicit *overrides* win over the environment.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for field in ("debug", "strict"):
            raw = env.get(f"FRANKIE_{field.upper()}")
            if raw is not None:
                values[field] = raw.strip().lower() in _TRUTHY
        values.update(overrides)
        return cls(**values)
