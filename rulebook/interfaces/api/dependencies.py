"""FastAPI dependency utilities."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from fastapi import Depends, HTTPException, Request, status

from rulebook.application.use_cases.validation import Validator
from rulebook.config import Settings, get_settings
from rulebook.domain.entities import RequestContext
from rulebook.domain.errors import ValidationConfigurationError
from rulebook.infrastructure.database import get_engine
from rulebook.infrastructure.uniqueness import SqlAlchemyUniquenessOracle

logger = logging.getLogger(__name__)

_INTEGER_PATTERN = re.compile(r"^-?\d+$")
_FLOAT_PATTERN = re.compile(r"^-?(\d+\.\d*|\.\d+|\d+)([eE][-+]?\d+)?$")


@lru_cache
def get_uniqueness_oracle() -> SqlAlchemyUniquenessOracle | None:
    """Return the oracle backing the ``unique`` check when a database is configured."""

    engine = get_engine()
    if engine is None:
        return None
    return SqlAlchemyUniquenessOracle(engine)


def get_validator(settings: Settings = Depends(get_settings)) -> Validator:
    """Return a :class:`Validator` configured from the application settings."""

    return Validator.from_settings(settings, uniqueness_oracle=get_uniqueness_oracle())


def coerce_query_value(value: str) -> Any:
    """Turn ``"10"``, ``"1.5"`` and ``"true"`` into their typed equivalents."""

    lowered = value.strip().lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    if _INTEGER_PATTERN.match(value.strip()):
        return int(value)
    if _FLOAT_PATTERN.match(value.strip()):
        return float(value)
    return value


async def build_request_context(request: Request) -> RequestContext:
    """Collect the body, path, query and header sections of ``request``."""

    raw_body = await request.body()
    body: Mapping[str, Any] | None = None
    if raw_body:
        try:
            body = json.loads(raw_body)
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Request body must be valid JSON",
            ) from exc
        if not isinstance(body, Mapping):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Request body must be a JSON object",
            )

    return RequestContext(
        body=body,
        path_parameters=dict(request.path_params),
        query_string_parameters={
            key: coerce_query_value(value) for key, value in request.query_params.items()
        },
        headers=dict(request.headers),
    )


class HttpRequestValidation:
    """Route dependency validating the incoming request against ``validations``.

    Usage::

        @router.post("/users", dependencies=[Depends(HttpRequestValidation(rules))])
    """

    def __init__(
        self,
        validations: Mapping[str, Mapping[str, Mapping[str, Any]]],
        *,
        overridden_error_messages: Mapping[str, str] | None = None,
    ) -> None:
        self.validations = validations
        self.overridden_error_messages = overridden_error_messages

    async def __call__(
        self,
        request: Request,
        validator: Validator = Depends(get_validator),
    ) -> RequestContext:
        request_context = await build_request_context(request)

        try:
            result = await validator.validate_http_request(
                request_context=request_context,
                validations=self.validations,
                overridden_error_messages=self.overridden_error_messages,
            )
        except ValidationConfigurationError as exc:
            logger.exception("Invalid request validations for %s %s", request.method, request.url.path)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(exc),
            ) from exc

        if not result.passed:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": "Validation failed", "errors": result.to_dict()["errors"]},
            )
        return request_context


__all__ = [
    "HttpRequestValidation",
    "build_request_context",
    "coerce_query_value",
    "get_uniqueness_oracle",
    "get_validator",
]
