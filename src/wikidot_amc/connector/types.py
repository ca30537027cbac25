"""Request/response contract of the ajax-module-connector endpoint."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import orjson
from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError

from ..errors import ResponseDataError


# Request bodies are flat form mappings; the routing discriminator is either
# ``moduleName`` or an ``action``/``event`` pair.
AMCRequestBody = Mapping[str, Any]

# Decoded responses are passed through untyped beyond the ``status`` guarantee.
AMCResponse = dict[str, Any]


class AMCResponseSchema(BaseModel):
    """Structural contract a decoded AMC response must satisfy."""

    model_config = ConfigDict(extra="allow")

    status: StrictStr
    body: StrictStr | None = None
    message: StrictStr | None = None


def parse_amc_response(raw: bytes | str) -> AMCResponse:
    """Decode and validate an AMC response body.

    Raises:
        ResponseDataError: If the body is not JSON, not an object, or lacks a string ``status``
    """
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        preview = raw[:200] if raw else raw
        raise ResponseDataError(f"AMC responded with non-JSON data: {preview!r}") from exc

    if not isinstance(data, dict):
        raise ResponseDataError(f"AMC response is not a JSON object: {type(data).__name__}")

    try:
        AMCResponseSchema.model_validate(data)
    except ValidationError as exc:
        raise ResponseDataError(f"Invalid AMC response format: {exc}") from exc

    return data


def is_success_response(response: Mapping[str, Any]) -> bool:
    return response.get("status") == "ok"


def describe_target(body: AMCRequestBody) -> str:
    """Human readable routing target of a request body (for error messages)."""
    if body.get("moduleName"):
        return f"moduleName: {body['moduleName']}"
    if body.get("action"):
        return f"action: {body['action']}/{body.get('event') or ''}"
    return "unknown"
