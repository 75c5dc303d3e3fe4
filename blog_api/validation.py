"""Request body validation with a stable, field-level error format.

Violations are reported as ``{message, path, type, context}`` objects whose
``type`` tags and messages follow the Joi conventions API clients already
parse (``any.required``, ``string.empty``, ...). Validation stops at the first
violation.
"""

import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from blog_api.schemas import IMAGE_URL_PATTERN_DISPLAY

logger = logging.getLogger(__name__)

ROOT_LABEL = "value"

_TYPE_TAGS = {
    "missing": "any.required",
    "string_type": "string.base",
    "string_too_short": "string.empty",
    "string_too_long": "string.max",
    "extra_forbidden": "object.unknown",
    "model_type": "object.base",
    "model_attributes_type": "object.base",
    "dict_type": "object.base",
    "json_invalid": "object.base",
}


class MalformedBody:
    """A request body that could not be decoded as JSON."""

    def __init__(self, raw: str):
        self.raw = raw


class PayloadValidationError(Exception):
    def __init__(self, errors: list[dict[str, Any]]):
        super().__init__(errors[0]["message"] if errors else "invalid payload")
        self.errors = errors


def _quote(value: Any) -> str:
    return f'"{value}"'


def _message(tag: str, label: str, value: Any, ctx: dict[str, Any]) -> str:
    if tag == "any.required":
        return f"{_quote(label)} is required"
    if tag == "string.base":
        return f"{_quote(label)} must be a string"
    if tag == "string.empty":
        return f"{_quote(label)} is not allowed to be empty"
    if tag == "string.max":
        return f"{_quote(label)} length must be less than or equal to {ctx.get('max_length')} characters long"
    if tag == "string.pattern.base":
        return f"{_quote(label)} with value {_quote(value)} fails to match the required pattern: {IMAGE_URL_PATTERN_DISPLAY}"
    if tag == "object.unknown":
        return f"{_quote(label)} is not allowed"
    if tag == "object.base":
        return f"{_quote(label)} must be of type object"
    return f"{_quote(label)} is invalid"


def translate_error(error: dict[str, Any]) -> dict[str, Any]:
    """Convert one pydantic error dict into a client-facing violation."""
    loc = list(error.get("loc", ()))
    path = [segment for segment in loc if isinstance(segment, str)]

    tag = _TYPE_TAGS.get(error["type"], error["type"])
    ctx = error.get("ctx") or {}
    key = path[-1] if path else None
    label = ".".join(path) if path else ROOT_LABEL

    context: dict[str, Any] = {"label": label}
    if tag != "any.required":
        context["value"] = error.get("input")
    if key is not None:
        context["key"] = key

    return {
        "message": _message(tag, label, context.get("value"), ctx),
        "path": path,
        "type": tag,
        "context": context,
    }


def validate_body(schema: type[BaseModel], body: Any) -> BaseModel:
    """Validate a decoded JSON body, treating an absent body as ``{}``."""
    if body is None:
        body = {}
    if isinstance(body, MalformedBody):
        violation = translate_error({"type": "json_invalid", "loc": (), "input": body.raw})
        logger.info("Rejected %s payload: body is not valid JSON", schema.__name__)
        raise PayloadValidationError([violation])
    try:
        return schema.model_validate(body)
    except ValidationError as exc:
        first = exc.errors(include_url=False)[0]
        violation = translate_error(first)
        logger.info("Rejected %s payload: %s", schema.__name__, violation["message"])
        raise PayloadValidationError([violation]) from exc
