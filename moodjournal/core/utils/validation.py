"""Request validation helpers shared by controllers."""

from __future__ import annotations

from typing import Any, Mapping, Type, TypeVar

from flask import jsonify
from pydantic import BaseModel, ValidationError

M = TypeVar("M", bound=BaseModel)


class RequestValidationFailed(Exception):
    """Carries a ready 400 response for a rejected payload."""

    def __init__(self, exc: ValidationError) -> None:
        super().__init__("validation_error")
        self.errors = jsonable_errors(exc)

    def response(self):
        return jsonify({"ok": False, "error": "validation_error", "details": self.errors}), 400


def jsonable_errors(exc: ValidationError) -> list[dict]:
    errors = exc.errors(include_url=False)
    for err in errors:
        if "ctx" in err and isinstance(err["ctx"], dict):
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
    return errors


def parse_payload(schema: Type[M], data: Mapping[str, Any] | None) -> M:
    try:
        return schema.model_validate(dict(data or {}))
    except ValidationError as exc:
        raise RequestValidationFailed(exc) from exc
