from __future__ import annotations
from typing import Any
from pydantic import ValidationError as PydanticValidationError

from geocache.errors import ValidationError
from geocache.schemas.cache import CacheCreate, CacheCandidate
from geocache.services.sanitize import Sanitizer, clean_markup


def _violations(exc: PydanticValidationError) -> dict[str, list[str]]:
    out: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc") or ()
        field = str(loc[0]) if loc else "body"
        msg = err.get("msg", "invalid")
        # "Value error, safety checklist..." -> "safety checklist..."
        if err.get("type") == "value_error" and msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        out.setdefault(field, []).append(msg)
    return out


class CacheSubmissionValidator:
    """
    Turns a raw submission body into a CacheCandidate.

    Every constraint is checked and all violations are reported together.
    The description is sanitized as part of normalization.
    """

    def __init__(self, sanitizer: Sanitizer = clean_markup):
        self.sanitizer = sanitizer

    def validate(self, raw: Any) -> CacheCandidate:
        try:
            data = CacheCreate.model_validate(raw)
        except PydanticValidationError as e:
            raise ValidationError(_violations(e)) from None
        return CacheCandidate(
            title=data.title,
            description=self.sanitizer(data.description),
            hint=data.hint,
            difficulty=data.difficulty,
            terrain=data.terrain,
            size=data.size,
            lat=data.lat,
            lng=data.lng,
        )
