"""
Lenient coercion helpers shared by schemas fed from untrusted sources
(model output, intake forms). Anything missing or mistyped becomes an
empty default instead of a validation error.
"""
import math
from typing import Any, List
from pydantic import AliasGenerator, BaseModel, field_validator
from pydantic.alias_generators import to_camel


def as_str(value: Any) -> str:
    if value is None or isinstance(value, (dict, list, tuple, set)):
        return ""
    if isinstance(value, bool):
        return ""
    return str(value).strip()


def as_str_list(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    items = []
    for item in value:
        text = as_str(item)
        if text:
            items.append(text)
    return items


def as_dict_list(value: Any) -> List[Any]:
    """Keep dict entries, wrap bare strings as a description."""
    if not isinstance(value, (list, tuple)):
        return []
    entries = []
    for item in value:
        if isinstance(item, dict):
            entries.append(item)
        elif isinstance(item, str) and item.strip():
            entries.append({"description": item.strip()})
    return entries


def as_number(value: Any, default: float = 0.0) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip().rstrip("%"))
        except ValueError:
            return default
    return default


def clamp_score(value: Any) -> int:
    """Numeric score clamped into [0, 100] and rounded."""
    number = as_number(value)
    if number != number:  # NaN
        number = 0.0
    return int(math.floor(min(100.0, max(0.0, number)) + 0.5))


class LenientModel(BaseModel):
    """Base for schemas that coerce gaps to empty defaults."""

    class Config:
        alias_generator = AliasGenerator(validation_alias=to_camel)
        populate_by_name = True
        extra = "ignore"

    @field_validator("*", mode="before")
    @classmethod
    def _fill_defaults(cls, value, info):
        field = cls.model_fields[info.field_name]
        if field.annotation is str:
            return as_str(value)
        if field.annotation == List[str]:
            return as_str_list(value)
        if value is None and field.default_factory is not None:
            return field.default_factory()
        return value
