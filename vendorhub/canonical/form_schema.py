from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


FieldType = Literal[
    "text",
    "number",
    "boolean",
    "enum_single",
    "enum_multi",
    "geo_coordinate",
    "image_reference",
    "currency",
]

MULTI_VALUED_TYPES: frozenset[str] = frozenset({"enum_multi"})

# Well-known list attributes that are always rendered as lists, declared or not.
WELL_KNOWN_LIST_KEYS: tuple[str, ...] = ("categories", "services")

# Top-level vendor attributes. A field id may not shadow one of these.
RESERVED_KEYS: frozenset[str] = frozenset({
    "id",
    "_id",
    "vendor_type",
    "status",
    "latitude",
    "longitude",
    "created_at",
    "updated_at",
    "agent_id",
    "form_data",
})

_IDENT_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]{0,79}$")


def _check_ident(v: str) -> str:
    v2 = v.strip()
    if not _IDENT_RE.match(v2):
        raise ValueError("identifier must start with a letter and contain only letters, digits or '_'")
    return v2


class ValidationRules(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_value: float | None = None
    max_value: float | None = None
    min_length: int | None = Field(default=None, ge=0)
    max_length: int | None = Field(default=None, ge=0)
    choices: tuple[str, ...] | None = None

    @model_validator(mode="after")
    def validate_bounds(self) -> "ValidationRules":
        if self.min_value is not None and self.max_value is not None and self.min_value > self.max_value:
            raise ValueError("min_value must be <= max_value")
        if self.min_length is not None and self.max_length is not None and self.min_length > self.max_length:
            raise ValueError("min_length must be <= max_length")
        if self.choices is not None and len(set(self.choices)) != len(self.choices):
            raise ValueError("choices must be unique")
        return self


class SectionDef(BaseModel):
    """
    Ordered group of fields.

    - visibility: consumer roles allowed to see the section (empty = everyone)
    - vendor_types: vendor types the section applies to (empty = all)
    """
    model_config = ConfigDict(frozen=True)

    id: str
    label: str = Field(min_length=1, max_length=200)
    order: int = Field(ge=1)
    visibility: frozenset[str] = frozenset()
    vendor_types: frozenset[str] = frozenset()

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        return _check_ident(v)

    def applies_to(self, vendor_type: str | None) -> bool:
        return not self.vendor_types or vendor_type in self.vendor_types

    def visible_to(self, role: str | None) -> bool:
        return role is None or not self.visibility or role in self.visibility


class FieldDef(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    section_id: str
    label: str = Field(min_length=1, max_length=200)
    type: FieldType
    order: int = Field(ge=1)
    required: bool = False
    rules: ValidationRules = Field(default_factory=ValidationRules)
    vendor_types: frozenset[str] = frozenset()

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        v2 = _check_ident(v)
        if v2 in RESERVED_KEYS:
            raise ValueError(f"'{v2}' is a reserved vendor attribute")
        return v2

    @model_validator(mode="after")
    def validate_rules_for_type(self) -> "FieldDef":
        if self.type in ("enum_single", "enum_multi") and not self.rules.choices:
            raise ValueError(f"{self.type} field requires rules.choices")
        return self

    @property
    def is_multi_valued(self) -> bool:
        return self.type in MULTI_VALUED_TYPES

    def applies_to(self, vendor_type: str | None) -> bool:
        return not self.vendor_types or vendor_type in self.vendor_types
