from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from vendorhub.core.errors import NotFound
from vendorhub.canonical.form_schema import FieldDef, SectionDef


class SchemaSnapshot(BaseModel):
    """
    Immutable, versioned set of sections and fields.

    Mutations never touch a snapshot in place; see services.schema_store,
    which always returns a new snapshot with version + 1.
    """
    model_config = ConfigDict(frozen=True)

    version: int = Field(default=0, ge=0)
    sections: tuple[SectionDef, ...] = ()
    fields: tuple[FieldDef, ...] = ()

    @model_validator(mode="after")
    def validate_invariants(self) -> "SchemaSnapshot":
        section_ids = [s.id for s in self.sections]
        if len(set(section_ids)) != len(section_ids):
            raise ValueError("section ids must be unique")

        section_orders = [s.order for s in self.sections]
        if len(set(section_orders)) != len(section_orders):
            raise ValueError("section orders must be unique")

        field_ids = [f.id for f in self.fields]
        if len(set(field_ids)) != len(field_ids):
            raise ValueError("field ids must be unique across sections")

        known = set(section_ids)
        seen_orders: set[tuple[str, int]] = set()
        for f in self.fields:
            if f.section_id not in known:
                raise ValueError(f"field '{f.id}' references unknown section '{f.section_id}'")
            key = (f.section_id, f.order)
            if key in seen_orders:
                raise ValueError(f"field order {f.order} used twice in section '{f.section_id}'")
            seen_orders.add(key)
        return self

    # --- lookups ---

    def ordered_sections(self) -> list[SectionDef]:
        return sorted(self.sections, key=lambda s: s.order)

    def fields_in(self, section_id: str) -> list[FieldDef]:
        return sorted((f for f in self.fields if f.section_id == section_id), key=lambda f: f.order)

    def get_section(self, section_id: str) -> SectionDef:
        for s in self.sections:
            if s.id == section_id:
                return s
        raise NotFound("section", section_id)

    def get_field(self, field_id: str) -> FieldDef:
        for f in self.fields:
            if f.id == field_id:
                return f
        raise NotFound("field", field_id)

    def field_map(self) -> dict[str, FieldDef]:
        return {f.id: f for f in self.fields}

    def applicable_fields(self, vendor_type: str | None, role: str | None = None) -> list[FieldDef]:
        """
        Fields that apply to a vendor type, in render order
        (section order first, then field order inside the section).
        """
        out: list[FieldDef] = []
        for s in self.ordered_sections():
            if not s.applies_to(vendor_type) or not s.visible_to(role):
                continue
            out.extend(f for f in self.fields_in(s.id) if f.applies_to(vendor_type))
        return out

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


EMPTY_SCHEMA = SchemaSnapshot()
