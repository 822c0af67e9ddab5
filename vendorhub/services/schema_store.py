from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from vendorhub.canonical.form_schema import FieldDef, SectionDef
from vendorhub.canonical.snapshot import SchemaSnapshot
from vendorhub.core.errors import NotFound, SchemaDefinitionError, StaleSchemaError

log = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

SECTION_MUTABLE = frozenset({"label", "visibility", "vendor_types"})
FIELD_MUTABLE = frozenset({"label", "type", "required", "rules", "vendor_types", "section_id"})


def _check_version(schema: SchemaSnapshot, expected_version: int) -> None:
    if schema.version != expected_version:
        raise StaleSchemaError(expected_version, schema.version)


def _model(cls: Type[M], data: Mapping[str, Any]) -> M:
    try:
        return cls.model_validate(dict(data))
    except PydanticValidationError as e:
        raise SchemaDefinitionError(f"invalid {cls.__name__}: {e.errors(include_url=False)}") from e


def _next(schema: SchemaSnapshot, sections: Iterable[SectionDef], fields: Iterable[FieldDef]) -> SchemaSnapshot:
    try:
        return SchemaSnapshot(version=schema.version + 1, sections=tuple(sections), fields=tuple(fields))
    except PydanticValidationError as e:
        raise SchemaDefinitionError(f"schema invariant violated: {e.errors(include_url=False)}") from e


def _renumber(items: list[M]) -> list[M]:
    return [it.model_copy(update={"order": i}) for i, it in enumerate(items, start=1)]


def _insert_at(items: list[M], item: M, order: int | None) -> list[M]:
    # order is 1-based; None or past-the-end appends, later siblings shift down
    pos = len(items) if order is None else max(0, min(order - 1, len(items)))
    return items[:pos] + [item] + items[pos:]


def _check_changes(changes: Mapping[str, Any], allowed: frozenset[str]) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise SchemaDefinitionError(f"cannot change: {', '.join(sorted(unknown))}")


def _check_reorder(current_ids: list[str], ordered_ids: list[str], kind: str) -> None:
    known = set(current_ids)
    for ident in ordered_ids:
        if ident not in known:
            raise NotFound(kind, ident)
    if len(ordered_ids) != len(set(ordered_ids)):
        raise SchemaDefinitionError(f"{kind} reorder list contains duplicates")
    if set(ordered_ids) != known:
        missing = sorted(known - set(ordered_ids))
        raise SchemaDefinitionError(f"{kind} reorder list must name every {kind}; missing: {', '.join(missing)}")


def _replace_section_fields(schema: SchemaSnapshot, section_id: str, new_fields: list[FieldDef]) -> list[FieldDef]:
    return [f for f in schema.fields if f.section_id != section_id] + new_fields


# --- sections ---

def create_section(
    schema: SchemaSnapshot,
    *,
    expected_version: int,
    section_id: str,
    label: str,
    order: int | None = None,
    visibility: Iterable[str] = (),
    vendor_types: Iterable[str] = (),
) -> SchemaSnapshot:
    _check_version(schema, expected_version)
    if any(s.id == section_id for s in schema.sections):
        raise SchemaDefinitionError(f"section already exists: {section_id}")

    section = _model(SectionDef, {
        "id": section_id,
        "label": label,
        "order": 1,
        "visibility": frozenset(visibility),
        "vendor_types": frozenset(vendor_types),
    })
    sections = _renumber(_insert_at(schema.ordered_sections(), section, order))
    return _next(schema, sections, schema.fields)


def update_section(
    schema: SchemaSnapshot,
    section_id: str,
    *,
    expected_version: int,
    changes: Mapping[str, Any],
) -> SchemaSnapshot:
    """Order is not editable here; use reorder_sections."""
    _check_version(schema, expected_version)
    _check_changes(changes, SECTION_MUTABLE)
    old = schema.get_section(section_id)

    new = _model(SectionDef, {**old.model_dump(), **changes})
    sections = [new if s.id == section_id else s for s in schema.sections]
    return _next(schema, sections, schema.fields)


def delete_section(schema: SchemaSnapshot, section_id: str, *, expected_version: int) -> SchemaSnapshot:
    """
    Delete a section and, explicitly, every field it owns. Vendor form_data
    entries for those fields are left alone and become passthrough data.
    """
    _check_version(schema, expected_version)
    schema.get_section(section_id)

    orphaned = [f.id for f in schema.fields if f.section_id == section_id]
    fields = [f for f in schema.fields if f.section_id != section_id]
    if orphaned:
        log.info("deleting section %s cascades to %d field(s): %s", section_id, len(orphaned), orphaned)

    sections = _renumber([s for s in schema.ordered_sections() if s.id != section_id])
    return _next(schema, sections, fields)


def reorder_sections(schema: SchemaSnapshot, ordered_ids: list[str], *, expected_version: int) -> SchemaSnapshot:
    _check_version(schema, expected_version)
    _check_reorder([s.id for s in schema.sections], ordered_ids, "section")

    by_id = {s.id: s for s in schema.sections}
    sections = _renumber([by_id[i] for i in ordered_ids])
    return _next(schema, sections, schema.fields)


# --- fields ---

def create_field(
    schema: SchemaSnapshot,
    *,
    expected_version: int,
    field_id: str,
    section_id: str,
    label: str,
    type: str,
    order: int | None = None,
    required: bool = False,
    rules: Mapping[str, Any] | None = None,
    vendor_types: Iterable[str] = (),
) -> SchemaSnapshot:
    _check_version(schema, expected_version)
    schema.get_section(section_id)
    if any(f.id == field_id for f in schema.fields):
        # ids key vendor form_data, so they are unique across every section
        raise SchemaDefinitionError(f"field already exists: {field_id}")

    field = _model(FieldDef, {
        "id": field_id,
        "section_id": section_id,
        "label": label,
        "type": type,
        "order": 1,
        "required": required,
        "rules": dict(rules or {}),
        "vendor_types": frozenset(vendor_types),
    })
    siblings = _renumber(_insert_at(schema.fields_in(section_id), field, order))
    return _next(schema, schema.sections, _replace_section_fields(schema, section_id, siblings))


def update_field(
    schema: SchemaSnapshot,
    field_id: str,
    *,
    expected_version: int,
    changes: Mapping[str, Any],
) -> SchemaSnapshot:
    """
    Update field attributes. Moving a field to another section (section_id)
    appends it to the end of the target section.
    """
    _check_version(schema, expected_version)
    _check_changes(changes, FIELD_MUTABLE)
    old = schema.get_field(field_id)

    data = {**old.model_dump(), **changes}
    target_section = data["section_id"]
    if target_section == old.section_id:
        new = _model(FieldDef, data)
        fields = [new if f.id == field_id else f for f in schema.fields]
        return _next(schema, schema.sections, fields)

    schema.get_section(target_section)
    data["order"] = len(schema.fields_in(target_section)) + 1
    new = _model(FieldDef, data)

    source = _renumber([f for f in schema.fields_in(old.section_id) if f.id != field_id])
    target = schema.fields_in(target_section) + [new]
    untouched = [f for f in schema.fields if f.section_id not in (old.section_id, target_section)]
    return _next(schema, schema.sections, untouched + source + target)


def delete_field(schema: SchemaSnapshot, field_id: str, *, expected_version: int) -> SchemaSnapshot:
    _check_version(schema, expected_version)
    old = schema.get_field(field_id)

    siblings = _renumber([f for f in schema.fields_in(old.section_id) if f.id != field_id])
    return _next(schema, schema.sections, _replace_section_fields(schema, old.section_id, siblings))


def reorder_fields(
    schema: SchemaSnapshot,
    section_id: str,
    ordered_ids: list[str],
    *,
    expected_version: int,
) -> SchemaSnapshot:
    _check_version(schema, expected_version)
    schema.get_section(section_id)
    current = schema.fields_in(section_id)
    _check_reorder([f.id for f in current], ordered_ids, "field")

    by_id = {f.id: f for f in current}
    siblings = _renumber([by_id[i] for i in ordered_ids])
    return _next(schema, schema.sections, _replace_section_fields(schema, section_id, siblings))
