from __future__ import annotations

import copy
import logging
from typing import Any, Iterable

from vendorhub.canonical.form_schema import RESERVED_KEYS, WELL_KNOWN_LIST_KEYS, FieldDef
from vendorhub.canonical.snapshot import SchemaSnapshot
from vendorhub.canonical.vendor import VendorRecord
from vendorhub.core.errors import FieldViolation, ValidationError
from vendorhub.services.coercion import (
    MISSING,
    CoercionObserver,
    coerce_lenient,
    coerce_strict,
    default_for,
    is_empty,
)

log = logging.getLogger(__name__)

FlatView = dict[str, Any]
PartialUpdate = dict[str, Any]


def _coordinate(vendor: VendorRecord, key: str, observer: CoercionObserver | None) -> float:
    raw = getattr(vendor, key)
    if raw is None:
        return 0.0
    return coerce_lenient("geo_coordinate", raw, field_id=key, observer=observer)


def _top_level(vendor: VendorRecord, observer: CoercionObserver | None) -> FlatView:
    return {
        "id": vendor.id,
        "vendor_type": vendor.vendor_type,
        "status": vendor.status,
        "latitude": _coordinate(vendor, "latitude", observer),
        "longitude": _coordinate(vendor, "longitude", observer),
        "created_at": vendor.created_at,
        "updated_at": vendor.updated_at,
        "agent_id": vendor.agent_id,
    }


def _absent_value(f: FieldDef) -> Any:
    # multi-valued fields are never MISSING; an empty list is their blank state
    if f.is_multi_valued:
        return []
    if f.required:
        return MISSING
    return default_for(f.type)


def normalize(
    schema: SchemaSnapshot,
    vendor: VendorRecord,
    *,
    role: str | None = None,
    observer: CoercionObserver | None = None,
) -> FlatView:
    """
    Flatten a vendor record against one explicit schema snapshot.

    Never raises on bad form data: unparseable values degrade to the type
    default (reported through `observer`), required fields that were never
    submitted come back as MISSING, and keys unknown to the snapshot are
    passed through as-is. Fixed attributes win over form_data on key clashes.
    """
    view = _top_level(vendor, observer)
    form = vendor.form_data
    declared = schema.field_map()

    for f in schema.applicable_fields(vendor.vendor_type, role):
        raw = form.get(f.id)
        if raw is None:
            view[f.id] = _absent_value(f)
        else:
            view[f.id] = coerce_lenient(f.type, raw, field_id=f.id, observer=observer)

    # always lists, even when declared by a section this vendor does not see
    for key in WELL_KNOWN_LIST_KEYS:
        if key in view:
            continue
        raw = form.get(key)
        view[key] = [] if raw is None else coerce_lenient("enum_multi", raw, field_id=key, observer=observer)

    for key, raw in form.items():
        if key in RESERVED_KEYS:
            log.warning("vendor %s: form_data key %r shadows a fixed attribute; dropped from view", vendor.id, key)
            continue
        if key in view or key in declared:
            # declared but not applicable/visible fields stay hidden
            continue
        view[key] = copy.deepcopy(raw)

    return view


def normalize_many(
    schema: SchemaSnapshot,
    vendors: Iterable[VendorRecord],
    *,
    role: str | None = None,
    observer: CoercionObserver | None = None,
) -> list[FlatView]:
    return [normalize(schema, v, role=role, observer=observer) for v in vendors]


def split_missing(view: FlatView) -> tuple[FlatView, list[str]]:
    """JSON rendering helper: (values without MISSING entries, missing ids in order)."""
    values: FlatView = {}
    missing: list[str] = []
    for k, v in view.items():
        if v is MISSING:
            missing.append(k)
        else:
            values[k] = v
    return values, missing


# --- write path ---

def _same(a: Any, b: Any) -> bool:
    if is_empty(a) and is_empty(b):
        return True
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    return a == b


def check_rules(f: FieldDef, value: Any) -> list[FieldViolation]:
    """Validate an already strictly-coerced value against a field's rules."""
    if is_empty(value):
        return [FieldViolation(f.id, "required", value)] if f.required else []

    rules = f.rules
    out: list[FieldViolation] = []

    if f.type in ("number", "currency", "geo_coordinate"):
        if rules.min_value is not None and value < rules.min_value:
            out.append(FieldViolation(f.id, "min_value", value))
        if rules.max_value is not None and value > rules.max_value:
            out.append(FieldViolation(f.id, "max_value", value))

    if f.type in ("text", "enum_multi"):
        # text: characters, enum_multi: number of picks
        size = len(value)
        if rules.min_length is not None and size < rules.min_length:
            out.append(FieldViolation(f.id, "min_length", value))
        if rules.max_length is not None and size > rules.max_length:
            out.append(FieldViolation(f.id, "max_length", value))

    if rules.choices is not None:
        if f.type == "enum_single" and value not in rules.choices:
            out.append(FieldViolation(f.id, "choices", value))
        elif f.type == "enum_multi":
            bad = [v for v in value if v not in rules.choices]
            if bad:
                out.append(FieldViolation(f.id, "choices", bad))

    return out


def denormalize(
    schema: SchemaSnapshot,
    flat_view: FlatView,
    original: VendorRecord,
    *,
    role: str | None = None,
) -> PartialUpdate:
    """
    Turn an edited FlatView (or a diff of one) into the minimal form_data update.

    Only applicable schema fields and the well-known list attributes are
    considered; top-level attributes and passthrough keys are ignored. Values
    are parsed strictly into their storage shape and only those that differ
    from the normalized original are returned. Every rule violation is
    collected before raising ValidationError; nothing is partially applied.
    """
    baseline = normalize(schema, original, role=role)
    editable = {f.id: f for f in schema.applicable_fields(original.vendor_type, role)}

    update: PartialUpdate = {}
    violations: list[FieldViolation] = []

    for key, edited in flat_view.items():
        f = editable.get(key)
        if f is None:
            if key in WELL_KNOWN_LIST_KEYS and key not in schema.field_map():
                field_type = "enum_multi"
            else:
                continue
        else:
            field_type = f.type

        try:
            value = coerce_strict(field_type, edited)
        except ValueError:
            violations.append(FieldViolation(key, "type", edited))
            continue

        if _same(value, baseline.get(key)):
            continue

        if f is not None:
            found = check_rules(f, value)
            if found:
                violations.extend(found)
                continue
        update[key] = value

    if violations:
        raise ValidationError(violations)

    if update:
        log.debug("vendor %s: denormalized %d changed field(s) against schema v%s", original.id, len(update), schema.version)
    return update
