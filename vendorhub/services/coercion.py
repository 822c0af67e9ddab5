from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Callable

from opentelemetry import trace

log = logging.getLogger(__name__)


class _Missing:
    """Marker for a required field the vendor has not submitted yet."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "_Missing":
        return self

    def __deepcopy__(self, memo: dict) -> "_Missing":
        return self


MISSING = _Missing()


@dataclass(frozen=True)
class CoercionDefaulted:
    """A present raw value could not be parsed; a default was used instead."""
    field_id: str
    field_type: str
    raw: Any
    default: Any


CoercionObserver = Callable[[CoercionDefaulted], None]


# --- parsers (strict: raise ValueError on anything they cannot read) ---

_TRUE = {"true", "yes", "y", "1", "on"}
_FALSE = {"false", "no", "n", "0", "off", ""}
_CURRENCY_JUNK = re.compile(r"[^\d.\-]")


def _finite(v: float) -> float:
    if math.isnan(v) or math.isinf(v):
        raise ValueError("number must be finite")
    return v


def _to_float(raw: Any) -> float:
    if isinstance(raw, bool):
        raise ValueError("boolean is not a number")
    if isinstance(raw, (int, float)):
        return _finite(float(raw))
    if isinstance(raw, str):
        s = raw.strip().replace(",", "")
        if not s:
            raise ValueError("empty string is not a number")
        return _finite(float(s))
    raise ValueError(f"cannot read number from {type(raw).__name__}")


def parse_number(raw: Any) -> int | float:
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    v = _to_float(raw)
    if v.is_integer() and abs(v) < 2**53:
        return int(v)
    return v


def parse_currency(raw: Any) -> float:
    if isinstance(raw, str):
        s = _CURRENCY_JUNK.sub("", raw)
        if not s or s in ("-", ".", "-."):
            raise ValueError(f"cannot read amount from {raw!r}")
        raw = s
    return round(_to_float(raw), 2)


def parse_geo(raw: Any) -> float:
    return _to_float(raw)


def parse_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str):
        s = raw.strip().lower()
        if s in _TRUE:
            return True
        if s in _FALSE:
            return False
    raise ValueError(f"cannot read boolean from {raw!r}")


def parse_text(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return str(raw)
    raise ValueError(f"cannot read text from {type(raw).__name__}")


def parse_enum_single(raw: Any) -> str:
    if isinstance(raw, bool):
        raise ValueError("boolean is not an option")
    return parse_text(raw).strip()


def parse_enum_multi(raw: Any) -> list[str]:
    if not isinstance(raw, (list, tuple)):
        raise ValueError(f"expected a list, got {type(raw).__name__}")
    return [parse_enum_single(item) for item in raw]


def parse_image(raw: Any) -> str:
    # uploads come back either as a bare URL or as an upload descriptor
    if isinstance(raw, dict):
        raw = raw.get("secure_url") or raw.get("url")
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    raise ValueError("image reference must be a URL or carry secure_url/url")


_PARSERS: dict[str, Callable[[Any], Any]] = {
    "text": parse_text,
    "number": parse_number,
    "currency": parse_currency,
    "boolean": parse_bool,
    "enum_single": parse_enum_single,
    "enum_multi": parse_enum_multi,
    "geo_coordinate": parse_geo,
    "image_reference": parse_image,
}

_DEFAULTS: dict[str, Any] = {
    "text": "",
    "number": 0,
    "currency": 0.0,
    "boolean": False,
    "enum_single": None,
    "geo_coordinate": 0.0,
    "image_reference": None,
}


def default_for(field_type: str) -> Any:
    if field_type == "enum_multi":
        return []
    return _DEFAULTS[field_type]


def is_empty(value: Any) -> bool:
    if value is None or value is MISSING:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def _emit(event: CoercionDefaulted, observer: CoercionObserver | None) -> None:
    log.info(
        "coercion defaulted field=%s type=%s raw=%r default=%r",
        event.field_id, event.field_type, event.raw, event.default,
    )
    span = trace.get_current_span()
    if span.is_recording():
        span.add_event("coercion_defaulted", {
            "field_id": event.field_id,
            "field_type": event.field_type,
            "raw": repr(event.raw)[:200],
        })
    if observer is not None:
        observer(event)


def coerce_lenient(
    field_type: str,
    raw: Any,
    *,
    field_id: str,
    observer: CoercionObserver | None = None,
) -> Any:
    """
    Read path: never raises. Unparseable values fall back to the type default
    and are reported as CoercionDefaulted.
    """
    try:
        return _PARSERS[field_type](raw)
    except (ValueError, TypeError, OverflowError):
        default = default_for(field_type)
        _emit(CoercionDefaulted(field_id=field_id, field_type=field_type, raw=raw, default=default), observer)
        return default


def coerce_strict(field_type: str, raw: Any) -> Any:
    """
    Write path: returns the storage shape for a value, None for an emptied
    value, raises ValueError when the value cannot be read as field_type.
    """
    if is_empty(raw):
        return [] if field_type == "enum_multi" else None
    try:
        return _PARSERS[field_type](raw)
    except (TypeError, OverflowError) as e:
        raise ValueError(str(e)) from e
