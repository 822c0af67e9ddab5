from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class VendorHubError(Exception):
    """Base class for domain errors surfaced to callers."""

    code = "vendorhub_error"

    def details(self) -> list[dict[str, Any]]:
        return []


class NotFound(VendorHubError):
    code = "not_found"

    def __init__(self, kind: str, ident: str) -> None:
        super().__init__(f"{kind} not found: {ident}")
        self.kind = kind
        self.ident = ident

    def details(self) -> list[dict[str, Any]]:
        return [{"kind": self.kind, "id": self.ident}]


class StaleSchemaError(VendorHubError):
    """Raised when a schema mutation was prepared against an outdated version."""

    code = "stale_schema"

    def __init__(self, expected_version: int, actual_version: int) -> None:
        super().__init__(
            f"schema moved on: expected version {expected_version}, found {actual_version}"
        )
        self.expected_version = expected_version
        self.actual_version = actual_version

    def details(self) -> list[dict[str, Any]]:
        return [{"expected_version": self.expected_version, "actual_version": self.actual_version}]


class SchemaDefinitionError(VendorHubError):
    """A schema mutation would break a snapshot invariant."""

    code = "invalid_schema"


class InvalidStateTransition(VendorHubError):
    code = "invalid_state_transition"

    def __init__(self, entity: str, ident: str, current: str, attempted: str) -> None:
        super().__init__(f"{entity} {ident} cannot {attempted} from state {current!r}")
        self.entity = entity
        self.ident = ident
        self.current = current
        self.attempted = attempted

    def details(self) -> list[dict[str, Any]]:
        return [{
            "entity": self.entity,
            "id": self.ident,
            "current": self.current,
            "attempted": self.attempted,
        }]


@dataclass(frozen=True)
class FieldViolation:
    field_id: str
    rule: str
    value: Any

    def to_dict(self) -> dict[str, Any]:
        return {"field_id": self.field_id, "rule": self.rule, "value": self.value}


class ValidationError(VendorHubError):
    """One or more edited fields broke their validation rules.

    Carries every violation so callers can present them all at once.
    """

    code = "validation_failed"

    def __init__(self, violations: list[FieldViolation]) -> None:
        fields = ", ".join(sorted({v.field_id for v in violations}))
        super().__init__(f"{len(violations)} validation error(s) on: {fields}")
        self.violations = list(violations)

    def details(self) -> list[dict[str, Any]]:
        return [v.to_dict() for v in self.violations]


class AlreadyExists(VendorHubError):
    code = "already_exists"

    def __init__(self, kind: str, key: str, value: str) -> None:
        super().__init__(f"{kind} with {key} {value!r} already exists")
        self.kind = kind
        self.key = key
        self.value = value

    def details(self) -> list[dict[str, Any]]:
        return [{"kind": self.kind, self.key: self.value}]
