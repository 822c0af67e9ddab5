from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

VendorStatus = Literal["pending", "approved", "rejected"]

VENDOR_STATUSES: tuple[str, ...] = ("pending", "approved", "rejected")


class VendorRecord(BaseModel):
    """
    A vendor as stored by the backend of record.

    Fixed attributes are typed; everything the vendor submitted lives in
    form_data, untyped. The primary id is accepted as either `_id` or `id`.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    vendor_type: str | None = Field(default=None, validation_alias=AliasChoices("vendor_type", "vendorType"))
    status: VendorStatus = Field(default="pending", validation_alias=AliasChoices("status", "restaurantStatus"))

    # raw at rest; normalize() is responsible for turning these into floats
    latitude: Any = None
    longitude: Any = None

    created_at: datetime | None = Field(default=None, validation_alias=AliasChoices("created_at", "createdAt"))
    updated_at: datetime | None = Field(default=None, validation_alias=AliasChoices("updated_at", "updatedAt"))
    agent_id: str | None = Field(default=None, validation_alias=AliasChoices("agent_id", "agentId"))

    form_data: dict[str, Any] = Field(default_factory=dict, validation_alias=AliasChoices("form_data", "formData"))

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> Any:
        # document stores hand back ObjectId-like values
        if v is not None and not isinstance(v, str):
            return str(v)
        return v

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.lower().strip()
        return v

    @field_validator("form_data", mode="before")
    @classmethod
    def tolerate_bad_form_data(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else {}

    def with_form_data(self, changes: dict[str, Any]) -> "VendorRecord":
        """Key-wise overwrite of form_data, returning a new record."""
        return self.model_copy(update={"form_data": {**self.form_data, **changes}})
