from typing import Any

from pydantic import BaseModel, Field

from vendorhub.canonical.form_schema import FieldType


class SectionCreate(BaseModel):
    expected_version: int = Field(ge=0)
    id: str = Field(min_length=1, max_length=80)
    label: str = Field(min_length=1, max_length=200)
    order: int | None = Field(default=None, ge=1)
    visibility: list[str] = Field(default_factory=list)
    vendor_types: list[str] = Field(default_factory=list)


class SectionUpdate(BaseModel):
    expected_version: int = Field(ge=0)
    label: str | None = Field(default=None, min_length=1, max_length=200)
    visibility: list[str] | None = None
    vendor_types: list[str] | None = None


class FieldCreate(BaseModel):
    expected_version: int = Field(ge=0)
    id: str = Field(min_length=1, max_length=80)
    label: str = Field(min_length=1, max_length=200)
    type: FieldType
    order: int | None = Field(default=None, ge=1)
    required: bool = False
    rules: dict[str, Any] = Field(default_factory=dict)
    vendor_types: list[str] = Field(default_factory=list)


class FieldUpdate(BaseModel):
    expected_version: int = Field(ge=0)
    section_id: str | None = None
    label: str | None = Field(default=None, min_length=1, max_length=200)
    type: FieldType | None = None
    required: bool | None = None
    rules: dict[str, Any] | None = None
    vendor_types: list[str] | None = None


class ReorderRequest(BaseModel):
    expected_version: int = Field(ge=0)
    ids: list[str]


def changes_of(body: BaseModel) -> dict[str, Any]:
    """Fields the client actually sent, minus the version precondition."""
    data = body.model_dump(exclude_unset=True, exclude={"expected_version"})
    return {k: v for k, v in data.items() if v is not None}
