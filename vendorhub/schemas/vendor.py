from typing import Any, Literal

from pydantic import BaseModel, Field


class VendorViewOut(BaseModel):
    schema_version: int
    values: dict[str, Any]
    # required fields never submitted; absent from values
    missing: list[str] = Field(default_factory=list)


class VendorListOut(BaseModel):
    items: list[VendorViewOut]
    total: int
    limit: int
    offset: int


class VendorEdit(BaseModel):
    # snapshot the editor rendered; defaults to the latest
    schema_version: int | None = Field(default=None, ge=0)
    values: dict[str, Any] = Field(default_factory=dict)


class VendorEditOut(BaseModel):
    changed: list[str]
    vendor: VendorViewOut


class VendorStatusUpdate(BaseModel):
    status: Literal["approved", "rejected"]


class MonthlyCount(BaseModel):
    year: int
    month: int
    count: int


class VendorSummaryOut(BaseModel):
    summary: dict[str, int]
    monthly_requests: list[MonthlyCount]
