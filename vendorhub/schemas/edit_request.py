from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class EditRequestSubmit(BaseModel):
    schema_version: int | None = Field(default=None, ge=0)
    values: dict[str, Any] = Field(default_factory=dict)


class EditRequestOut(BaseModel):
    id: str
    vendor_id: str
    changes: dict[str, Any]
    review_state: str
    remark: str | None
    seen: bool
    schema_version: int | None
    submitted_at: datetime | None
    reviewed_at: datetime | None
    reviewed_by: str | None


class EditRequestListOut(BaseModel):
    items: list[EditRequestOut]
    unread_count: int


class ReviewRequest(BaseModel):
    remark: str | None = Field(default=None, max_length=1000)


class MarkSeenRequest(BaseModel):
    ids: list[str] = Field(min_length=1, max_length=500)


class MarkSeenOut(BaseModel):
    modified: int
    unread_count: int


class EditRequestSubmitOut(BaseModel):
    # False when the submitted values match the stored record
    created: bool
    request: EditRequestOut | None = None
