from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ReviewState = Literal["pending", "approved", "rejected"]
Decision = Literal["approve", "reject"]

TERMINAL_STATES: frozenset[str] = frozenset({"approved", "rejected"})


class EditRequestRecord(BaseModel):
    """
    Proposed form_data changes against an approved vendor.

    review_state moves once (pending -> approved|rejected); seen is an
    independent notification flag that only ever goes false -> true.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    vendor_id: str
    changes: dict[str, Any] = Field(default_factory=dict)
    submitted_at: datetime | None = None
    review_state: ReviewState = "pending"
    remark: str | None = None
    seen: bool = False
    schema_version: int | None = None
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.review_state in TERMINAL_STATES
