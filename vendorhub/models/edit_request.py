from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from sqlalchemy.types import DateTime

from vendorhub.core.ids import gen_id
from vendorhub.models.base import Base, JSONType


class EditRequest(Base):
    __tablename__ = "edit_requests"
    __table_args__ = (
        Index("ix_edit_requests_state_submitted", "review_state", "submitted_at"),
        Index("ix_edit_requests_vendor", "vendor_id"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id("edr"))
    vendor_id: Mapped[str] = mapped_column(String, ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False)

    # field id -> raw storage value (already denormalized)
    changes: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)

    # "pending" | "approved" | "rejected"; moves exactly once
    review_state: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    remark: Mapped[str | None] = mapped_column(Text, nullable=True)

    # admin notification flag; independent of review_state
    seen: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    schema_version: Mapped[int | None] = mapped_column(nullable=True)

    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
