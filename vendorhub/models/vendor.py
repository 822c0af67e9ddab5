from sqlalchemy import Float, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from vendorhub.core.ids import gen_id
from vendorhub.models.base import AuditMixin, Base, JSONType


class Vendor(AuditMixin, Base):
    __tablename__ = "vendors"
    __table_args__ = (
        Index("ix_vendors_status_created", "status", "created_at"),
        Index("ix_vendors_agent_id", "agent_id"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id("vnd"))

    vendor_type: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # "pending" | "approved" | "rejected"
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")

    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    # onboarding agent who registered the vendor
    agent_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # vendor submission, keyed by form field id; untyped at rest
    form_data: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
