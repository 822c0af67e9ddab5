from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from vendorhub.core.ids import gen_id
from vendorhub.models.base import AuditMixin, Base


class Agent(AuditMixin, Base):
    __tablename__ = "agents"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id("agt"))

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    # login handle, stored lowercased
    username: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)

    # "agent" (field onboarding) | "employee"
    role: Mapped[str] = mapped_column(String(16), nullable=False, default="agent")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
