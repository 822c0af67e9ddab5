from datetime import datetime

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from sqlalchemy.types import DateTime

from vendorhub.models.base import Base, JSONType


class FormSchemaVersion(Base):
    """
    One immutable schema snapshot per row. Rows are only ever inserted;
    the primary key on version is what makes concurrent writers collide.
    """
    __tablename__ = "form_schema_versions"

    version: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)

    # SchemaSnapshot.to_document()
    document: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)

    change_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
