"""SQLAlchemy ORM model for spreadsheet import batches."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from lablend.infrastructure.database.base import Base


class ImportBatchModel(Base):
    """ORM model — maps to the 'asset_imports' table."""

    __tablename__ = "asset_imports"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    source_file_ref: Mapped[str] = mapped_column(String(1024), nullable=False)
    created_by: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
