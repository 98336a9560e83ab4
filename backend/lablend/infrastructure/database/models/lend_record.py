"""SQLAlchemy ORM model for the append-only lend record log."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from lablend.infrastructure.database.base import Base


class LendRecordModel(Base):
    """ORM model — maps to the 'lend_records' table."""

    __tablename__ = "lend_records"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)
    group_key: Mapped[str] = mapped_column(String(300), nullable=False)
    asset_description: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    asset_unit: Mapped[str | None] = mapped_column(String(36), nullable=True)
    action: Mapped[str] = mapped_column(String(10), nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_lend_records_user_time", "user", "occurred_at"),
        Index("idx_lend_records_group_time", "group_key", "occurred_at"),
    )

    def __repr__(self) -> str:
        return f"<LendRecordModel(id={self.id}, user={self.user}, action='{self.action}')>"
