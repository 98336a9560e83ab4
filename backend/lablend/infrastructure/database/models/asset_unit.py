"""SQLAlchemy ORM model for the AssetUnit entity."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from lablend.infrastructure.database.base import Base


class AssetUnitModel(Base):
    """ORM model — maps to the 'assets' table.

    ``status`` is stored alongside ``current_holder`` for indexed filtering
    and is always written together with it.
    """

    __tablename__ = "assets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    group_key: Mapped[str] = mapped_column(String(300), nullable=False)
    asset_description: Mapped[str] = mapped_column(String(500), nullable=False)
    asset_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="available")
    current_holder: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=True
    )
    scrapped: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    image_ref: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    import_ref: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("asset_imports.id"), nullable=True
    )

    is_fixed_assets: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    category: Mapped[str | None] = mapped_column(String(200), nullable=True)
    serial_no: Mapped[str | None] = mapped_column(String(200), nullable=True)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    excel_user: Mapped[str | None] = mapped_column(String(200), nullable=True)
    manufacturer: Mapped[str | None] = mapped_column(String(200), nullable=True)
    value_cny: Mapped[float | None] = mapped_column(Float, nullable=True)
    commissioning_time: Mapped[str | None] = mapped_column(String(40), nullable=True)
    metrology_validity_period: Mapped[str | None] = mapped_column(String(40), nullable=True)
    metrology_requirement: Mapped[str | None] = mapped_column(Text, nullable=True)
    metrology_cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_assets_group_key", "group_key"),
        Index("idx_assets_group_status", "group_key", "status"),
        Index("idx_assets_holder", "current_holder"),
    )

    def __repr__(self) -> str:
        return (
            f"<AssetUnitModel(id={self.id}, group='{self.group_key}', "
            f"holder={self.current_holder}, scrapped={self.scrapped})>"
        )
