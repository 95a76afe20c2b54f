"""SQLAlchemy ORM model for the append-only version history."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from datakeeper.infrastructure.database.base import Base


class VersionHistoryModel(Base):
    """ORM model — maps to the 'data_version_history' table."""

    __tablename__ = "data_version_history"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    data: Mapped[dict] = mapped_column(JSON, nullable=False)
    changed_fields: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    user_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    restored_from_version: Mapped[int | None] = mapped_column(Integer, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("category", "version", name="uq_version_history_category_version"),
        Index("ix_version_history_category", "category"),
    )

    def __repr__(self) -> str:
        return f"<VersionHistoryModel(category='{self.category}', version={self.version})>"
