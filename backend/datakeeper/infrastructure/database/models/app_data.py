"""SQLAlchemy ORM model for the server copy of each data category."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from datakeeper.infrastructure.database.base import Base


class AppDataModel(Base):
    """ORM model — maps to the 'app_data' table (one row per category and owner)."""

    __tablename__ = "app_data"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    data_id: Mapped[str] = mapped_column(String(100), nullable=False, default="default")
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (UniqueConstraint("type", "data_id", name="uq_app_data_type_owner"),)

    def __repr__(self) -> str:
        return f"<AppDataModel(type='{self.type}', data_id='{self.data_id}')>"
