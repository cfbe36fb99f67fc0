from sqlalchemy import String, DateTime, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from datetime import datetime
from typing import TYPE_CHECKING

from config_service.database.base import Base
from config_service.utils.ulid import ULID_LENGTH

if TYPE_CHECKING:
    from .application import Application

# Configuration document every new application starts with
DEFAULT_CONFIG_DATA = "{}"


class Configuration(Base):
    """
    SQLAlchemy model for Configuration.

    Holds an opaque JSON document (stored as text) for one application.
    """
    __tablename__ = "configurations"

    # Primary key and owning application at the same time (one-to-one)
    application_id: Mapped[str] = mapped_column(
        String(ULID_LENGTH),
        ForeignKey("applications.id", ondelete="CASCADE"),
        primary_key=True,
    )

    config_data: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default=DEFAULT_CONFIG_DATA
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    application: Mapped["Application"] = relationship(
        "Application",
        back_populates="configuration",
    )

    def __repr__(self) -> str:
        return f"<Configuration(application_id={self.application_id!r})>"
