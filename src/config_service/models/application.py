from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from datetime import datetime
from typing import TYPE_CHECKING

from config_service.database.base import Base
from config_service.utils.ulid import ULID_LENGTH, new_ulid

# Avoid circular import issues when using type hints for related models
if TYPE_CHECKING:
    from .configuration import Configuration


class Application(Base):
    """
    SQLAlchemy model for Application.

    The top-level named entity managed by the service. Each application owns
    exactly one Configuration, created in the same transaction.
    """
    __tablename__ = "applications"

    # ULID primary key (time-sortable, 26 chars). The service assigns it explicitly;
    # the default only covers direct inserts.
    id: Mapped[str] = mapped_column(
        String(ULID_LENGTH),
        primary_key=True,
        default=new_ulid,
    )

    # Unique, enforced by the store (constraint: uq_applications_name)
    name: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False
    )

    description: Mapped[str | None] = mapped_column(
        String(1000),
        nullable=True
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

    # --- Relationships ---

    # One-to-One: the configuration seeded at creation time
    configuration: Mapped["Configuration | None"] = relationship(
        "Configuration",
        back_populates="application",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="select"
    )

    def __repr__(self) -> str:
        return f"<Application(id={self.id!r}, name={self.name!r})>"
