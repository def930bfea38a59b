from sqlalchemy import Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from datetime import datetime
from conversation_engine.database.base import Base
from typing import TYPE_CHECKING

# Avoid circular import issues when using type hints for related models
if TYPE_CHECKING:
    from .assignment import Assignment
    from .campaign_contact import CampaignContact


class Campaign(Base):
    """
    SQLAlchemy model for a Campaign.

    A campaign belongs to one organization and targets many contacts; texters
    are attached to it through assignments.
    """
    __tablename__ = "campaign"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    organization_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("organization.id"),
        nullable=False,
        index=True
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    due_by: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

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

    contacts: Mapped[list["CampaignContact"]] = relationship(
        "CampaignContact",
        back_populates="campaign",
        lazy="select",
    )

    assignments: Mapped[list["Assignment"]] = relationship(
        "Assignment",
        back_populates="campaign",
        lazy="select",
    )

    def __repr__(self) -> str:
        return f"<Campaign(id={self.id!r}, title={self.title!r}, organization_id={self.organization_id!r})>"
