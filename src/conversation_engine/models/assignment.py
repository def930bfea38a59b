from sqlalchemy import Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from datetime import datetime
from conversation_engine.database.base import Base
from typing import TYPE_CHECKING

# Avoid circular import issues when using type hints for related models
if TYPE_CHECKING:
    from .user import User
    from .campaign import Campaign


class Assignment(Base):
    """
    Link between a texter (user) and a campaign.

    Contacts point at an assignment through `campaign_contact.assignment_id`;
    the reassignment service reuses one assignment per (user_id, campaign_id)
    pair and creates it lazily when missing.
    """
    __tablename__ = "assignment"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user.id"),
        nullable=False,
        index=True
    )

    campaign_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("campaign.id"),
        nullable=False,
        index=True
    )

    # Quota of contacts the texter may take on; None means unlimited
    max_contacts: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    # --- Relationships ---

    user: Mapped["User"] = relationship("User", back_populates="assignments")
    campaign: Mapped["Campaign"] = relationship("Campaign", back_populates="assignments")

    def __repr__(self) -> str:
        return (
            f"<Assignment(id={self.id!r}, user_id={self.user_id!r}, campaign_id={self.campaign_id!r}, "
            f"max_contacts={self.max_contacts!r})>"
        )
