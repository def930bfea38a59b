from sqlalchemy import Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from datetime import datetime
from conversation_engine.database.base import Base
from typing import TYPE_CHECKING

# Avoid circular import issues when using type hints for related models
if TYPE_CHECKING:
    from .campaign import Campaign
    from .message import Message


class CampaignContact(Base):
    """
    SQLAlchemy model for a campaign contact: one person targeted within one campaign.

    A conversation is a campaign contact together with its assignment, campaign
    and message thread.
    """
    __tablename__ = "campaign_contact"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    campaign_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("campaign.id"),
        nullable=False,
        index=True
    )

    # NULL means the contact is unassigned
    assignment_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("assignment.id"),
        nullable=True,
        index=True
    )

    first_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    cell: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    zip: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    external_id: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    # needsMessage, needsResponse, convo, messaged, closed
    message_status: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        default="needsMessage",
        index=True
    )

    is_opted_out: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Last carrier error code for the contact's number; NULL when none
    error_code: Mapped[int | None] = mapped_column(Integer, nullable=True)

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

    campaign: Mapped["Campaign"] = relationship("Campaign", back_populates="contacts")

    messages: Mapped[list["Message"]] = relationship(
        "Message",
        back_populates="campaign_contact",
        lazy="select",
        order_by="Message.id"
    )

    def __repr__(self) -> str:
        return (
            f"<CampaignContact(id={self.id!r}, campaign_id={self.campaign_id!r}, "
            f"assignment_id={self.assignment_id!r}, message_status={self.message_status!r})>"
        )
