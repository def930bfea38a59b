from sqlalchemy import Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from datetime import datetime
from conversation_engine.database.base import Base
from typing import TYPE_CHECKING

# Avoid circular import issues when using type hints for related models
if TYPE_CHECKING:
    from .campaign_contact import CampaignContact


class Message(Base):
    """
    SQLAlchemy model representing one SMS in a contact's thread.

    `user_id` is the texter who sent it (NULL for inbound messages). Message ids
    increase with time, so ordering by id orders a thread chronologically.
    """
    __tablename__ = "message"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    campaign_contact_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("campaign_contact.id"),
        nullable=False,
        index=True
    )

    user_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("user.id"),
        nullable=True,
        index=True
    )

    # Message body (can be multi-line, so Text is used)
    text: Mapped[str] = mapped_column(Text, nullable=False, default="")

    user_number: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    contact_number: Mapped[str] = mapped_column(String(50), nullable=False, default="")

    is_from_contact: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # QUEUED, SENDING, SENT, DELIVERED, ERROR, PAUSED, NOT_ATTEMPTED
    send_status: Mapped[str] = mapped_column(String(32), nullable=False, default="QUEUED")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    # --- Relationships ---

    campaign_contact: Mapped["CampaignContact"] = relationship(
        "CampaignContact",
        back_populates="messages"
    )

    def __repr__(self) -> str:
        return (
            f"<Message(id={self.id!r}, campaign_contact_id={self.campaign_contact_id!r}, "
            f"is_from_contact={self.is_from_contact!r})>"
        )
