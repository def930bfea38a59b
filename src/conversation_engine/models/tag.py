from sqlalchemy import Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from datetime import datetime
from conversation_engine.database.base import Base


class Tag(Base):
    """A label an organization can attach to contacts."""
    __tablename__ = "tag"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    organization_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("organization.id"),
        nullable=False,
        index=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    def __repr__(self) -> str:
        return f"<Tag(id={self.id!r}, name={self.name!r})>"


class TagCampaignContact(Base):
    """A tag applied to a campaign contact, optionally carrying a value."""
    __tablename__ = "tag_campaign_contact"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    tag_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tag.id"),
        nullable=False,
        index=True
    )

    campaign_contact_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("campaign_contact.id"),
        nullable=False,
        index=True
    )

    value: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<TagCampaignContact(tag_id={self.tag_id!r}, "
            f"campaign_contact_id={self.campaign_contact_id!r}, value={self.value!r})>"
        )
