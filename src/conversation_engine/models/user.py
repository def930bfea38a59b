from sqlalchemy import Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from datetime import datetime
from conversation_engine.database.base import Base
from typing import TYPE_CHECKING

# Avoid circular import issues when using type hints for related models
if TYPE_CHECKING:
    from .assignment import Assignment


class Organization(Base):
    """An organization owns campaigns, tags and texter memberships."""
    __tablename__ = "organization"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<Organization(id={self.id!r}, name={self.name!r})>"


class User(Base):
    """
    SQLAlchemy model for a User.

    In conversation queries a user is the "texter": the agent owning the
    assignment a contact is linked to.
    """
    __tablename__ = "user"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    cell: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    # --- Relationships ---

    # One-to-Many: a texter holds one assignment per campaign
    assignments: Mapped[list["Assignment"]] = relationship(
        "Assignment",
        back_populates="user",
        lazy="select",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id!r}, first_name={self.first_name!r}, last_name={self.last_name!r})>"


class UserOrganization(Base):
    """Membership of a user in an organization, carrying the user's role there."""
    __tablename__ = "user_organization"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user.id"),
        nullable=False,
        index=True
    )

    organization_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("organization.id"),
        nullable=False,
        index=True
    )

    # TEXTER, SUPERVOLUNTEER, ADMIN, OWNER
    role: Mapped[str] = mapped_column(String(64), nullable=False, default="TEXTER")

    def __repr__(self) -> str:
        return (
            f"<UserOrganization(user_id={self.user_id!r}, organization_id={self.organization_id!r}, "
            f"role={self.role!r})>"
        )
