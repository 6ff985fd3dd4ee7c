"""
User model and roles.

Two roles exist. MANAGER holds every permission SALES has, plus user and
customer administration and the right to edit anyone's reports/comments.
"""

from datetime import datetime, timezone
from enum import Enum as PyEnum
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from daily_report.core.database import Base

if TYPE_CHECKING:
    from daily_report.models.report import Comment, DailyReport


class Role(str, PyEnum):
    SALES = "SALES"
    MANAGER = "MANAGER"


class User(Base):
    """Application user (sales staff or manager)."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)

    # Authentication
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Profile
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    department: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    role: Mapped[Role] = mapped_column(Enum(Role), nullable=False, default=Role.SALES)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    reports: Mapped[List["DailyReport"]] = relationship(
        "DailyReport",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    comments: Mapped[List["Comment"]] = relationship(
        "Comment",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"

    def set_password(self, password: str) -> None:
        """Hash and set password using Argon2id."""
        from daily_report.auth.password import hash_password

        self.password_hash = hash_password(password)

    def verify_password(self, password: str) -> bool:
        """
        Verify password against stored hash.
        Upgrades the stored hash in place when its parameters are outdated.
        """
        from daily_report.auth.password import needs_rehash, verify_password

        if not verify_password(password, self.password_hash):
            return False
        if needs_rehash(self.password_hash):
            self.set_password(password)
        return True