"""
Daily report, visit and comment models.

A DailyReport belongs to one user (its owner) and one calendar date; a user
has at most one report per date, enforced by a unique constraint. Visits and
comments live and die with their report.
"""

from datetime import date, datetime, timezone
from enum import Enum as PyEnum
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Date, DateTime, Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from daily_report.core.database import Base

if TYPE_CHECKING:
    from daily_report.models.customer import Customer
    from daily_report.models.user import User


class TargetType(str, PyEnum):
    """Which section of a report a comment addresses."""
    PROBLEM = "PROBLEM"
    PLAN = "PLAN"


class DailyReport(Base):
    __tablename__ = "daily_reports"
    __table_args__ = (
        UniqueConstraint("user_id", "report_date", name="uq_daily_reports_user_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    report_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    problem: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    plan: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    user: Mapped["User"] = relationship("User", back_populates="reports")
    visits: Mapped[List["Visit"]] = relationship(
        "Visit",
        back_populates="report",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=lambda: [Visit.visit_time, Visit.id],
    )
    comments: Mapped[List["Comment"]] = relationship(
        "Comment",
        back_populates="report",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=lambda: [Comment.created_at, Comment.id],
    )

    def __repr__(self) -> str:
        return f"<DailyReport user={self.user_id} date={self.report_date}>"


class Visit(Base):
    __tablename__ = "visits"

    id: Mapped[int] = mapped_column(primary_key=True)
    daily_report_id: Mapped[int] = mapped_column(
        ForeignKey("daily_reports.id", ondelete="CASCADE"), index=True, nullable=False
    )
    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customers.id", ondelete="RESTRICT"), index=True, nullable=False
    )
    visit_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)  # HH:MM
    content: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )

    report: Mapped["DailyReport"] = relationship("DailyReport", back_populates="visits")
    customer: Mapped["Customer"] = relationship("Customer", back_populates="visits")


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(primary_key=True)
    daily_report_id: Mapped[int] = mapped_column(
        ForeignKey("daily_reports.id", ondelete="CASCADE"), index=True, nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    target_type: Mapped[TargetType] = mapped_column(Enum(TargetType), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )

    report: Mapped["DailyReport"] = relationship("DailyReport", back_populates="comments")
    user: Mapped["User"] = relationship("User", back_populates="comments")
