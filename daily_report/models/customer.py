"""
Customer model.

Customers are shared reference data: visits point at them, and a customer
that has been visited cannot be deleted (the FK is RESTRICT).
"""

from datetime import datetime, timezone
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from daily_report.core.database import Base

if TYPE_CHECKING:
    from daily_report.models.report import Visit


class Customer(Base):
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), index=True, nullable=False)
    address: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    contact_person: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    # Visits are never detached from their customer: the database refuses the delete
    visits: Mapped[List["Visit"]] = relationship(
        "Visit", back_populates="customer", passive_deletes="all"
    )

    def __repr__(self) -> str:
        return f"<Customer {self.name}>"
