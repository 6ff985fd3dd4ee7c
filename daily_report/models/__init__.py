"""
Database models.

This module exports all SQLAlchemy models for the application.
"""

from daily_report.models.user import User, Role
from daily_report.models.customer import Customer
from daily_report.models.report import DailyReport, Visit, Comment, TargetType

__all__ = [
    # Users
    "User",
    "Role",
    # Customers
    "Customer",
    # Reports
    "DailyReport",
    "Visit",
    "Comment",
    "TargetType",
]
