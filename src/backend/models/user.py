"""
User account table for the SQL ledger.

Mirrors models.documents.UserDocument plus the store-managed version column.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class User(Base):
    """User account row, keyed by the uid issued at first authentication."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Profile
    display_name: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)

    # Score and voting stats
    score: Mapped[int] = mapped_column(Integer, default=0, index=True)
    votes_cast: Mapped[int] = mapped_column(Integer, default=0)
    votes_won: Mapped[int] = mapped_column(Integer, default=0)
    current_streak: Mapped[int] = mapped_column(Integer, default=0)
    best_streak: Mapped[int] = mapped_column(Integer, default=0)

    # Question creation quota
    questions_created: Mapped[int] = mapped_column(Integer, default=0)
    questions_created_today: Mapped[int] = mapped_column(Integer, default=0)
    last_question_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    last_active: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
