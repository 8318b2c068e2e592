"""
Question table for the SQL ledger.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class Question(Base):
    """A binary question with its two vote tallies."""

    __tablename__ = "questions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    text: Mapped[str] = mapped_column(String(280))
    option_a: Mapped[str] = mapped_column(String(60))
    option_b: Mapped[str] = mapped_column(String(60))

    # Monotonic tallies, one increment per vote row
    votes_a: Mapped[int] = mapped_column(Integer, default=0)
    votes_b: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    creator_uid: Mapped[Optional[str]] = mapped_column(String(128), nullable=True, index=True)

    __table_args__ = (Index("ix_questions_created", "created_at", "id"),)
