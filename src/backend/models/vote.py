"""
Vote record table for the SQL ledger.

The primary key is the composite "{uid}_{question_id}" string, so the
database itself refuses a second vote by the same user on the same question.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class Vote(Base):
    """
    Immutable vote record.

    Written once, atomically with the question tally and user stats update.
    """

    __tablename__ = "votes"

    id: Mapped[str] = mapped_column(String(256), primary_key=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    uid: Mapped[str] = mapped_column(String(128))
    question_id: Mapped[str] = mapped_column(String(64), index=True)
    choice: Mapped[str] = mapped_column(String(1))
    won: Mapped[bool] = mapped_column(Boolean)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    __table_args__ = (Index("ix_votes_uid_created", "uid", "created_at"),)
