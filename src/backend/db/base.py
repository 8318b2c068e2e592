"""SQLAlchemy declarative base for the SQL ledger tables."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all table models."""

    pass
