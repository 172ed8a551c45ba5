"""SQLAlchemy ORM base for the domain cache tables."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for the domain, glue record and metadata models."""

    pass
