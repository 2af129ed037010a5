"""SQLAlchemy declarative Base shared by the user and role models."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base; Alembic autogenerate reads Base.metadata."""
