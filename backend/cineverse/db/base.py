"""Database base and model registry."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


# Import all models here so metadata.create_all sees every table
import cineverse.models  # noqa: E402, F401
