"""
Declarative base - every ORM model inherits from Base.

Alembic and the test suite use Base.metadata to create tables; a model's
table is registered once its module has been imported.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """SQLAlchemy 2.0 declarative base class."""
    pass
