"""SQLAlchemy declarative base with common mixins."""
from datetime import datetime

from sqlalchemy import DDL, DateTime, Table, event, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TimestampMixin:
    """
    Mixin that adds created_at and updated_at columns.

    Both default to the database's CURRENT_TIMESTAMP. ``updated_at`` is also
    bumped by the ORM on update, and on SQLite by a row trigger so that updates
    issued outside the ORM are covered too (see ``add_updated_at_trigger``).
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.current_timestamp(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp(),
        nullable=False,
    )


def add_updated_at_trigger(table: Table) -> None:
    """Create an AFTER UPDATE trigger maintaining ``updated_at`` when table is created on SQLite."""
    name = table.name
    trigger = DDL(
        f"CREATE TRIGGER IF NOT EXISTS update_{name}_updated_at "
        f"AFTER UPDATE ON {name} FOR EACH ROW "
        f"WHEN NEW.updated_at = OLD.updated_at "
        f"BEGIN UPDATE {name} SET updated_at = CURRENT_TIMESTAMP WHERE id = NEW.id; END",
    )
    event.listen(table, "after_create", trigger.execute_if(dialect="sqlite"))
