import uuid
from datetime import datetime

from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def new_id() -> str:
    return str(uuid.uuid4())


class Base(AsyncAttrs, DeclarativeBase):
    """
    Base class for all models.
    Includes AsyncAttrs for async loading of relationships.
    """
    pass


class IdMixin:
    """Opaque UUID primary key, exposed to Python as a plain string."""
    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), primary_key=True, default=new_id
    )


class TimestampMixin:
    """Mixin to add created_at/updated_at to any model."""
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )
