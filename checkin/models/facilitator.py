from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, IdMixin, TimestampMixin


class Facilitator(Base, IdMixin, TimestampMixin):
    """
    Staff member who looks after a group of attendees.

    Shares the attendee id space: a facilitator who also checks in as an
    attendee has a facilitator row with the same id as their attendee row.
    """

    __tablename__ = "facilitators"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    gender: Mapped[str] = mapped_column(String(10), nullable=False, index=True)

    attendees = relationship(
        "Attendee", back_populates="facilitator", passive_deletes=True
    )

    def __repr__(self):
        return f"<Facilitator(id={self.id}, name='{self.first_name} {self.last_name}')>"
