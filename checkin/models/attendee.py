from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Date, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, IdMixin, TimestampMixin


class Attendee(Base, IdMixin, TimestampMixin):
    __tablename__ = "attendees"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Null when the attendee has no mobile number (optional contact policy).
    contact_number: Mapped[Optional[str]] = mapped_column(
        String(20), unique=True, index=True
    )
    email: Mapped[Optional[str]] = mapped_column(String(255))
    birthday: Mapped[Optional[date]] = mapped_column(Date)

    school_name: Mapped[str] = mapped_column(String(200), nullable=False)
    barangay: Mapped[str] = mapped_column(String(100), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    social_media_name: Mapped[Optional[str]] = mapped_column(String(200))

    # "Male" or "Female"; must match the facilitator's gender on assignment.
    gender: Mapped[str] = mapped_column(String(10), nullable=False)

    is_dgroup_member: Mapped[bool] = mapped_column(Boolean, default=False)
    dgroup_leader_name: Mapped[Optional[str]] = mapped_column(String(200))
    is_first_timer: Mapped[bool] = mapped_column(Boolean, default=True)

    # Weak reference: deleting the facilitator only clears this column.
    facilitator_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("facilitators.id", ondelete="SET NULL"), index=True
    )

    facilitator = relationship("Facilitator", back_populates="attendees")
    attendance_logs = relationship(
        "AttendanceLog", back_populates="attendee", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Attendee(id={self.id}, name='{self.first_name} {self.last_name}')>"
