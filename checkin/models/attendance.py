from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, IdMixin


class AttendanceLog(Base, IdMixin):
    __tablename__ = "attendance_log"

    attendee_id: Mapped[str] = mapped_column(
        ForeignKey("attendees.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Stored separately from check_in_time for the daily unique index.
    service_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    check_in_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    attendee = relationship("Attendee", back_populates="attendance_logs")

    # one check-in per attendee per service date
    __table_args__ = (
        UniqueConstraint(
            "attendee_id", "service_date", name="uq_attendance_log_attendee_date"
        ),
    )

    def __repr__(self):
        return f"<AttendanceLog(attendee_id={self.attendee_id}, service_date='{self.service_date}')>"
