import datetime  # module import avoids clashing with fields named 'date'
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .attendee import AttendeeRead


class AttendanceRead(BaseModel):
    id: str
    attendee_id: str
    service_date: datetime.date
    check_in_time: datetime.datetime

    # Joined attendee; None when the row points at a missing attendee.
    attendee: Optional[AttendeeRead] = None

    model_config = ConfigDict(from_attributes=True)


class CheckedInAttendee(BaseModel):
    """Reporting shape for one check-in, used by the today list and rosters."""

    attendance_log_id: str
    attendee_id: str
    first_name: str
    last_name: str
    contact_number: Optional[str] = None
    full_name: str
    check_in_time: datetime.datetime
    is_first_timer: bool = False

    @classmethod
    def from_log(cls, log: AttendanceRead, attendee: AttendeeRead) -> "CheckedInAttendee":
        return cls(
            attendance_log_id=log.id,
            attendee_id=attendee.id,
            first_name=attendee.first_name,
            last_name=attendee.last_name,
            contact_number=attendee.contact_number,
            full_name=attendee.full_name,
            check_in_time=log.check_in_time,
            is_first_timer=attendee.is_first_timer,
        )
