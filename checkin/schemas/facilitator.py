import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from .attendance import CheckedInAttendee
from .attendee import Gender


class FacilitatorRead(BaseModel):
    id: str
    first_name: str
    last_name: str
    gender: Gender
    created_at: Optional[datetime.datetime] = None

    model_config = ConfigDict(from_attributes=True)


class FacilitatorRoster(FacilitatorRead):
    """A facilitator with the attendees assigned to them who checked in today."""

    attendees: List[CheckedInAttendee] = []
    attendee_count: int = 0
