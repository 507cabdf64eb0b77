from .attendance import AttendanceRead, CheckedInAttendee
from .attendee import (
    AttendeeRead,
    AttendeeRegistration,
    FacilitatorAssignment,
    Gender,
    SearchResult,
)
from .facilitator import FacilitatorRead, FacilitatorRoster

__all__ = [
    "AttendeeRegistration",
    "AttendeeRead",
    "SearchResult",
    "FacilitatorAssignment",
    "Gender",
    "AttendanceRead",
    "CheckedInAttendee",
    "FacilitatorRead",
    "FacilitatorRoster",
]
