from .base import Base
from .attendee import Attendee
from .facilitator import Facilitator
from .attendance import AttendanceLog

# for wildcard imports
__all__ = ["Base", "Attendee", "Facilitator", "AttendanceLog"]
