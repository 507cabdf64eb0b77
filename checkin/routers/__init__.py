from .attendance import router as attendance_router
from .attendees import router as attendees_router
from .facilitators import router as facilitators_router
from .health import router as health_router

# for wildcard imports
__all__ = [
    "attendance_router",
    "attendees_router",
    "facilitators_router",
    "health_router",
]
