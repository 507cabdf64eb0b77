from typing import List

from fastapi import APIRouter, Depends, Query

from checkin.dependencies import get_cache, get_store
from checkin.routers.responses import envelope, unwrap
from checkin.schemas import AttendeeRegistration, FacilitatorAssignment, SearchResult
from checkin.services.assignment import AssignmentService
from checkin.services.attendance import AttendanceService
from checkin.services.store import RecordStore

router = APIRouter(prefix="/attendees", tags=["attendees"])


@router.post("/register")
async def register_attendee(
    registration: AttendeeRegistration,
    store: RecordStore = Depends(get_store),
    cache=Depends(get_cache),
):
    """Register a first-timer and check them in for today's service."""
    service = AttendanceService(store, cache)
    return envelope(await service.register_and_check_in(registration))


@router.get("/search", response_model=List[SearchResult])
async def search_attendees(
    q: str = Query("", description="Part of a name or contact number"),
    store: RecordStore = Depends(get_store),
):
    return unwrap(await AttendanceService(store).search_attendees(q))


@router.put("/{attendee_id}/facilitator")
async def transfer_attendee(
    attendee_id: str,
    assignment: FacilitatorAssignment,
    store: RecordStore = Depends(get_store),
):
    """Move an attendee to another facilitator; a null facilitator unassigns."""
    unwrap(await AssignmentService(store).transfer(attendee_id, assignment.facilitator_id))
    return {"attendee_id": attendee_id, "facilitator_id": assignment.facilitator_id}


@router.post("/{attendee_id}/assign")
async def assign_attendee(attendee_id: str, store: RecordStore = Depends(get_store)):
    """Run the load-balancing assigner for one attendee."""
    return envelope(await AssignmentService(store).assign_attendee(attendee_id))
