from typing import List

from fastapi import APIRouter, Depends

from checkin.dependencies import get_cache, get_store
from checkin.routers.responses import envelope, unwrap
from checkin.schemas import CheckedInAttendee
from checkin.services.attendance import AttendanceService
from checkin.services.store import RecordStore

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.post("/check-in/{attendee_id}")
async def check_in(
    attendee_id: str,
    store: RecordStore = Depends(get_store),
    cache=Depends(get_cache),
):
    service = AttendanceService(store, cache)
    return envelope(await service.check_in(attendee_id))


@router.get("/today", response_model=List[CheckedInAttendee])
async def checked_in_today(store: RecordStore = Depends(get_store)):
    """
    Everyone checked in for today's service, newest first.
    """
    return unwrap(await AttendanceService(store).checked_in_today())


@router.delete("/{attendance_log_id}")
async def remove_check_in(
    attendance_log_id: str,
    store: RecordStore = Depends(get_store),
    cache=Depends(get_cache),
):
    unwrap(await AttendanceService(store, cache).remove_check_in(attendance_log_id))
    return {"status": "removed", "attendance_log_id": attendance_log_id}
