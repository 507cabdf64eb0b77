from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from checkin.dependencies import get_store
from checkin.routers.responses import unwrap
from checkin.schemas import FacilitatorRead, FacilitatorRoster, Gender
from checkin.services.activity import ActivityService
from checkin.services.roster import RosterService
from checkin.services.store import RecordStore

router = APIRouter(prefix="/facilitators", tags=["facilitators"])


@router.get("/active", response_model=List[FacilitatorRead])
async def active_facilitators(
    gender: Optional[Gender] = Query(None),
    store: RecordStore = Depends(get_store),
):
    return unwrap(await ActivityService(store).active_facilitators(gender))


@router.get("/rosters", response_model=List[FacilitatorRoster])
async def all_rosters(store: RecordStore = Depends(get_store)):
    return unwrap(await RosterService(store).all_rosters())


@router.get("/{facilitator_id}/roster", response_model=FacilitatorRoster)
async def roster_for(facilitator_id: str, store: RecordStore = Depends(get_store)):
    return unwrap(await RosterService(store).roster_for(facilitator_id))
