from collections import defaultdict
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional

from checkin.schemas import (
    AttendanceRead,
    CheckedInAttendee,
    FacilitatorRead,
    FacilitatorRoster,
)
from checkin.services.activity import ActivityService
from checkin.services.membership import MembershipService
from checkin.services.result import ErrorKind, ServiceResult
from checkin.services.store import RecordStore, StoreError
from checkin.utils.service_date import current_service_date


def group_by_facilitator(
    logs: Iterable[AttendanceRead],
    facilitator_ids: set[str],
    only: Optional[str] = None,
) -> Dict[str, List[CheckedInAttendee]]:
    """
    Today's assigned attendees keyed by facilitator id, newest check-in first.

    Attendees who are themselves facilitators are dropped, as are logs whose
    attendee row is missing.
    """
    groups: Dict[str, List[CheckedInAttendee]] = defaultdict(list)
    for log in logs:
        attendee = log.attendee
        if attendee is None or attendee.facilitator_id is None:
            continue
        if only is not None and attendee.facilitator_id != only:
            continue
        if attendee.id in facilitator_ids:
            continue
        groups[attendee.facilitator_id].append(CheckedInAttendee.from_log(log, attendee))

    for members in groups.values():
        members.sort(key=lambda member: member.check_in_time, reverse=True)
    return groups


def _roster(facilitator: FacilitatorRead, members: List[CheckedInAttendee]) -> FacilitatorRoster:
    return FacilitatorRoster(
        **facilitator.model_dump(),
        attendees=members,
        attendee_count=len(members),
    )


class RosterService:
    def __init__(
        self,
        store: RecordStore,
        service_date: Callable[[], date] = current_service_date,
    ):
        self.store = store
        self.activity = ActivityService(store, service_date)
        self.membership = MembershipService(store)

    async def roster_for(self, facilitator_id: str) -> ServiceResult[FacilitatorRoster]:
        if not facilitator_id:
            return ServiceResult.failure(
                ErrorKind.INVALID_ARGUMENT, "Invalid facilitator ID."
            )
        try:
            facilitator = await self.store.get_facilitator(facilitator_id)
            if facilitator is None:
                return ServiceResult.failure(
                    ErrorKind.NOT_FOUND, "Facilitator not found."
                )
            logs = await self.activity.todays_logs()
            excluded = await self.membership.facilitator_ids()
        except StoreError as error:
            return ServiceResult.failure(error.kind, error.message)

        groups = group_by_facilitator(logs, excluded, only=facilitator_id)
        return ServiceResult.success(_roster(facilitator, groups.get(facilitator_id, [])))

    async def all_rosters(self) -> ServiceResult[List[FacilitatorRoster]]:
        """One roster per facilitator active today, including empty ones."""
        try:
            logs = await self.activity.todays_logs()
            active = await self.activity.load_active_facilitators(logs=logs)
            if not active:
                return ServiceResult.success([])
            excluded = await self.membership.facilitator_ids()
        except StoreError as error:
            return ServiceResult.failure(error.kind, error.message)

        groups = group_by_facilitator(logs, excluded)
        return ServiceResult.success(
            [_roster(f, groups.get(f.id, [])) for f in active]
        )
