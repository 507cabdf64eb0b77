"""
Facilitator assignment: load-balanced auto-assignment and manual transfer.

Loads are recounted from the store on every call. Two attendees assigned at
the same moment can both land on the same least-loaded facilitator; the
imbalance is small and corrects itself on later assignments, so no lock is
taken.
"""

from datetime import date
from typing import Callable, Dict, Iterable, Optional

from checkin.schemas import AttendanceRead, AttendeeRead, FacilitatorRead
from checkin.services.activity import ActivityService
from checkin.services.membership import MembershipService
from checkin.services.result import ErrorKind, ServiceResult
from checkin.services.store import RecordStore, StoreError
from checkin.utils.logging import get_logger
from checkin.utils.service_date import current_service_date

logger = get_logger(__name__)


def count_loads(
    active: Iterable[FacilitatorRead],
    logs: Iterable[AttendanceRead],
    facilitator_ids: set[str],
) -> Dict[str, int]:
    """Checked-in attendees per active facilitator, starting every one at zero."""
    loads = {facilitator.id: 0 for facilitator in active}
    for log in logs:
        attendee = log.attendee
        if attendee is None or attendee.facilitator_id not in loads:
            continue
        if attendee.id in facilitator_ids:
            continue
        loads[attendee.facilitator_id] += 1
    return loads


def pick_least_loaded(
    active: Iterable[FacilitatorRead], loads: Dict[str, int]
) -> Optional[FacilitatorRead]:
    # Strict comparison keeps the first facilitator (by first name) on ties.
    chosen = None
    for facilitator in active:
        if chosen is None or loads[facilitator.id] < loads[chosen.id]:
            chosen = facilitator
    return chosen


class AssignmentService:
    def __init__(
        self,
        store: RecordStore,
        service_date: Callable[[], date] = current_service_date,
    ):
        self.store = store
        self.activity = ActivityService(store, service_date)
        self.membership = MembershipService(store)

    async def transfer(
        self, attendee_id: str, new_facilitator_id: Optional[str]
    ) -> ServiceResult[None]:
        """Move an attendee to another facilitator, or unassign them with None."""
        if not attendee_id:
            return ServiceResult.failure(ErrorKind.INVALID_ARGUMENT, "Invalid attendee ID.")

        if await self.membership.is_facilitator(attendee_id):
            return ServiceResult.failure(
                ErrorKind.POLICY_VIOLATION,
                "Facilitators cannot be assigned to a facilitator.",
            )

        try:
            if new_facilitator_id is not None:
                attendee = await self.store.get_attendee(attendee_id)
                if attendee is None:
                    return ServiceResult.failure(ErrorKind.NOT_FOUND, "Attendee not found.")
                facilitator = await self.store.get_facilitator(new_facilitator_id)
                if facilitator is None:
                    return ServiceResult.failure(
                        ErrorKind.NOT_FOUND, "Facilitator not found."
                    )
                if attendee.gender != facilitator.gender:
                    return ServiceResult.failure(
                        ErrorKind.POLICY_VIOLATION,
                        "Attendee and facilitator must have the same gender.",
                    )

            updated = await self.store.update_attendee_facilitator(
                attendee_id, new_facilitator_id
            )
        except StoreError as error:
            return ServiceResult.failure(error.kind, error.message)

        if not updated:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, "Attendee not found.")

        logger.info("Attendee %s assigned to facilitator %s", attendee_id, new_facilitator_id)
        return ServiceResult.success()

    async def facilitator_loads(self, gender: Optional[str] = None) -> ServiceResult[Dict[str, int]]:
        try:
            logs = await self.activity.todays_logs()
            active = await self.activity.load_active_facilitators(gender, logs=logs)
            excluded = await self.membership.facilitator_ids() if active else set()
        except StoreError as error:
            return ServiceResult.failure(error.kind, error.message)
        return ServiceResult.success(count_loads(active, logs, excluded))

    async def assign(self, attendee_id: str, gender: str) -> ServiceResult[Optional[str]]:
        """
        Assign an attendee to the least-loaded active facilitator of their gender.

        Succeeds with None when the attendee is a facilitator or nobody of that
        gender is serving today; the attendee is then left unassigned.
        """
        if await self.membership.is_facilitator(attendee_id):
            return ServiceResult.success(None)

        try:
            logs = await self.activity.todays_logs()
            active = await self.activity.load_active_facilitators(gender, logs=logs)
            if not active:
                return ServiceResult.success(None)
            excluded = await self.membership.facilitator_ids()
        except StoreError as error:
            return ServiceResult.failure(error.kind, error.message)

        loads = count_loads(active, logs, excluded)
        chosen = pick_least_loaded(active, loads)

        transferred = await self.transfer(attendee_id, chosen.id)
        if transferred.is_failure:
            return ServiceResult.from_error(transferred.error)
        return ServiceResult.success(chosen.id, metadata={"loads": loads})

    async def auto_assign(self, attendee: AttendeeRead) -> ServiceResult[Optional[str]]:
        """Assign only attendees who have no facilitator yet."""
        if attendee.facilitator_id is not None:
            return ServiceResult.success(attendee.facilitator_id)
        return await self.assign(attendee.id, attendee.gender)

    async def assign_attendee(self, attendee_id: str) -> ServiceResult[Optional[str]]:
        """Manual run of the assigner, using the attendee's recorded gender."""
        if not attendee_id:
            return ServiceResult.failure(ErrorKind.INVALID_ARGUMENT, "Invalid attendee ID.")
        try:
            attendee = await self.store.get_attendee(attendee_id)
        except StoreError as error:
            return ServiceResult.failure(error.kind, error.message)
        if attendee is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, "Attendee not found.")
        return await self.assign(attendee.id, attendee.gender)
