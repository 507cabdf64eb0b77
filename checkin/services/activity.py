from datetime import date
from typing import Callable, List, Optional, Sequence

from checkin.schemas import AttendanceRead, FacilitatorRead
from checkin.services.result import ServiceResult
from checkin.services.store import RecordStore, StoreError
from checkin.utils.service_date import current_service_date


class ActivityService:
    """Who has checked in for today's service, and which of them are facilitators."""

    def __init__(
        self,
        store: RecordStore,
        service_date: Callable[[], date] = current_service_date,
    ):
        self.store = store
        self.service_date = service_date

    async def todays_logs(self) -> List[AttendanceRead]:
        return await self.store.list_attendance(self.service_date())

    async def checked_in_ids(self) -> set[str]:
        return {log.attendee_id for log in await self.todays_logs()}

    async def load_active_facilitators(
        self,
        gender: Optional[str] = None,
        logs: Optional[Sequence[AttendanceRead]] = None,
    ) -> List[FacilitatorRead]:
        """
        Raising variant used by the other services; ordered by first name.

        Callers that already fetched today's logs pass them in to save a query.
        """
        if logs is None:
            logs = await self.todays_logs()
        checked_in = {log.attendee_id for log in logs}
        if not checked_in:
            return []
        return await self.store.list_facilitators(ids=checked_in, gender=gender)

    async def active_facilitators(
        self, gender: Optional[str] = None
    ) -> ServiceResult[List[FacilitatorRead]]:
        try:
            facilitators = await self.load_active_facilitators(gender)
        except StoreError as error:
            return ServiceResult.failure(error.kind, error.message)
        return ServiceResult.success(facilitators)
