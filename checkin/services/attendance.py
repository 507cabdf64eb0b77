from datetime import date
from typing import Callable, List, Optional

import httpx
from redis.exceptions import RedisError

from checkin.cache_config import CacheClient, checkin_cache_key
from checkin.config import settings
from checkin.schemas import (
    AttendeeRead,
    AttendeeRegistration,
    CheckedInAttendee,
    SearchResult,
)
from checkin.services.assignment import AssignmentService
from checkin.services.result import ErrorKind, ServiceResult
from checkin.services.store import RecordStore, StoreError
from checkin.services.validation import registration_values, validate_registration
from checkin.utils.logging import get_logger
from checkin.utils.service_date import current_service_date

logger = get_logger(__name__)

ALREADY_CHECKED_IN = "You are already checked in for today's service."
DUPLICATE_CONTACT = (
    "This contact number is already registered. "
    "Please use the returning user check-in instead."
)
CACHE_ERRORS = (RedisError, httpx.HTTPError, RuntimeError, OSError)


class AttendanceService:
    """Registration, check-in and today's attendance list."""

    def __init__(
        self,
        store: RecordStore,
        cache: Optional[CacheClient] = None,
        service_date: Callable[[], date] = current_service_date,
        contact_number_policy: Optional[str] = None,
    ):
        self.store = store
        self.cache = cache
        self.service_date = service_date
        self.contact_number_policy = contact_number_policy or settings.CONTACT_NUMBER_POLICY
        self.assignments = AssignmentService(store, service_date)

    # --- check-in marker (fast path only, the database constraint decides) ---

    async def _marker_exists(self, attendee_id: str, today: date) -> bool:
        if self.cache is None:
            return False
        try:
            return bool(await self.cache.get(checkin_cache_key(attendee_id, today)))
        except CACHE_ERRORS as error:
            logger.warning("Check-in marker read failed: %s", error)
            return False

    async def _set_marker(self, attendee_id: str, today: date) -> None:
        if self.cache is None:
            return
        try:
            await self.cache.setex(
                checkin_cache_key(attendee_id, today),
                settings.CHECKIN_MARKER_TTL_SECONDS,
                "checked_in",
            )
        except CACHE_ERRORS as error:
            logger.warning("Check-in marker write failed: %s", error)

    async def _clear_marker(self, attendee_id: str, service_date: date) -> None:
        if self.cache is None:
            return
        try:
            await self.cache.delete(checkin_cache_key(attendee_id, service_date))
        except CACHE_ERRORS as error:
            logger.warning("Check-in marker delete failed: %s", error)

    async def _auto_assign(self, attendee: AttendeeRead, result: ServiceResult) -> AttendeeRead:
        assigned = await self.assignments.auto_assign(attendee)
        if assigned.is_failure:
            # The check-in itself stands; report the assignment problem alongside it.
            logger.warning(
                "Auto-assignment for attendee %s failed: %s", attendee.id, assigned.message
            )
            result.metadata["assignment_error"] = assigned.error.to_dict()
            return attendee
        return attendee.model_copy(update={"facilitator_id": assigned.data})

    # --- operations ---

    async def register_and_check_in(
        self, data: AttendeeRegistration
    ) -> ServiceResult[AttendeeRead]:
        """Register a first-timer and check them in for today's service."""
        problem = validate_registration(data, self.contact_number_policy)
        if problem:
            return ServiceResult.failure(ErrorKind.INVALID_ARGUMENT, problem)

        try:
            attendee = await self.store.insert_attendee(
                registration_values(data, self.contact_number_policy)
            )
        except StoreError as error:
            if error.kind == ErrorKind.DUPLICATE_KEY:
                return ServiceResult.failure(error.kind, DUPLICATE_CONTACT)
            return ServiceResult.failure(error.kind, error.message)

        today = self.service_date()
        try:
            await self.store.insert_attendance(attendee.id, today)
        except StoreError as error:
            logger.error("Attendee %s registered but check-in failed: %s", attendee.id, error.message)
            return ServiceResult.failure(
                error.kind,
                f"Attendee registered but check-in failed: {error.message}",
                data=attendee,
                partial=True,
                details={"failed_step": "check_in", "attendee_id": attendee.id},
            )
        await self._set_marker(attendee.id, today)

        result = ServiceResult.success(attendee)
        result.data = await self._auto_assign(attendee, result)
        return result

    async def check_in(self, attendee_id: str) -> ServiceResult[AttendeeRead]:
        """Check in a returning attendee for today's service."""
        if not attendee_id:
            return ServiceResult.failure(ErrorKind.INVALID_ARGUMENT, "Invalid attendee ID.")

        today = self.service_date()
        marked = await self._marker_exists(attendee_id, today)

        try:
            # Optimisation only: a concurrent check-in can still slip past this read.
            if await self.store.get_attendance(attendee_id, today) is not None:
                if not marked:
                    await self._set_marker(attendee_id, today)
                return ServiceResult.failure(ErrorKind.DUPLICATE_KEY, ALREADY_CHECKED_IN)
            if marked:
                logger.info("Ignoring stale check-in marker for attendee %s", attendee_id)
            await self.store.insert_attendance(attendee_id, today)
        except StoreError as error:
            if error.kind == ErrorKind.DUPLICATE_KEY:
                await self._set_marker(attendee_id, today)
                return ServiceResult.failure(error.kind, ALREADY_CHECKED_IN)
            if error.kind == ErrorKind.NOT_FOUND:
                return ServiceResult.failure(error.kind, "Attendee not found.")
            return ServiceResult.failure(error.kind, error.message)
        await self._set_marker(attendee_id, today)

        try:
            attendee = await self.store.get_attendee(attendee_id)
        except StoreError as error:
            logger.warning("Checked in %s but could not load the attendee: %s", attendee_id, error.message)
            attendee = None
        if attendee is None:
            return ServiceResult.success(
                None,
                "Checked in successfully, but could not retrieve attendee information.",
                partial=True,
            )

        result = ServiceResult.success(attendee)
        result.data = await self._auto_assign(attendee, result)
        return result

    async def search_attendees(self, term: str) -> ServiceResult[List[SearchResult]]:
        if not term or len(term.strip()) < settings.SEARCH_MIN_LENGTH:
            return ServiceResult.success([])

        try:
            attendees = await self.store.search_attendees(
                term.strip(), settings.SEARCH_RESULT_LIMIT
            )
        except StoreError as error:
            return ServiceResult.failure(error.kind, error.message)

        return ServiceResult.success(
            [
                SearchResult(
                    id=a.id,
                    first_name=a.first_name,
                    last_name=a.last_name,
                    contact_number=a.contact_number,
                    full_name=a.full_name,
                )
                for a in attendees
            ]
        )

    async def checked_in_today(self) -> ServiceResult[List[CheckedInAttendee]]:
        try:
            logs = await self.store.list_attendance(self.service_date())
        except StoreError as error:
            return ServiceResult.failure(error.kind, error.message)

        return ServiceResult.success(
            [
                CheckedInAttendee.from_log(log, log.attendee)
                for log in logs
                if log.attendee is not None
            ]
        )

    async def remove_check_in(self, attendance_log_id: str) -> ServiceResult[None]:
        """Undo a check-in."""
        if not attendance_log_id:
            return ServiceResult.failure(
                ErrorKind.INVALID_ARGUMENT, "Invalid attendance log ID."
            )

        try:
            removed = await self.store.delete_attendance(attendance_log_id)
        except StoreError as error:
            return ServiceResult.failure(error.kind, error.message)

        if removed is None:
            return ServiceResult.failure(
                ErrorKind.NOT_FOUND,
                "No record was deleted. The check-in may already have been removed.",
            )

        await self._clear_marker(removed.attendee_id, removed.service_date)
        return ServiceResult.success()
