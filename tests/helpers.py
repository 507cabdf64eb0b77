from __future__ import annotations

import asyncio
import itertools
from datetime import date, datetime, timedelta, timezone
from typing import Any, Collection, Optional

from checkin.schemas import AttendanceRead, AttendeeRead, FacilitatorRead
from checkin.services.result import ErrorKind
from checkin.services.store import StoreError

TODAY = date(2026, 10, 18)
YESTERDAY = TODAY - timedelta(days=1)
BASE_TIME = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)


def run(coro):
    return asyncio.run(coro)


class InMemoryStore:
    """RecordStore fake with the same uniqueness rules as the database."""

    def __init__(self):
        self.attendees: dict[str, AttendeeRead] = {}
        self.facilitators: dict[str, FacilitatorRead] = {}
        self.logs: dict[str, AttendanceRead] = {}
        self.mutations: list[tuple] = []
        self.calls: list[str] = []
        self.failures: dict[str, StoreError] = {}
        self._ids = itertools.count(1)
        self._clock = itertools.count(0)

    # --- test helpers ---

    def fail(self, method: str, kind: ErrorKind = ErrorKind.STORE_UNAVAILABLE, message: str = "boom"):
        self.failures[method] = StoreError(kind, message)

    def _enter(self, method: str):
        self.calls.append(method)
        if method in self.failures:
            raise self.failures[method]

    def add_attendee(self, attendee_id: str, gender: str = "Male", *, first_name: Optional[str] = None,
                     last_name: str = "Doe", facilitator_id: Optional[str] = None,
                     contact_number: Optional[str] = None, is_first_timer: bool = False) -> AttendeeRead:
        attendee = AttendeeRead(
            id=attendee_id,
            first_name=first_name or attendee_id.title(),
            last_name=last_name,
            contact_number=contact_number,
            gender=gender,
            facilitator_id=facilitator_id,
            is_first_timer=is_first_timer,
        )
        self.attendees[attendee_id] = attendee
        return attendee

    def add_facilitator(self, facilitator_id: str, gender: str = "Male", *, first_name: Optional[str] = None,
                        as_attendee: bool = True) -> FacilitatorRead:
        facilitator = FacilitatorRead(
            id=facilitator_id,
            first_name=first_name or facilitator_id.title(),
            last_name="Staff",
            gender=gender,
        )
        self.facilitators[facilitator_id] = facilitator
        if as_attendee:
            self.add_attendee(facilitator_id, gender, first_name=facilitator.first_name, last_name="Staff")
        return facilitator

    def check_in_now(self, attendee_id: str, service_date: date = TODAY) -> AttendanceRead:
        return run(self.insert_attendance(attendee_id, service_date))

    def reset_tracking(self):
        self.mutations.clear()
        self.calls.clear()

    # --- RecordStore ---

    async def get_attendee(self, attendee_id: str) -> Optional[AttendeeRead]:
        self._enter("get_attendee")
        return self.attendees.get(attendee_id)

    async def get_facilitator(self, facilitator_id: str) -> Optional[FacilitatorRead]:
        self._enter("get_facilitator")
        return self.facilitators.get(facilitator_id)

    async def list_facilitator_ids(self) -> set[str]:
        self._enter("list_facilitator_ids")
        return set(self.facilitators)

    async def list_facilitators(self, ids: Optional[Collection[str]] = None,
                                gender: Optional[str] = None) -> list[FacilitatorRead]:
        self._enter("list_facilitators")
        rows = [
            f for f in self.facilitators.values()
            if (ids is None or f.id in ids) and (gender is None or f.gender == gender)
        ]
        return sorted(rows, key=lambda f: f.first_name)

    async def list_attendance(self, service_date: date) -> list[AttendanceRead]:
        self._enter("list_attendance")
        rows = [
            log.model_copy(update={"attendee": self.attendees.get(log.attendee_id)})
            for log in self.logs.values()
            if log.service_date == service_date
        ]
        return sorted(rows, key=lambda log: log.check_in_time, reverse=True)

    async def get_attendance(self, attendee_id: str, service_date: date) -> Optional[AttendanceRead]:
        self._enter("get_attendance")
        for log in self.logs.values():
            if log.attendee_id == attendee_id and log.service_date == service_date:
                return log
        return None

    async def search_attendees(self, term: str, limit: int) -> list[AttendeeRead]:
        self._enter("search_attendees")
        needle = term.lower()
        rows = [
            a for a in self.attendees.values()
            if needle in a.first_name.lower()
            or needle in a.last_name.lower()
            or needle in (a.contact_number or "").lower()
        ]
        return sorted(rows, key=lambda a: a.first_name)[:limit]

    async def insert_attendee(self, values: dict[str, Any]) -> AttendeeRead:
        self._enter("insert_attendee")
        contact = values.get("contact_number")
        if contact and any(a.contact_number == contact for a in self.attendees.values()):
            raise StoreError(ErrorKind.DUPLICATE_KEY, "Duplicate record.")
        attendee = AttendeeRead(id=f"a{next(self._ids)}", **values)
        self.attendees[attendee.id] = attendee
        self.mutations.append(("insert_attendee", attendee.id))
        return attendee

    async def insert_attendance(self, attendee_id: str, service_date: date) -> AttendanceRead:
        self._enter("insert_attendance")
        if attendee_id not in self.attendees:
            raise StoreError(ErrorKind.NOT_FOUND, "Referenced record does not exist.")
        for log in self.logs.values():
            if log.attendee_id == attendee_id and log.service_date == service_date:
                raise StoreError(ErrorKind.DUPLICATE_KEY, "Duplicate record.")
        log = AttendanceRead(
            id=f"log{next(self._ids)}",
            attendee_id=attendee_id,
            service_date=service_date,
            check_in_time=BASE_TIME + timedelta(minutes=next(self._clock)),
        )
        self.logs[log.id] = log
        self.mutations.append(("insert_attendance", attendee_id))
        return log

    async def update_attendee_facilitator(self, attendee_id: str, facilitator_id: Optional[str]) -> int:
        self._enter("update_attendee_facilitator")
        attendee = self.attendees.get(attendee_id)
        if attendee is None:
            return 0
        self.attendees[attendee_id] = attendee.model_copy(update={"facilitator_id": facilitator_id})
        self.mutations.append(("update_attendee_facilitator", attendee_id, facilitator_id))
        return 1

    async def delete_attendance(self, attendance_log_id: str) -> Optional[AttendanceRead]:
        self._enter("delete_attendance")
        removed = self.logs.pop(attendance_log_id, None)
        if removed is not None:
            self.mutations.append(("delete_attendance", attendance_log_id))
        return removed


class FakeCache:
    def __init__(self):
        self.values: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self.values.get(key)

    async def setex(self, key: str, ttl_seconds: int, value: str) -> None:
        self.values[key] = value

    async def delete(self, key: str) -> None:
        self.values.pop(key, None)

    async def close(self) -> None:
        pass
