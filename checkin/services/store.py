"""
Boundary between the check-in services and the record store.

``RecordStore`` lists the async capabilities the services consume.
Implementations raise only ``StoreError``; raw driver errors are classified
exactly once, by ``classify_store_error``, so the services only ever branch
on ``ErrorKind``.
"""

from datetime import date
from typing import Any, Collection, Optional, Protocol

from sqlalchemy import exc as sa_exc

from checkin.schemas import AttendanceRead, AttendeeRead, FacilitatorRead
from checkin.services.result import ErrorKind

# PostgreSQL SQLSTATE codes
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
INSUFFICIENT_PRIVILEGE = "42501"
UNDEFINED_TABLE = "42P01"
DATA_EXCEPTION_CLASS = "22"


class StoreError(Exception):
    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self):
        return f"<StoreError(kind={self.kind.value}, message='{self.message}')>"


class RecordStore(Protocol):
    async def get_attendee(self, attendee_id: str) -> Optional[AttendeeRead]: ...

    async def get_facilitator(self, facilitator_id: str) -> Optional[FacilitatorRead]: ...

    async def list_facilitator_ids(self) -> set[str]: ...

    async def list_facilitators(
        self, ids: Optional[Collection[str]] = None, gender: Optional[str] = None
    ) -> list[FacilitatorRead]:
        """Facilitators ordered by first name, optionally limited to ``ids``."""
        ...

    async def list_attendance(self, service_date: date) -> list[AttendanceRead]:
        """Logs for one service date with the joined attendee, newest first."""
        ...

    async def get_attendance(
        self, attendee_id: str, service_date: date
    ) -> Optional[AttendanceRead]: ...

    async def search_attendees(self, term: str, limit: int) -> list[AttendeeRead]:
        """Case-insensitive substring match on names and contact number."""
        ...

    async def insert_attendee(self, values: dict[str, Any]) -> AttendeeRead: ...

    async def insert_attendance(
        self, attendee_id: str, service_date: date
    ) -> AttendanceRead: ...

    async def update_attendee_facilitator(
        self, attendee_id: str, facilitator_id: Optional[str]
    ) -> int:
        """Returns the number of rows updated."""
        ...

    async def delete_attendance(self, attendance_log_id: str) -> Optional[AttendanceRead]:
        """Returns the deleted row, or None when nothing matched."""
        ...


def _sqlstate(exc: BaseException) -> Optional[str]:
    for source in (getattr(exc, "orig", None), exc):
        if source is None:
            continue
        code = getattr(source, "sqlstate", None) or getattr(source, "pgcode", None)
        if code:
            return str(code)
    return None


def classify_store_error(exc: BaseException) -> StoreError:
    if isinstance(exc, StoreError):
        return exc

    code = _sqlstate(exc)
    raw = str(getattr(exc, "orig", None) or exc)
    text = raw.lower()

    if code == UNIQUE_VIOLATION or (
        isinstance(exc, sa_exc.IntegrityError)
        and code is None
        and ("unique" in text or "duplicate" in text)
    ):
        return StoreError(ErrorKind.DUPLICATE_KEY, "Duplicate record.")

    if code == FOREIGN_KEY_VIOLATION:
        return StoreError(ErrorKind.NOT_FOUND, "Referenced record does not exist.")

    if code == INSUFFICIENT_PRIVILEGE or "permission denied" in text:
        return StoreError(
            ErrorKind.PERMISSION_DENIED,
            "Permission denied. Please check the database role's privileges.",
        )

    if code == UNDEFINED_TABLE or "no such table" in text or (
        "relation" in text and "does not exist" in text
    ):
        return StoreError(
            ErrorKind.STORE_UNAVAILABLE,
            "Database tables not found. Please run the migrations (alembic upgrade head).",
        )

    # Malformed ids: 22P02 from the server, or asyncpg refusing to encode the
    # argument before sending it (surfaces as an InterfaceError).
    if (
        (code or "").startswith(DATA_EXCEPTION_CLASS)
        or isinstance(exc, sa_exc.DataError)
        or "invalid input" in text
    ):
        return StoreError(ErrorKind.INVALID_ARGUMENT, f"Invalid identifier or value: {raw}")

    if isinstance(
        exc,
        (
            sa_exc.OperationalError,
            sa_exc.InterfaceError,
            sa_exc.DisconnectionError,
            sa_exc.TimeoutError,
            OSError,
        ),
    ) or getattr(exc, "connection_invalidated", False):
        return StoreError(
            ErrorKind.STORE_UNAVAILABLE, f"Unable to reach the database: {raw}"
        )

    return StoreError(ErrorKind.UNKNOWN, raw or type(exc).__name__)
