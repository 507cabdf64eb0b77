from contextlib import asynccontextmanager
from datetime import date
from typing import Any, Collection, Optional

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from checkin.models import AttendanceLog, Attendee, Facilitator
from checkin.schemas import AttendanceRead, AttendeeRead, FacilitatorRead
from checkin.services.store import classify_store_error
from checkin.utils.logging import get_logger

logger = get_logger(__name__)


class SqlAlchemyStore:
    """RecordStore backed by the application's PostgreSQL database."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def _translate_errors(self, operation: str):
        try:
            yield
        except (SQLAlchemyError, OSError) as exc:
            # Reads too: an aborted transaction fails every later statement
            # on the same session.
            try:
                await self.db.rollback()
            except (SQLAlchemyError, OSError) as rollback_exc:
                logger.warning("Rollback after failed %s also failed: %s", operation, rollback_exc)
            error = classify_store_error(exc)
            logger.error("Store %s failed [%s]: %s", operation, error.kind.value, exc)
            raise error from exc

    async def get_attendee(self, attendee_id: str) -> Optional[AttendeeRead]:
        async with self._translate_errors("get_attendee"):
            attendee = await self.db.get(Attendee, attendee_id)
        return AttendeeRead.model_validate(attendee) if attendee else None

    async def get_facilitator(self, facilitator_id: str) -> Optional[FacilitatorRead]:
        async with self._translate_errors("get_facilitator"):
            facilitator = await self.db.get(Facilitator, facilitator_id)
        return FacilitatorRead.model_validate(facilitator) if facilitator else None

    async def list_facilitator_ids(self) -> set[str]:
        async with self._translate_errors("list_facilitator_ids"):
            result = await self.db.execute(select(Facilitator.id))
            return {str(row) for row in result.scalars().all()}

    async def list_facilitators(
        self, ids: Optional[Collection[str]] = None, gender: Optional[str] = None
    ) -> list[FacilitatorRead]:
        query = select(Facilitator)
        if ids is not None:
            if not ids:
                return []
            query = query.where(Facilitator.id.in_(list(ids)))
        if gender:
            query = query.where(Facilitator.gender == gender)
        query = query.order_by(Facilitator.first_name.asc())

        async with self._translate_errors("list_facilitators"):
            result = await self.db.execute(query)
            return [FacilitatorRead.model_validate(f) for f in result.scalars().all()]

    async def list_attendance(self, service_date: date) -> list[AttendanceRead]:
        query = (
            select(AttendanceLog)
            .options(selectinload(AttendanceLog.attendee))
            .where(AttendanceLog.service_date == service_date)
            .order_by(AttendanceLog.check_in_time.desc())
        )
        async with self._translate_errors("list_attendance"):
            result = await self.db.execute(query)
            return [AttendanceRead.model_validate(r) for r in result.scalars().all()]

    async def get_attendance(
        self, attendee_id: str, service_date: date
    ) -> Optional[AttendanceRead]:
        query = (
            select(AttendanceLog)
            .options(selectinload(AttendanceLog.attendee))
            .where(
                AttendanceLog.attendee_id == attendee_id,
                AttendanceLog.service_date == service_date,
            )
        )
        async with self._translate_errors("get_attendance"):
            result = await self.db.execute(query)
            log = result.scalar_one_or_none()
        return AttendanceRead.model_validate(log) if log else None

    async def search_attendees(self, term: str, limit: int) -> list[AttendeeRead]:
        pattern = f"%{term}%"
        query = (
            select(Attendee)
            .where(
                or_(
                    Attendee.first_name.ilike(pattern),
                    Attendee.last_name.ilike(pattern),
                    Attendee.contact_number.ilike(pattern),
                )
            )
            .order_by(Attendee.first_name.asc())
            .limit(limit)
        )
        async with self._translate_errors("search_attendees"):
            result = await self.db.execute(query)
            return [AttendeeRead.model_validate(a) for a in result.scalars().all()]

    async def insert_attendee(self, values: dict[str, Any]) -> AttendeeRead:
        attendee = Attendee(**values)
        async with self._translate_errors("insert_attendee"):
            self.db.add(attendee)
            await self.db.commit()
            await self.db.refresh(attendee)
        return AttendeeRead.model_validate(attendee)

    async def insert_attendance(
        self, attendee_id: str, service_date: date
    ) -> AttendanceRead:
        log = AttendanceLog(attendee_id=attendee_id, service_date=service_date)
        async with self._translate_errors("insert_attendance"):
            self.db.add(log)
            await self.db.commit()
            await self.db.refresh(log)
        return AttendanceRead(
            id=log.id,
            attendee_id=log.attendee_id,
            service_date=log.service_date,
            check_in_time=log.check_in_time,
        )

    async def update_attendee_facilitator(
        self, attendee_id: str, facilitator_id: Optional[str]
    ) -> int:
        statement = (
            update(Attendee)
            .where(Attendee.id == attendee_id)
            .values(facilitator_id=facilitator_id)
        )
        async with self._translate_errors("update_attendee_facilitator"):
            result = await self.db.execute(statement)
            await self.db.commit()
        return result.rowcount or 0

    async def delete_attendance(self, attendance_log_id: str) -> Optional[AttendanceRead]:
        statement = (
            delete(AttendanceLog)
            .where(AttendanceLog.id == attendance_log_id)
            .returning(
                AttendanceLog.id,
                AttendanceLog.attendee_id,
                AttendanceLog.service_date,
                AttendanceLog.check_in_time,
            )
        )
        async with self._translate_errors("delete_attendance"):
            result = await self.db.execute(statement)
            row = result.first()
            await self.db.commit()
        if row is None:
            return None
        return AttendanceRead(
            id=str(row.id),
            attendee_id=str(row.attendee_id),
            service_date=row.service_date,
            check_in_time=row.check_in_time,
        )
