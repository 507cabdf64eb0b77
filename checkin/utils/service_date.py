from datetime import date, datetime
from zoneinfo import ZoneInfo

from checkin.config import settings


def current_service_date(now: datetime | None = None) -> date:
    """
    Calendar date of today's service in the reporting timezone.

    Recomputed on every call so long-running workers roll over at midnight.
    A naive ``now`` is taken to already be in the reporting timezone.
    """
    tz = ZoneInfo(settings.SERVICE_TIMEZONE)
    if now is None:
        return datetime.now(tz).date()
    if now.tzinfo is None:
        return now.date()
    return now.astimezone(tz).date()
