from checkin.services.store import RecordStore, StoreError
from checkin.utils.logging import get_logger

logger = get_logger(__name__)


class MembershipService:
    """Answers "is this person a facilitator?"."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def is_facilitator(self, person_id: str) -> bool:
        """
        True when ``person_id`` has a facilitator row.

        A failed lookup counts as "not a facilitator" so assignment is never
        blocked by a transient store error. Do not use this for access control.
        """
        if not person_id:
            return False
        try:
            return await self.store.get_facilitator(person_id) is not None
        except StoreError as error:
            logger.warning(
                "Facilitator lookup for %s failed, assuming attendee: %s",
                person_id,
                error.message,
            )
            return False

    async def facilitator_ids(self) -> set[str]:
        # One query for the whole exclusion set; there are only tens of facilitators.
        return await self.store.list_facilitator_ids()
