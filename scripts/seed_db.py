import argparse
import asyncio

from sqlalchemy import select

from checkin.database import AsyncSessionLocal
from checkin.models import Facilitator
from checkin.services.sql_store import SqlAlchemyStore
from checkin.services.store import StoreError
from checkin.utils.service_date import current_service_date

SAMPLE_FACILITATORS = [
    {"first_name": "Andrea", "last_name": "Santos", "gender": "Female"},
    {"first_name": "Bianca", "last_name": "Reyes", "gender": "Female"},
    {"first_name": "Carlo", "last_name": "Mendoza", "gender": "Male"},
    {"first_name": "Daniel", "last_name": "Garcia", "gender": "Male"},
]

SAMPLE_STAFF_ATTENDEE = {
    "school_name": "Staff",
    "barangay": "-",
    "city": "-",
    "is_dgroup_member": True,
    "is_first_timer": False,
}


async def seed(check_in: bool):
    async with AsyncSessionLocal() as session:
        result = await session.execute(select(Facilitator).limit(1))
        if result.scalars().first():
            print("Database already contains facilitators. Skipping seed.")
            return

        print("Seeding database with sample facilitators...")
        store = SqlAlchemyStore(session)
        today = current_service_date()

        for data in SAMPLE_FACILITATORS:
            # Facilitators check in as attendees that share their facilitator id.
            attendee = await store.insert_attendee({**SAMPLE_STAFF_ATTENDEE, **data})
            session.add(Facilitator(id=attendee.id, **data))
            await session.commit()
            print(f"Added facilitator: {data['first_name']} {data['last_name']} ({attendee.id})")

            if check_in:
                try:
                    await store.insert_attendance(attendee.id, today)
                except StoreError as error:
                    print(f"  could not check in: {error.message}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed sample facilitators.")
    parser.add_argument(
        "--check-in",
        action="store_true",
        help="also check the facilitators in for today's service",
    )
    args = parser.parse_args()
    asyncio.run(seed(args.check_in))
