import asyncio
import logging
import os

from dotenv import load_dotenv

project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
env_path = os.path.join(project_root, ".env")
if os.path.exists(env_path):
    load_dotenv(env_path)

# Keep SQL echo out of the table output
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)

from checkin.database import AsyncSessionLocal  # noqa: E402
from checkin.services.roster import RosterService  # noqa: E402
from checkin.services.sql_store import SqlAlchemyStore  # noqa: E402
from checkin.utils.service_date import current_service_date  # noqa: E402


async def show_rosters():
    print("\n" + "=" * 80)
    print(f" Facilitator rosters for {current_service_date()}")
    print("=" * 80)

    async with AsyncSessionLocal() as session:
        result = await RosterService(SqlAlchemyStore(session)).all_rosters()

    if result.is_failure:
        print(f"\n[!] Error fetching rosters: {result.message}")
        return

    if not result.data:
        print(" No facilitators have checked in yet.")

    for roster in result.data:
        print(
            f"\n {roster.first_name} {roster.last_name} ({roster.gender})"
            f" - {roster.attendee_count} attendee(s)"
        )
        for member in roster.attendees:
            time_str = member.check_in_time.strftime("%H:%M:%S")
            first = " [first timer]" if member.is_first_timer else ""
            print(f"   {time_str:<10} {member.full_name:<30} {member.contact_number or '---'}{first}")

    print("=" * 80 + "\n")


if __name__ == "__main__":
    try:
        asyncio.run(show_rosters())
    except KeyboardInterrupt:
        pass
