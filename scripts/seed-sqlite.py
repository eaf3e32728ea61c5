import asyncio
import os
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from fleetfuel.domain.profiles import CitizenProfile, DriverProfile
from fleetfuel.domain.trips import TripRecord
from fleetfuel.infrastructure.db import create_all, create_engine, create_session_factory
from fleetfuel.infrastructure.repositories.profiles import SqlAlchemyProfileStore
from fleetfuel.infrastructure.repositories.trips import SqlAlchemyTripStore

DB_PATH = "./fleetfuel.db"
DATABASE_URL = f"sqlite+aiosqlite:///{DB_PATH}"
GROUP_ID = "biz_swazi_logistics"


async def seed():
    # Delete existing DB file to ensure fresh start
    if os.path.exists(DB_PATH):
        os.remove(DB_PATH)

    engine = create_engine(DATABASE_URL)
    await create_all(engine)
    session_factory = create_session_factory(engine)

    profiles = SqlAlchemyProfileStore(session_factory)
    trips = SqlAlchemyTripStore(session_factory)

    demo_profiles = [
        CitizenProfile(user_id="citizen_thandi", personal_budget=Decimal("500.00"),
                       name="Thandi Dlamini", email="thandi@example.com"),
        CitizenProfile(user_id="citizen_sipho", personal_budget=Decimal("300.00"),
                       name="Sipho Nkosi", email="sipho@example.com"),
        DriverProfile(user_id="driver_john", monthly_fuel_limit=Decimal("1000.00"),
                      business_group_id=GROUP_ID, name="John Mamba"),
        DriverProfile(user_id="driver_lindiwe", monthly_fuel_limit=Decimal("1200.00"),
                      business_group_id=GROUP_ID, name="Lindiwe Simelane"),
    ]
    for profile in demo_profiles:
        await profiles.save_profile(profile)
        print(f"Added {profile.role.value}: {profile.user_id} (limit {profile.budget_limit})")

    # Spend chosen to land each user in a different alert band this month
    month_start = datetime.now(timezone.utc).replace(day=1, hour=8, minute=0, second=0, microsecond=0)
    spend = {
        "citizen_thandi": (["125.00", "150.00", "100.00"], None),
        "citizen_sipho": (["40.00"], None),
        "driver_john": (["400.00", "350.00", "300.00"], GROUP_ID),
        "driver_lindiwe": (["500.00", "420.00"], GROUP_ID),
    }
    for owner_id, (costs, group_id) in spend.items():
        for day, cost in enumerate(costs):
            await trips.add_trip(
                TripRecord(
                    id=str(uuid.uuid4()),
                    owner_id=owner_id,
                    business_group_id=group_id,
                    vehicle_id=f"veh_{owner_id}",
                    start_time=month_start + timedelta(days=day),
                    cost=Decimal(cost),
                    distance_km=Decimal("42.50"),
                    fuel_used_l=(Decimal(cost) / Decimal("21.50")).quantize(Decimal("0.01")),
                )
            )

    await engine.dispose()
    print("Database seeded successfully.")


if __name__ == "__main__":
    asyncio.run(seed())
