import asyncio
import os

import httpx

from fleetfuel_client.client import FleetFuelClient

BASE_URL = os.getenv("FLEETFUEL_BASE_URL", "http://localhost:8001")


async def run_demo():
    print("Starting FleetFuel budget demo...")

    async with FleetFuelClient(base_url=BASE_URL) as client:
        try:
            status = await client.get_budget_status("citizen_thandi")
            print(f"Thandi: {status['monthly_usage']} of {status['limit']} ({status['usage_percentage']}%)")

            for alert in await client.get_budget_alerts("driver_john"):
                print(f"John alert: {alert}")

            check = await client.check_budget_before_action("citizen_thandi", "120.00")
            print(f"Pre-trip check: {check['decision']} - {check['message'] or 'no warning'}")

            print("Fleet overview:")
            for row in await client.get_group_budget("biz_swazi_logistics"):
                print(f"  {row['user_id']}: {row['usage_percentage']}%")
        except httpx.HTTPError as e:
            print(f"Error during request: {e}")
            print("Note: run scripts/seed-sqlite.py and start the API before the demo.")

    print("\nDemo finished.")

if __name__ == "__main__":
    asyncio.run(run_demo())
