from __future__ import annotations

import asyncio
import logging
import statistics
import time
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from fleetfuel.application.services.budget_reconciler import BudgetReconciler
from fleetfuel.domain.profiles import CitizenProfile
from fleetfuel.domain.trips import TripRecord
from fleetfuel.infrastructure.memory_store import InMemoryProfileStore, InMemoryTripStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def benchmark_reconciler(iterations: int = 1000, trips_per_user: int = 500):
    logger.info(f"Starting BudgetReconciler benchmark with {iterations} iterations...")

    now = datetime.now(timezone.utc)
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    trips = [
        TripRecord(
            id=f"trip_{i}",
            owner_id="citizen_bench",
            start_time=month_start + timedelta(minutes=i),
            cost=Decimal("3.75"),
        )
        for i in range(trips_per_user)
    ]
    reconciler = BudgetReconciler(
        profiles=InMemoryProfileStore([CitizenProfile(user_id="citizen_bench", personal_budget=Decimal("5000"))]),
        trips=InMemoryTripStore(trips),
    )

    latencies = []
    for _ in range(iterations):
        start = time.perf_counter()
        await reconciler.get_budget_status("citizen_bench")
        end = time.perf_counter()
        latencies.append((end - start) * 1000)  # ms

    avg = statistics.mean(latencies)
    p95 = statistics.quantiles(latencies, n=20)[18]  # 95th percentile
    p99 = statistics.quantiles(latencies, n=100)[98]  # 99th percentile

    logger.info("--- Benchmark Results ---")
    logger.info(f"Average Latency: {avg:.3f} ms")
    logger.info(f"P95 Latency:     {p95:.3f} ms")
    logger.info(f"P99 Latency:     {p99:.3f} ms")

    target_p95 = 5.0
    if p95 <= target_p95:
        logger.info(f"SUCCESS: P95 latency ({p95:.3f}ms) is within target ({target_p95}ms)")
    else:
        logger.warning(f"FAILURE: P95 latency ({p95:.3f}ms) exceeds target ({target_p95}ms)")


if __name__ == "__main__":
    asyncio.run(benchmark_reconciler())
