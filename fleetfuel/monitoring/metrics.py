from __future__ import annotations

from prometheus_client import Counter, Histogram


BUDGET_STATUS_TOTAL = Counter(
    "fleetfuel_budget_status_total",
    "Budget status computations",
    ["role"],
)

BUDGET_STATUS_DURATION_SECONDS = Histogram(
    "fleetfuel_budget_status_duration_seconds",
    "Time spent computing a budget status, store reads included",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

BUDGET_ALERTS_TOTAL = Counter(
    "fleetfuel_budget_alerts_total",
    "Budget alerts produced",
    ["level"],
)

BUDGET_DECISIONS_TOTAL = Counter(
    "fleetfuel_budget_decisions_total",
    "Pre-action budget checks by outcome",
    ["decision"],
)

STORE_ERRORS_TOTAL = Counter(
    "fleetfuel_store_errors_total",
    "Failed reads or writes against backing stores",
    ["store"],
)
