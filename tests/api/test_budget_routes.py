from __future__ import annotations

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from factories import GROUP, NOW, citizen, driver, make_trip
from fleetfuel.api.dependencies import get_budget_admin, get_budget_reconciler, get_trip_store
from fleetfuel.application.services.budget_admin import BudgetAdminService
from fleetfuel.application.services.budget_reconciler import BudgetReconciler
from fleetfuel.core.settings import Settings
from fleetfuel.domain.errors import StoreUnavailable
from fleetfuel.infrastructure.memory_store import InMemoryProfileStore, InMemoryTripStore
from fleetfuel.main import create_app


@pytest.fixture
def client() -> TestClient:
    profiles = InMemoryProfileStore(
        [citizen(budget="500"), driver("driver_1", limit="1000"), driver("driver_2", limit="400")]
    )
    trips = InMemoryTripStore(
        [
            make_trip("citizen_1", "375"),
            make_trip("driver_1", "1050", business_group_id=GROUP),
            make_trip("driver_2", "100", business_group_id=GROUP),
        ]
    )
    reconciler = BudgetReconciler(profiles=profiles, trips=trips, clock=lambda: NOW)
    admin = BudgetAdminService(profiles, max_budget=Decimal("100000"))

    app = create_app(Settings(database_url="memory://"))
    app.dependency_overrides[get_budget_reconciler] = lambda: reconciler
    app.dependency_overrides[get_budget_admin] = lambda: admin
    app.dependency_overrides[get_trip_store] = lambda: trips
    return TestClient(app)


def test_get_budget_status(client: TestClient) -> None:
    response = client.get("/v1/users/citizen_1/budget/status")

    assert response.status_code == 200
    body = response.json()
    assert body["role"] == "citizen"
    assert Decimal(body["usage_percentage"]) == 75
    assert Decimal(body["remaining_budget"]) == Decimal("125")
    assert body["is_over_budget"] is False


def test_get_monthly_usage_reports_period(client: TestClient) -> None:
    response = client.get("/v1/users/citizen_1/budget/usage")

    assert response.status_code == 200
    body = response.json()
    assert Decimal(body["monthly_usage"]) == Decimal("375")
    assert body["period_start"].startswith("2026-10-01T00:00:00")
    assert body["period_end"].startswith("2026-11-01T00:00:00")


def test_get_budget_alerts(client: TestClient) -> None:
    response = client.get("/v1/users/driver_1/budget/alerts")

    assert response.status_code == 200
    assert response.json()["alerts"] == ["Budget exceeded by E50.00"]


def test_check_before_action_returns_warning_message(client: TestClient) -> None:
    response = client.post("/v1/users/citizen_1/budget/check", json={"estimated_cost": "95"})

    assert response.status_code == 200
    body = response.json()
    assert body["decision"] == "warn"
    assert Decimal(body["percentage"]) == 94
    assert body["overage"] is None
    assert body["message"] == "This trip will bring you to 94% of your budget."


def test_check_before_action_rejects_negative_estimate(client: TestClient) -> None:
    response = client.post("/v1/users/citizen_1/budget/check", json={"estimated_cost": "-5"})

    assert response.status_code == 422
    assert response.json()["error"] == "InvalidAmount"


def test_unknown_user_is_404(client: TestClient) -> None:
    response = client.get("/v1/users/ghost/budget/status")

    assert response.status_code == 404
    assert response.json() == {
        "error": "IdentityNotFound",
        "detail": "User profile not found: ghost",
        "retryable": False,
    }


def test_update_limit_returns_fresh_status(client: TestClient) -> None:
    response = client.put(
        "/v1/users/citizen_1/budget/limit",
        json={"amount": "750", "actor_id": "citizen_1"},
    )

    assert response.status_code == 200
    assert Decimal(response.json()["limit"]) == Decimal("750")
    assert Decimal(response.json()["usage_percentage"]) == 50


def test_update_limit_validation_error(client: TestClient) -> None:
    response = client.put(
        "/v1/users/citizen_1/budget/limit",
        json={"amount": "0", "actor_id": "citizen_1"},
    )

    assert response.status_code == 422
    assert response.json()["detail"] == "Budget cannot be zero"


def test_group_budget_lists_drivers(client: TestClient) -> None:
    response = client.get(f"/v1/groups/{GROUP}/budget")

    assert response.status_code == 200
    assert [s["user_id"] for s in response.json()] == ["driver_1", "driver_2"]


def test_recorded_trip_counts_towards_usage(client: TestClient) -> None:
    created = client.post(
        "/v1/trips",
        json={"owner_id": "citizen_1", "start_time": NOW.isoformat(), "cost": "25.00"},
    )
    status = client.get("/v1/users/citizen_1/budget/status")

    assert created.status_code == 201
    assert Decimal(status.json()["monthly_usage"]) == Decimal("400")


def test_negative_trip_cost_is_rejected(client: TestClient) -> None:
    response = client.post(
        "/v1/trips",
        json={"owner_id": "citizen_1", "start_time": NOW.isoformat(), "cost": "-1"},
    )

    assert response.status_code == 422
    assert response.json()["error"] == "InvalidTripCost"


class _DownTripStore:
    async def list_trips(self, scope, *, start, end):
        raise StoreUnavailable(store="trips", message="Failed to load trips")

    async def add_trip(self, trip):
        raise StoreUnavailable(store="trips", message="Failed to record trip")


def test_store_outage_is_503_with_retry_after() -> None:
    reconciler = BudgetReconciler(
        profiles=InMemoryProfileStore([citizen()]),
        trips=_DownTripStore(),
        clock=lambda: NOW,
    )
    app = create_app(Settings(database_url="memory://"))
    app.dependency_overrides[get_budget_reconciler] = lambda: reconciler

    response = TestClient(app).get("/v1/users/citizen_1/budget/status")

    assert response.status_code == 503
    assert response.headers["Retry-After"] == "5"
    assert response.json()["retryable"] is True


def test_health_and_metrics(client: TestClient) -> None:
    assert client.get("/internal/health").json()["status"] == "healthy"

    client.get("/v1/users/citizen_1/budget/status")
    metrics = client.get("/internal/metrics")

    assert metrics.status_code == 200
    assert "fleetfuel_budget_status_total" in metrics.text


def test_driver_trip_without_group_is_tagged_and_counted(client: TestClient) -> None:
    created = client.post(
        "/v1/trips",
        json={"owner_id": "driver_2", "start_time": NOW.isoformat(), "cost": "300"},
    )
    usage = client.get("/v1/users/driver_2/budget/usage")

    assert created.status_code == 201
    assert created.json()["business_group_id"] == GROUP
    assert Decimal(usage.json()["monthly_usage"]) == Decimal("400")


def test_driver_trip_for_another_group_is_rejected(client: TestClient) -> None:
    response = client.post(
        "/v1/trips",
        json={
            "owner_id": "driver_2",
            "start_time": NOW.isoformat(),
            "cost": "300",
            "business_group_id": "biz_other",
        },
    )
    usage = client.get("/v1/users/driver_2/budget/usage")

    assert response.status_code == 422
    assert response.json()["error"] == "TripGroupMismatch"
    assert Decimal(usage.json()["monthly_usage"]) == Decimal("100")


def test_trip_for_unknown_owner_is_404(client: TestClient) -> None:
    response = client.post(
        "/v1/trips",
        json={"owner_id": "ghost", "start_time": NOW.isoformat(), "cost": "10"},
    )

    assert response.status_code == 404
