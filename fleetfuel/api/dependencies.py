from __future__ import annotations

from fastapi import Request

from fleetfuel.application.services.budget_admin import BudgetAdminService
from fleetfuel.application.services.budget_reconciler import BudgetReconciler
from fleetfuel.domain.trips import TripStore


def get_budget_reconciler(request: Request) -> BudgetReconciler:
    """Return the BudgetReconciler built during application startup."""
    return request.app.state.budget_reconciler


def get_budget_admin(request: Request) -> BudgetAdminService:
    """Return the BudgetAdminService built during application startup."""
    return request.app.state.budget_admin


def get_trip_store(request: Request) -> TripStore:
    return request.app.state.trip_store
