"""
Budget routes consumed by the mobile app and the fleet dashboard.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from fleetfuel.api.dependencies import get_budget_admin, get_budget_reconciler
from fleetfuel.application.services.budget_admin import BudgetAdminService
from fleetfuel.application.services.budget_reconciler import BudgetReconciler
from fleetfuel.domain.budget import Block, BudgetStatus, DecisionKind, Warn
from fleetfuel.domain.formatting import describe_decision

router = APIRouter(prefix="/v1", tags=["budget"])


class MonthlyUsage(BaseModel):
    user_id: str
    monthly_usage: Decimal
    period_start: datetime
    period_end: datetime


class BudgetAlerts(BaseModel):
    user_id: str
    alerts: List[str] = Field(default_factory=list)


class ActionCheckRequest(BaseModel):
    estimated_cost: Decimal = Field(..., examples=["20.00"])


class ActionCheckResponse(BaseModel):
    decision: DecisionKind
    new_total: Decimal
    limit: Decimal
    overage: Optional[Decimal] = None
    percentage: Optional[Decimal] = None
    message: Optional[str] = None


class LimitUpdateRequest(BaseModel):
    amount: Decimal
    actor_id: str = Field(..., description="Citizen editing their own budget, or fleet admin")


@router.get("/users/{user_id}/budget/status", response_model=BudgetStatus)
async def get_budget_status(
    user_id: str,
    as_of: Optional[datetime] = Query(None, description="Any instant inside the month to report"),
    reconciler: BudgetReconciler = Depends(get_budget_reconciler),
) -> BudgetStatus:
    return await reconciler.get_budget_status(user_id, as_of)


@router.get("/users/{user_id}/budget/usage", response_model=MonthlyUsage)
async def get_monthly_usage(
    user_id: str,
    as_of: Optional[datetime] = Query(None),
    reconciler: BudgetReconciler = Depends(get_budget_reconciler),
) -> MonthlyUsage:
    usage, (start, end) = await reconciler.get_usage_with_period(user_id, as_of)
    return MonthlyUsage(user_id=user_id, monthly_usage=usage, period_start=start, period_end=end)


@router.get("/users/{user_id}/budget/alerts", response_model=BudgetAlerts)
async def get_budget_alerts(
    user_id: str,
    as_of: Optional[datetime] = Query(None),
    reconciler: BudgetReconciler = Depends(get_budget_reconciler),
) -> BudgetAlerts:
    alerts = await reconciler.get_budget_alerts(user_id, as_of)
    return BudgetAlerts(user_id=user_id, alerts=alerts)


@router.post("/users/{user_id}/budget/check", response_model=ActionCheckResponse)
async def check_budget_before_action(
    user_id: str,
    body: ActionCheckRequest,
    reconciler: BudgetReconciler = Depends(get_budget_reconciler),
) -> ActionCheckResponse:
    """
    Classify a planned trip cost. The response never blocks anything by itself;
    the client decides whether to let the user override a block.
    """
    status, decision = await reconciler.evaluate_planned_spend(user_id, body.estimated_cost)
    return ActionCheckResponse(
        decision=decision.kind,
        new_total=decision.new_total,
        limit=decision.limit,
        overage=decision.overage if isinstance(decision, Block) else None,
        percentage=decision.percentage if isinstance(decision, Warn) else None,
        message=describe_decision(decision, status.role, reconciler.policy.currency_symbol),
    )


@router.put("/users/{user_id}/budget/limit", response_model=BudgetStatus)
async def update_budget_limit(
    user_id: str,
    body: LimitUpdateRequest,
    admin: BudgetAdminService = Depends(get_budget_admin),
    reconciler: BudgetReconciler = Depends(get_budget_reconciler),
) -> BudgetStatus:
    await admin.set_limit(user_id, body.amount, actor_id=body.actor_id)
    return await reconciler.get_budget_status(user_id)


@router.get("/groups/{group_id}/budget", response_model=List[BudgetStatus])
async def get_group_budget(
    group_id: str,
    as_of: Optional[datetime] = Query(None),
    reconciler: BudgetReconciler = Depends(get_budget_reconciler),
) -> List[BudgetStatus]:
    """
    Per-driver budget status for a business group, highest usage first.
    """
    return await reconciler.get_group_budget_statuses(group_id, as_of)
