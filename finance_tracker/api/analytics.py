"""
Read-only analytics endpoints.

Thin views over the analytics engine: the same numbers the assistant's
tools report, without going through the model.
"""

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Query

from ..core.clock import Clock, current_month
from ..database.repositories.budget_repository import BudgetRepository
from ..database.repositories.category_repository import CategoryRepository
from ..database.repositories.transaction_repository import TransactionRepository
from ..models.budget import MONTH_PATTERN
from ..services import analytics
from .dependencies.auth import get_current_user_id
from .dependencies.chat_deps import (
    get_budget_repository,
    get_category_repository,
    get_clock,
    get_transaction_repository,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["analytics"])

MonthQuery = Annotated[
    str | None, Query(pattern=MONTH_PATTERN, description="YYYY-MM month filter")
]


@router.get("/analytics/spending")
async def spending_by_category(
    month: MonthQuery = None,
    user_id: str = Depends(get_current_user_id),
    transaction_repo: TransactionRepository = Depends(get_transaction_repository),
    category_repo: CategoryRepository = Depends(get_category_repository),
    clock: Clock = Depends(get_clock),
) -> dict[str, Any]:
    """Expense totals per category for a month, largest first."""
    month = month or current_month(clock)
    rows = await transaction_repo.aggregate_by_category(user_id, month=month)
    names = await category_repo.get_names([r["category_id"] for r in rows if r["category_id"]])

    return {"month": month, "categories": analytics.category_totals(rows, names)}


@router.get("/analytics/summary")
async def monthly_summary(
    month: MonthQuery = None,
    user_id: str = Depends(get_current_user_id),
    transaction_repo: TransactionRepository = Depends(get_transaction_repository),
    category_repo: CategoryRepository = Depends(get_category_repository),
) -> dict[str, Any]:
    """Income, expenses, category split and daily trend for a month, or all time."""
    transactions = await transaction_repo.list_by_user(user_id, month=month)
    rows = await transaction_repo.aggregate_by_category(user_id, month=month)
    names = await category_repo.get_names([r["category_id"] for r in rows if r["category_id"]])

    logger.info("Summary computed", user_id=user_id, month=month or "all")

    return {"month": month, **analytics.monthly_summary(transactions, rows, names)}


@router.get("/analytics/anomalies")
async def anomalies(
    user_id: str = Depends(get_current_user_id),
    transaction_repo: TransactionRepository = Depends(get_transaction_repository),
    category_repo: CategoryRepository = Depends(get_category_repository),
) -> dict[str, Any]:
    """Expenses at or above twice their category's all-time mean."""
    rows = await transaction_repo.aggregate_by_category(user_id)
    averages = {r["category_id"]: r["average"] for r in rows}
    candidates = await transaction_repo.list_expenses_at_or_above(
        user_id, analytics.anomaly_thresholds(averages)
    )
    names = await category_repo.get_names([t.category_id for t in candidates if t.category_id])

    return {"items": analytics.detect_anomalies(candidates, averages, names)}


@router.get("/budgets/status")
async def budget_status(
    user_id: str = Depends(get_current_user_id),
    budget_repo: BudgetRepository = Depends(get_budget_repository),
    transaction_repo: TransactionRepository = Depends(get_transaction_repository),
    category_repo: CategoryRepository = Depends(get_category_repository),
    clock: Clock = Depends(get_clock),
) -> dict[str, Any]:
    """Utilization and traffic-light status of this month's budgets."""
    month = current_month(clock)
    budgets = await budget_repo.list_by_month(user_id, month)
    rows = await transaction_repo.aggregate_by_category(user_id, month=month)
    names = await category_repo.get_names([b.category_id for b in budgets if b.category_id])
    spent = analytics.spent_by_category(rows)

    return {"month": month, "items": analytics.budget_status_items(budgets, spent, names)}
