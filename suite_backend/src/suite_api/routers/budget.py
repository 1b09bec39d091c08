from __future__ import annotations

from typing import Any, Dict, Mapping

from fastapi import APIRouter, Depends

from .. import readers
from ..store import StoreClient, get_store
from ..utils import materialize, round_half_up, success_envelope

router = APIRouter(prefix="/api/budget", tags=["budget"])

OVER_BUDGET_RATIO = 0.9


def budget_view(budget: Mapping[str, Any]) -> Dict[str, Any]:
    """Reshape a `budgets` row into the client-facing budget summary."""
    total = float(budget.get("total") or 0)
    spent = float(budget.get("spent") or 0)
    return {
        "id": budget.get("id"),
        "project_id": budget.get("project_id"),
        "total_budget": total,
        "spent_amount": spent,
        "remaining_amount": total - spent,
        "currency": "USD",
        "period": "monthly",
        "status": "over-budget" if spent > total * OVER_BUDGET_RATIO else "on-track",
        "created_at": budget.get("updated_at"),
    }


# PUBLIC_INTERFACE
@router.get(
    "/budgets",
    summary="List Budgets",
    description="Budgets, most recently updated first; flagged over-budget once 90% is spent.",
)
def list_budgets(store: StoreClient = Depends(get_store)):
    budgets = [budget_view(b) for b in materialize(readers.list_budgets(store).unwrap())]
    return success_envelope(budgets, total=len(budgets))


# PUBLIC_INTERFACE
@router.get("/expenses", summary="List Expenses", description="Latest 100 expenses and their total amount.")
def list_expenses(store: StoreClient = Depends(get_store)):
    expenses = materialize(readers.list_expenses(store).unwrap())
    total_amount = sum(float(e.get("amount") or 0) for e in expenses)
    return success_envelope(expenses, total=len(expenses), total_amount=round_half_up(total_amount, 2))
