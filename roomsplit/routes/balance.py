"""Balance routes: per-member balances, suggested settlements and totals."""

from typing import List

from fastapi import APIRouter, Depends

from roomsplit.authz_utils import ensure_member_or_403
from roomsplit.balances import check_zero_sum, summarize_expenses
from roomsplit.models import GroupSummary, MemberBalance, Settlement
from roomsplit.planner import plan_settlements
from roomsplit.store import ExpenseStore, get_store
from roomsplit.utils import get_current_user

router = APIRouter()

@router.get("/groups/{group_id}/balances", response_model=List[MemberBalance], summary="Net balance per member in group", tags=["Balances"])
def group_balances(group_id: str, user=Depends(get_current_user), store: ExpenseStore = Depends(get_store)):
    ensure_member_or_403(store, user["sub"], group_id)
    balances = store.group_balances(group_id)
    check_zero_sum(balances)
    return balances

@router.get("/groups/{group_id}/settlements", response_model=List[Settlement], summary="Suggested payments that settle the group", tags=["Settlements"])
def suggest_settlements(group_id: str, user=Depends(get_current_user), store: ExpenseStore = Depends(get_store)):
    # Recomputed from current balances on every call; nothing is stored
    ensure_member_or_403(store, user["sub"], group_id)
    balances = store.group_balances(group_id)
    check_zero_sum(balances)
    return plan_settlements(balances)

@router.get("/groups/{group_id}/summary", response_model=GroupSummary, summary="Group spending totals", tags=["Reports"])
def group_summary(group_id: str, user=Depends(get_current_user), store: ExpenseStore = Depends(get_store)):
    ensure_member_or_403(store, user["sub"], group_id)
    return summarize_expenses(store.group_expense_rows(group_id), store.list_members(group_id))
