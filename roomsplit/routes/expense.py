"""Expense routes: split preview, create, list, read and delete.

Shares are always computed by the allocator and pass the validation gate
before anything is written, so a stored expense's shares add up to its
amount within 0.02.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from roomsplit.allocator import allocate_shares, ensure_valid
from roomsplit.authz_utils import ensure_can_delete_or_403, ensure_member_or_403, get_expense_or_404
from roomsplit.models import AllocationRequest, AllocationResult, Category, Expense, ExpenseCreateRequest
from roomsplit.store import ExpenseStore, get_store
from roomsplit.utils import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/categories", summary="List expense categories", tags=["Metadata"])
def list_categories() -> List[str]:
    return [c.value for c in Category]

@router.post("/splits/preview", response_model=AllocationResult, summary="Preview a split without saving it", tags=["Splits"])
def preview_split(body: AllocationRequest, user=Depends(get_current_user)):
    # valid=False is a normal answer here; the form shows the mismatch
    return allocate_shares(body)

@router.post("/groups/{group_id}/expenses", response_model=Expense, status_code=201, summary="Create an expense in a group", tags=["Expenses"])
def create_expense(group_id: str, body: ExpenseCreateRequest, user=Depends(get_current_user),
                   store: ExpenseStore = Depends(get_store)):
    ensure_member_or_403(store, user["sub"], group_id)
    member_ids = {m.member_id for m in store.list_members(group_id)}
    if body.paid_by not in member_ids:
        raise HTTPException(status_code=422, detail="Payer is not a member of this group")
    outsiders = [p.member_id for p in body.participants if p.included and p.member_id not in member_ids]
    if outsiders:
        raise HTTPException(status_code=422, detail=f"Not group members: {', '.join(outsiders)}")

    result = ensure_valid(allocate_shares(body.allocation_request()))
    data = {
        "paid_by": body.paid_by,
        "amount": result.amount,
        "description": body.description,
        "category": body.category.value,
        "expense_date": body.expense_date.isoformat(),
    }
    created = store.create_expense(group_id, data, result.shares)
    logger.info("Expense %s created in group %s by %s (%.2f, %d shares)",
                created["id"], group_id, user["sub"], result.amount, len(result.shares))
    return created

@router.get("/groups/{group_id}/expenses", response_model=List[Expense], summary="List expenses for a group", tags=["Expenses"])
def list_group_expenses(group_id: str, category: Optional[Category] = None, paid_by: Optional[str] = None,
                        month: Optional[str] = Query(None, description="YYYY-MM"),
                        search: Optional[str] = Query(None, max_length=100),
                        page: int = Query(1, ge=1), page_size: int = Query(20, ge=1, le=100),
                        user=Depends(get_current_user), store: ExpenseStore = Depends(get_store)):
    ensure_member_or_403(store, user["sub"], group_id)
    return store.list_expenses(
        group_id,
        category=category.value if category else None,
        paid_by=paid_by,
        month=month,
        search=search,
        limit=page_size,
        offset=(page - 1) * page_size,
    )

@router.get("/expenses/{expense_id}", response_model=Expense, summary="Get a single expense with its shares", tags=["Expenses"])
def get_expense(expense_id: str, user=Depends(get_current_user), store: ExpenseStore = Depends(get_store)):
    expense = get_expense_or_404(store, expense_id)
    ensure_member_or_403(store, user["sub"], expense["group_id"])
    return expense

@router.delete("/expenses/{expense_id}", summary="Delete an expense", tags=["Expenses"])
def delete_expense(expense_id: str, user=Depends(get_current_user), store: ExpenseStore = Depends(get_store)):
    expense = get_expense_or_404(store, expense_id)
    ensure_can_delete_or_403(store, user["sub"], expense)
    store.delete_expense(expense_id)
    logger.info("Expense %s deleted by %s", expense_id, user["sub"])
    return {"msg": "Expense deleted"}
