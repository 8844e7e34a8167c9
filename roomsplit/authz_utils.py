"""Authorization helpers for the expense service.

Membership and delete checks raise HTTP 403 when the caller is not allowed
to perform an action, and 404 when the target expense does not exist.
"""

from fastapi import HTTPException

from roomsplit.store import ExpenseStore

def ensure_member_or_403(store: ExpenseStore, user_id: str, group_id: str) -> str:
    """Raise 403 if the user is not a member of the group; return the role."""
    role = store.member_role(group_id, user_id)
    if role is None:
        raise HTTPException(status_code=403, detail="Not a member of this group")
    return role

def get_expense_or_404(store: ExpenseStore, expense_id: str) -> dict:
    expense = store.get_expense(expense_id)
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    return expense

def ensure_can_delete_or_403(store: ExpenseStore, user_id: str, expense: dict):
    """Only the payer or a group admin may delete an expense."""
    role = ensure_member_or_403(store, user_id, expense["group_id"])
    if expense.get("paid_by") != user_id and role != "admin":
        raise HTTPException(status_code=403, detail="Permission denied")
