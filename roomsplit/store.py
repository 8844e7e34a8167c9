"""Data access for expenses, shares and group membership.

All reads and writes go through ``ExpenseStore`` so the routes never build
Supabase queries themselves. ``get_store`` is the FastAPI dependency; tests
override it with an in-memory store exposing the same methods.
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import HTTPException

from roomsplit.balances import aggregate_balances
from roomsplit.errors import InvalidInput
from roomsplit.models import Member, MemberBalance, ShareItem
from roomsplit.utils import get_supabase_client

logger = logging.getLogger(__name__)


def _execute(query, action: str):
    """Run a write query; storage failures become HTTP 500 with the detail."""
    try:
        res = query.execute()
    except Exception as e:
        logger.error("Failed to %s: %s", action, e)
        raise HTTPException(status_code=500, detail=f"Failed to {action}: {e}")
    err = getattr(res, "error", None)
    if err:
        logger.error("Failed to %s: %s", action, err)
        raise HTTPException(status_code=500, detail=f"Failed to {action}: {err}")
    return res


def month_bounds(month: str) -> Tuple[str, str]:
    """Return the first day of ``month`` (YYYY-MM) and of the month after."""
    try:
        start = datetime.strptime(month, "%Y-%m").date()
    except ValueError:
        raise InvalidInput(f"month must be YYYY-MM, got {month!r}")
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start.isoformat(), end.isoformat()


class ExpenseStore:
    def __init__(self, client=None):
        self._client = client

    @property
    def client(self):
        # Created on first use so importing the app never needs credentials
        if self._client is None:
            self._client = get_supabase_client()
        return self._client

    def member_role(self, group_id: str, user_id: str) -> Optional[str]:
        """Return the caller's role in the group, or None if not a member."""
        res = self.client.table("group_members").select("role").eq("group_id", group_id).eq("user_id", user_id).execute()
        if not res.data:
            return None
        return res.data[0].get("role") or "member"

    def list_members(self, group_id: str) -> List[Member]:
        rows = self.client.table("group_members").select("user_id, role, joined_at").eq("group_id", group_id).order("joined_at").execute().data or []
        if not rows:
            return []
        user_ids = [r["user_id"] for r in rows]
        profiles = self.client.table("profiles").select("id, nickname").in_("id", user_ids).execute().data or []
        names = {p["id"]: p.get("nickname") or p["id"] for p in profiles}
        return [
            Member(member_id=r["user_id"], display_name=names.get(r["user_id"], r["user_id"]), role=r.get("role") or "member")
            for r in rows
        ]

    def create_expense(self, group_id: str, data: dict, shares: List[ShareItem]) -> dict:
        expense_id = str(uuid.uuid4())
        row = dict(data, id=expense_id, group_id=group_id)
        res = _execute(self.client.table("expenses").insert(row), "create expense")
        created = res.data[0] if res.data else row
        share_rows = [
            {"id": str(uuid.uuid4()), "expense_id": expense_id, "user_id": s.member_id, "amount": s.amount}
            for s in shares
        ]
        try:
            _execute(self.client.table("expense_shares").insert(share_rows), "create shares")
        except HTTPException:
            # Do not leave an expense without shares behind
            try:
                self.client.table("expenses").delete().eq("id", expense_id).execute()
            except Exception as e:
                logger.error("Rollback of expense %s failed: %s", expense_id, e)
            raise
        created["shares"] = [{"member_id": s.member_id, "amount": s.amount} for s in shares]
        return created

    def _attach_shares(self, expenses: List[dict]) -> List[dict]:
        ids = [e["id"] for e in expenses]
        rows = []
        if ids:
            rows = self.client.table("expense_shares").select("expense_id, user_id, amount").in_("expense_id", ids).execute().data or []
        by_expense = {}
        for r in rows:
            by_expense.setdefault(r["expense_id"], []).append({"member_id": r["user_id"], "amount": float(r["amount"])})
        for e in expenses:
            e["shares"] = by_expense.get(e["id"], [])
        return expenses

    def list_expenses(self, group_id: str, category: Optional[str] = None, paid_by: Optional[str] = None,
                      month: Optional[str] = None, search: Optional[str] = None,
                      limit: int = 20, offset: int = 0) -> List[dict]:
        query = self.client.table("expenses").select("*").eq("group_id", group_id)
        if category:
            query = query.eq("category", category)
        if paid_by:
            query = query.eq("paid_by", paid_by)
        if month:
            start, end = month_bounds(month)
            query = query.gte("expense_date", start).lt("expense_date", end)
        if search:
            query = query.ilike("description", f"%{search}%")
        query = query.order("expense_date", desc=True).order("created_at", desc=True)
        res = query.range(offset, offset + limit - 1).execute()
        return self._attach_shares(res.data or [])

    def get_expense(self, expense_id: str) -> Optional[dict]:
        res = self.client.table("expenses").select("*").eq("id", expense_id).execute()
        if not res.data:
            return None
        return self._attach_shares([res.data[0]])[0]

    def delete_expense(self, expense_id: str) -> None:
        # expense_shares rows go with the expense through the FK cascade
        res = _execute(self.client.table("expenses").delete().eq("id", expense_id), "delete expense")
        if not res.data:
            raise HTTPException(status_code=400, detail="Failed to delete expense")
        # Clears leftovers where the cascade is not configured
        _execute(self.client.table("expense_shares").delete().eq("expense_id", expense_id), "delete shares")

    def group_expense_rows(self, group_id: str) -> List[dict]:
        return self.client.table("expenses").select("id, amount, paid_by, category, expense_date").eq("group_id", group_id).execute().data or []

    def group_balances(self, group_id: str) -> List[MemberBalance]:
        members = self.list_members(group_id)
        expenses = self.group_expense_rows(group_id)
        ids = [e["id"] for e in expenses]
        shares = []
        if ids:
            shares = self.client.table("expense_shares").select("expense_id, user_id, amount").in_("expense_id", ids).execute().data or []
        return aggregate_balances(members, expenses, shares)


_store = None

def get_store() -> ExpenseStore:
    global _store
    if _store is None:
        _store = ExpenseStore()
    return _store
