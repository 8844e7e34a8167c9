import uuid

import jwt
import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from main import app
from roomsplit.balances import aggregate_balances
from roomsplit.config import JWT_ALGORITHM, JWT_SECRET
from roomsplit.models import Member
from roomsplit.store import get_store, month_bounds

ALICE = "11111111-1111-1111-1111-111111111111"
BOB = "22222222-2222-2222-2222-222222222222"
CARA = "33333333-3333-3333-3333-333333333333"
OUTSIDER = "44444444-4444-4444-4444-444444444444"
GROUP = "group-flat-12"


class InMemoryStore:
    """Same surface as ExpenseStore, backed by plain lists."""

    def __init__(self):
        self.members = {}
        self.expenses = []
        self.shares = []

    def add_member(self, group_id, user_id, name, role="member"):
        self.members.setdefault(group_id, []).append(Member(member_id=user_id, display_name=name, role=role))

    def member_role(self, group_id, user_id):
        for m in self.members.get(group_id, []):
            if m.member_id == user_id:
                return m.role
        return None

    def list_members(self, group_id):
        return list(self.members.get(group_id, []))

    def create_expense(self, group_id, data, shares):
        row = dict(data, id=str(uuid.uuid4()), group_id=group_id, created_at=f"2026-01-01T00:00:{len(self.expenses):02d}")
        self.expenses.append(row)
        for s in shares:
            self.shares.append({"expense_id": row["id"], "user_id": s.member_id, "amount": s.amount})
        return self._with_shares(row)

    def _with_shares(self, row):
        out = dict(row)
        out["shares"] = [{"member_id": s["user_id"], "amount": s["amount"]} for s in self.shares if s["expense_id"] == row["id"]]
        return out

    def list_expenses(self, group_id, category=None, paid_by=None, month=None, search=None, limit=20, offset=0):
        rows = [e for e in self.expenses if e["group_id"] == group_id]
        if category:
            rows = [e for e in rows if e["category"] == category]
        if paid_by:
            rows = [e for e in rows if e["paid_by"] == paid_by]
        if month:
            start, end = month_bounds(month)
            rows = [e for e in rows if start <= e["expense_date"] < end]
        if search:
            rows = [e for e in rows if search.lower() in (e.get("description") or "").lower()]
        rows.sort(key=lambda e: (e["expense_date"], e["created_at"]), reverse=True)
        return [self._with_shares(e) for e in rows[offset:offset + limit]]

    def get_expense(self, expense_id):
        for e in self.expenses:
            if e["id"] == expense_id:
                return self._with_shares(e)
        return None

    def delete_expense(self, expense_id):
        before = len(self.expenses)
        self.expenses = [e for e in self.expenses if e["id"] != expense_id]
        if len(self.expenses) == before:
            raise HTTPException(status_code=400, detail="Failed to delete expense")
        self.shares = [s for s in self.shares if s["expense_id"] != expense_id]

    def group_expense_rows(self, group_id):
        return [e for e in self.expenses if e["group_id"] == group_id]

    def group_balances(self, group_id):
        return aggregate_balances(self.list_members(group_id), self.group_expense_rows(group_id), self.shares)


@pytest.fixture
def store():
    s = InMemoryStore()
    s.add_member(GROUP, ALICE, "alice", role="admin")
    s.add_member(GROUP, BOB, "bob")
    s.add_member(GROUP, CARA, "cara")
    return s


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def auth_headers(user_id):
    token = jwt.encode({"sub": user_id, "email": f"{user_id[:4]}@example.com"}, JWT_SECRET, algorithm=JWT_ALGORITHM)
    return {"Authorization": f"Bearer {token}"}
