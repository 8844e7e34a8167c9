"""Per-member balances for a group: a group-by-sum over expenses and shares."""

import logging
from collections import OrderedDict
from decimal import Decimal
from typing import Iterable, List

from roomsplit.models import Member, MemberBalance
from roomsplit.money import as_float, to_decimal

logger = logging.getLogger(__name__)


def aggregate_balances(members: Iterable[Member], expenses: Iterable[dict], shares: Iterable[dict]) -> List[MemberBalance]:
    """Sum what each member paid and owes across a group's expenses.

    ``expenses`` are rows with ``id``, ``paid_by`` and ``amount``; ``shares``
    are rows with ``expense_id``, ``user_id`` and ``amount``. Shares of
    expenses outside ``expenses`` are ignored. A payer or share holder missing
    from ``members`` (for example someone who left the group) is still
    reported, named by id, so the balances keep summing to zero.
    """
    names = OrderedDict((m.member_id, m.display_name) for m in members)
    paid = {uid: Decimal(0) for uid in names}
    owed = {uid: Decimal(0) for uid in names}

    expense_ids = set()
    for e in expenses:
        expense_ids.add(e["id"])
        payer = e.get("paid_by")
        if payer is None:
            # payer account deleted
            continue
        names.setdefault(payer, payer)
        paid[payer] = paid.get(payer, Decimal(0)) + to_decimal(e.get("amount", 0))
    for s in shares:
        if s.get("expense_id") not in expense_ids:
            continue
        uid = s.get("user_id")
        names.setdefault(uid, uid)
        owed[uid] = owed.get(uid, Decimal(0)) + to_decimal(s.get("amount", 0))

    result = []
    for uid, name in names.items():
        total_paid = paid.get(uid, Decimal(0))
        total_share = owed.get(uid, Decimal(0))
        result.append(MemberBalance(
            member_id=uid,
            display_name=name,
            total_paid=as_float(total_paid),
            total_share=as_float(total_share),
            balance=as_float(total_paid - total_share),
        ))
    return result


def balance_drift(balances: Iterable[MemberBalance]) -> Decimal:
    return abs(sum((to_decimal(b.balance) for b in balances), Decimal(0)))


def check_zero_sum(balances: List[MemberBalance], tolerance=None) -> bool:
    """Return True when the balances add up to zero within tolerance.

    The default tolerance allows one cent per member for per-share rounding.
    """
    if tolerance is None:
        tolerance = Decimal("0.01") * max(len(balances), 1)
    drift = balance_drift(balances)
    if drift > to_decimal(tolerance, "tolerance"):
        logger.warning("Group balances drift from zero by %s across %d members", drift, len(balances))
        return False
    return True


def summarize_expenses(expenses: Iterable[dict], members: Iterable[Member] = ()) -> dict:
    """Totals for a group's expenses by category, by payer and by month."""
    names = {m.member_id: m.display_name for m in members}
    total = Decimal(0)
    by_category = {}
    by_payer = {}
    by_month = {}
    for e in expenses:
        amount = to_decimal(e.get("amount", 0))
        total += amount
        cat = e.get("category") or "Other"
        by_category[cat] = by_category.get(cat, Decimal(0)) + amount
        payer = names.get(e.get("paid_by"), e.get("paid_by") or "unknown")
        by_payer[payer] = by_payer.get(payer, Decimal(0)) + amount
        # expense_date is an ISO date string or a date
        month = str(e.get("expense_date") or "")[:7] or "unknown"
        by_month[month] = by_month.get(month, Decimal(0)) + amount
    return {
        "total": as_float(total),
        "by_category": {k: as_float(v) for k, v in by_category.items()},
        "by_payer": {k: as_float(v) for k, v in by_payer.items()},
        "by_month": {k: as_float(v) for k, v in sorted(by_month.items())},
    }
