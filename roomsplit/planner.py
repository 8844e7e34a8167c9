"""Settlement planning: who pays whom so every balance ends at zero.

Greedy largest-first matching. It does not promise the global minimum number
of payments, but it always terminates, emits only positive amounts and uses
at most one payment fewer than the number of members still owed or owing.
"""

import logging
from decimal import Decimal
from typing import Dict, Iterable, List

from roomsplit.models import MemberBalance, Settlement
from roomsplit.money import as_float, to_decimal

logger = logging.getLogger(__name__)

SETTLED_THRESHOLD = Decimal("0.01")


class _Party:
    __slots__ = ("member_id", "name", "remaining")

    def __init__(self, member_id: str, name: str, remaining: Decimal):
        self.member_id = member_id
        self.name = name
        self.remaining = remaining


def plan_settlements(balances: Iterable[MemberBalance]) -> List[Settlement]:
    """Return the suggested payments for a snapshot of group balances.

    Members within 0.01 of zero are treated as settled. Equal magnitudes keep
    their input order, so the same snapshot always gives the same plan.
    """
    creditors: List[_Party] = []
    debtors: List[_Party] = []
    for b in balances:
        value = to_decimal(b.balance, f"balance for {b.member_id}")
        if value > SETTLED_THRESHOLD:
            creditors.append(_Party(b.member_id, b.display_name, value))
        elif value < -SETTLED_THRESHOLD:
            debtors.append(_Party(b.member_id, b.display_name, -value))

    # list.sort is stable, ties stay in input order
    creditors.sort(key=lambda p: p.remaining, reverse=True)
    debtors.sort(key=lambda p: p.remaining, reverse=True)

    settlements = []
    i = j = 0
    while i < len(creditors) and j < len(debtors):
        credit = creditors[i]
        debt = debtors[j]
        transfer = min(credit.remaining, debt.remaining)
        if transfer > SETTLED_THRESHOLD:
            settlements.append(Settlement(
                from_id=debt.member_id,
                from_name=debt.name,
                to_id=credit.member_id,
                to_name=credit.name,
                amount=as_float(transfer),
            ))
        credit.remaining -= transfer
        debt.remaining -= transfer
        if credit.remaining < SETTLED_THRESHOLD:
            i += 1
        if debt.remaining < SETTLED_THRESHOLD:
            j += 1

    logger.debug(
        "Planned %d settlements for %d creditors and %d debtors",
        len(settlements), len(creditors), len(debtors),
    )
    return settlements


def apply_settlements(balances: Iterable[MemberBalance], settlements: Iterable[Settlement]) -> Dict[str, Decimal]:
    """Return each member's balance after the given payments are made."""
    residual = {b.member_id: to_decimal(b.balance) for b in balances}
    for s in settlements:
        residual[s.from_id] = residual.get(s.from_id, Decimal(0)) + to_decimal(s.amount)
        residual[s.to_id] = residual.get(s.to_id, Decimal(0)) - to_decimal(s.amount)
    return residual
