"""Share allocation: turn an expense amount and a split strategy into shares.

The allocator only computes. Deciding whether a set of shares is acceptable
is the job of ``validate_shares``, which is the gate every expense passes
before it is stored.
"""

import logging
from decimal import Decimal
from typing import Iterable, List

from roomsplit.errors import InvalidInput, ShareMismatch
from roomsplit.models import AllocationRequest, AllocationResult, ShareItem
from roomsplit.money import CENT, as_float, round_money, to_decimal, to_money

logger = logging.getLogger(__name__)

SHARE_TOLERANCE = Decimal("0.02")
HUNDRED = Decimal(100)


def _check_participants(request: AllocationRequest) -> None:
    if not request.participants:
        raise InvalidInput("At least one participant is required")
    seen = set()
    for p in request.participants:
        if p.member_id in seen:
            raise InvalidInput(f"Duplicate participant: {p.member_id}")
        seen.add(p.member_id)


def _apportion(exact: List[Decimal]) -> List[Decimal]:
    """Round each value half-up, then hand out the cents lost to rounding.

    The target is the rounded total of the unrounded values, so the result
    never adds money that the inputs did not ask for. Cents go to the values
    that lost the most in rounding; ties favour later participants.
    """
    rounded = [round_money(v) for v in exact]
    steps = int((round_money(sum(exact, Decimal(0))) - sum(rounded, Decimal(0))) / CENT)
    if steps == 0:
        return rounded
    sign = 1 if steps > 0 else -1
    order = sorted(
        reversed(range(len(exact))),
        key=lambda i: (exact[i] - rounded[i]) * sign,
        reverse=True,
    )
    for i in order[:abs(steps)]:
        rounded[i] += CENT * sign
    return rounded


def _equal_shares(amount: Decimal, request: AllocationRequest) -> List[ShareItem]:
    included = [p for p in request.participants if p.included]
    if not included:
        raise InvalidInput("Equal split needs at least one included participant")
    # recomputed from scratch over whoever is still included
    amounts = _apportion([amount / len(included)] * len(included))
    return [ShareItem(member_id=p.member_id, amount=float(a)) for p, a in zip(included, amounts)]


def _percentage_shares(amount: Decimal, request: AllocationRequest) -> List[ShareItem]:
    default_pct = HUNDRED / len(request.participants)
    included = []
    exact = []
    for p in request.participants:
        if not p.included:
            continue
        if p.percentage is None:
            pct = default_pct
        else:
            pct = to_decimal(p.percentage, f"percentage for {p.member_id}")
            if pct < 0:
                raise InvalidInput(f"percentage for {p.member_id} must not be negative")
        included.append(p)
        exact.append(amount * pct / HUNDRED)
    amounts = _apportion(exact)
    return [ShareItem(member_id=p.member_id, amount=float(a)) for p, a in zip(included, amounts)]


def _exact_shares(request: AllocationRequest) -> List[ShareItem]:
    shares = []
    for p in request.participants:
        if not p.included:
            continue
        if p.manual_amount is None:
            raise InvalidInput(f"manual_amount is required for {p.member_id} in exact mode")
        value = to_money(p.manual_amount, f"manual_amount for {p.member_id}")
        if value < 0:
            raise InvalidInput(f"manual_amount for {p.member_id} must not be negative")
        shares.append(ShareItem(member_id=p.member_id, amount=float(value)))
    return shares


def shares_total(shares: Iterable[ShareItem]) -> Decimal:
    return sum((to_decimal(s.amount) for s in shares), Decimal(0))


def allocate_shares(request: AllocationRequest) -> AllocationResult:
    """Compute the shares for one expense.

    Excluded participants never receive a share. Under ``equal`` the amount is
    spread again over whoever is still included. Percentages are applied as
    stated and are not rescaled to total 100, so a 110% allocation comes back
    with ``valid=False`` rather than being corrected.
    """
    amount = to_money(request.amount)
    if amount <= 0:
        raise InvalidInput("amount must be positive")
    _check_participants(request)

    if request.strategy == "equal":
        shares = _equal_shares(amount, request)
    elif request.strategy == "percentage":
        shares = _percentage_shares(amount, request)
    elif request.strategy == "exact":
        shares = _exact_shares(request)
    else:
        raise InvalidInput(f"Unknown split strategy: {request.strategy}")

    computed = shares_total(shares)
    return AllocationResult(
        amount=as_float(amount),
        shares=shares,
        valid=abs(computed - amount) <= SHARE_TOLERANCE,
        computed_sum=as_float(computed),
    )


def validate_shares(shares: Iterable[ShareItem], amount) -> Decimal:
    """Raise ShareMismatch unless the shares add up to ``amount`` within 0.02."""
    target = to_decimal(amount)
    computed = shares_total(shares)
    if abs(computed - target) > SHARE_TOLERANCE:
        logger.info("Share mismatch: computed %s, expected %s", computed, target)
        raise ShareMismatch(round_money(computed), round_money(target))
    return computed


def ensure_valid(result: AllocationResult) -> AllocationResult:
    validate_shares(result.shares, result.amount)
    return result
