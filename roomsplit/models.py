from datetime import date
from enum import Enum
from typing import List, Optional, Literal

from pydantic import BaseModel, Field


class Category(str, Enum):
    food = "Food"
    rent = "Rent"
    supplies = "Supplies"
    utilities = "Utilities"
    transportation = "Transportation"
    entertainment = "Entertainment"
    healthcare = "Healthcare"
    groceries = "Groceries"
    internet = "Internet"
    other = "Other"


SplitStrategy = Literal["equal", "exact", "percentage"]


# One row of the split form: a member and how they take part in the expense
class SplitParticipant(BaseModel):
    member_id: str
    included: bool = True
    # percentage mode only; defaults to an even share of the participant list
    percentage: Optional[float] = None
    # exact mode only
    manual_amount: Optional[float] = None


class AllocationRequest(BaseModel):
    amount: float
    strategy: SplitStrategy = "equal"
    participants: List[SplitParticipant]


class ShareItem(BaseModel):
    member_id: str
    amount: float


class AllocationResult(BaseModel):
    amount: float
    shares: List[ShareItem]
    valid: bool
    computed_sum: float


# This model validates expense creation input
class ExpenseCreateRequest(BaseModel):
    description: str = Field(min_length=1, max_length=100)
    amount: float = Field(gt=0)
    category: Category = Category.other
    expense_date: date
    paid_by: str
    strategy: SplitStrategy = "equal"
    participants: List[SplitParticipant]

    def allocation_request(self) -> AllocationRequest:
        return AllocationRequest(
            amount=self.amount, strategy=self.strategy, participants=self.participants
        )


# This model represents an expense record with its shares
class Expense(BaseModel):
    id: str
    group_id: str
    paid_by: Optional[str] = None
    amount: float
    description: Optional[str] = None
    category: Optional[str] = None
    expense_date: Optional[date] = None
    created_at: Optional[str] = None
    shares: List[ShareItem] = []


class Member(BaseModel):
    member_id: str
    display_name: str
    role: str = "member"


class MemberBalance(BaseModel):
    member_id: str
    display_name: str
    total_paid: float = 0.0
    total_share: float = 0.0
    balance: float


class Settlement(BaseModel):
    from_id: str
    from_name: str
    to_id: str
    to_name: str
    amount: float


class GroupSummary(BaseModel):
    total: float
    by_category: dict[str, float]
    by_payer: dict[str, float]
    by_month: dict[str, float]
