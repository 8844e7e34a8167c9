from roomsplit.balances import aggregate_balances, check_zero_sum, summarize_expenses
from roomsplit.models import Member, MemberBalance


MEMBERS = [
    Member(member_id="a", display_name="Asha"),
    Member(member_id="b", display_name="Ben"),
    Member(member_id="c", display_name="Chen"),
]


def test_aggregate_balances():
    expenses = [
        {"id": "e1", "paid_by": "a", "amount": 90, "category": "Rent", "expense_date": "2026-03-02"},
        {"id": "e2", "paid_by": "b", "amount": "30.00", "category": "Food", "expense_date": "2026-04-10"},
    ]
    shares = [
        {"expense_id": "e1", "user_id": "a", "amount": 30},
        {"expense_id": "e1", "user_id": "b", "amount": 30},
        {"expense_id": "e1", "user_id": "c", "amount": 30},
        {"expense_id": "e2", "user_id": "b", "amount": 15},
        {"expense_id": "e2", "user_id": "c", "amount": 15},
        # belongs to another group
        {"expense_id": "x9", "user_id": "a", "amount": 500},
    ]
    balances = aggregate_balances(MEMBERS, expenses, shares)

    assert [(b.member_id, b.total_paid, b.total_share, b.balance) for b in balances] == [
        ("a", 90.0, 30.0, 60.0),
        ("b", 30.0, 45.0, -15.0),
        ("c", 0.0, 45.0, -45.0),
    ]
    assert balances[2].display_name == "Chen"
    assert check_zero_sum(balances)


def test_former_member_still_counted():
    expenses = [{"id": "e1", "paid_by": "gone", "amount": 20}]
    shares = [
        {"expense_id": "e1", "user_id": "a", "amount": 10},
        {"expense_id": "e1", "user_id": "gone", "amount": 10},
    ]
    balances = aggregate_balances(MEMBERS[:1], expenses, shares)
    assert [(b.member_id, b.display_name, b.balance) for b in balances] == [
        ("a", "Asha", -10.0),
        ("gone", "gone", 10.0),
    ]


def test_members_without_activity_have_zero_balance():
    balances = aggregate_balances(MEMBERS, [], [])
    assert all(b.balance == 0 for b in balances)
    assert len(balances) == 3


def test_check_zero_sum_flags_drift(caplog):
    balances = [
        MemberBalance(member_id="a", display_name="a", balance=10),
        MemberBalance(member_id="b", display_name="b", balance=-9),
    ]
    assert not check_zero_sum(balances)
    assert "drift" in caplog.text


def test_summarize_expenses():
    expenses = [
        {"id": "e1", "paid_by": "a", "amount": 90, "category": "Rent", "expense_date": "2026-03-02"},
        {"id": "e2", "paid_by": "b", "amount": 30.5, "category": "Food", "expense_date": "2026-04-10"},
        {"id": "e3", "paid_by": "a", "amount": 9.5, "category": None, "expense_date": "2026-04-11"},
    ]
    summary = summarize_expenses(expenses, MEMBERS)
    assert summary["total"] == 130.0
    assert summary["by_category"] == {"Rent": 90.0, "Food": 30.5, "Other": 9.5}
    assert summary["by_payer"] == {"Asha": 99.5, "Ben": 30.5}
    assert summary["by_month"] == {"2026-03": 90.0, "2026-04": 40.0}
