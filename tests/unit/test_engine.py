"""Unit tests for insight engine orchestration with in-memory readers"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.exc import OperationalError
from spendwise.domain.engine import (
    build_spending_analysis,
    evaluate_budget_health,
    generate_insights,
    select_financial_tips,
)
from spendwise.domain.exceptions import InvalidDateRangeError, UserNotFoundError
from spendwise.domain.gatherer import InsightReaders, gather_snapshot, resolve_window, validate_window
from spendwise.domain.models import Category, DateWindow, NudgeKind, Priority, Transaction, UserEngagement


class FakeTransactionReader:
    def __init__(self, transactions: List[Transaction]):
        self.transactions = transactions
        self.sum_calls = []

    def _matching(self, start, end, category_id):
        return [
            t for t in self.transactions
            if start <= t.occurred_on <= end and (category_id is None or t.category_id == category_id)
        ]

    def list_transactions(self, user_id, start, end, category_id: Optional[str] = None):
        return sorted(self._matching(start, end, category_id), key=lambda t: t.occurred_on)

    def sum_amounts(self, user_id, start, end, category_id: Optional[str] = None):
        self.sum_calls.append((start, end, category_id))
        return sum((t.amount for t in self._matching(start, end, category_id)), Decimal("0"))


class FakeCategoryReader:
    def __init__(self, categories: List[Category]):
        self.categories = categories

    def list_budgeted_categories(self, user_id):
        return list(self.categories)


class FakeProfileReader:
    def __init__(self, engagement: Optional[UserEngagement]):
        self.engagement = engagement

    def get_engagement_streak(self, user_id):
        if self.engagement is None:
            raise UserNotFoundError(user_id)
        return self.engagement


class FailingTransactionReader(FakeTransactionReader):
    def list_transactions(self, user_id, start, end, category_id=None):
        raise OperationalError("SELECT", {}, Exception("connection refused"))


def _readers(transactions=None, categories=None, engagement=UserEngagement(current=2, longest=5)):
    return InsightReaders(
        transactions=FakeTransactionReader(transactions or []),
        categories=FakeCategoryReader(categories or []),
        profiles=FakeProfileReader(engagement),
    )


def test_resolve_window_defaults_to_trailing_30_days(now):
    window = resolve_window(None, None, now)

    assert window == DateWindow(start=date(2024, 5, 21), end=date(2024, 6, 20))
    assert window.previous() == DateWindow(start=date(2024, 4, 21), end=date(2024, 5, 20))


def test_resolve_window_keeps_explicit_bounds(now):
    window = resolve_window(date(2024, 6, 1), date(2024, 6, 10), now)

    assert window == DateWindow(start=date(2024, 6, 1), end=date(2024, 6, 10))
    assert window.previous() == DateWindow(start=date(2024, 5, 23), end=date(2024, 5, 31))


def test_gather_snapshot_reads_previous_period_and_month(make_txn, now):
    food = Category("food", "Food", "#FF6B6B", Decimal("5000"))
    readers = _readers(
        transactions=[
            make_txn("100.00", date(2024, 5, 1)),  # previous period and no longer this month
            make_txn("40.00", date(2024, 6, 2)),
        ],
        categories=[food, Category("misc", "Misc", "#000000", Decimal("0"))],
    )
    window = DateWindow(start=date(2024, 5, 21), end=date(2024, 6, 20))

    snapshot = gather_snapshot(readers, "user_1", window, now)

    assert snapshot.previous_period_total == Decimal("100.00")
    assert snapshot.current_period_total == Decimal("40.00")
    assert snapshot.month_spend == {"food": Decimal("40.00")}
    assert [c.category_id for c in snapshot.categories] == ["food"]
    assert (date(2024, 6, 1), date(2024, 6, 30), "food") in readers.transactions.sum_calls


def test_generate_insights_budget_overage_scenario(make_txn, now):
    """5000 budget with 5000.01 spent this month yields exactly one overage"""
    food = Category("food", "Food", "#FF6B6B", Decimal("5000"))
    readers = _readers(
        transactions=[make_txn("3000.00", date(2024, 6, 3)), make_txn("2000.01", date(2024, 6, 4))],
        categories=[food],
        engagement=UserEngagement(current=2, longest=5),
    )

    result = generate_insights(readers, "user_1", now=now)

    overages = [n for n in result.nudges if n.kind == NudgeKind.BUDGET_OVERAGE]
    assert len(overages) == 1
    assert overages[0].metadata.percentage == 100.0
    assert "by 0%" in overages[0].message
    assert not [n for n in result.nudges if n.kind == NudgeKind.BUDGET_WARNING]
    assert result.insights.category_alerts[0].over_budget is True


def test_generate_insights_trend_scenario(make_txn, now):
    """Previous 1000, current 1200: one trend-up nudge and an "up" label"""
    readers = _readers(
        transactions=[
            make_txn("1000.00", date(2024, 5, 1)),
            make_txn("1200.00", date(2024, 6, 5)),
        ],
    )

    result = generate_insights(readers, "user_1", now=now)

    assert [n.kind for n in result.nudges] == [NudgeKind.SPENDING_TREND_UP]
    assert result.insights.spending_patterns.trend == "up"
    assert result.period == DateWindow(start=date(2024, 5, 21), end=date(2024, 6, 20))


def test_generate_insights_streak_scenario(now):
    readers = _readers(engagement=UserEngagement(current=7, longest=10))

    result = generate_insights(readers, "user_1", now=now)

    assert [n.kind for n in result.nudges] == [NudgeKind.STREAK_MILESTONE]
    assert result.insights.streak_info.longest == 10


def test_generate_insights_bounds_and_sorts(make_txn, now):
    """Many firing rules still return at most five nudges, high first"""
    categories = [
        Category(f"c{i}", f"Cat {i}", "#000000", Decimal("100")) for i in range(4)
    ]
    transactions = [make_txn("150.00", date(2024, 6, 3), f"c{i}", f"Cat {i}") for i in range(4)]
    transactions += [make_txn("10.00", date(2024, 6, 4), "c0", "Cat 0") for _ in range(10)]
    readers = _readers(
        transactions=transactions,
        categories=categories,
        engagement=UserEngagement(current=7, longest=7),
    )

    result = generate_insights(readers, "user_1", now=now)

    assert len(result.nudges) == 5
    ranks = [n.priority.rank for n in result.nudges]
    assert ranks == sorted(ranks)
    assert result.nudges[0].priority == Priority.HIGH


def test_generate_insights_is_repeatable(make_txn, now):
    readers = _readers(
        transactions=[make_txn("600.00", date(2024, 6, 15)), make_txn("100.00", date(2024, 6, 17))],
        engagement=UserEngagement(current=7, longest=7),
    )

    first = generate_insights(readers, "user_1", now=now)
    second = generate_insights(readers, "user_1", now=now)

    assert [(n.kind, n.metadata) for n in first.nudges] == [(n.kind, n.metadata) for n in second.nudges]


def test_generate_insights_propagates_store_errors(now):
    readers = InsightReaders(
        transactions=FailingTransactionReader([]),
        categories=FakeCategoryReader([]),
        profiles=FakeProfileReader(UserEngagement(current=1, longest=1)),
    )

    with pytest.raises(OperationalError):
        generate_insights(readers, "user_1", now=now)


def test_generate_insights_unknown_user(now):
    with pytest.raises(UserNotFoundError):
        generate_insights(_readers(engagement=None), "ghost", now=now)


def test_spending_analysis_uses_trailing_period(make_txn, now):
    readers = _readers(transactions=[make_txn("50.00", now.date() - timedelta(days=5))])

    analysis = build_spending_analysis(readers, "user_1", period_days=7, now=now)

    assert analysis.period == DateWindow(start=date(2024, 6, 13), end=date(2024, 6, 20))
    assert analysis.spending_patterns.current_period_total == 50.0
    assert analysis.recommendations == []


def test_financial_tips_filters_actionable_and_category(make_txn, now):
    categories = [
        Category("food", "Food", "#FF6B6B", Decimal("100")),
        Category("travel", "Transport", "#4ECDC4", Decimal("100")),
    ]
    readers = _readers(
        transactions=[
            make_txn("150.00", date(2024, 6, 3), "food", "Food"),
            make_txn("90.00", date(2024, 6, 3), "travel", "Transport"),
        ],
        categories=categories,
        engagement=UserEngagement(current=7, longest=7),
    )
    result = generate_insights(readers, "user_1", now=now)

    all_tips = select_financial_tips(result)
    food_tips = select_financial_tips(result, category="fOO")

    assert all_tips.total_tips == 2
    assert all(t.actionable for t in all_tips.tips)
    assert all_tips.high_priority_count == 1
    assert [t.kind for t in food_tips.tips] == [NudgeKind.BUDGET_OVERAGE]


def test_evaluate_budget_health(make_txn, now):
    readers = _readers(
        transactions=[make_txn("90.00", date(2024, 6, 3))],
        categories=[Category("food", "Food", "#FF6B6B", Decimal("100"))],
    )

    health = evaluate_budget_health(readers, "user_1", now=now)

    assert health.score == 60
    assert health.grade == "C"
    assert health.warning_categories == 1


def test_validate_window(now):
    validate_window(date(2024, 6, 1), date(2024, 6, 1), now.date())
    validate_window(None, None, now.date())

    with pytest.raises(InvalidDateRangeError):
        validate_window(date(2024, 6, 10), date(2024, 6, 1), now.date())
    with pytest.raises(InvalidDateRangeError):
        validate_window(date(2024, 7, 1), None, now.date())
