"""Insight engine - main entry points tying gathering, rules, ranking and aggregation together"""

from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from spendwise.domain.aggregator import build_insight_bundle, compute_budget_health
from spendwise.domain.gatherer import InsightReaders, gather_snapshot, resolve_window
from spendwise.domain.models import (
    BudgetHealth,
    FinancialTips,
    InsightResult,
    SpendingAnalysis,
)
from spendwise.domain.nudges import Evaluator, run_evaluators
from spendwise.domain.prioritizer import prioritize_nudges
from spendwise.utils.date_utils import month_bounds


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_insights(
    readers: InsightReaders,
    user_id: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
    now: Optional[datetime] = None,
    max_nudges: int = 5,
    default_window_days: int = 30,
    evaluators: Optional[List[Evaluator]] = None,
) -> InsightResult:
    """
    Main entry point: gather a user's data, run every rule and build the insight bundle.

    Flow:
    1. Resolve the analysis window (trailing 30 days by default)
    2. Read transactions, budgeted categories, streak and period totals
    3. Run all evaluators and keep the top ``max_nudges`` by priority
    4. Compute descriptive statistics from the same snapshot

    Store failures propagate to the caller; nothing is returned partially.
    """
    now = now or _utcnow()
    window = resolve_window(start, end, now, default_days=default_window_days)
    snapshot = gather_snapshot(readers, user_id, window, now)

    nudges = prioritize_nudges(run_evaluators(snapshot, evaluators), limit=max_nudges)
    insights = build_insight_bundle(snapshot)

    return InsightResult(nudges=nudges, insights=insights, period=window)


def build_spending_analysis(
    readers: InsightReaders,
    user_id: str,
    period_days: int = 30,
    now: Optional[datetime] = None,
    max_nudges: int = 5,
) -> SpendingAnalysis:
    """Trailing ``period_days`` analysis with nudges reshaped as recommendations"""
    now = now or _utcnow()
    end = now.date()
    start = end - timedelta(days=period_days)

    result = generate_insights(readers, user_id, start, end, now=now, max_nudges=max_nudges)
    return SpendingAnalysis(
        spending_patterns=result.insights.spending_patterns,
        category_breakdown=result.insights.category_alerts,
        recommendations=result.nudges,
        streak_info=result.insights.streak_info,
        period=result.period,
    )


def select_financial_tips(result: InsightResult, category: Optional[str] = None) -> FinancialTips:
    """Actionable nudges, optionally narrowed to categories whose name contains ``category``"""
    tips = [n for n in result.nudges if n.actionable]

    if category:
        needle = category.lower()
        tips = [n for n in tips if n.category_name and needle in n.category_name.lower()]

    return FinancialTips(tips=tips)


def evaluate_budget_health(
    readers: InsightReaders,
    user_id: str,
    now: Optional[datetime] = None,
) -> BudgetHealth:
    """Score the current calendar month's spending against every budget"""
    now = now or _utcnow()
    month_start, month_end = month_bounds(now)

    categories = [c for c in readers.categories.list_budgeted_categories(user_id) if c.is_budget_tracked]
    month_spend = {
        c.category_id: readers.transactions.sum_amounts(
            user_id, month_start, month_end, category_id=c.category_id
        )
        for c in categories
    }

    return compute_budget_health(categories, month_spend, now)
