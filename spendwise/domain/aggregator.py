"""Descriptive statistics shown alongside nudges"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List

from spendwise.domain.gatherer import InsightSnapshot
from spendwise.domain.models import (
    BudgetHealth,
    Category,
    CategoryAlert,
    DateWindow,
    InsightBundle,
    SpendingPatterns,
    StreakInfo,
)
from spendwise.utils.date_utils import month_bounds
from spendwise.utils.rounding import round_money, round_percentage, round_whole

# Looser than the trend nudge thresholds; these only label the trend
TREND_LABEL_PERCENT = 5

ALERT_PERCENT = 80
OVER_BUDGET_PERCENT = 100


def analyze_spending_patterns(snapshot: InsightSnapshot) -> SpendingPatterns:
    current_total = snapshot.current_period_total
    previous_total = snapshot.previous_period_total

    trend = "stable"
    change = Decimal("0")

    if previous_total > 0:
        change = (current_total - previous_total) / previous_total * 100
        if change > TREND_LABEL_PERCENT:
            trend = "up"
        elif change < -TREND_LABEL_PERCENT:
            trend = "down"

    return SpendingPatterns(
        trend=trend,
        change_percentage=round_percentage(change),
        current_period_total=round_money(current_total),
        previous_period_total=round_money(previous_total),
    )


def analyze_category_spending(snapshot: InsightSnapshot) -> List[CategoryAlert]:
    """Budget-tracked categories at or above 80% of budget over the analysis window"""
    alerts = []

    for category in snapshot.categories:
        spent = snapshot.window_spend(category.category_id)
        percentage = spent / category.monthly_budget * 100

        if percentage < ALERT_PERCENT:
            continue

        alerts.append(
            CategoryAlert(
                category_id=category.category_id,
                name=category.name,
                spent=round_money(spent),
                budget=round_money(category.monthly_budget),
                percentage=round_percentage(percentage),
                over_budget=percentage >= OVER_BUDGET_PERCENT,
            )
        )

    return alerts


def build_insight_bundle(snapshot: InsightSnapshot) -> InsightBundle:
    engagement = snapshot.engagement
    return InsightBundle(
        spending_patterns=analyze_spending_patterns(snapshot),
        category_alerts=analyze_category_spending(snapshot),
        streak_info=StreakInfo(
            current=engagement.current,
            longest=engagement.longest,
            last_active_date=engagement.last_active_date,
        ),
        period=snapshot.window,
    )


def _grade(score: int) -> tuple[str, str]:
    """
    Map an average category score to a letter grade.

    Bands:
    - 90+: A+
    - 80-89: A
    - 70-79: B
    - 60-69: C
    - below 60: D
    """
    if score >= 90:
        return "A+", "Excellent budget management! You're on track with your spending goals."
    elif score >= 80:
        return "A", "Great job! Most of your spending is within budget limits."
    elif score >= 70:
        return "B", "Good progress, but watch out for categories approaching limits."
    elif score >= 60:
        return "C", "Some categories need attention. Consider adjusting budgets or reducing spending."
    else:
        return "D", "Budget management needs improvement. Review your spending patterns."


def compute_budget_health(
    categories: List[Category],
    month_spend: Dict[str, Decimal],
    now: datetime,
) -> BudgetHealth:
    """
    Score this month's budget discipline from 0 to 100.

    Each budget-tracked category scores 100 at or under 80% of budget, 60 up to
    100%, and 20 once over. The overall score is the rounded mean.
    """
    month_start, month_end = month_bounds(now)
    period = DateWindow(start=month_start, end=month_end)
    month_label = now.strftime("%B %Y")

    tracked = [c for c in categories if c.is_budget_tracked]
    if not tracked:
        return BudgetHealth(
            score=0,
            grade="N/A",
            message="No budgets set to evaluate health",
            total_categories=0,
            on_track_categories=0,
            warning_categories=0,
            over_budget_categories=0,
            period=period,
            month=month_label,
        )

    total_score = 0
    on_track = warning = over = 0

    for category in tracked:
        spent = month_spend.get(category.category_id, Decimal("0"))
        percentage = spent / category.monthly_budget * 100

        if percentage <= 80:
            total_score += 100
            on_track += 1
        elif percentage <= 100:
            total_score += 60
            warning += 1
        else:
            total_score += 20
            over += 1

    score = round_whole(Decimal(total_score) / len(tracked))
    grade, message = _grade(score)

    return BudgetHealth(
        score=score,
        grade=grade,
        message=message,
        total_categories=len(tracked),
        on_track_categories=on_track,
        warning_categories=warning,
        over_budget_categories=over,
        period=period,
        month=month_label,
    )
