"""Rule evaluators - each inspects a snapshot and emits zero or more nudges"""

from collections import OrderedDict
from decimal import Decimal
from typing import Callable, Dict, List, Optional

from spendwise.domain.gatherer import InsightSnapshot
from spendwise.domain.models import (
    BudgetOverageMetadata,
    BudgetWarningMetadata,
    Nudge,
    NudgeKind,
    NudgeMetadata,
    Priority,
    SmallPurchasesMetadata,
    SpendingSpikeMetadata,
    SpendingTrendMetadata,
    StreakMetadata,
    Transaction,
    WeekendOverspendMetadata,
)
from spendwise.utils.date_utils import days_until_month_end, is_weekend
from spendwise.utils.rounding import round_money, round_percentage, round_whole

Evaluator = Callable[[InsightSnapshot], List[Nudge]]

# Weekend average must exceed weekday average by this factor
WEEKEND_RATIO_THRESHOLD = Decimal("1.8")
WEEKEND_RATIO_HIGH = Decimal("2.5")

BUDGET_WARNING_PERCENT = 80
BUDGET_OVERAGE_PERCENT = 100

# Outer gate on |change|, then separate up/down thresholds
TREND_SIGNIFICANT_PERCENT = 15
TREND_UP_PERCENT = 15
TREND_DOWN_PERCENT = -10

STREAK_MILESTONE_DAYS = 7

SMALL_PURCHASE_LIMIT = Decimal("200")
SMALL_PURCHASE_MIN_COUNT = 10
SPIKE_MIN_TRANSACTIONS = 3
SPIKE_MEDIAN_MULTIPLIER = 5


def _make_nudge(
    snapshot: InsightSnapshot,
    kind: NudgeKind,
    title: str,
    message: str,
    priority: Priority,
    actionable: bool,
    metadata: NudgeMetadata,
    key: Optional[str] = None,
) -> Nudge:
    nudge_id = f"{kind.value}_{key}" if key else kind.value
    return Nudge(
        nudge_id=nudge_id,
        kind=kind,
        title=title,
        message=message,
        priority=priority,
        actionable=actionable,
        metadata=metadata,
        created_at=snapshot.now,
    )


def _mean(amounts: List[Decimal]) -> Decimal:
    return sum(amounts, Decimal("0")) / len(amounts)


def detect_weekend_overspend(snapshot: InsightSnapshot) -> List[Nudge]:
    """Flag weekends whose average purchase dwarfs the weekday average"""
    weekend = [t.amount for t in snapshot.transactions if is_weekend(t.occurred_on)]
    weekday = [t.amount for t in snapshot.transactions if not is_weekend(t.occurred_on)]

    if not weekend or not weekday:
        return []

    weekend_avg = _mean(weekend)
    weekday_avg = _mean(weekday)
    ratio = weekend_avg / weekday_avg

    if ratio <= WEEKEND_RATIO_THRESHOLD:
        return []

    return [
        _make_nudge(
            snapshot,
            NudgeKind.WEEKEND_OVERSPEND,
            title="Weekend Spending Alert",
            message=(
                f"Your weekend spending is {ratio:.1f}× weekday average. Try a low-cost "
                f"activity or set a ₹{round_whole(weekend_avg)} limit this weekend."
            ),
            priority=Priority.HIGH if ratio > WEEKEND_RATIO_HIGH else Priority.MEDIUM,
            actionable=True,
            metadata=WeekendOverspendMetadata(
                ratio=round_money(ratio),
                weekend_avg=round_money(weekend_avg),
                weekday_avg=round_money(weekday_avg),
            ),
        )
    ]


def detect_budget_overspend(snapshot: InsightSnapshot) -> List[Nudge]:
    """
    Compare each budget-tracked category's calendar-month spend with its budget.

    Bands are exclusive: >= 100% is an overage, [80%, 100%) a warning, below 80% nothing.
    """
    nudges = []

    for category in snapshot.categories:
        budget = category.monthly_budget
        spent = snapshot.month_spend.get(category.category_id, Decimal("0"))
        percentage = spent / budget * 100

        if percentage >= BUDGET_OVERAGE_PERCENT:
            nudges.append(
                _make_nudge(
                    snapshot,
                    NudgeKind.BUDGET_OVERAGE,
                    title=f"{category.name} Budget Exceeded",
                    message=(
                        f"You've exceeded your {category.name} budget by "
                        f"{round_whole(percentage - 100)}%. Pause non-essentials & reallocate funds."
                    ),
                    priority=Priority.HIGH,
                    actionable=True,
                    metadata=BudgetOverageMetadata(
                        category_id=category.category_id,
                        category_name=category.name,
                        budget=round_money(budget),
                        spent=round_money(spent),
                        percentage=round_percentage(percentage),
                    ),
                    key=category.category_id,
                )
            )
        elif percentage >= BUDGET_WARNING_PERCENT:
            remaining_days = days_until_month_end(snapshot.now)
            nudges.append(
                _make_nudge(
                    snapshot,
                    NudgeKind.BUDGET_WARNING,
                    title=f"{category.name} Budget Warning",
                    message=(
                        f"You're approaching your {category.name} budget limit. "
                        f"₹{round_whole(budget - spent)} remaining for {remaining_days} days."
                    ),
                    priority=Priority.MEDIUM,
                    actionable=True,
                    metadata=BudgetWarningMetadata(
                        category_id=category.category_id,
                        category_name=category.name,
                        budget=round_money(budget),
                        spent=round_money(spent),
                        percentage=round_percentage(percentage),
                        remaining_days=remaining_days,
                    ),
                    key=category.category_id,
                )
            )

    return nudges


def detect_spending_trend(snapshot: InsightSnapshot) -> List[Nudge]:
    """
    Compare the window's total with the preceding window of equal length.

    Changes under 15% in magnitude are ignored; of the rest, rises above 15% and
    drops below -10% fire. A change of exactly +15% fires nothing.
    """
    current_total = snapshot.current_period_total
    previous_total = snapshot.previous_period_total

    if previous_total == 0:
        return []

    change = (current_total - previous_total) / previous_total * 100

    if abs(change) < TREND_SIGNIFICANT_PERCENT:
        return []

    metadata = SpendingTrendMetadata(
        current_period_total=round_money(current_total),
        previous_period_total=round_money(previous_total),
        change_percentage=round_percentage(change),
    )

    if change > TREND_UP_PERCENT:
        return [
            _make_nudge(
                snapshot,
                NudgeKind.SPENDING_TREND_UP,
                title="Spending Increasing",
                message=(
                    f"Your spending increased {round_whole(change)}% this period. "
                    "Review your largest expenses and consider cutting back."
                ),
                priority=Priority.MEDIUM,
                actionable=True,
                metadata=metadata,
            )
        ]
    if change < TREND_DOWN_PERCENT:
        return [
            _make_nudge(
                snapshot,
                NudgeKind.SPENDING_TREND_DOWN,
                title="Great Job!",
                message=(
                    f"Great job! You reduced spending by {round_whole(abs(change))}% this period. "
                    "Keep up the good work!"
                ),
                priority=Priority.LOW,
                actionable=False,
                metadata=metadata,
            )
        ]
    return []


def detect_streak_milestones(snapshot: InsightSnapshot) -> List[Nudge]:
    """Celebrate the 7-day mark and new personal records; both may fire together"""
    current = snapshot.engagement.current
    longest = snapshot.engagement.longest
    nudges = []

    if current == STREAK_MILESTONE_DAYS:
        nudges.append(
            _make_nudge(
                snapshot,
                NudgeKind.STREAK_MILESTONE,
                title="🔥 7-Day Streak!",
                message="7-day streak! You're building a great habit of tracking expenses consistently.",
                priority=Priority.LOW,
                actionable=False,
                metadata=StreakMetadata(streak_days=current),
            )
        )

    if current == longest and current > 0:
        nudges.append(
            _make_nudge(
                snapshot,
                NudgeKind.STREAK_PERSONAL_BEST,
                title="🎉 New Personal Record!",
                message=f"New personal record: {current} days! Consistency is key to financial success.",
                priority=Priority.LOW,
                actionable=False,
                metadata=StreakMetadata(streak_days=current, personal_best=True),
            )
        )

    return nudges


def _group_by_category(transactions: List[Transaction]) -> Dict[str, List[Transaction]]:
    groups: Dict[str, List[Transaction]] = OrderedDict()
    for txn in transactions:
        groups.setdefault(txn.category_id, []).append(txn)
    return groups


def detect_category_patterns(snapshot: InsightSnapshot) -> List[Nudge]:
    """
    Per-category habits: many small purchases, or one purchase far above the rest.

    The spike "median" is the element at index n // 2 of the amounts sorted
    descending, which for even n is the lower of the two middle values.
    """
    nudges = []

    for category_id, txns in _group_by_category(snapshot.transactions).items():
        category_name = txns[0].category_name

        small = [t.amount for t in txns if t.amount < SMALL_PURCHASE_LIMIT]
        if len(small) >= SMALL_PURCHASE_MIN_COUNT:
            total_small = sum(small, Decimal("0"))
            nudges.append(
                _make_nudge(
                    snapshot,
                    NudgeKind.FREQUENT_SMALL_PURCHASES,
                    title=f"{category_name} Small Purchases",
                    message=(
                        f"You made {len(small)} small purchases in {category_name} totaling "
                        f"₹{round_whole(total_small)}. Consider bundling or setting a weekly limit."
                    ),
                    priority=Priority.MEDIUM,
                    actionable=True,
                    metadata=SmallPurchasesMetadata(
                        category_id=category_id,
                        category_name=category_name,
                        count=len(small),
                        total_amount=round_money(total_small),
                    ),
                    key=category_id,
                )
            )

        amounts = sorted((t.amount for t in txns), reverse=True)
        if len(amounts) >= SPIKE_MIN_TRANSACTIONS:
            median = amounts[len(amounts) // 2]
            largest = amounts[0]
            if largest > median * SPIKE_MEDIAN_MULTIPLIER:
                nudges.append(
                    _make_nudge(
                        snapshot,
                        NudgeKind.SPENDING_SPIKE,
                        title=f"{category_name} Spending Spike",
                        message=(
                            f"Unusual spending detected in {category_name}. "
                            "Was this planned, or should you review these expenses?"
                        ),
                        priority=Priority.MEDIUM,
                        actionable=True,
                        metadata=SpendingSpikeMetadata(
                            category_id=category_id,
                            category_name=category_name,
                            largest_expense=round_money(largest),
                            median_expense=round_money(median),
                        ),
                        key=category_id,
                    )
                )

    return nudges


# Every evaluator runs on every request, in this order
EVALUATORS: List[Evaluator] = [
    detect_weekend_overspend,
    detect_budget_overspend,
    detect_spending_trend,
    detect_streak_milestones,
    detect_category_patterns,
]


def run_evaluators(snapshot: InsightSnapshot, evaluators: Optional[List[Evaluator]] = None) -> List[Nudge]:
    """Concatenate every evaluator's output and stamp each nudge with its generation order"""
    nudges: List[Nudge] = []
    for evaluator in evaluators if evaluators is not None else EVALUATORS:
        nudges.extend(evaluator(snapshot))

    for sequence, nudge in enumerate(nudges):
        nudge.sequence = sequence

    return nudges
