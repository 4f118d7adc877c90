"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, asdict, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class Transaction:
    """Recorded expense, annotated with its category's display fields"""

    transaction_id: str
    amount: Decimal
    occurred_on: date
    category_id: str
    category_name: str
    category_color: str
    payment_method: str


@dataclass(frozen=True)
class Category:
    """Spending category with an optional monthly budget ceiling"""

    category_id: str
    name: str
    color: str
    monthly_budget: Optional[Decimal] = None

    @property
    def is_budget_tracked(self) -> bool:
        budget = self.monthly_budget
        return budget is not None and budget.is_finite() and budget > 0


@dataclass(frozen=True)
class UserEngagement:
    """Snapshot of the user's consecutive-activity streak"""

    current: int
    longest: int
    last_active_date: Optional[date] = None


@dataclass(frozen=True)
class DateWindow:
    """Analysis window; both bounds inclusive"""

    start: date
    end: date

    @property
    def duration_days(self) -> int:
        return (self.end - self.start).days

    def previous(self) -> "DateWindow":
        """Immediately preceding window of the same duration"""
        return DateWindow(
            start=self.start - timedelta(days=self.duration_days),
            end=self.start - timedelta(days=1),
        )


class NudgeKind(str, Enum):
    WEEKEND_OVERSPEND = "weekend_overspend"
    BUDGET_OVERAGE = "budget_overage"
    BUDGET_WARNING = "budget_warning"
    SPENDING_TREND_UP = "spending_trend_up"
    SPENDING_TREND_DOWN = "spending_trend_down"
    STREAK_MILESTONE = "streak_milestone"
    STREAK_PERSONAL_BEST = "streak_personal_best"
    FREQUENT_SMALL_PURCHASES = "frequent_small_purchases"
    SPENDING_SPIKE = "spending_spike"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.HIGH: 1, Priority.MEDIUM: 2, Priority.LOW: 3}


# Kind-specific nudge metadata. Monetary fields are rounded to 2 decimals,
# percentages to 1 decimal.


@dataclass(frozen=True)
class WeekendOverspendMetadata:
    ratio: float
    weekend_avg: float
    weekday_avg: float


@dataclass(frozen=True)
class BudgetOverageMetadata:
    category_id: str
    category_name: str
    budget: float
    spent: float
    percentage: float


@dataclass(frozen=True)
class BudgetWarningMetadata:
    category_id: str
    category_name: str
    budget: float
    spent: float
    percentage: float
    remaining_days: int


@dataclass(frozen=True)
class SpendingTrendMetadata:
    current_period_total: float
    previous_period_total: float
    change_percentage: float


@dataclass(frozen=True)
class StreakMetadata:
    streak_days: int
    personal_best: bool = False


@dataclass(frozen=True)
class SmallPurchasesMetadata:
    category_id: str
    category_name: str
    count: int
    total_amount: float


@dataclass(frozen=True)
class SpendingSpikeMetadata:
    category_id: str
    category_name: str
    largest_expense: float
    median_expense: float


NudgeMetadata = Union[
    WeekendOverspendMetadata,
    BudgetOverageMetadata,
    BudgetWarningMetadata,
    SpendingTrendMetadata,
    StreakMetadata,
    SmallPurchasesMetadata,
    SpendingSpikeMetadata,
]


@dataclass
class Nudge:
    """Advisory message emitted by a rule evaluator"""

    nudge_id: str
    kind: NudgeKind
    title: str
    message: str
    priority: Priority
    actionable: bool
    metadata: NudgeMetadata
    created_at: datetime
    sequence: int = 0  # Generation order within one engine run

    @property
    def category_name(self) -> Optional[str]:
        return getattr(self.metadata, "category_name", None)

    def metadata_dict(self) -> Dict[str, Any]:
        return asdict(self.metadata)


@dataclass
class SpendingPatterns:
    trend: str  # "up" | "down" | "stable"
    change_percentage: float
    current_period_total: float
    previous_period_total: float

    @property
    def is_increasing(self) -> bool:
        return self.trend == "up"


@dataclass
class CategoryAlert:
    category_id: str
    name: str
    spent: float
    budget: float
    percentage: float
    over_budget: bool


@dataclass
class StreakInfo:
    current: int
    longest: int
    last_active_date: Optional[date]


@dataclass
class InsightBundle:
    spending_patterns: SpendingPatterns
    category_alerts: List[CategoryAlert]
    streak_info: StreakInfo
    period: DateWindow


@dataclass
class InsightResult:
    """Output of one engine run"""

    nudges: List[Nudge]
    insights: InsightBundle
    period: DateWindow


@dataclass
class BudgetHealth:
    score: int
    grade: str
    message: str
    total_categories: int
    on_track_categories: int
    warning_categories: int
    over_budget_categories: int
    period: DateWindow
    month: str


@dataclass
class SpendingAnalysis:
    spending_patterns: SpendingPatterns
    category_breakdown: List[CategoryAlert]
    recommendations: List[Nudge]
    streak_info: StreakInfo
    period: DateWindow


@dataclass
class FinancialTips:
    tips: List[Nudge] = field(default_factory=list)

    @property
    def total_tips(self) -> int:
        return len(self.tips)

    @property
    def high_priority_count(self) -> int:
        return sum(1 for tip in self.tips if tip.priority == Priority.HIGH)
