"""Read-only data gathering for the insight engine"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Protocol

from spendwise.domain.exceptions import InvalidDateRangeError
from spendwise.domain.models import Category, DateWindow, Transaction, UserEngagement
from spendwise.utils.date_utils import month_bounds


class TransactionReader(Protocol):
    def list_transactions(
        self, user_id: str, start: date, end: date, category_id: Optional[str] = None
    ) -> List[Transaction]: ...

    def sum_amounts(
        self, user_id: str, start: date, end: date, category_id: Optional[str] = None
    ) -> Decimal: ...


class CategoryReader(Protocol):
    def list_budgeted_categories(self, user_id: str) -> List[Category]: ...


class ProfileReader(Protocol):
    def get_engagement_streak(self, user_id: str) -> UserEngagement: ...


@dataclass(frozen=True)
class InsightReaders:
    """Store collaborators the engine reads from"""

    transactions: TransactionReader
    categories: CategoryReader
    profiles: ProfileReader


@dataclass(frozen=True)
class InsightSnapshot:
    """Everything the evaluators and aggregator need, fetched once per request"""

    window: DateWindow
    now: datetime
    transactions: List[Transaction]
    categories: List[Category]
    engagement: UserEngagement
    previous_period_total: Decimal
    month_spend: Dict[str, Decimal]  # category_id -> spend in the calendar month of ``now``

    @property
    def current_period_total(self) -> Decimal:
        return sum((t.amount for t in self.transactions), Decimal("0"))

    def window_spend(self, category_id: str) -> Decimal:
        return sum(
            (t.amount for t in self.transactions if t.category_id == category_id),
            Decimal("0"),
        )


def validate_window(start: Optional[date], end: Optional[date], today: date) -> None:
    """
    Caller-side check for requested bounds; the engine itself does not re-validate.

    Raises:
        InvalidDateRangeError: If the window would end before it starts
    """
    if start is not None and start > (end or today):
        raise InvalidDateRangeError(f"Analysis window {start} - {end or today} ends before it starts")


def resolve_window(
    start: Optional[date],
    end: Optional[date],
    now: datetime,
    default_days: int = 30,
) -> DateWindow:
    """
    Resolve the analysis window.

    Missing bounds fall back to the trailing ``default_days`` ending today.
    Explicit bounds are trusted: callers validate ordering before invoking the engine.
    """
    if end is None:
        end = now.date()
    if start is None:
        start = end - timedelta(days=default_days)
    return DateWindow(start=start, end=end)


def gather_snapshot(
    readers: InsightReaders,
    user_id: str,
    window: DateWindow,
    now: datetime,
) -> InsightSnapshot:
    """
    Fetch the window's data for one user.

    Store errors propagate unchanged; there are no retries and no partial results.
    """
    engagement = readers.profiles.get_engagement_streak(user_id)
    transactions = readers.transactions.list_transactions(user_id, window.start, window.end)
    categories = [c for c in readers.categories.list_budgeted_categories(user_id) if c.is_budget_tracked]

    previous = window.previous()
    previous_total = readers.transactions.sum_amounts(user_id, previous.start, previous.end)

    # Budget nudges always look at the calendar month, independent of the window
    month_start, month_end = month_bounds(now)
    month_spend = {
        c.category_id: readers.transactions.sum_amounts(
            user_id, month_start, month_end, category_id=c.category_id
        )
        for c in categories
    }

    return InsightSnapshot(
        window=window,
        now=now,
        transactions=transactions,
        categories=categories,
        engagement=engagement,
        previous_period_total=previous_total,
        month_spend=month_spend,
    )
