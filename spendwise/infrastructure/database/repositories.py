"""Read-only data access for the insight engine"""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from spendwise.infrastructure.database.models import UserAccount, CategoryRecord, ExpenseRecord
from spendwise.domain.gatherer import InsightReaders
from spendwise.domain.models import Category, Transaction, UserEngagement
from spendwise.domain.exceptions import UserNotFoundError


def _to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value)).quantize(Decimal("0.01"))


class ExpenseRepository:
    """Repository for recorded expenses"""

    def __init__(self, db: Session):
        self.db = db

    def _scoped(self, query, user_id: str, start: date, end: date, category_id: Optional[str]):
        query = query.filter(
            ExpenseRecord.user_id == user_id,
            ExpenseRecord.is_active.is_(True),
            ExpenseRecord.occurred_on >= start,
            ExpenseRecord.occurred_on <= end,
        )
        if category_id is not None:
            query = query.filter(ExpenseRecord.category_id == category_id)
        return query

    def list_transactions(
        self,
        user_id: str,
        start: date,
        end: date,
        category_id: Optional[str] = None,
    ) -> List[Transaction]:
        """Expenses dated within [start, end], with their category's name and color"""
        rows = (
            self._scoped(
                self.db.query(ExpenseRecord, CategoryRecord).join(
                    CategoryRecord, ExpenseRecord.category_id == CategoryRecord.id
                ),
                user_id,
                start,
                end,
                category_id,
            )
            .order_by(ExpenseRecord.occurred_on.asc(), ExpenseRecord.created_at.asc())
            .all()
        )

        return [
            Transaction(
                transaction_id=expense.id,
                amount=_to_decimal(expense.amount),
                occurred_on=expense.occurred_on,
                category_id=category.id,
                category_name=category.name,
                category_color=category.color,
                payment_method=expense.payment_method,
            )
            for expense, category in rows
        ]

    def sum_amounts(
        self,
        user_id: str,
        start: date,
        end: date,
        category_id: Optional[str] = None,
    ) -> Decimal:
        """Total spend within [start, end]; zero when nothing matches"""
        total = self._scoped(
            self.db.query(func.sum(ExpenseRecord.amount)),
            user_id,
            start,
            end,
            category_id,
        ).scalar()
        return _to_decimal(total)


class CategoryRepository:
    """Repository for spending categories"""

    def __init__(self, db: Session):
        self.db = db

    def list_budgeted_categories(self, user_id: str) -> List[Category]:
        """Active categories with a positive monthly budget"""
        rows = (
            self.db.query(CategoryRecord)
            .filter(
                CategoryRecord.user_id == user_id,
                CategoryRecord.is_active.is_(True),
                CategoryRecord.monthly_budget > 0,
            )
            .order_by(CategoryRecord.created_at.asc(), CategoryRecord.name.asc())
            .all()
        )
        return [
            Category(
                category_id=row.id,
                name=row.name,
                color=row.color,
                monthly_budget=_to_decimal(row.monthly_budget),
            )
            for row in rows
        ]


class UserRepository:
    """Repository for user profiles"""

    def __init__(self, db: Session):
        self.db = db

    def get_engagement_streak(self, user_id: str) -> UserEngagement:
        """
        Fetch the user's streak snapshot.

        Raises:
            UserNotFoundError: If no user has this identifier
        """
        user = self.db.query(UserAccount).filter(UserAccount.id == user_id).first()
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found")

        return UserEngagement(
            current=user.streak_current,
            longest=user.streak_longest,
            last_active_date=user.last_active_date,
        )


def build_readers(db: Session) -> InsightReaders:
    """Wire the SQL repositories into the engine's reader bundle"""
    return InsightReaders(
        transactions=ExpenseRepository(db),
        categories=CategoryRepository(db),
        profiles=UserRepository(db),
    )
