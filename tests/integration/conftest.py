"""Fixtures that seed the test database"""

import pytest
from datetime import date
from decimal import Decimal
from sqlalchemy.orm import Session
from spendwise.infrastructure.database.models import UserAccount, CategoryRecord, ExpenseRecord


@pytest.fixture
def seeded_user(db: Session) -> dict:
    """
    One user with three categories and a month of expenses around 2024-06-20.

    - Food (budget 5000): 5000.01 spent in June -> overage
    - Transport (budget 1000): 850 spent in June -> warning
    - Hobbies (no budget): one large purchase
    - May: 1000 of Food spending in the previous window
    """
    user = UserAccount(
        id="user_1",
        email="asha@example.com",
        name="Asha",
        streak_current=7,
        streak_longest=10,
        last_active_date=date(2024, 6, 19),
    )
    food = CategoryRecord(id="cat_food", user_id=user.id, name="Food", color="#FF6B6B", monthly_budget=Decimal("5000"))
    transport = CategoryRecord(
        id="cat_transport", user_id=user.id, name="Transport", color="#4ECDC4", monthly_budget=Decimal("1000")
    )
    hobbies = CategoryRecord(id="cat_hobbies", user_id=user.id, name="Hobbies", color="#96CEB4", monthly_budget=Decimal("0"))
    archived = CategoryRecord(
        id="cat_old", user_id=user.id, name="Old", color="#000000", monthly_budget=Decimal("10"), is_active=False
    )
    db.add_all([user, food, transport, hobbies, archived])
    db.flush()

    expenses = [
        ExpenseRecord(user_id=user.id, category_id=food.id, amount=Decimal("1000.00"), occurred_on=date(2024, 5, 10)),
        ExpenseRecord(user_id=user.id, category_id=food.id, amount=Decimal("3000.00"), occurred_on=date(2024, 6, 3)),
        ExpenseRecord(user_id=user.id, category_id=food.id, amount=Decimal("2000.01"), occurred_on=date(2024, 6, 4)),
        ExpenseRecord(user_id=user.id, category_id=transport.id, amount=Decimal("850.00"), occurred_on=date(2024, 6, 5)),
        ExpenseRecord(user_id=user.id, category_id=hobbies.id, amount=Decimal("400.00"), occurred_on=date(2024, 6, 6)),
        # Soft-deleted rows are ignored everywhere
        ExpenseRecord(
            user_id=user.id,
            category_id=food.id,
            amount=Decimal("999.00"),
            occurred_on=date(2024, 6, 7),
            is_active=False,
        ),
    ]
    db.add_all(expenses)
    db.commit()

    return {"user_id": user.id, "food_id": food.id, "transport_id": transport.id, "hobbies_id": hobbies.id}
