"""SQLAlchemy ORM models for users, categories and expenses"""

import uuid
from sqlalchemy import Column, String, Boolean, Numeric, DateTime, Date, Integer, ForeignKey, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class UserAccount(Base):
    """Registered user with engagement streak counters"""

    __tablename__ = "app_user"

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(Text, nullable=False, unique=True)
    name = Column(Text, nullable=False)
    streak_current = Column(Integer, nullable=False, default=0)
    streak_longest = Column(Integer, nullable=False, default=0)
    last_active_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    categories = relationship("CategoryRecord", back_populates="user", cascade="all, delete-orphan")


class CategoryRecord(Base):
    """Spending category; a monthly budget of 0 means the category is not budget-tracked"""

    __tablename__ = "category"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    color = Column(String(7), nullable=False, default="#808080")
    monthly_budget = Column(Numeric(12, 2), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    user = relationship("UserAccount", back_populates="categories")
    expenses = relationship("ExpenseRecord", back_populates="category")


class ExpenseRecord(Base):
    """Single recorded expense"""

    __tablename__ = "expense"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(String(36), ForeignKey("category.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    occurred_on = Column(Date, nullable=False, index=True)
    payment_method = Column(Text, nullable=False, default="cash")
    note = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    category = relationship("CategoryRecord", back_populates="expenses")
