"""Dependency injection for FastAPI endpoints"""

from datetime import datetime, timezone
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from spendwise.domain.gatherer import InsightReaders
from spendwise.infrastructure.database.repositories import build_readers
from spendwise.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_readers(db: Session = Depends(get_db)) -> InsightReaders:
    """Provide store readers bound to the request's session"""
    return build_readers(db)


def get_now() -> datetime:
    """Current instant; overridden in tests to pin the calendar month"""
    return datetime.now(timezone.utc)
