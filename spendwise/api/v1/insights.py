"""GET /v1/insights/* - Spending nudges, analysis, tips and budget health"""

import time
import logging
from datetime import date, datetime
from typing import Callable, List, Optional, TypeVar
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.exc import SQLAlchemyError

from spendwise.api.v1.schemas import (
    BudgetHealthDetails,
    BudgetHealthResponse,
    CategoryAlertSchema,
    DismissNudgeRequest,
    DismissNudgeResponse,
    FinancialTipsResponse,
    InsightBundleSchema,
    NudgeSchema,
    NudgesResponse,
    PeriodSchema,
    RecommendationSchema,
    SpendingAnalysisResponse,
    SpendingPatternsSchema,
    StreakInfoSchema,
    TipSchema,
)
from spendwise.api.dependencies import get_now, get_readers, get_request_id
from spendwise.config import settings
from spendwise.domain.engine import (
    build_spending_analysis,
    evaluate_budget_health,
    generate_insights,
    select_financial_tips,
)
from spendwise.domain.exceptions import InvalidDateRangeError, UserNotFoundError
from spendwise.domain.gatherer import InsightReaders, validate_window
from spendwise.domain.models import (
    CategoryAlert,
    DateWindow,
    Nudge,
    SpendingPatterns,
    StreakInfo,
)
from spendwise.infrastructure.observability.metrics import (
    insight_duration_histogram,
    insight_request_counter,
    record_nudges,
    store_failures_counter,
)
from spendwise.infrastructure.observability.logging import log_insights_generated

router = APIRouter()

T = TypeVar("T")


def _period(window: DateWindow) -> PeriodSchema:
    return PeriodSchema(start=window.start, end=window.end)


def _nudge(nudge: Nudge) -> NudgeSchema:
    return NudgeSchema(
        id=nudge.nudge_id,
        kind=nudge.kind.value,
        title=nudge.title,
        message=nudge.message,
        priority=nudge.priority.value,
        actionable=nudge.actionable,
        metadata=nudge.metadata_dict(),
        created_at=nudge.created_at,
    )


def _patterns(patterns: SpendingPatterns) -> SpendingPatternsSchema:
    return SpendingPatternsSchema(
        trend=patterns.trend,
        is_increasing=patterns.is_increasing,
        change_percentage=patterns.change_percentage,
        current_period_total=patterns.current_period_total,
        previous_period_total=patterns.previous_period_total,
    )


def _alerts(alerts: List[CategoryAlert]) -> List[CategoryAlertSchema]:
    return [
        CategoryAlertSchema(
            category_id=a.category_id,
            name=a.name,
            spent=a.spent,
            budget=a.budget,
            percentage=a.percentage,
            over_budget=a.over_budget,
        )
        for a in alerts
    ]


def _streak(info: StreakInfo) -> StreakInfoSchema:
    return StreakInfoSchema(current=info.current, longest=info.longest, last_active_date=info.last_active_date)


def _run_engine(endpoint: str, request_id: str, user_id: str, call: Callable[[], T]) -> T:
    """
    Invoke the engine and map its failures to HTTP errors.

    Store errors -> 503, unknown user -> 404, anything else -> 500.
    """
    try:
        with insight_duration_histogram.time():
            return call()

    except UserNotFoundError as e:
        insight_request_counter.labels(endpoint=endpoint, outcome="not_found").inc()
        logging.warning(f"User not found: {e}", extra={"request_id": request_id, "user_id": user_id})
        raise HTTPException(status_code=404, detail="User not found")

    except SQLAlchemyError as e:
        insight_request_counter.labels(endpoint=endpoint, outcome="store_error").inc()
        store_failures_counter.inc()
        logging.error(f"Store error: {e}", extra={"request_id": request_id, "user_id": user_id})
        raise HTTPException(status_code=503, detail="Data store unavailable")

    except Exception as e:
        insight_request_counter.labels(endpoint=endpoint, outcome="error").inc()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id, "user_id": user_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/insights/nudges", response_model=NudgesResponse)
def get_nudges(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    start: Optional[date] = Query(None, description="First day of the analysis window"),
    end: Optional[date] = Query(None, description="Last day of the analysis window"),
    readers: InsightReaders = Depends(get_readers),
    now: datetime = Depends(get_now),
):
    """
    Generate prioritized nudges and descriptive insights for a user.

    Flow:
    1. Validate the requested window (defaults to the trailing 30 days)
    2. Gather transactions, budgets and streak from the store
    3. Run every rule and keep the top 5 nudges
    4. Return nudges, insight bundle and the resolved period
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        validate_window(start, end, now.date())
    except InvalidDateRangeError as e:
        logging.warning(f"Invalid window: {e}", extra={"request_id": request_id, "user_id": user_id})
        raise HTTPException(status_code=422, detail=str(e))

    result = _run_engine(
        "nudges",
        request_id,
        user_id,
        lambda: generate_insights(
            readers,
            user_id,
            start,
            end,
            now=now,
            max_nudges=settings.max_nudges,
            default_window_days=settings.default_window_days,
        ),
    )

    duration_ms = (time.time() - start_time) * 1000
    record_nudges("nudges", result.nudges)
    log_insights_generated(request_id, user_id, "nudges", result.nudges, duration_ms)

    return NudgesResponse(
        nudges=[_nudge(n) for n in result.nudges],
        insights=InsightBundleSchema(
            spending_patterns=_patterns(result.insights.spending_patterns),
            category_alerts=_alerts(result.insights.category_alerts),
            streak_info=_streak(result.insights.streak_info),
            period=_period(result.insights.period),
        ),
        period=_period(result.period),
    )


@router.get("/insights/spending-analysis", response_model=SpendingAnalysisResponse)
def get_spending_analysis(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    period: int = Query(30, ge=1, le=366, description="Trailing window length in days"),
    readers: InsightReaders = Depends(get_readers),
    now: datetime = Depends(get_now),
):
    """Spending trend, category breakdown and recommendations over a trailing window"""
    start_time = time.time()
    request_id = get_request_id(request)

    analysis = _run_engine(
        "spending_analysis",
        request_id,
        user_id,
        lambda: build_spending_analysis(readers, user_id, period, now=now, max_nudges=settings.max_nudges),
    )

    duration_ms = (time.time() - start_time) * 1000
    record_nudges("spending_analysis", analysis.recommendations)
    log_insights_generated(request_id, user_id, "spending_analysis", analysis.recommendations, duration_ms)

    return SpendingAnalysisResponse(
        spending_patterns=_patterns(analysis.spending_patterns),
        category_breakdown=_alerts(analysis.category_breakdown),
        recommendations=[
            RecommendationSchema(
                kind=n.kind.value,
                title=n.title,
                message=n.message,
                priority=n.priority.value,
                actionable=n.actionable,
            )
            for n in analysis.recommendations
        ],
        streak_info=_streak(analysis.streak_info),
        period=_period(analysis.period),
    )


@router.get("/insights/financial-tips", response_model=FinancialTipsResponse)
def get_financial_tips(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    category: Optional[str] = Query(None, description="Only tips whose category name contains this text"),
    readers: InsightReaders = Depends(get_readers),
    now: datetime = Depends(get_now),
):
    """Actionable nudges from the trailing 30 days, optionally narrowed to one category"""
    start_time = time.time()
    request_id = get_request_id(request)

    result = _run_engine(
        "financial_tips",
        request_id,
        user_id,
        lambda: generate_insights(
            readers,
            user_id,
            now=now,
            max_nudges=settings.max_nudges,
            default_window_days=settings.default_window_days,
        ),
    )
    tips = select_financial_tips(result, category)

    duration_ms = (time.time() - start_time) * 1000
    record_nudges("financial_tips", tips.tips)
    log_insights_generated(request_id, user_id, "financial_tips", tips.tips, duration_ms)

    return FinancialTipsResponse(
        tips=[
            TipSchema(
                id=tip.nudge_id,
                kind=tip.kind.value,
                title=tip.title,
                description=tip.message,
                priority=tip.priority.value,
                category=tip.category_name or "General",
                metadata=tip.metadata_dict(),
            )
            for tip in tips.tips
        ],
        total_tips=tips.total_tips,
        high_priority_count=tips.high_priority_count,
    )


@router.get("/insights/budget-health", response_model=BudgetHealthResponse)
def get_budget_health(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    readers: InsightReaders = Depends(get_readers),
    now: datetime = Depends(get_now),
):
    """Grade this month's spending against every budgeted category"""
    request_id = get_request_id(request)

    health = _run_engine(
        "budget_health",
        request_id,
        user_id,
        lambda: evaluate_budget_health(readers, user_id, now=now),
    )
    insight_request_counter.labels(endpoint="budget_health", outcome="ok").inc()

    return BudgetHealthResponse(
        score=health.score,
        grade=health.grade,
        message=health.message,
        details=BudgetHealthDetails(
            total_categories=health.total_categories,
            on_track_categories=health.on_track_categories,
            warning_categories=health.warning_categories,
            over_budget_categories=health.over_budget_categories,
        ),
        period=_period(health.period),
        month=health.month,
    )


@router.post("/insights/dismiss-nudge", response_model=DismissNudgeResponse)
def dismiss_nudge(request_body: DismissNudgeRequest, request: Request):
    """
    Acknowledge a dismissed nudge.

    Nudges are regenerated on every request and never stored, so there is
    nothing to update; the dismissal is logged for analysis.
    """
    logging.info(
        "Nudge dismissed",
        extra={
            "request_id": get_request_id(request),
            "user_id": request_body.user_id,
            "nudge_id": request_body.nudge_id,
        },
    )
    return DismissNudgeResponse(nudge_id=request_body.nudge_id, dismissed=True)
