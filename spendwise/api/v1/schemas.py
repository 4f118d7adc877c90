"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Any, Dict, List, Optional


class PeriodSchema(BaseModel):
    """Resolved analysis window (both bounds inclusive)"""

    start: date
    end: date


class NudgeSchema(BaseModel):
    """Single advisory message"""

    id: str
    kind: str
    title: str
    message: str
    priority: str
    actionable: bool
    metadata: Dict[str, Any]
    created_at: datetime


class SpendingPatternsSchema(BaseModel):
    trend: str
    is_increasing: bool
    change_percentage: float
    current_period_total: float
    previous_period_total: float


class CategoryAlertSchema(BaseModel):
    category_id: str
    name: str
    spent: float
    budget: float
    percentage: float
    over_budget: bool


class StreakInfoSchema(BaseModel):
    current: int
    longest: int
    last_active_date: Optional[date] = None


class InsightBundleSchema(BaseModel):
    spending_patterns: SpendingPatternsSchema
    category_alerts: List[CategoryAlertSchema]
    streak_info: StreakInfoSchema
    period: PeriodSchema


class NudgesResponse(BaseModel):
    """Response for GET /v1/insights/nudges"""

    nudges: List[NudgeSchema]
    insights: InsightBundleSchema
    period: PeriodSchema


class RecommendationSchema(BaseModel):
    kind: str
    title: str
    message: str
    priority: str
    actionable: bool


class SpendingAnalysisResponse(BaseModel):
    """Response for GET /v1/insights/spending-analysis"""

    spending_patterns: SpendingPatternsSchema
    category_breakdown: List[CategoryAlertSchema]
    recommendations: List[RecommendationSchema]
    streak_info: StreakInfoSchema
    period: PeriodSchema


class TipSchema(BaseModel):
    id: str
    kind: str
    title: str
    description: str
    priority: str
    category: str
    actionable: bool = True
    metadata: Dict[str, Any]


class FinancialTipsResponse(BaseModel):
    """Response for GET /v1/insights/financial-tips"""

    tips: List[TipSchema]
    total_tips: int
    high_priority_count: int


class BudgetHealthDetails(BaseModel):
    total_categories: int
    on_track_categories: int
    warning_categories: int
    over_budget_categories: int


class BudgetHealthResponse(BaseModel):
    """Response for GET /v1/insights/budget-health"""

    score: int
    grade: str
    message: str
    details: BudgetHealthDetails
    period: PeriodSchema
    month: str


class DismissNudgeRequest(BaseModel):
    """Request body for POST /v1/insights/dismiss-nudge"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    nudge_id: str = Field(..., min_length=1, description="Identifier of the nudge being dismissed")


class DismissNudgeResponse(BaseModel):
    nudge_id: str
    dismissed: bool
