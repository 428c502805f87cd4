"""
Pydantic schemas for the feedback service API.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    # Any JSON value; anything but the exact password string is rejected.
    password: Any = None


class LoginResponse(BaseModel):
    success: bool = True
    token: str


class SuccessResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    success: bool = False
    message: str


class SubmitFeedbackResponse(BaseModel):
    success: bool = True
    id: str


class FeedbackListResponse(BaseModel):
    success: bool = True
    feedback: list[dict[str, Any]]


class FeaturesResponse(BaseModel):
    success: bool = True
    features: dict[str, Any]


class UpdateFeaturesRequest(BaseModel):
    features: Optional[dict[str, Any]]


class ChangePasswordRequest(BaseModel):
    newPassword: str


class TimelinePoint(BaseModel):
    date: str
    count: int


class FeedbackStats(BaseModel):
    total: int
    average_rating: Optional[float] = None
    contact_requests: int
    subscribers: int
    rating_distribution: dict[str, int]
    category_counts: dict[str, int]
    timeline: list[TimelinePoint] = Field(default_factory=list)


class FeedbackStatsResponse(BaseModel):
    success: bool = True
    stats: FeedbackStats
