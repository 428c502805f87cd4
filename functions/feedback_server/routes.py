"""
HTTP routes for the feedback service.

Every handler wraps its body and turns unexpected failures into a 500 with
a per-operation message. Admin routes are gated by ``require_admin`` before
the handler runs.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.responses import Response
from pydantic import BaseModel, ValidationError

from feedback_server.auth import AdminAuth
from feedback_server.dependencies import (
    admin_json_body,
    get_admin_auth,
    get_feature_flag_store,
    get_feedback_repository,
    require_admin,
    require_public_key,
)
from feedback_server.errors import InvalidRequest, Unauthorized
from feedback_server.features import FeatureFlagStore, effective_flags
from feedback_server.feedback import FeedbackRepository
from feedback_server import reports
from feedback_server.schemas import (
    ChangePasswordRequest,
    ErrorResponse,
    FeaturesResponse,
    FeedbackListResponse,
    FeedbackStatsResponse,
    LoginRequest,
    LoginResponse,
    SubmitFeedbackResponse,
    SuccessResponse,
    UpdateFeaturesRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    dependencies=[Depends(require_public_key)],
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)


def _failure(message: str) -> HTTPException:
    return HTTPException(status_code=500, detail=message)


def _parse(model: type[BaseModel], body: Any) -> Any:
    try:
        return model.model_validate(body)
    except ValidationError:
        raise InvalidRequest()


@router.post("/admin/login", response_model=LoginResponse)
def admin_login(
    payload: LoginRequest, auth: AdminAuth = Depends(get_admin_auth)
):
    try:
        token = auth.login(payload.password)
    except Unauthorized:
        raise
    except Exception:
        logger.exception("Admin login error")
        raise _failure("Login failed")
    return LoginResponse(token=token)


@router.post("/feedback", response_model=SubmitFeedbackResponse)
def submit_feedback(
    payload: dict[str, Any] = Body(...),
    repo: FeedbackRepository = Depends(get_feedback_repository),
):
    """
    Public form submission. Fields are stored as sent; no server-side
    validation beyond requiring a JSON object.
    """
    try:
        feedback_id = repo.submit(payload)
    except Exception:
        logger.exception("Feedback submission error")
        raise _failure("Failed to submit feedback")
    return SubmitFeedbackResponse(id=feedback_id)


@router.get(
    "/admin/feedback",
    response_model=FeedbackListResponse,
    dependencies=[Depends(require_admin)],
)
def list_feedback(
    category: str | None = Query(None),
    repo: FeedbackRepository = Depends(get_feedback_repository),
):
    try:
        entries = repo.list(category=category)
    except Exception:
        logger.exception("Get feedback error")
        raise _failure("Failed to retrieve feedback")
    return FeedbackListResponse(feedback=entries)


@router.get(
    "/admin/feedback/stats",
    response_model=FeedbackStatsResponse,
    dependencies=[Depends(require_admin)],
)
def feedback_stats(repo: FeedbackRepository = Depends(get_feedback_repository)):
    try:
        stats = reports.summarize(repo.list())
    except Exception:
        logger.exception("Feedback stats error")
        raise _failure("Failed to build feedback stats")
    return FeedbackStatsResponse(stats=stats)


@router.get("/admin/feedback/export", dependencies=[Depends(require_admin)])
def export_feedback(
    category: str | None = Query(None),
    repo: FeedbackRepository = Depends(get_feedback_repository),
):
    try:
        body = reports.to_csv(repo.list(category=category))
    except Exception:
        logger.exception("Feedback export error")
        raise _failure("Failed to export feedback")
    filename = f"feedback-{datetime.now(timezone.utc).date().isoformat()}.csv"
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete(
    "/admin/feedback/{feedback_id}",
    response_model=SuccessResponse,
    dependencies=[Depends(require_admin)],
)
def delete_feedback(
    feedback_id: str, repo: FeedbackRepository = Depends(get_feedback_repository)
):
    try:
        repo.delete(feedback_id)
    except Exception:
        logger.exception("Delete feedback error")
        raise _failure("Failed to delete feedback")
    return SuccessResponse()


@router.get("/features", response_model=FeaturesResponse)
def get_features(
    resolved: bool = Query(False, description="Fill in defaults for preset flags"),
    flags: FeatureFlagStore = Depends(get_feature_flag_store),
):
    try:
        features = flags.get_flags()
    except Exception:
        logger.exception("Get features error")
        raise _failure("Failed to retrieve features")
    if resolved:
        features = effective_flags(features)
    return FeaturesResponse(features=features)


@router.post(
    "/admin/features",
    response_model=SuccessResponse,
    dependencies=[Depends(require_admin)],
)
def update_features(
    body: Any = Depends(admin_json_body),
    flags: FeatureFlagStore = Depends(get_feature_flag_store),
):
    payload = _parse(UpdateFeaturesRequest, body)
    try:
        flags.set_flags(payload.features)
    except Exception:
        logger.exception("Update features error")
        raise _failure("Failed to update features")
    return SuccessResponse()


@router.post(
    "/admin/change-password",
    response_model=SuccessResponse,
    dependencies=[Depends(require_admin)],
)
def change_password(
    body: Any = Depends(admin_json_body),
    auth: AdminAuth = Depends(get_admin_auth),
):
    """Overwrites the admin password. The old password is not checked here."""
    payload = _parse(ChangePasswordRequest, body)
    try:
        auth.change_password(payload.newPassword)
    except Exception:
        logger.exception("Change password error")
        raise _failure("Failed to change password")
    return SuccessResponse()
