"""
Surveys Router.

Signed-in users may submit one satisfaction survey per rolling 24 hours;
the aggregate statistics are public.
"""

import logging

from fastapi import APIRouter, Depends

from humanlenk.api.dependencies import current_user_id, get_current_user, get_session_factory
from humanlenk.api.models import SurveySubmission
from humanlenk.database.core.funcs import list_user_surveys, submit_survey, survey_stats

router = APIRouter(prefix="/api/surveys", tags=["Surveys"])
logger = logging.getLogger(__name__)


@router.post("", status_code=201)
def submit(data: SurveySubmission, user: dict = Depends(get_current_user), session_factory=Depends(get_session_factory)):
    """Store a survey.

    Response:
        201: the stored survey
        429: a survey was already submitted in the last 24 hours
    """
    survey = submit_survey(
        user_id=current_user_id(user),
        rating=data.rating,
        feedback=data.feedback,
        session_factory=session_factory,
    )
    return {"success": True, "message": "Survey submitted successfully", "data": survey}


@router.get("/my")
def my_surveys(user: dict = Depends(get_current_user), session_factory=Depends(get_session_factory)):
    surveys = list_user_surveys(user_id=current_user_id(user), session_factory=session_factory)
    return {"success": True, "data": surveys}


@router.get("/stats")
def public_stats(session_factory=Depends(get_session_factory)):
    """Total count, average rating (2 decimals) and rating distribution. No authentication."""
    return {"success": True, "data": survey_stats(session_factory=session_factory)}
