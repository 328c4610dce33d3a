"""
Survey DAO

Data-access helpers for the `Survey` ORM entity: creation, the per-user
cooldown lookup, listings and rating aggregates.
"""

import logging
from uuid import UUID

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from humanlenk.database.entities.survey import Survey

logger = logging.getLogger(__name__)


class SurveyDao:
    """
    Data Access Object (DAO) for managing Survey entities.
    """

    def createSurvey(self, session: Session, survey: Survey) -> Survey:
        try:
            session.add(survey)
            session.flush()
            return survey
        except Exception:
            logger.exception("Error in SurveyDao.createSurvey")
            raise

    def fetchLatestSurveyByUserId(self, session: Session, user_id: UUID) -> Survey | None:
        """Most recent survey of a user, used to enforce the 24 hour cooldown."""
        try:
            return (
                session.query(Survey)
                .filter(Survey.user_id == user_id)
                .order_by(desc(Survey.created_at))
                .first()
            )
        except Exception:
            logger.exception("Error in SurveyDao.fetchLatestSurveyByUserId")
            raise

    def fetchSurveysByUserId(self, session: Session, user_id: UUID):
        return (
            session.query(Survey)
            .filter(Survey.user_id == user_id)
            .order_by(desc(Survey.created_at))
            .all()
        )

    def fetchSurveys(self, session: Session, limit: int, offset: int):
        """
        Page through all surveys, newest first.

        Returns
        -------
        tuple[list[Survey], int]
        """
        try:
            query = session.query(Survey)
            total = query.count()
            surveys = query.order_by(desc(Survey.created_at)).offset(offset).limit(limit).all()
            return surveys, total
        except Exception:
            logger.exception("Error in SurveyDao.fetchSurveys")
            raise

    def countSurveys(self, session: Session) -> int:
        return session.query(Survey).count()

    def averageRating(self, session: Session) -> float:
        value = session.query(func.avg(Survey.rating)).scalar()
        return float(value) if value is not None else 0.0

    def countSurveysByRating(self, session: Session) -> dict[int, int]:
        rows = session.query(Survey.rating, func.count(Survey.id)).group_by(Survey.rating).all()
        return {rating: count for rating, count in rows}
