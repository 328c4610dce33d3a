"""
Survey ORM Model
================

User feedback survey: a 1–5 rating plus free-text feedback. Surveys are
immutable; a user may submit at most one per rolling 24 hours (enforced by
the service layer).
"""

from humanlenk.database.config.connection_engine import declarativeBase
from sqlalchemy import CheckConstraint, ForeignKey, DateTime, Integer, VARCHAR, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid import UUID
import uuid
from datetime import datetime, timezone


class Survey(declarativeBase):
    """
    ORM model for the `survey` table.

    Attributes
    ----------
    id : UUID
        Primary key.
    user_id : UUID
        Author of the survey.
    rating : int
        Rating between 1 and 5.
    feedback : str
        Free-text feedback (max 1000 chars).
    created_at : datetime
        Submission time (UTC).
    """

    __tablename__ = 'survey'
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_survey_rating_range"),
    )

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey('app_user.id', ondelete="CASCADE"), nullable=False, index=True
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    feedback: Mapped[str] = mapped_column(VARCHAR(1000), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)

    user = relationship("User", back_populates="surveys")

    def __init__(self, user_id: UUID, rating: int, feedback: str, date_created_on=None):
        self.id = uuid.uuid4()
        self.user_id = user_id
        self.rating = rating
        self.feedback = feedback
        if date_created_on is None:
            self.created_at = datetime.now(timezone.utc)
        elif isinstance(date_created_on, str):
            self.created_at = datetime.fromisoformat(date_created_on)
        else:
            self.created_at = date_created_on

    def __str__(self) -> str:
        return f"Survey: id:{self.id}, user_id: {self.user_id}, rating: {self.rating}"
