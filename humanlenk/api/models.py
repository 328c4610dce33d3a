"""
Pydantic models used for request validation and API data contracts.

Each class defines the structure of a JSON body expected by an endpoint.
Field names follow Python conventions; the wire names (camelCase) are
declared as aliases. A body that violates any constraint is rejected with
400 ``Validation failed`` and a field-level ``details`` list.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from humanlenk.database.entities.enums import UserRole


class RequestModel(BaseModel):
    """Base for request bodies: accepts both wire aliases and field names."""
    model_config = ConfigDict(populate_by_name=True)


class RegisterDetails(RequestModel):
    """
    Data needed to open a new account.
    """
    email: EmailStr
    """Email address, unique across accounts."""
    password: str = Field(..., min_length=8)
    """Plaintext password (at least 8 characters), hashed before storage."""
    name: str = Field(..., min_length=2, max_length=255)
    """Display name."""


class UserCredentials(RequestModel):
    """
    Represents login credentials for a user.
    """
    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdate(RequestModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None


class PasswordChange(RequestModel):
    current_password: str = Field(..., min_length=1, alias="currentPassword")
    new_password: str = Field(..., min_length=8, alias="newPassword")


class ChatSessionCreationDetails(RequestModel):
    """
    Represents details needed to create a new chat session.
    """
    title: Optional[str] = Field(None, max_length=255)
    """Title of the session; "New Chat" when omitted or empty."""


class ChatMessage(RequestModel):
    """
    One chat turn sent by the client.
    """
    message: str = Field(..., min_length=1, max_length=4000)
    """The text of the user's message."""
    chat_session_id: str = Field(..., min_length=1, alias="chatSessionId")
    """Id of a session owned by the caller."""
    file_id: Optional[str] = Field(None, alias="fileId")
    """Optional id of a completed file owned by the caller."""


class RoleUpdate(RequestModel):
    role: UserRole


class SurveySubmission(RequestModel):
    """
    A satisfaction survey.
    """
    rating: int = Field(..., ge=1, le=5)
    """Integer score from 1 (worst) to 5 (best)."""
    feedback: str = Field(..., min_length=1, max_length=1000)
    """Free-text comment."""
