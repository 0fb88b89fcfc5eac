"""
Pydantic models used for request/response validation and API data contracts.

Each class defines the structure of data expected in API endpoints, ensuring
validation and automatic OpenAPI schema generation.
"""

from pydantic import BaseModel, Field


class UserCredentials(BaseModel):
    """
    Represents login credentials for a user.
    """
    email: str
    """The login email of the user."""
    password: str
    """The plaintext password provided for authentication."""


class UserData(BaseModel):
    """
    Represents data required to register a new user.
    """
    email: str
    """Email address of the user."""
    password: str
    """Password chosen by the user (6+ characters)."""
    full_name: str | None = None
    """Display name stored on the profile."""


class ChatRequest(BaseModel):
    """
    A chat message sent by the user.
    """
    content: str = Field(..., min_length=1, description="The message text.")
    conversation_id: str | None = Field(
        None, description="Conversation to append to; a new one is created when omitted."
    )


class RoleChange(BaseModel):
    """
    New role for a user (admin only).
    """
    role: str = Field(..., description="One of 'admin', 'legal_analyst', 'user'.", examples=["legal_analyst"])
