# helpdesk/schemas/user.py
"""
Pydantic schemas for FastAPI Users and the users API.
These schemas control what data is sent/received via the API.
"""
import uuid
from datetime import datetime
from typing import Optional

from fastapi_users import schemas
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..core.constants import MIN_PASSWORD_LENGTH, UserRole


class UserRead(schemas.BaseUser[uuid.UUID]):
    """
    Schema for reading user data (API responses).
    Includes all safe-to-expose user fields.
    """

    name: str
    role: UserRole
    avatar_url: Optional[str] = None
    timezone: str
    notify_on_assigned: bool
    notify_on_comment: bool
    notify_on_resolved: bool


class UserCreate(schemas.BaseUserCreate):
    """
    Self-registration. There is no role field: new accounts are always USER.
    """

    name: str = Field(min_length=1, max_length=120)


class UserAdminCreate(BaseModel):
    """Account created by an administrator, with an explicit role."""

    name: str = Field(min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    role: UserRole = UserRole.AGENT


class UserProfileUpdate(BaseModel):
    """
    Self-service profile edit. All fields are optional.
    """

    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    avatar_url: Optional[str] = None
    timezone: Optional[str] = None
    notify_on_assigned: Optional[bool] = None
    notify_on_comment: Optional[bool] = None
    notify_on_resolved: Optional[bool] = None


class UserRoleUpdate(BaseModel):
    role: UserRole


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=MIN_PASSWORD_LENGTH)


class UserSummary(BaseModel):
    """Compact user reference embedded in tickets and comments."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str


class UserListItem(UserSummary):
    role: UserRole
    created_at: datetime
