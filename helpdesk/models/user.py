# helpdesk/models/user.py
"""
User model for FastAPI Users with SQLModel.
Combines FastAPI Users base fields with help-desk profile fields.
"""

import uuid as uuid_pkg
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel

from ..core.constants import UserRole


class User(SQLModel, table=True):
    """
    User model combining FastAPI Users authentication fields with custom fields.

    FastAPI Users provides minimal required fields, we add:
    - name: display name
    - role: USER, AGENT or ADMIN
    - token_version: bumped to revoke every token issued before
    - avatar_url, timezone and notification preferences
    """

    __tablename__ = "users"

    # FastAPI Users required fields
    id: uuid_pkg.UUID = Field(default_factory=uuid_pkg.uuid4, primary_key=True, nullable=False)
    email: str = Field(unique=True, index=True, nullable=False, max_length=320)
    hashed_password: str = Field(nullable=False, max_length=1024)
    is_active: bool = Field(default=True, nullable=False)
    is_superuser: bool = Field(default=False, nullable=False)
    is_verified: bool = Field(default=False, nullable=False)

    # Custom fields
    name: str = Field(nullable=False, max_length=120)
    role: str = Field(default=UserRole.USER.value, index=True, max_length=20)
    token_version: int = Field(default=0, nullable=False)

    avatar_url: Optional[str] = Field(default=None, max_length=500)
    timezone: str = Field(default="America/Argentina/Buenos_Aires", max_length=64)
    notify_on_assigned: bool = Field(default=True)
    notify_on_comment: bool = Field(default=True)
    notify_on_resolved: bool = Field(default=True)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_staff(self) -> bool:
        return self.role in (UserRole.AGENT, UserRole.ADMIN)
