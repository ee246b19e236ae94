# helpdesk/core/users.py
"""
FastAPI Users configuration and authentication setup.
Session tokens are JWTs delivered either as an HTTP-only cookie (web UI)
or as a Bearer header (API clients).
"""
import logging
import uuid
from typing import Optional, Union

from fastapi import Depends, HTTPException, Request, status
from fastapi_users import BaseUserManager, FastAPIUsers, InvalidPasswordException, UUIDIDMixin
from fastapi_users.authentication import (
    AuthenticationBackend,
    BearerTransport,
    CookieTransport,
    JWTStrategy,
)
from fastapi_users.db import SQLAlchemyUserDatabase
from fastapi_users.jwt import decode_jwt, generate_jwt
from fastapi_users.password import PasswordHelper
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.engine import get_session
from ..models.user import User
from ..schemas.user import UserCreate
from .config import settings
from .constants import MIN_PASSWORD_LENGTH, STAFF_ROLES, UserRole

logger = logging.getLogger(__name__)

# --- Configuration ---
SECRET = settings.secret_key
if not SECRET:
    raise RuntimeError("FATAL: SECRET_KEY not configured in .env")

ACCESS_TOKEN_COOKIE_NAME = "helpdesk_access_token"
ACCESS_TOKEN_LIFETIME_SECONDS = settings.access_token_lifetime_seconds

# --- Authentication Transports ---
# 1. Bearer Token Transport (for API access via Authorization header)
bearer_transport = BearerTransport(tokenUrl="auth/jwt/login")

# 2. Cookie Transport (for Web UI session management)
cookie_transport = CookieTransport(
    cookie_name=ACCESS_TOKEN_COOKIE_NAME,
    cookie_max_age=ACCESS_TOKEN_LIFETIME_SECONDS,
    cookie_httponly=True,
    cookie_secure=settings.is_production,
    cookie_samesite="lax",
)


# --- JWT Strategy ---
class VersionedJWTStrategy(JWTStrategy):
    """
    JWT strategy that embeds the user's token_version in every token.
    A token whose version no longer matches the user row is rejected,
    which is how "log out from all devices" revokes old sessions.
    """

    async def write_token(self, user: User) -> str:
        data = {"sub": str(user.id), "aud": self.token_audience, "ver": user.token_version}
        return generate_jwt(data, self.encode_key, self.lifetime_seconds, algorithm=self.algorithm)

    async def read_token(self, token: Optional[str], user_manager) -> Optional[User]:
        user = await super().read_token(token, user_manager)
        if user is None:
            return None

        data = decode_jwt(token, self.decode_key, self.token_audience, algorithms=[self.algorithm])
        if data.get("ver") != user.token_version:
            logger.info("Rejected revoked token for user %s", user.email)
            return None
        return user


def get_jwt_strategy() -> JWTStrategy:
    """Returns JWT strategy for token generation and validation"""
    return VersionedJWTStrategy(secret=SECRET, lifetime_seconds=ACCESS_TOKEN_LIFETIME_SECONDS)


# --- Authentication Backends ---
# JWT Backend (Bearer token for API)
auth_backend_jwt = AuthenticationBackend(
    name="jwt",
    transport=bearer_transport,
    get_strategy=get_jwt_strategy,
)

# Cookie Backend (HTTP-only cookie for Web UI)
auth_backend_cookie = AuthenticationBackend(
    name="cookie",
    transport=cookie_transport,
    get_strategy=get_jwt_strategy,
)


# --- User Manager ---
class UserManager(UUIDIDMixin, BaseUserManager[User, uuid.UUID]):
    """
    User manager handles user lifecycle events and business logic.
    """

    reset_password_token_secret = SECRET
    verification_token_secret = SECRET

    async def validate_password(self, password: str, user: Union[UserCreate, User]) -> None:
        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidPasswordException(
                reason=f"Password should be at least {MIN_PASSWORD_LENGTH} characters"
            )

    async def on_after_register(self, user: User, request: Optional[Request] = None):
        """Called after successful user registration"""
        logger.info("User registered: %s (%s)", user.name, user.email)

    async def on_after_login(
        self, user: User, request: Optional[Request] = None, response=None
    ):
        """Called after successful login"""
        logger.info("User logged in: %s", user.email)


# --- Dependency Injectors ---
async def get_user_db(session: AsyncSession = Depends(get_session)):
    """Dependency to get the user database adapter (lookup by email)."""
    yield SQLAlchemyUserDatabase(session, User)


# --- Argon2 Password Helper ---
# Configure passlib to use Argon2 for password hashing
argon2_context = CryptContext(schemes=["argon2"], deprecated="auto")
password_helper = PasswordHelper(argon2_context)


async def get_user_manager(user_db=Depends(get_user_db)):
    """
    Dependency to get the user manager instance.
    Uses Argon2 for password hashing via PasswordHelper.
    """
    yield UserManager(user_db, password_helper)


# --- FastAPI Users Instance ---
fastapi_users = FastAPIUsers[User, uuid.UUID](
    get_user_manager,
    [auth_backend_jwt, auth_backend_cookie],  # Support both auth methods
)

# --- Dependency Shortcuts ---
current_active_user = fastapi_users.current_user(active=True)
current_optional_user = fastapi_users.current_user(active=True, optional=True)


# --- Role-Based Access Control ---
class RoleChecker:
    """
    Dependency class to check if the current user has one of the allowed roles.

    Usage:
        @router.get("/admin-only")
        def admin_endpoint(user: User = Depends(RoleChecker([UserRole.ADMIN]))):
            ...
    """

    def __init__(self, allowed_roles: list[UserRole]):
        self.allowed_roles = allowed_roles

    def __call__(self, user: User = Depends(current_active_user)) -> User:
        if user.role not in self.allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="No autorizado",
            )
        return user


# Pre-configured role checkers for common use cases
require_admin = RoleChecker([UserRole.ADMIN])
require_staff = RoleChecker(STAFF_ROLES)
require_requester = RoleChecker([UserRole.USER])
