# helpdesk/api/auth/main.py
"""
Session endpoints that complement the fastapi-users auth routers
mounted under /auth (login, logout, register).
"""
import uuid

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ...core.audit import log_action
from ...core.constants import UserRole
from ...core.users import ACCESS_TOKEN_COOKIE_NAME, current_active_user
from ...models.user import User
from ...services.user_service import UserService
from ..users.main import get_user_service

router = APIRouter(prefix="/auth")


class MeResponse(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    role: UserRole


@router.get("/me", response_model=MeResponse)
async def read_me(current_user: User = Depends(current_active_user)):
    return current_user


@router.post("/logout-all")
async def logout_all(
    request: Request,
    current_user: User = Depends(current_active_user),
    service: UserService = Depends(get_user_service),
):
    """Revoke every token issued to the caller, on every device."""
    await service.revoke_sessions(current_user)
    log_action("LOGOUT_ALL", "user", str(current_user.id), user=current_user, request=request)

    response = JSONResponse(content={"status": "success"})
    response.delete_cookie(ACCESS_TOKEN_COOKIE_NAME)
    return response
