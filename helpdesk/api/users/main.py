# helpdesk/api/users/main.py
import uuid as uuid_pkg
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, status
from sqlmodel.ext.asyncio.session import AsyncSession

from ...core.audit import log_action
from ...core.constants import UserRole
from ...core.users import current_active_user, require_admin
from ...db.engine import get_session
from ...models.user import User
from ...schemas.user import (
    PasswordChange,
    UserAdminCreate,
    UserListItem,
    UserProfileUpdate,
    UserRead,
    UserRoleUpdate,
)
from ...services.user_service import UserService

router = APIRouter()


# --- Inyección de Dependencias ---
def get_user_service(session: AsyncSession = Depends(get_session)) -> UserService:
    return UserService(session)


@router.get("/users", response_model=List[UserListItem])
async def api_get_all_users(
    role: Optional[UserRole] = None,
    service: UserService = Depends(get_user_service),
    current_user: User = Depends(require_admin),
):
    """Users ordered by name, e.g. ?role=AGENT for the "by agent" dashboard filter."""
    return await service.get_all_users(role)


@router.post("/users", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def api_create_user(
    user_data: UserAdminCreate,
    request: Request,
    service: UserService = Depends(get_user_service),
    current_user: User = Depends(require_admin),
):
    new_user = await service.create_user(user_data)
    log_action(
        "CREATE", "user", str(new_user.id), user=current_user, request=request,
        details={"email": new_user.email, "role": new_user.role},
    )
    return new_user


@router.get("/users/me", response_model=UserRead)
async def api_get_me(current_user: User = Depends(current_active_user)):
    return current_user


@router.patch("/users/me", response_model=UserRead)
async def api_update_me(
    profile: UserProfileUpdate,
    service: UserService = Depends(get_user_service),
    current_user: User = Depends(current_active_user),
):
    return await service.update_profile(current_user, profile)


@router.patch("/users/me/password", status_code=status.HTTP_204_NO_CONTENT)
async def api_change_password(
    data: PasswordChange,
    request: Request,
    service: UserService = Depends(get_user_service),
    current_user: User = Depends(current_active_user),
):
    await service.change_password(current_user, data)
    log_action("PASSWORD_CHANGE", "user", str(current_user.id), user=current_user, request=request)


@router.patch("/users/{user_id}/role", response_model=UserRead)
async def api_change_role(
    user_id: uuid_pkg.UUID,
    data: UserRoleUpdate,
    request: Request,
    service: UserService = Depends(get_user_service),
    current_user: User = Depends(require_admin),
):
    updated = await service.change_role(current_user, user_id, data.role)
    log_action(
        "UPDATE", "user", str(user_id), user=current_user, request=request,
        details={"role": updated.role},
    )
    return updated
