# helpdesk/api/uploads/main.py
from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status

from ...core.limiter import limiter
from ...core.users import current_active_user
from ...models.user import User
from ...services.upload_service import InvalidUploadError, UploadService
from ...services.user_service import UserService
from ..users.main import get_user_service

router = APIRouter(prefix="/upload")


def get_upload_service() -> UploadService:
    return UploadService()


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
async def upload_image(
    request: Request,
    file: UploadFile = File(...),
    service: UploadService = Depends(get_upload_service),
    current_user: User = Depends(current_active_user),
):
    """Store one image (e.g. a comment attachment) and return its URL."""
    try:
        url = await service.save_image(file)
    except InvalidUploadError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"url": url}


@router.post("/avatar")
@limiter.limit("10/minute")
async def upload_avatar(
    request: Request,
    file: UploadFile = File(...),
    service: UploadService = Depends(get_upload_service),
    user_service: UserService = Depends(get_user_service),
    current_user: User = Depends(current_active_user),
):
    try:
        avatar_url = await service.save_avatar(file, current_user.id)
    except InvalidUploadError as e:
        raise HTTPException(status_code=400, detail=str(e))
    await user_service.set_avatar(current_user, avatar_url)
    return {"avatar_url": avatar_url}
