# helpdesk/services/user_service.py
import logging
import uuid as uuid_pkg
from typing import List, Optional

from sqlmodel import func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.constants import UserRole
from ..core.exceptions import (
    InvalidPasswordError,
    InvalidTransitionError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from ..core.users import password_helper
from ..models.user import User
from ..schemas.user import PasswordChange, UserAdminCreate, UserProfileUpdate

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_all_users(self, role: Optional[UserRole] = None) -> List[User]:
        statement = select(User)
        if role:
            statement = statement.where(User.role == role.value)
        result = await self.session.exec(statement.order_by(User.name))
        return list(result.all())

    async def get_user(self, user_id: uuid_pkg.UUID) -> User:
        user = await self.session.get(User, user_id)
        if not user:
            raise UserNotFoundError("Usuario no encontrado.")
        return user

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.session.exec(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.first()

    async def count_users(self) -> int:
        result = await self.session.exec(select(func.count()).select_from(User))
        return result.one()

    async def create_user(self, user_create: UserAdminCreate) -> User:
        if await self.get_user_by_email(user_create.email):
            raise UserAlreadyExistsError("El email ya está registrado")

        db_user = User(
            name=user_create.name,
            email=user_create.email,
            hashed_password=password_helper.hash(user_create.password),
            role=user_create.role.value,
            is_superuser=user_create.role == UserRole.ADMIN,
            is_verified=True,
        )
        self.session.add(db_user)
        await self.session.commit()
        await self.session.refresh(db_user)
        logger.info("User %s created with role %s", db_user.email, db_user.role)
        return db_user

    async def update_profile(self, user: User, profile: UserProfileUpdate) -> User:
        # Aplicar cambios solo si se enviaron; null significa "sin cambios"
        update_data = profile.model_dump(exclude_unset=True, exclude_none=True)
        for key, value in update_data.items():
            setattr(user, key, value)

        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return user

    async def change_password(self, user: User, data: PasswordChange) -> None:
        verified, _ = password_helper.verify_and_update(data.current_password, user.hashed_password)
        if not verified:
            raise InvalidPasswordError("La contraseña actual es incorrecta")

        user.hashed_password = password_helper.hash(data.new_password)
        self.session.add(user)
        await self.session.commit()

    async def change_role(self, acting_user: User, user_id: uuid_pkg.UUID, role: UserRole) -> User:
        target = await self.get_user(user_id)
        if target.id == acting_user.id and role != UserRole.ADMIN:
            raise InvalidTransitionError("No podés quitarte el rol de administrador.")

        target.role = role.value
        target.is_superuser = role == UserRole.ADMIN
        self.session.add(target)
        await self.session.commit()
        await self.session.refresh(target)
        return target

    async def set_avatar(self, user: User, avatar_url: str) -> User:
        user.avatar_url = avatar_url
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return user

    async def revoke_sessions(self, user: User) -> int:
        """Invalidate every token issued so far by bumping token_version."""
        user.token_version = (user.token_version or 0) + 1
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        logger.info("All sessions revoked for %s", user.email)
        return user.token_version
