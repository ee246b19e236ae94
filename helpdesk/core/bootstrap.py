# helpdesk/core/bootstrap.py
import logging

from ..db.engine import async_session_maker, create_db_and_tables
from ..schemas.user import UserAdminCreate
from ..services.user_service import UserService
from .config import settings
from .constants import UserRole

logger = logging.getLogger(__name__)


async def bootstrap_system() -> None:
    """
    Idempotent bootstrapping:
    1. Creates the database tables.
    2. If no user exists and ADMIN_EMAIL/ADMIN_PASSWORD are set, creates the admin.
    """
    logger.info("[Bootstrap] Initializing database schema...")
    await create_db_and_tables()

    async with async_session_maker() as session:
        service = UserService(session)
        if await service.count_users():
            logger.info("[Bootstrap] Users found. Skipping admin creation.")
            return

        if not (settings.admin_email and settings.admin_password):
            logger.warning(
                "[Bootstrap] No users and no ADMIN_EMAIL/ADMIN_PASSWORD set. "
                "Register a user and promote it, or set the variables and restart."
            )
            return

        admin = await service.create_user(
            UserAdminCreate(
                name=settings.admin_name,
                email=settings.admin_email,
                password=settings.admin_password,
                role=UserRole.ADMIN,
            )
        )
        logger.info("[Bootstrap] Administrator %s created.", admin.email)
