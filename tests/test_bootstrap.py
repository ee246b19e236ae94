from helpdesk.core.bootstrap import bootstrap_system
from helpdesk.core.config import settings
from helpdesk.db.engine import async_session_maker
from helpdesk.services.user_service import UserService


async def test_bootstrap_creates_first_admin_once(monkeypatch):
    monkeypatch.setattr(settings, "admin_email", "root@example.com")
    monkeypatch.setattr(settings, "admin_password", "clave-admin")

    await bootstrap_system()
    await bootstrap_system()

    async with async_session_maker() as session:
        service = UserService(session)
        assert await service.count_users() == 1
        admin = await service.get_user_by_email("ROOT@example.com")
        assert admin.role == "ADMIN"
        assert admin.is_superuser


async def test_bootstrap_without_credentials_creates_nobody(monkeypatch):
    monkeypatch.setattr(settings, "admin_email", None)
    monkeypatch.setattr(settings, "admin_password", None)

    await bootstrap_system()

    async with async_session_maker() as session:
        assert await UserService(session).count_users() == 0
