# helpdesk/core/config.py
"""
Application settings.
Values come from the environment (or a .env file loaded by python-dotenv).
"""
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), "..", ".."))
DATA_DIR = os.path.join(PROJECT_ROOT, "data")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    app_env: str = "development"
    secret_key: Optional[str] = None
    database_url: Optional[str] = None

    access_token_lifetime_seconds: int = 60 * 60 * 24 * 7  # 7 days

    allowed_origins: str = "http://localhost:8000"
    allowed_hosts: str = "localhost,127.0.0.1"

    upload_dir: str = os.path.join(DATA_DIR, "uploads")
    log_dir: str = "logs"
    log_level: str = "INFO"
    rate_limit_enabled: bool = True

    # Initial administrator, created on first start when the users table is empty
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None
    admin_name: str = "Administrador"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def origins(self) -> List[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def hosts(self) -> List[str]:
        return [h.strip() for h in self.allowed_hosts.split(",") if h.strip()]

    def get_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        database_file = os.path.join(DATA_DIR, "db", "helpdesk.sqlite")
        os.makedirs(os.path.dirname(database_file), exist_ok=True)
        return f"sqlite+aiosqlite:///{database_file}"


settings = Settings()
