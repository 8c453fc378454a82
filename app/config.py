from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache

_BACKEND_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = f"sqlite:///{_BACKEND_ROOT / 'controle_obras.db'}"

    # JWT
    JWT_SECRET: str = "change-this-secret-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_MINUTES: int = 480  # 8 hours

    # App
    APP_NAME: str = "Controle de Obras"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # CORS (override with env var CORS_ORIGINS as a JSON array)
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Startup admin seed (only used when the usuario table is empty)
    ADMIN_NOME: str = "Administrador"
    ADMIN_EMAIL: str = "admin@controleobras.com.br"
    ADMIN_PASSWORD: str = "Admin123!"

    # Google service account (Drive v3 / Sheets v4)
    GOOGLE_CLIENT_EMAIL: str | None = None
    GOOGLE_PRIVATE_KEY: str | None = None
    GOOGLE_TOKEN_URI: str = "https://oauth2.googleapis.com/token"
    GOOGLE_TIMEOUT_SECONDS: float = 15.0

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def google_configurado(self) -> bool:
        return bool(self.GOOGLE_CLIENT_EMAIL and self.GOOGLE_PRIVATE_KEY)


@lru_cache
def get_settings() -> Settings:
    return Settings()
