import os
from pathlib import Path

from dotenv import load_dotenv


# A local .env next to the package is authoritative for development.
env_path = Path(__file__).resolve().parents[2] / ".env"
if env_path.exists():
    load_dotenv(env_path, override=True)


def _as_bool(raw) -> bool:
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    """Settings read from environment variables.

    Values are resolved when the instance is created, so tests can set
    environment variables (or pass keyword overrides) before building one.
    """

    def __init__(self, **overrides):
        self.SECRET_KEY: str = os.getenv("SECRET_KEY", "change-me-to-a-secure-random-string")
        self.ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
        self.ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7)))
        # password reset links are short lived
        self.RESET_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("RESET_TOKEN_EXPIRE_MINUTES", "60"))

        raw_db = os.getenv("DATABASE_URL", "sqlite:///./transporte.db")
        # tolerate a duplicated "DATABASE_URL=" prefix coming from a malformed .env
        if isinstance(raw_db, str) and raw_db.startswith("DATABASE_URL="):
            raw_db = raw_db.split("=", 1)[1]
        self.DATABASE_URL: str = raw_db

        self.APP_ENV: str = os.getenv("APP_ENV", os.getenv("ENV", "development")).lower()
        default_pool_size = 5 if self.APP_ENV == "development" else 10
        default_max_overflow = 2 if self.APP_ENV == "development" else 20
        default_pool_recycle = 900 if self.APP_ENV == "development" else 1800
        self.DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", str(default_pool_size)))
        self.DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", str(default_max_overflow)))
        self.DB_POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", str(default_pool_recycle)))  # seconds

        # Logging and monitoring controls
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.REQUEST_LOG_EVERY_N: int = int(os.getenv("REQUEST_LOG_EVERY_N", "100"))
        self.DB_LOG_EVERY_N: int = int(os.getenv("DB_LOG_EVERY_N", "50"))
        self.REQUEST_LOG_VERBOSE: bool = _as_bool(os.getenv("REQUEST_LOG_VERBOSE", "0"))
        self.REQUEST_LOG_INCLUDE_PREFIXES: str = os.getenv(
            "REQUEST_LOG_INCLUDE_PREFIXES",
            "/viagens,/acertos,/receitas,/despesas,/motoristas,/transportadoras",
        )

        # Session cookie
        self.AUTH_COOKIE_NAME: str = os.getenv("AUTH_COOKIE_NAME", "auth-token")
        self.AUTH_COOKIE_SECURE: bool = _as_bool(os.getenv("AUTH_COOKIE_SECURE", "1" if self.APP_ENV == "production" else "0"))

        self.CORS_ORIGINS: str = os.getenv(
            "CORS_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173",
        )
        self.FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")

        for key, value in overrides.items():
            setattr(self, key, value)

    @property
    def cors_origins(self):
        return [o.strip() for o in (self.CORS_ORIGINS or "").split(",") if o.strip()]


settings = Settings()
