from dotenv import load_dotenv
from pydantic import BaseModel
from typing import List
import os

# Load .env automatically
load_dotenv()


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "development")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./hr_portal.db")
    sql_echo: bool = _env_flag("SQL_ECHO")

    jwt_secret: str = os.getenv("JWT_SECRET", "dev-access-secret")
    jwt_refresh_secret: str = os.getenv("JWT_REFRESH_SECRET", "dev-refresh-secret")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
    refresh_token_expire_days: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))

    # Reference zone for "today"; limit periods are calendar dates, not instants
    timezone: str = os.getenv("TIMEZONE", "Europe/Berlin")

    cors_origins: List[str] = _split_csv(os.getenv("CORS_ORIGINS", "http://localhost:3000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
