"""Settings for TaskFlow, loaded from environment variables (+ optional .env)."""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.split(",") if p.strip()]


@dataclass(frozen=True)
class Settings:
    """Application settings.

    Attributes:
        jwt_secret: HMAC secret used to sign access tokens
        database_url: SQLAlchemy URL of the task database
        jwt_expire_days: Lifetime of issued tokens
        gemini_api_key: Key for the insight model; insights fall back when unset
        insights_base_url: OpenAI-compatible endpoint of the insight model
        insights_model: Model name sent to the endpoint
        insights_timeout: Request timeout in seconds for the insight call
        cors_origins: Allowed CORS origins
        environment: "development" exposes error detail in 500 responses
        log_level: Root log level
        sql_echo: Echo SQL statements to the log
    """

    jwt_secret: str
    database_url: str = "sqlite:///./taskflow.db"
    jwt_expire_days: int = 7
    gemini_api_key: Optional[str] = None
    insights_base_url: str = GEMINI_OPENAI_BASE_URL
    insights_model: str = "gemini-2.5-flash"
    insights_timeout: float = 30.0
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    environment: str = "production"
    log_level: str = "INFO"
    sql_echo: bool = False

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables.

        Raises:
            ValueError: If JWT_SECRET is not set
        """
        jwt_secret = os.getenv("JWT_SECRET")
        if not jwt_secret:
            raise ValueError("JWT_SECRET environment variable is not set.")

        return cls(
            jwt_secret=jwt_secret,
            database_url=os.getenv("DATABASE_URL", "sqlite:///./taskflow.db"),
            jwt_expire_days=int(os.getenv("JWT_EXPIRE_DAYS", "7")),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            insights_base_url=os.getenv("INSIGHTS_BASE_URL", GEMINI_OPENAI_BASE_URL),
            insights_model=os.getenv("INSIGHTS_MODEL", "gemini-2.5-flash"),
            insights_timeout=float(os.getenv("INSIGHTS_TIMEOUT", "30")),
            cors_origins=_env_list("CORS_ORIGINS", ["*"]),
            environment=os.getenv("TASKFLOW_ENV", "production").strip().lower(),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            sql_echo=_env_bool("SQL_ECHO", False),
        )
