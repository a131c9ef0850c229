from pydantic_settings import BaseSettings, SettingsConfigDict
from datetime import date, datetime, timezone
from typing import List

class Settings(BaseSettings):
    app_name: str = "Operations Dashboard API"
    app_version: str = "1.0.0"
    debug: bool = True
    log_level: str = "INFO"
    allowed_origins: str = "*"

    mongo_uri: str
    mongo_db_name: str

    jwt_secret_key: str
    jwt_algorithm: str = "HS256"

    # Payment lifecycle
    payment_cycle_days: int = 45
    reminder_pending_day: int = 1
    reminder_overdue_from_day: int = 15
    payroll_trigger_statuses: List[str] = ["paid", "received"]

    # Invoice automation delivery
    invoice_event_max_attempts: int = 3
    invoice_event_retry_seconds: float = 2.0

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
# -----------------------
# JWT configuration
# -----------------------
JWT_SECRET = settings.jwt_secret_key
JWT_ALGORITHM = settings.jwt_algorithm

if not JWT_SECRET:
    raise RuntimeError("JWT_SECRET_KEY must be set in environment")

def _now_utc() -> datetime:
    return datetime.now(timezone.utc)

def _today() -> date:
    # Payment cycles are counted on the local calendar
    return date.today()
