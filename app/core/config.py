import os
import logging
from pydantic import BaseModel, Field
from typing import List
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


class AttendanceSettings(BaseModel):
    # Daily threshold above which worked time counts as overtime
    normal_working_hours: float = Field(default=float(os.getenv("NORMAL_WORKING_HOURS", "8.0")))


class LeaveSettings(BaseModel):
    annual_allowance: int = Field(default=int(os.getenv("ANNUAL_LEAVE_ALLOWANCE", "22")))
    # When false, over-allocated employees report a negative balance
    clamp_remaining: bool = Field(default=_env_bool("CLAMP_REMAINING_LEAVE"))


class Config(BaseModel):
    app_name: str = "HR Attendance & Leave API"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./database.db")

    # Audit fields fall back to this actor when the caller sends none
    default_actor: str = os.getenv("DEFAULT_ACTOR", "system")
    actor_header: str = "X-Actor"

    attendance: AttendanceSettings = AttendanceSettings()
    leave: LeaveSettings = LeaveSettings()

    version: str = "1.0.0"
    build_id: str = os.getenv("BUILD_ID", "local")
    commit_hash: str = os.getenv("COMMIT_HASH", "HEAD")
    request_id_header: str = "X-Request-ID"

    # CORS: comma-separated origins loaded from env
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://127.0.0.1:3000",
            ).split(",")
            if o.strip()
        ]
    )

    rate_limit_per_minute: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))
    enable_rate_limiting: bool = _env_bool("ENABLE_RATE_LIMITING", "true")

settings = Config()

_logger = logging.getLogger(__name__)
if settings.leave.annual_allowance < 0:
    raise RuntimeError("FATAL: ANNUAL_LEAVE_ALLOWANCE must not be negative.")
if settings.attendance.normal_working_hours <= 0:
    raise RuntimeError("FATAL: NORMAL_WORKING_HOURS must be positive.")
if settings.environment == "development" and settings.database_url.startswith("sqlite:///./"):
    _logger.warning("Using local SQLite database file, only acceptable in development.")
