"""
Request-scoped providers for routers.

Services receive the caller identity (used for audit fields) from the
X-Actor header; the surrounding gateway is expected to set it after
authenticating the caller.
"""
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database import get_db
from app.services.attendance_service import AttendanceService
from app.services.leave_service import LeaveService


def get_actor(x_actor: Optional[str] = Header(None, alias=settings.actor_header)) -> str:
    actor = (x_actor or "").strip()
    return actor or settings.default_actor


def get_attendance_service(
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
) -> AttendanceService:
    return AttendanceService(db, actor=actor)


def get_leave_service(
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
) -> LeaveService:
    return LeaveService(db, actor=actor)


__all__ = [
    "get_actor",
    "get_attendance_service",
    "get_leave_service",
]
