from sqlalchemy import Column, Integer, String, Date, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base
from datetime import datetime, timezone
import enum

class LeaveStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not LeaveStatus.PENDING

# Requests in these states never block a new interval
INACTIVE_STATUSES = frozenset({LeaveStatus.REJECTED, LeaveStatus.CANCELLED})

class LeaveType(str, enum.Enum):
    VACATION = "vacation"
    SICK = "sick"
    PERSONAL = "personal"
    MATERNITY = "maternity"
    PATERNITY = "paternity"
    UNPAID = "unpaid"

def _utcnow():
    return datetime.now(timezone.utc)

class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    leave_type = Column(String, nullable=False, index=True)
    start_date = Column(Date, nullable=False)  # inclusive, UTC
    end_date = Column(Date, nullable=False)  # inclusive, UTC
    days_requested = Column(Integer, nullable=False, default=0)  # business days
    reason = Column(Text, nullable=True)
    # Using String to store enum value for simplicity with SQLite
    status = Column(String, nullable=False, default=LeaveStatus.PENDING.value, index=True)

    manager_comments = Column(Text, nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_by = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    created_by = Column(String, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)
    updated_by = Column(String, nullable=True)

    employee = relationship("Employee", back_populates="leave_requests")

    @property
    def employee_name(self) -> str:
        return self.employee.full_name if self.employee else ""

    def overlaps(self, start_date, end_date) -> bool:
        """Inclusive interval overlap with [start_date, end_date]."""
        return self.start_date <= end_date and self.end_date >= start_date
