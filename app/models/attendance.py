from sqlalchemy import (
    Column, Integer, String, Date, Time, Interval, Numeric, Text, DateTime,
    ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from app.database import Base
from datetime import datetime, timezone


def _utcnow():
    return datetime.now(timezone.utc)


class Attendance(Base):
    """One record per (employee, calendar date). Hours are derived, never input."""
    __tablename__ = "attendances"
    __table_args__ = (
        UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)  # UTC calendar date

    clock_in = Column(Time, nullable=True)
    clock_out = Column(Time, nullable=True)
    break_duration = Column(Interval, nullable=True)

    worked_hours = Column(Numeric(6, 2), nullable=False, default=0)
    overtime_hours = Column(Numeric(6, 2), nullable=False, default=0)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    created_by = Column(String, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)
    updated_by = Column(String, nullable=True)

    employee = relationship("Employee", back_populates="attendances")

    @property
    def employee_name(self) -> str:
        return self.employee.full_name if self.employee else ""

    def __repr__(self):
        return f"<Attendance {self.employee_id}@{self.date}>"
