from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime, time, timedelta
from typing import Optional


class ClockInOutRequest(BaseModel):
    employee_id: int
    # Defaults to the current UTC time when omitted
    timestamp: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=500)


class AttendanceCreate(BaseModel):
    employee_id: int
    date: date
    clock_in: Optional[time] = None
    clock_out: Optional[time] = None
    break_duration: Optional[timedelta] = None
    notes: Optional[str] = Field(None, max_length=500)


class AttendanceResponse(BaseModel):
    id: int
    employee_id: int
    employee_name: str = ""
    date: date
    clock_in: Optional[time] = None
    clock_out: Optional[time] = None
    break_duration: Optional[timedelta] = None
    worked_hours: float
    overtime_hours: float
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class MonthlyHoursResponse(BaseModel):
    employee_id: int
    year: int
    month: int
    total_hours: float
