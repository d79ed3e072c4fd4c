from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Optional

from app.models.leave_request import LeaveStatus, LeaveType

class LeaveRequestCreate(BaseModel):
    employee_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: Optional[str] = Field(None, max_length=1000)

class LeaveRequestResponse(BaseModel):
    id: int
    employee_id: int
    employee_name: str = ""
    leave_type: str
    start_date: date
    end_date: date
    days_requested: int
    reason: Optional[str] = None
    status: str
    manager_comments: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class LeaveStatusUpdate(BaseModel):
    status: LeaveStatus
    manager_comments: Optional[str] = Field(None, max_length=1000)

class LeaveStatusUpdateResponse(BaseModel):
    success: bool
    message: str

class RemainingLeaveResponse(BaseModel):
    employee_id: int
    year: int
    remaining_days: int

class ConflictCheckResponse(BaseModel):
    employee_id: int
    start_date: date
    end_date: date
    has_conflict: bool
