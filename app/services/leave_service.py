"""
Leave Service Layer

Overlap detection between leave intervals, business-day arithmetic and the
leave-request status workflow:

    pending ──> approved | rejected | cancelled

Only pending requests can be reviewed; the three outcomes are terminal.
"""
from datetime import date, datetime, timedelta
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    ConflictingLeaveRequestError,
    EmployeeNotFoundError,
    InvalidStatusTransitionError,
    LeaveRequestNotFoundError,
    ValidationError,
)
from app.core.time_utils import to_utc_date, utc_today, utcnow
from app.models.leave_request import INACTIVE_STATUSES, LeaveRequest, LeaveStatus, LeaveType
from app.services.base import BaseService
from app.services.stores import EmployeeDirectory, LeaveRequestStore

_SATURDAY = 5


def count_business_days(start_date: date, end_date: date) -> int:
    """Monday to Friday days in [start_date, end_date]. No holiday calendar."""
    if end_date < start_date:
        raise ValueError("end_date must be on or after start_date")
    days = 0
    current = start_date
    while current <= end_date:
        if current.weekday() < _SATURDAY:
            days += 1
        current += timedelta(days=1)
    return days


def _parse_leave_type(value: Union[LeaveType, str]) -> LeaveType:
    try:
        return LeaveType(value)
    except ValueError:
        raise ValidationError("leave_type", f"Unknown leave type '{value}'.")


def _parse_status(value: Union[LeaveStatus, str]) -> LeaveStatus:
    try:
        return LeaveStatus(value)
    except ValueError:
        raise ValidationError("status", f"Unknown leave status '{value}'.")


def find_conflicts(
    requests: List[LeaveRequest],
    start_date: date,
    end_date: date,
    exclude_request_id: Optional[int] = None,
) -> List[LeaveRequest]:
    """Active (not rejected/cancelled) requests whose interval overlaps the query."""
    return [
        r for r in requests
        if LeaveStatus(r.status) not in INACTIVE_STATUSES
        and (exclude_request_id is None or r.id != exclude_request_id)
        and r.overlaps(start_date, end_date)
    ]


class LeaveService(BaseService):
    def __init__(
        self,
        db: Session,
        actor: Optional[str] = None,
        directory: Optional[EmployeeDirectory] = None,
        store: Optional[LeaveRequestStore] = None,
        annual_allowance: Optional[int] = None,
        clamp_remaining: Optional[bool] = None,
    ):
        super().__init__(db, actor)
        self.directory = directory or EmployeeDirectory(db)
        self.store = store or LeaveRequestStore(db)
        self.annual_allowance = (
            settings.leave.annual_allowance if annual_allowance is None else annual_allowance
        )
        self.clamp_remaining = (
            settings.leave.clamp_remaining if clamp_remaining is None else clamp_remaining
        )

    def _ensure_employee(self, employee_id: int):
        if not self.directory.exists(employee_id):
            raise EmployeeNotFoundError(employee_id)

    def has_conflict(
        self,
        employee_id: int,
        start_date: Union[date, datetime],
        end_date: Union[date, datetime],
        exclude_request_id: Optional[int] = None,
    ) -> bool:
        self._ensure_employee(employee_id)
        start, end = to_utc_date(start_date), to_utc_date(end_date)
        requests = self.store.find_by_employee(employee_id)
        return bool(find_conflicts(requests, start, end, exclude_request_id))

    def create_leave_request(
        self,
        employee_id: int,
        leave_type: Union[LeaveType, str],
        start_date: date,
        end_date: date,
        reason: Optional[str] = None,
    ) -> LeaveRequest:
        """
        Create a pending leave request.

        Raises:
            EmployeeNotFoundError: unknown employee.
            ValidationError: end_date before start_date (checked first), or
                start_date in the past, or an unknown leave_type.
            ConflictingLeaveRequestError: overlaps a pending/approved request.
            ConcurrentModificationError: another request for the same
                employee was inserted between the overlap check and the write.
        """
        self._ensure_employee(employee_id)

        start, end = to_utc_date(start_date), to_utc_date(end_date)
        if end < start:
            raise ValidationError("end_date", "End date must be on or after the start date.")
        if start < utc_today():
            raise ValidationError("start_date", "Start date must be today or later.")
        leave_type = _parse_leave_type(leave_type)

        days_requested = count_business_days(start, end)

        version = self.store.current_version(employee_id)
        if find_conflicts(self.store.find_by_employee(employee_id), start, end):
            self.log_warning(
                "Rejected overlapping leave request",
                employee_id=employee_id, start_date=start.isoformat(), end_date=end.isoformat()
            )
            raise ConflictingLeaveRequestError(start, end)

        request = LeaveRequest(
            employee_id=employee_id,
            leave_type=leave_type.value,
            start_date=start,
            end_date=end,
            days_requested=days_requested,
            reason=reason,
            status=LeaveStatus.PENDING.value,
            created_by=self.actor,
        )
        request = self.store.add(request, expected_version=version)
        self.log_info(
            "Leave request created",
            leave_request_id=request.id, employee_id=employee_id, days_requested=days_requested
        )
        return request

    def get_leave_request(self, request_id: int) -> LeaveRequest:
        request = self.store.get_by_id(request_id)
        if request is None:
            raise LeaveRequestNotFoundError(request_id)
        return request

    def list_by_employee(self, employee_id: int) -> List[LeaveRequest]:
        self._ensure_employee(employee_id)
        return self.store.find_by_employee(employee_id)

    def list_by_status(self, status: Union[LeaveStatus, str]) -> List[LeaveRequest]:
        return self.store.find_by_status(_parse_status(status).value)

    def list_pending(self) -> List[LeaveRequest]:
        return self.list_by_status(LeaveStatus.PENDING)

    def update_status(
        self,
        request_id: int,
        new_status: Union[LeaveStatus, str],
        manager_comments: Optional[str] = None,
    ) -> bool:
        new_status = _parse_status(new_status)
        request = self.get_leave_request(request_id)
        current = LeaveStatus(request.status)

        if current.is_terminal or new_status is LeaveStatus.PENDING:
            self.log_warning(
                "Rejected leave status transition",
                leave_request_id=request_id, current_status=current.value, attempted_status=new_status.value
            )
            raise InvalidStatusTransitionError(current.value, new_status.value)

        now = utcnow()
        values = {
            "status": new_status.value,
            "manager_comments": manager_comments,
            "reviewed_at": now,
            "reviewed_by": self.actor,
            "updated_at": now,
            "updated_by": self.actor,
        }
        if not self.store.compare_and_set_status(request, LeaveStatus.PENDING.value, values):
            # A concurrent reviewer got there first
            self.db.refresh(request)
            raise InvalidStatusTransitionError(request.status, new_status.value)

        self.log_info(
            "Leave request reviewed",
            leave_request_id=request_id, previous_status=current.value, new_status=new_status.value
        )
        return True

    def get_remaining_leave_days(self, employee_id: int, year: int) -> int:
        """
        Annual allowance minus business days of approved requests starting in
        `year`. Negative when over-allocated unless clamping is configured.
        """
        self._ensure_employee(employee_id)
        used_days = sum(
            r.days_requested or 0
            for r in self.store.find_by_employee(employee_id)
            if r.status == LeaveStatus.APPROVED.value and r.start_date.year == year
        )
        remaining = self.annual_allowance - used_days
        if self.clamp_remaining:
            remaining = max(0, remaining)
        return remaining
