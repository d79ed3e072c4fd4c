from datetime import date
from typing import Any, Dict, List, Optional

class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class EmployeeNotFoundError(AppException):
    def __init__(self, employee_id: int):
        self.employee_id = employee_id
        super().__init__(
            message=f"Employee with ID {employee_id} not found.",
            status_code=404,
            error_code="EMPLOYEE_NOT_FOUND",
            details={"employee_id": employee_id}
        )

# --- Attendance state machine ---

class AlreadyClockedInError(AppException):
    def __init__(self, employee_id: int, day: date):
        self.employee_id = employee_id
        self.day = day
        super().__init__(
            message=f"Employee {employee_id} has already clocked in on {day.isoformat()}.",
            status_code=409,
            error_code="ALREADY_CLOCKED_IN",
            details={"employee_id": employee_id, "date": day.isoformat()}
        )

class AlreadyClockedOutError(AppException):
    def __init__(self, employee_id: int, day: date):
        self.employee_id = employee_id
        self.day = day
        super().__init__(
            message=f"Employee {employee_id} has already clocked out on {day.isoformat()}.",
            status_code=409,
            error_code="ALREADY_CLOCKED_OUT",
            details={"employee_id": employee_id, "date": day.isoformat()}
        )

class NotClockedInError(AppException):
    def __init__(self, employee_id: int, day: date):
        self.employee_id = employee_id
        self.day = day
        super().__init__(
            message=f"Employee {employee_id} must clock in on {day.isoformat()} before clocking out.",
            status_code=400,
            error_code="NOT_CLOCKED_IN",
            details={"employee_id": employee_id, "date": day.isoformat()}
        )

class AttendanceAlreadyExistsError(AppException):
    def __init__(self, employee_id: int, day: date):
        self.employee_id = employee_id
        self.day = day
        super().__init__(
            message=f"Attendance record already exists for employee {employee_id} on {day.isoformat()}.",
            status_code=409,
            error_code="ATTENDANCE_ALREADY_EXISTS",
            details={"employee_id": employee_id, "date": day.isoformat()}
        )

class AttendanceNotFoundError(AppException):
    def __init__(self, attendance_id: int):
        super().__init__(
            message=f"Attendance record with ID {attendance_id} not found.",
            status_code=404,
            error_code="ATTENDANCE_NOT_FOUND",
            details={"attendance_id": attendance_id}
        )

# --- Leave requests ---

class ValidationError(AppException):
    """Field-scoped business validation failure. Not pydantic's ValidationError."""
    def __init__(self, field: str, message: str):
        self.errors: Dict[str, List[str]] = {field: [message]}
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details={"errors": self.errors}
        )

    @property
    def field(self) -> str:
        return next(iter(self.errors))

class ConflictingLeaveRequestError(AppException):
    def __init__(self, start_date: date, end_date: date):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            message=(
                f"Leave conflict detected for the period "
                f"{start_date:%d/%m/%Y} to {end_date:%d/%m/%Y}."
            ),
            status_code=409,
            error_code="CONFLICTING_LEAVE_REQUEST",
            details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()}
        )

class LeaveRequestNotFoundError(AppException):
    def __init__(self, request_id: int):
        self.request_id = request_id
        super().__init__(
            message=f"Leave request with ID {request_id} not found.",
            status_code=404,
            error_code="LEAVE_REQUEST_NOT_FOUND",
            details={"request_id": request_id}
        )

class InvalidStatusTransitionError(AppException):
    def __init__(self, current_status: str, attempted_status: str):
        self.current_status = current_status
        self.attempted_status = attempted_status
        super().__init__(
            message=f"Invalid status transition from '{current_status}' to '{attempted_status}'.",
            status_code=400,
            error_code="INVALID_STATUS_TRANSITION",
            details={"current_status": current_status, "attempted_status": attempted_status}
        )

class ConcurrentModificationError(AppException):
    """A compare-and-set at the store boundary lost against a concurrent writer."""
    def __init__(self, entity: str, key: Dict[str, Any]):
        super().__init__(
            message=f"The {entity} was modified by a concurrent request. Please retry.",
            status_code=409,
            error_code="CONCURRENT_MODIFICATION",
            details={"entity": entity, **key}
        )
