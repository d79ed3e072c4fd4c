# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import department, employee, attendance, leave_request

# Explicit class exports for cleaner imports
from .department import Department
from .employee import Employee
from .attendance import Attendance
from .leave_request import LeaveRequest, LeaveStatus, LeaveType

__all__ = [
    "Department",
    "Employee",
    "Attendance",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveType",
]
