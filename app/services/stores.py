"""
Persistence collaborators for the attendance and leave services.

The services only talk to the database through these narrow classes. Writes
that follow a check (create-if-absent, set-if-unset, transition-if-pending)
are expressed as compare-and-set statements so that a concurrent request that
raced past the check cannot silently overwrite the winner.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import AttendanceAlreadyExistsError, ConcurrentModificationError
from app.models.attendance import Attendance
from app.models.employee import Employee
from app.models.leave_request import LeaveRequest

logger = logging.getLogger(__name__)


def _guarded_update(db: Session, model, record_id: int, expected: Dict[str, Any], values: Dict[str, Any]) -> bool:
    """
    UPDATE ... WHERE id = :id AND <expected>; commits and returns True only
    when exactly one row matched. `None` in `expected` means IS NULL.
    """
    conditions = [model.id == record_id]
    for column_name, expected_value in expected.items():
        column = getattr(model, column_name)
        conditions.append(column.is_(None) if expected_value is None else column == expected_value)

    result = db.execute(
        update(model)
        .where(*conditions)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        return False
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    return True


class EmployeeDirectory:
    def __init__(self, db: Session):
        self.db = db

    def exists(self, employee_id: int) -> bool:
        return self.db.query(Employee.id).filter(Employee.id == employee_id).first() is not None


class AttendanceStore:
    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Attendance).options(joinedload(Attendance.employee))

    def get_by_id(self, attendance_id: int) -> Optional[Attendance]:
        return self._query().filter(Attendance.id == attendance_id).first()

    def find_by_employee_and_date(self, employee_id: int, day: date) -> Optional[Attendance]:
        return self._query().filter(
            Attendance.employee_id == employee_id,
            Attendance.date == day
        ).first()

    def find_by_employee(
        self,
        employee_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[Attendance]:
        query = self._query().filter(Attendance.employee_id == employee_id)
        if start_date:
            query = query.filter(Attendance.date >= start_date)
        if end_date:
            query = query.filter(Attendance.date <= end_date)
        return query.order_by(Attendance.date).all()

    def find_by_date(self, day: date) -> List[Attendance]:
        return self._query().filter(Attendance.date == day).order_by(Attendance.employee_id).all()

    def add(self, record: Attendance) -> Attendance:
        """Insert a record; the (employee_id, date) unique constraint arbitrates races."""
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(
                "Duplicate attendance insert rejected by constraint",
                extra={"employee_id": record.employee_id, "date": str(record.date)}
            )
            raise AttendanceAlreadyExistsError(record.employee_id, record.date)
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(record)
        return record

    def compare_and_set(self, record: Attendance, expected: Dict[str, Any], values: Dict[str, Any]) -> bool:
        if not _guarded_update(self.db, Attendance, record.id, expected, values):
            return False
        self.db.refresh(record)
        return True


class LeaveRequestStore:
    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(LeaveRequest).options(joinedload(LeaveRequest.employee))

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        return self._query().filter(LeaveRequest.id == request_id).first()

    def find_by_employee(self, employee_id: int) -> List[LeaveRequest]:
        return self._query().filter(
            LeaveRequest.employee_id == employee_id
        ).order_by(LeaveRequest.start_date).all()

    def find_by_status(self, status: str) -> List[LeaveRequest]:
        return self._query().filter(
            LeaveRequest.status == status
        ).order_by(LeaveRequest.start_date, LeaveRequest.id).all()

    def current_version(self, employee_id: int) -> int:
        version = self.db.query(Employee.leave_version).filter(Employee.id == employee_id).scalar()
        return version or 0

    def add(self, request: LeaveRequest, expected_version: int) -> LeaveRequest:
        """
        Insert a request only if the employee's leave schedule is still at
        `expected_version`, i.e. nobody inserted a request since the caller
        ran its overlap check.
        """
        bumped = self.db.execute(
            update(Employee)
            .where(Employee.id == request.employee_id, Employee.leave_version == expected_version)
            .values(leave_version=expected_version + 1)
            .execution_options(synchronize_session=False)
        )
        if bumped.rowcount != 1:
            self.db.rollback()
            raise ConcurrentModificationError("leave schedule", {"employee_id": request.employee_id})

        self.db.add(request)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(request)
        return request

    def compare_and_set_status(self, request: LeaveRequest, expected_status: str, values: Dict[str, Any]) -> bool:
        if not _guarded_update(self.db, LeaveRequest, request.id, {"status": expected_status}, values):
            return False
        self.db.refresh(request)
        return True
