"""
Attendance Service Layer

Clock-in / clock-out state machine for one employee-day record and the
worked-hours / overtime split.

Lifecycle of a record (one per employee and UTC calendar date):
- created on first clock-in, or explicitly via create_attendance
- clock_in set once, clock_out set once and only after clock_in
- worked/overtime hours recomputed whenever both clock times are present
"""
from datetime import date, datetime, time, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    AlreadyClockedInError,
    AlreadyClockedOutError,
    AttendanceAlreadyExistsError,
    AttendanceNotFoundError,
    EmployeeNotFoundError,
    NotClockedInError,
    ValidationError,
)
from app.core.time_utils import month_bounds, split_timestamp, time_span, to_utc_date, utc_today, utcnow
from app.models.attendance import Attendance
from app.services.base import BaseService
from app.services.stores import AttendanceStore, EmployeeDirectory

NORMAL_WORKING_HOURS = Decimal("8.0")
_TWO_PLACES = Decimal("0.01")
_SECONDS_PER_HOUR = Decimal(3600)
_ZERO = Decimal("0.00")


def append_notes(existing: Optional[str], addition: Optional[str]) -> Optional[str]:
    """Join notes with '; ', without a leading separator when nothing is there yet."""
    if not addition:
        return existing
    if not existing:
        return addition
    return f"{existing}; {addition}"


def calculate_worked_hours(
    clock_in: Optional[time],
    clock_out: Optional[time],
    break_duration: Optional[timedelta] = None,
    normal_hours: Decimal = NORMAL_WORKING_HOURS,
) -> Optional[Tuple[Decimal, Decimal]]:
    """
    Split the elapsed time of a day into (worked_hours, overtime_hours).

    Returns None unless both clock times are known. Hours up to
    `normal_hours` are regular time; anything beyond is overtime.

    Raises:
        ValidationError: clock_out precedes clock_in, or the break is longer
            than the span between them.
    """
    if clock_in is None or clock_out is None:
        return None

    total = time_span(clock_in, clock_out)
    if total < timedelta(0):
        raise ValidationError("clock_out", "Clock-out time must not be earlier than clock-in time.")
    if break_duration:
        total -= break_duration
        if total < timedelta(0):
            raise ValidationError("break_duration", "Break duration exceeds the time between clock-in and clock-out.")

    hours = (Decimal(str(total.total_seconds())) / _SECONDS_PER_HOUR).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    if hours <= normal_hours:
        return max(_ZERO, hours), _ZERO
    return normal_hours.quantize(_TWO_PLACES), hours - normal_hours


class AttendanceService(BaseService):
    def __init__(
        self,
        db: Session,
        actor: Optional[str] = None,
        directory: Optional[EmployeeDirectory] = None,
        store: Optional[AttendanceStore] = None,
        normal_hours: Optional[Decimal] = None,
    ):
        super().__init__(db, actor)
        self.directory = directory or EmployeeDirectory(db)
        self.store = store or AttendanceStore(db)
        self.normal_hours = (
            Decimal(str(settings.attendance.normal_working_hours)) if normal_hours is None else normal_hours
        )

    def _ensure_employee(self, employee_id: int):
        if not self.directory.exists(employee_id):
            raise EmployeeNotFoundError(employee_id)

    def _hours(self, clock_in, clock_out, break_duration) -> Optional[Tuple[Decimal, Decimal]]:
        return calculate_worked_hours(clock_in, clock_out, break_duration, self.normal_hours)

    def clock_in(self, employee_id: int, timestamp: datetime, notes: Optional[str] = None) -> Attendance:
        self._ensure_employee(employee_id)
        day, moment = split_timestamp(timestamp)

        existing = self.store.find_by_employee_and_date(employee_id, day)
        if existing is None:
            record = Attendance(
                employee_id=employee_id,
                date=day,
                clock_in=moment,
                notes=notes or None,
                created_by=self.actor,
            )
            try:
                record = self.store.add(record)
            except AttendanceAlreadyExistsError:
                # Lost the insert race to a concurrent clock-in for the same day
                raise AlreadyClockedInError(employee_id, day)
            self.log_info("Employee clocked in", employee_id=employee_id, date=day.isoformat())
            return record

        if existing.clock_in is not None:
            self.log_warning("Rejected duplicate clock-in", employee_id=employee_id, date=day.isoformat())
            raise AlreadyClockedInError(employee_id, day)

        values = {
            "clock_in": moment,
            "notes": append_notes(existing.notes, notes),
            "updated_at": utcnow(),
            "updated_by": self.actor,
        }
        hours = self._hours(moment, existing.clock_out, existing.break_duration)
        if hours is not None:
            values["worked_hours"], values["overtime_hours"] = hours

        if not self.store.compare_and_set(existing, {"clock_in": None}, values):
            raise AlreadyClockedInError(employee_id, day)
        self.log_info("Employee clocked in", employee_id=employee_id, date=day.isoformat())
        return existing

    def clock_out(self, employee_id: int, timestamp: datetime, notes: Optional[str] = None) -> Attendance:
        self._ensure_employee(employee_id)
        day, moment = split_timestamp(timestamp)

        record = self.store.find_by_employee_and_date(employee_id, day)
        if record is None or record.clock_in is None:
            self.log_warning("Rejected clock-out without clock-in", employee_id=employee_id, date=day.isoformat())
            raise NotClockedInError(employee_id, day)
        if record.clock_out is not None:
            self.log_warning("Rejected duplicate clock-out", employee_id=employee_id, date=day.isoformat())
            raise AlreadyClockedOutError(employee_id, day)

        worked, overtime = self._hours(record.clock_in, moment, record.break_duration)
        values = {
            "clock_out": moment,
            "notes": append_notes(record.notes, notes),
            "worked_hours": worked,
            "overtime_hours": overtime,
            "updated_at": utcnow(),
            "updated_by": self.actor,
        }
        if not self.store.compare_and_set(record, {"clock_out": None}, values):
            raise AlreadyClockedOutError(employee_id, day)

        self.log_info(
            "Employee clocked out",
            employee_id=employee_id, date=day.isoformat(),
            worked_hours=str(worked), overtime_hours=str(overtime)
        )
        return record

    def create_attendance(
        self,
        employee_id: int,
        day: date,
        clock_in: Optional[time] = None,
        clock_out: Optional[time] = None,
        break_duration: Optional[timedelta] = None,
        notes: Optional[str] = None,
    ) -> Attendance:
        self._ensure_employee(employee_id)
        day = to_utc_date(day)

        if clock_out is not None and clock_in is None:
            raise ValidationError("clock_in", "Clock-in time is required when clock-out time is given.")
        if self.store.find_by_employee_and_date(employee_id, day) is not None:
            raise AttendanceAlreadyExistsError(employee_id, day)

        record = Attendance(
            employee_id=employee_id,
            date=day,
            clock_in=clock_in,
            clock_out=clock_out,
            break_duration=break_duration,
            notes=notes or None,
            created_by=self.actor,
        )
        hours = self._hours(clock_in, clock_out, break_duration)
        if hours is not None:
            record.worked_hours, record.overtime_hours = hours

        record = self.store.add(record)
        self.log_info("Attendance record created", employee_id=employee_id, date=day.isoformat())
        return record

    def get_attendance(self, attendance_id: int) -> Attendance:
        record = self.store.get_by_id(attendance_id)
        if record is None:
            raise AttendanceNotFoundError(attendance_id)
        return record

    def list_by_employee(
        self,
        employee_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Attendance]:
        self._ensure_employee(employee_id)
        return self.store.find_by_employee(employee_id, start_date, end_date)

    def list_by_date(self, day: date) -> List[Attendance]:
        return self.store.find_by_date(to_utc_date(day))

    def get_today_attendance(self, employee_id: int) -> Optional[Attendance]:
        self._ensure_employee(employee_id)
        return self.store.find_by_employee_and_date(employee_id, utc_today())

    def get_monthly_worked_hours(self, employee_id: int, year: int, month: int) -> Decimal:
        """
        Total time worked in a month: worked_hours + overtime_hours summed over
        every record dated within the month. Incomplete days contribute 0.
        """
        self._ensure_employee(employee_id)
        if not 1 <= month <= 12:
            raise ValidationError("month", "Month must be between 1 and 12.")
        if not date.min.year <= year <= date.max.year:
            raise ValidationError("year", f"Year must be between {date.min.year} and {date.max.year}.")

        first, last = month_bounds(year, month)
        total = _ZERO
        for record in self.store.find_by_employee(employee_id, first, last):
            total += Decimal(record.worked_hours or 0) + Decimal(record.overtime_hours or 0)
        return total.quantize(_TWO_PLACES)
