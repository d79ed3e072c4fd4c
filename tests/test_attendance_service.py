import pytest
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

from app.core.exceptions import (
    AlreadyClockedInError,
    AlreadyClockedOutError,
    AttendanceAlreadyExistsError,
    AttendanceNotFoundError,
    EmployeeNotFoundError,
    NotClockedInError,
    ValidationError,
)
from app.services.attendance_service import AttendanceService

DAY = date(2025, 1, 10)


def _at(hour, minute=0, day=DAY):
    return datetime(day.year, day.month, day.day, hour, minute)


@pytest.fixture
def service(db_session):
    return AttendanceService(db_session, actor="manager@example.com")


def test_clock_in_creates_record(service, employee):
    record = service.clock_in(employee.id, _at(9), notes="on site")

    assert record.id is not None
    assert record.date == DAY
    assert record.clock_in == time(9, 0)
    assert record.clock_out is None
    assert record.worked_hours == 0
    assert record.notes == "on site"
    assert record.created_by == "manager@example.com"


def test_second_clock_in_same_day_is_rejected(service, employee):
    service.clock_in(employee.id, _at(9))
    with pytest.raises(AlreadyClockedInError):
        service.clock_in(employee.id, _at(10))


def test_clock_in_on_another_day_is_independent(service, employee):
    service.clock_in(employee.id, _at(9))
    other = service.clock_in(employee.id, _at(9, day=DAY + timedelta(days=1)))
    assert other.date == DAY + timedelta(days=1)


def test_clock_out_without_clock_in_is_rejected(service, employee):
    with pytest.raises(NotClockedInError):
        service.clock_out(employee.id, _at(17))


def test_clock_out_computes_hours(service, employee):
    service.clock_in(employee.id, _at(9))
    record = service.clock_out(employee.id, _at(18, 30))

    assert record.clock_out == time(18, 30)
    assert record.worked_hours == Decimal("8")
    assert record.overtime_hours == Decimal("1.5")
    assert record.updated_by == "manager@example.com"


def test_second_clock_out_is_rejected(service, employee):
    service.clock_in(employee.id, _at(9))
    service.clock_out(employee.id, _at(17))
    with pytest.raises(AlreadyClockedOutError):
        service.clock_out(employee.id, _at(18))


def test_clock_out_before_clock_in_is_rejected(service, employee):
    service.clock_in(employee.id, _at(9))
    with pytest.raises(ValidationError) as exc_info:
        service.clock_out(employee.id, _at(8))
    assert exc_info.value.field == "clock_out"
    assert service.store.find_by_employee_and_date(employee.id, DAY).clock_out is None


def test_notes_are_appended(service, employee):
    service.clock_in(employee.id, _at(9), notes="arrived early")
    record = service.clock_out(employee.id, _at(17), notes="left on time")
    assert record.notes == "arrived early; left on time"


def test_timezone_aware_timestamp_is_stored_as_utc(service, employee):
    paris = timezone(timedelta(hours=2))
    record = service.clock_in(employee.id, datetime(2025, 6, 2, 10, 0, tzinfo=paris))
    assert record.date == date(2025, 6, 2)
    assert record.clock_in == time(8, 0)


def test_timezone_shift_can_change_the_calendar_date(service, employee):
    tokyo = timezone(timedelta(hours=9))
    record = service.clock_in(employee.id, datetime(2025, 6, 2, 7, 0, tzinfo=tokyo))
    assert record.date == date(2025, 6, 1)
    assert record.clock_in == time(22, 0)


def test_unknown_employee(service):
    with pytest.raises(EmployeeNotFoundError):
        service.clock_in(9999, _at(9))
    with pytest.raises(EmployeeNotFoundError):
        service.clock_out(9999, _at(17))


def test_concurrent_clock_in_loses_on_unique_constraint(service, employee, monkeypatch):
    service.clock_in(employee.id, _at(9))

    # Second caller read "no record" before the first one committed
    monkeypatch.setattr(service.store, "find_by_employee_and_date", lambda *args: None)
    with pytest.raises(AlreadyClockedInError):
        service.clock_in(employee.id, _at(9, 1))

    monkeypatch.undo()
    records = service.list_by_employee(employee.id)
    assert len(records) == 1
    assert records[0].clock_in == time(9, 0)


def test_create_attendance_with_break(service, employee):
    record = service.create_attendance(
        employee.id, DAY,
        clock_in=time(8, 0), clock_out=time(18, 0),
        break_duration=timedelta(hours=1),
    )
    assert record.worked_hours == Decimal("8")
    assert record.overtime_hours == Decimal("1")


def test_create_attendance_without_times_has_zero_hours(service, employee):
    record = service.create_attendance(employee.id, DAY)
    assert record.worked_hours == 0
    assert record.overtime_hours == 0


def test_create_attendance_duplicate_is_rejected(service, employee):
    service.create_attendance(employee.id, DAY, clock_in=time(9, 0))
    with pytest.raises(AttendanceAlreadyExistsError):
        service.create_attendance(employee.id, DAY)


def test_create_attendance_requires_clock_in_with_clock_out(service, employee):
    with pytest.raises(ValidationError) as exc_info:
        service.create_attendance(employee.id, DAY, clock_out=time(17, 0))
    assert exc_info.value.field == "clock_in"


def test_clock_in_fills_pre_created_record(service, employee):
    service.create_attendance(employee.id, DAY, notes="planned")
    record = service.clock_in(employee.id, _at(9), notes="badge")
    assert record.clock_in == time(9, 0)
    assert record.notes == "planned; badge"


def test_get_attendance(service, employee):
    created = service.create_attendance(employee.id, DAY)
    assert service.get_attendance(created.id).id == created.id
    with pytest.raises(AttendanceNotFoundError):
        service.get_attendance(created.id + 100)


def test_list_by_employee_filters_range(service, employee):
    for offset in range(5):
        service.create_attendance(employee.id, DAY + timedelta(days=offset))

    records = service.list_by_employee(employee.id, DAY + timedelta(days=1), DAY + timedelta(days=3))
    assert [r.date for r in records] == [DAY + timedelta(days=n) for n in (1, 2, 3)]


def test_list_by_date(service, make_employee):
    alice = make_employee("Alice")
    bob = make_employee("Bob")
    service.create_attendance(alice.id, DAY)
    service.create_attendance(bob.id, DAY)
    service.create_attendance(bob.id, DAY + timedelta(days=1))

    assert {r.employee_id for r in service.list_by_date(DAY)} == {alice.id, bob.id}


def test_monthly_worked_hours(service, employee):
    service.create_attendance(employee.id, date(2025, 1, 6), clock_in=time(9, 0), clock_out=time(17, 0))
    service.create_attendance(employee.id, date(2025, 1, 7), clock_in=time(9, 0), clock_out=time(19, 30))
    # Incomplete day and a day outside the month
    service.create_attendance(employee.id, date(2025, 1, 8), clock_in=time(9, 0))
    service.create_attendance(employee.id, date(2025, 2, 3), clock_in=time(9, 0), clock_out=time(17, 0))

    assert service.get_monthly_worked_hours(employee.id, 2025, 1) == Decimal("18.50")


def test_monthly_worked_hours_empty_month(service, employee):
    assert service.get_monthly_worked_hours(employee.id, 2025, 12) == Decimal("0.00")


def test_monthly_worked_hours_rejects_bad_month(service, employee):
    with pytest.raises(ValidationError) as exc_info:
        service.get_monthly_worked_hours(employee.id, 2025, 13)
    assert exc_info.value.field == "month"


@pytest.mark.parametrize("year", [0, 10000])
def test_monthly_worked_hours_rejects_out_of_range_year(service, employee, year):
    with pytest.raises(ValidationError) as exc_info:
        service.get_monthly_worked_hours(employee.id, year, 1)
    assert exc_info.value.field == "year"


def test_monthly_worked_hours_last_representable_month(service, employee):
    assert service.get_monthly_worked_hours(employee.id, 9999, 12) == Decimal("0.00")


def test_zero_threshold_counts_everything_as_overtime(db_session, employee):
    service = AttendanceService(db_session, normal_hours=Decimal("0"))
    assert service.normal_hours == 0

    record = service.create_attendance(employee.id, DAY, clock_in=time(9, 0), clock_out=time(17, 0))
    assert record.worked_hours == 0
    assert record.overtime_hours == Decimal("8")
