from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.time_utils import utcnow
from app.dependencies import get_attendance_service
from app.schemas.attendance import (
    AttendanceCreate,
    AttendanceResponse,
    ClockInOutRequest,
    MonthlyHoursResponse,
)
from app.services.attendance_service import AttendanceService

router = APIRouter(prefix="/attendances", tags=["attendance"])


@router.post("/clock-in", response_model=AttendanceResponse)
def clock_in(
    payload: ClockInOutRequest,
    service: AttendanceService = Depends(get_attendance_service),
):
    return service.clock_in(payload.employee_id, payload.timestamp or utcnow(), payload.notes)


@router.post("/clock-out", response_model=AttendanceResponse)
def clock_out(
    payload: ClockInOutRequest,
    service: AttendanceService = Depends(get_attendance_service),
):
    return service.clock_out(payload.employee_id, payload.timestamp or utcnow(), payload.notes)


@router.post("", response_model=AttendanceResponse, status_code=status.HTTP_201_CREATED)
def create_attendance(
    payload: AttendanceCreate,
    service: AttendanceService = Depends(get_attendance_service),
):
    return service.create_attendance(
        payload.employee_id,
        payload.date,
        clock_in=payload.clock_in,
        clock_out=payload.clock_out,
        break_duration=payload.break_duration,
        notes=payload.notes,
    )


@router.get("/{attendance_id}", response_model=AttendanceResponse)
def get_attendance(
    attendance_id: int,
    service: AttendanceService = Depends(get_attendance_service),
):
    return service.get_attendance(attendance_id)


@router.get("/employee/{employee_id}", response_model=List[AttendanceResponse])
def list_employee_attendances(
    employee_id: int,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    service: AttendanceService = Depends(get_attendance_service),
):
    return service.list_by_employee(employee_id, start_date, end_date)


@router.get("/employee/{employee_id}/today", response_model=Optional[AttendanceResponse])
def get_today_attendance(
    employee_id: int,
    service: AttendanceService = Depends(get_attendance_service),
):
    return service.get_today_attendance(employee_id)


@router.get("/employee/{employee_id}/monthly/{year}/{month}", response_model=MonthlyHoursResponse)
def get_monthly_hours(
    employee_id: int,
    year: int,
    month: int,
    service: AttendanceService = Depends(get_attendance_service),
):
    total = service.get_monthly_worked_hours(employee_id, year, month)
    return MonthlyHoursResponse(employee_id=employee_id, year=year, month=month, total_hours=float(total))


@router.get("/date/{day}", response_model=List[AttendanceResponse])
def list_attendances_by_date(
    day: date,
    service: AttendanceService = Depends(get_attendance_service),
):
    return service.list_by_date(day)
