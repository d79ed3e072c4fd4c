from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.dependencies import get_leave_service
from app.models.leave_request import LeaveStatus
from app.schemas.leave import (
    ConflictCheckResponse,
    LeaveRequestCreate,
    LeaveRequestResponse,
    LeaveStatusUpdate,
    LeaveStatusUpdateResponse,
    RemainingLeaveResponse,
)
from app.services.leave_service import LeaveService

router = APIRouter(
    prefix="/leave-requests",
    tags=["leave"]
)


@router.post("", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
def create_leave_request(
    payload: LeaveRequestCreate,
    service: LeaveService = Depends(get_leave_service),
):
    return service.create_leave_request(
        payload.employee_id,
        payload.leave_type,
        payload.start_date,
        payload.end_date,
        payload.reason,
    )


# Declared before /{request_id} so "pending" is not parsed as an id
@router.get("/pending", response_model=List[LeaveRequestResponse])
def list_pending_requests(service: LeaveService = Depends(get_leave_service)):
    return service.list_pending()


@router.get("/status/{leave_status}", response_model=List[LeaveRequestResponse])
def list_requests_by_status(
    leave_status: LeaveStatus,
    service: LeaveService = Depends(get_leave_service),
):
    return service.list_by_status(leave_status)


@router.get("/employee/{employee_id}", response_model=List[LeaveRequestResponse])
def list_employee_requests(
    employee_id: int,
    service: LeaveService = Depends(get_leave_service),
):
    return service.list_by_employee(employee_id)


@router.get("/employee/{employee_id}/remaining/{year}", response_model=RemainingLeaveResponse)
def get_remaining_leave_days(
    employee_id: int,
    year: int,
    service: LeaveService = Depends(get_leave_service),
):
    remaining = service.get_remaining_leave_days(employee_id, year)
    return RemainingLeaveResponse(employee_id=employee_id, year=year, remaining_days=remaining)


@router.get("/employee/{employee_id}/conflicts", response_model=ConflictCheckResponse)
def check_conflicts(
    employee_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
    exclude_request_id: Optional[int] = Query(None),
    service: LeaveService = Depends(get_leave_service),
):
    has_conflict = service.has_conflict(employee_id, start_date, end_date, exclude_request_id)
    return ConflictCheckResponse(
        employee_id=employee_id,
        start_date=start_date,
        end_date=end_date,
        has_conflict=has_conflict,
    )


@router.get("/{request_id}", response_model=LeaveRequestResponse)
def get_leave_request(
    request_id: int,
    service: LeaveService = Depends(get_leave_service),
):
    return service.get_leave_request(request_id)


@router.put("/{request_id}/status", response_model=LeaveStatusUpdateResponse)
def update_leave_status(
    request_id: int,
    payload: LeaveStatusUpdate,
    service: LeaveService = Depends(get_leave_service),
):
    service.update_status(request_id, payload.status, payload.manager_comments)
    return LeaveStatusUpdateResponse(success=True, message="Leave request status updated successfully")
