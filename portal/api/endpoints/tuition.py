# portal/api/endpoints/tuition.py

import re
from typing import Optional

from fastapi import APIRouter, Depends

from portal.core.database import DatabaseManager, get_db_manager
from portal.core.errors import PortalError
from portal.core.rbac import AllowPages, DashboardPage
from portal.schemas.auth import SessionUser
from portal.schemas.tuition import DetailedFeeRequest, PaymentDetailsRequest, TuitionPaymentRequest
from portal.services import tuition_service
from portal.services.department_service import require_department

router = APIRouter(prefix="/api", tags=["Tuition"])

payment_access = AllowPages(DashboardPage.TUITION_PAYMENT)
report_access = AllowPages(DashboardPage.TUITION_REPORTS)

STUDENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9]{1,10}$")
ACADEMIC_YEAR_PATTERN = re.compile(r"^\d{4}-\d{4}$")
VALID_SEMESTERS = (1, 2, 3)


def _bad_request(message: str) -> PortalError:
    return PortalError(message, status_code=400)


async def _connection(manager: DatabaseManager, department_name: str, message: str):
    dept = await require_department(manager, department_name, status_code=400, message=message)
    return await manager.department(dept.server_name)


# -------------------------------------------------------------------
# RECORD A PAYMENT
# -------------------------------------------------------------------
@router.post("/tuition-payment/pay")
async def pay_tuition(
    payload: TuitionPaymentRequest,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(payment_access),
):
    if not payload.student_id or not payload.academic_year or payload.semester is None \
            or payload.payment_date is None or payload.amount_paid is None:
        raise _bad_request("Missing required fields: studentId, academicYear, semester, paymentDate, amountPaid")

    if not payload.department_name:
        raise _bad_request("Department name is required")

    if payload.amount_paid <= 0:
        raise _bad_request("Amount paid must be greater than 0")

    conn = await _connection(manager, payload.department_name, "Invalid department specified")
    await tuition_service.pay_tuition(
        conn,
        payload.student_id,
        payload.academic_year,
        payload.semester,
        payload.payment_date,
        payload.amount_paid,
    )
    return {"success": True, "message": "Payment recorded successfully"}


# -------------------------------------------------------------------
# FEE OVERVIEW OF ONE STUDENT
# -------------------------------------------------------------------
async def _detailed_fee(manager: DatabaseManager, student_id: str, department_name: str, invalid_department: str):
    conn = await _connection(manager, department_name, invalid_department)

    info = await tuition_service.student_info(conn, student_id)
    if not info:
        raise PortalError("Student not found", status_code=404)

    records = await tuition_service.detailed_fee(conn, student_id)
    return {"success": True, "studentInfo": info, "tuitionRecords": records}


@router.get("/tuition/detailed-fee")
async def detailed_fee(
    studentId: Optional[str] = None,
    department: Optional[str] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(payment_access),
):
    if not studentId:
        raise _bad_request("Student ID parameter is required")
    if not department:
        raise _bad_request("Department parameter is required")
    if not STUDENT_ID_PATTERN.match(studentId):
        raise _bad_request("Invalid student ID format")
    return await _detailed_fee(manager, studentId, department, "Invalid department")


@router.post("/tuition/detailed-fee")
async def detailed_fee_post(
    payload: DetailedFeeRequest,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(payment_access),
):
    if not payload.student_id:
        raise _bad_request("Student ID is required")
    if not payload.department_name:
        raise _bad_request("Department name is required")
    return await _detailed_fee(manager, payload.student_id, payload.department_name, "Invalid department specified")


# -------------------------------------------------------------------
# PAYMENTS OF ONE TERM
# -------------------------------------------------------------------
@router.get("/tuition/payment-details")
async def payment_details(
    studentId: Optional[str] = None,
    academicYear: Optional[str] = None,
    semester: Optional[str] = None,
    department: Optional[str] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(payment_access),
):
    if not studentId or not academicYear or not semester:
        raise _bad_request("All parameters are required: studentId, academicYear, semester")
    if not department:
        raise _bad_request("Department parameter is required")
    if not STUDENT_ID_PATTERN.match(studentId):
        raise _bad_request("Invalid student ID format")
    if not ACADEMIC_YEAR_PATTERN.match(academicYear):
        raise _bad_request("Invalid academic year format (expected: YYYY-YYYY)")
    if not semester.isdigit() or int(semester) not in VALID_SEMESTERS:
        raise _bad_request("Invalid semester (must be 1, 2, or 3)")
    conn = await _connection(manager, department, "Invalid department")
    details = await tuition_service.payment_details(conn, studentId, academicYear, int(semester))
    return {"success": True, **details}


@router.post("/tuition/payment-details")
async def payment_details_post(
    payload: PaymentDetailsRequest,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(payment_access),
):
    if not payload.student_id or not payload.academic_year or payload.semester is None:
        raise _bad_request("Required fields: studentId, academicYear, semester")
    if not payload.department_name:
        raise _bad_request("Department name is required")
    conn = await _connection(manager, payload.department_name, "Invalid department specified")
    details = await tuition_service.payment_details(
        conn, payload.student_id, payload.academic_year, payload.semester
    )
    return {"success": True, **details}


# -------------------------------------------------------------------
# CLASS TUITION REPORT
# -------------------------------------------------------------------
@router.get("/tuition-reports")
async def tuition_report(
    classId: Optional[str] = None,
    academicYear: Optional[str] = None,
    semester: Optional[int] = None,
    department: Optional[str] = None,
    manager: DatabaseManager = Depends(get_db_manager),
    _: SessionUser = Depends(report_access),
):
    if not classId or not academicYear or semester is None or not department:
        raise _bad_request("Missing required fields: classId, academicYear, semester, department")

    conn = await _connection(manager, department, "Invalid department specified")
    report = await tuition_service.tuition_report(conn, classId, academicYear, semester)
    return {"success": True, "data": report}
