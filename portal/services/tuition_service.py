# portal/services/tuition_service.py

from datetime import date, datetime
from typing import Optional

from loguru import logger
from sqlmodel import select

from portal.core.database import ServerConnection
from portal.core.number_words import currency_to_words
from portal.models.student import Student


def format_payment_date(value) -> str:
    """dd/mm/yyyy; unparseable values are returned unchanged."""
    if isinstance(value, (date, datetime)):
        return value.strftime("%d/%m/%Y")
    try:
        return datetime.fromisoformat(str(value)).strftime("%d/%m/%Y")
    except ValueError:
        return str(value)


# ------------------------------------------------------------
# Payments
# ------------------------------------------------------------
async def pay_tuition(
    conn: ServerConnection,
    student_id: str,
    academic_year: str,
    semester: int,
    payment_date: date,
    amount_paid: int,
) -> None:
    logger.info(
        f"Calling SP_PAY_TUITION for student: {student_id}, year: {academic_year}, "
        f"semester: {semester}, amount: {amount_paid}"
    )
    await conn.call_procedure(
        "SP_PAY_TUITION",
        {
            "StudentID": student_id,
            "AcademicYear": academic_year,
            "Semester": semester,
            "PaymentDate": payment_date,
            "AmountPaid": amount_paid,
        },
    )


async def payment_details(conn: ServerConnection, student_id: str, academic_year: str, semester: int) -> dict:
    rows = await conn.call_procedure(
        "SP_DETAILED_TUITION_PAYMENT_INFO",
        {"StudentID": student_id, "AcademicYear": academic_year, "Semester": semester},
    )

    details = [
        {
            "PAYMENT_DATE": format_payment_date(row.get("PAYMENT_DATE")),
            "AMOUNT_PAID": row.get("AMOUNT_PAID") or 0,
        }
        for row in rows
    ]
    total_amount = sum(d["AMOUNT_PAID"] for d in details)
    logger.info(f"Found {len(details)} payment records with total amount: {total_amount}")

    return {
        "paymentDetails": details,
        "totalPayments": len(details),
        "totalAmount": total_amount,
    }


# ------------------------------------------------------------
# Fees
# ------------------------------------------------------------
async def student_info(conn: ServerConnection, student_id: str) -> Optional[dict]:
    return await conn.fetch_one(
        select(
            Student.student_id,
            (Student.last_name + " " + Student.first_name).label("FULL_NAME"),
            Student.class_id,
        ).where(Student.student_id == student_id)
    )


async def detailed_fee(conn: ServerConnection, student_id: str) -> list[dict]:
    """Fee records, newest academic year first, then latest semester first."""
    rows = await conn.call_procedure("SP_DETAILED_TUITION_FEE", {"StudentID": student_id})
    records = sorted(
        rows,
        key=lambda r: (str(r.get("ACADEMIC_YEAR") or ""), r.get("SEMESTER") or 0),
        reverse=True,
    )
    logger.info(f"Fetched {len(records)} tuition records for student {student_id}")
    return records


# ------------------------------------------------------------
# Class tuition report
# ------------------------------------------------------------
async def tuition_report(conn: ServerConnection, class_id: str, academic_year: str, semester: int) -> dict:
    faculty_rows = await conn.call_procedure("SP_GET_FACULTY_BY_CLASS", {"ClassID": class_id})
    faculty_name = (faculty_rows[0].get("FACULTY_NAME") if faculty_rows else None) or "Unknown Faculty"

    rows = await conn.call_procedure(
        "SP_REPORT_TUITION_FEE",
        {"ClassID": class_id, "AcademicYear": academic_year, "Semester": semester},
    )

    total_paid = sum(row.get("AMOUNT_PAID") or 0 for row in rows)

    return {
        "classId": class_id,
        "academicYear": academic_year,
        "semester": str(semester),
        "facultyName": faculty_name,
        "students": [
            {
                "no": i,
                "fullName": row.get("FULL_NAME"),
                "tuitionFee": row.get("FEE_AMOUNT"),
                "amountPaid": row.get("AMOUNT_PAID") or 0,
            }
            for i, row in enumerate(rows, start=1)
        ],
        "summary": {
            "totalStudents": len(rows),
            "totalAmountPaid": total_paid,
            "totalAmountPaidInWords": currency_to_words(total_paid),
        },
    }
