from datetime import date
from typing import Optional

from portal.schemas.common import CamelModel


# ------------------------------------------------------------
# TUITION PAYMENT
# ------------------------------------------------------------
class TuitionPaymentRequest(CamelModel):
    student_id: Optional[str] = None
    academic_year: Optional[str] = None
    semester: Optional[int] = None
    payment_date: Optional[date] = None
    amount_paid: Optional[int] = None
    department_name: Optional[str] = None


# ------------------------------------------------------------
# TUITION LOOKUPS (POST variants of the GET endpoints)
# ------------------------------------------------------------
class DetailedFeeRequest(CamelModel):
    student_id: Optional[str] = None
    department_name: Optional[str] = None


class PaymentDetailsRequest(CamelModel):
    student_id: Optional[str] = None
    academic_year: Optional[str] = None
    semester: Optional[int] = None
    department_name: Optional[str] = None
