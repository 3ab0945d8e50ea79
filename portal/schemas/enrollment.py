from typing import Optional

from portal.schemas.common import CamelModel


# ------------------------------------------------------------
# REGISTER / CANCEL A STUDENT IN A CREDIT CLASS
# ------------------------------------------------------------
class EnrollmentRequest(CamelModel):
    department_name: Optional[str] = None
    student_id: Optional[str] = None
    credit_class_id: Optional[int] = None


# ------------------------------------------------------------
# GRADE ENTRY (one row of the TYPE_ENROLLMENT table parameter)
# ------------------------------------------------------------
class GradeEntry(CamelModel):
    credit_class_id: int
    student_id: str
    attendance_grade: Optional[float] = None
    midterm_grade: Optional[float] = None
    final_grade: Optional[float] = None


class GradesUpdate(CamelModel):
    department: Optional[str] = None
    grades: Optional[list[GradeEntry]] = None
