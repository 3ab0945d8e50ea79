from typing import Optional

from portal.schemas.common import CamelModel


# ------------------------------------------------------------
# CREDIT CLASS CREATE / UPDATE
# ------------------------------------------------------------
class CreditClassUpsert(CamelModel):
    credit_class_id: Optional[int] = None   # PUT only
    academic_year: Optional[str] = None
    semester: Optional[int] = None
    subject_id: Optional[str] = None
    group_number: Optional[int] = None
    lecturer_id: Optional[str] = None
    faculty_id: Optional[str] = None
    min_students: Optional[int] = None
    canceled_class: Optional[bool] = None
    department_name: Optional[str] = None

    def validation_error(self, updating: bool = False) -> Optional[str]:
        required = [
            self.academic_year,
            self.semester,
            self.subject_id,
            self.group_number,
            self.lecturer_id,
            self.faculty_id,
            self.department_name,
        ]
        if updating:
            required.append(self.credit_class_id)

        if not all(required):
            return "All required fields must be provided"

        if self.min_students is None or self.min_students <= 0:
            return "Minimum students must be greater than 0"

        return None

    def column_values(self) -> dict:
        return {
            "academic_year": self.academic_year,
            "semester": self.semester,
            "subject_id": self.subject_id,
            "group_number": self.group_number,
            "lecturer_id": self.lecturer_id,
            "faculty_id": self.faculty_id,
            "min_students": self.min_students,
            "canceled_class": bool(self.canceled_class),
        }
