# portal/schemas/student.py
from datetime import date
from typing import ClassVar, Optional

from portal.schemas.common import CamelModel


# ------------------------------------------------------------
# STUDENT CREATE / UPDATE (same body for POST and PUT)
# ------------------------------------------------------------
class StudentUpsert(CamelModel):
    student_id: Optional[str] = None
    last_name: Optional[str] = None
    first_name: Optional[str] = None
    gender: Optional[bool] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    class_id: Optional[str] = None
    suspended: Optional[bool] = None
    password: Optional[str] = None
    department_name: Optional[str] = None

    REQUIRED: ClassVar[list[str]] = ["student_id", "last_name", "first_name", "class_id", "department_name"]

    def column_values(self) -> dict:
        """Column values with the defaults applied to omitted optional fields."""
        return {
            "last_name": self.last_name,
            "first_name": self.first_name,
            "gender": bool(self.gender),
            "address": self.address or None,
            "date_of_birth": self.date_of_birth,
            "class_id": self.class_id,
            "suspended": bool(self.suspended),
            "password": self.password or "",
        }
