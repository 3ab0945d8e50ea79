from typing import Optional

from portal.schemas.common import CamelModel


# ------------------------------------------------------------
# CLASS CREATE
# ------------------------------------------------------------
class ClassCreate(CamelModel):
    class_id: Optional[str] = None
    class_name: Optional[str] = None
    course_year: Optional[str] = None
    faculty_id: Optional[str] = None
    department_name: Optional[str] = None


# ------------------------------------------------------------
# CLASS UPDATE (class id comes from the path)
# ------------------------------------------------------------
class ClassUpdate(CamelModel):
    class_name: Optional[str] = None
    course_year: Optional[str] = None
    department_name: Optional[str] = None
