from typing import Optional

from portal.schemas.common import CamelModel


# -------------------------------------------------------------------
# DIRECTORY MAINTENANCE ACTIONS
# -------------------------------------------------------------------
class DepartmentAction(CamelModel):
    action: Optional[str] = None
    department_name: Optional[str] = None
    server_name: Optional[str] = None


# -------------------------------------------------------------------
# CONNECTION DIAGNOSTICS
# -------------------------------------------------------------------
class DiagnoseRequest(CamelModel):
    server_name: Optional[str] = None
    is_student: bool = False
