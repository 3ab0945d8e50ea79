from typing import Literal, Optional

from pydantic import ConfigDict

from portal.models.directory import Department
from portal.schemas.common import CamelModel


# -------------------------------------------------------------------
# LOGIN REQUEST
# -------------------------------------------------------------------
class LoginRequest(CamelModel):
    username: Optional[str] = None
    password: Optional[str] = None
    department: Optional[str] = None
    is_student_login: bool = False

    model_config = ConfigDict(json_schema_extra={
        "examples": [
            {
                "username": "GV01",
                "password": "123456",
                "department": "IT Department",
                "isStudentLogin": False
            },
            {
                "username": "N21DCCN001",
                "department": "IT Department",
                "isStudentLogin": True
                # Students sign in with their ID only
            }
        ]
    })


# -------------------------------------------------------------------
# SESSION USER (carried inside the access token)
# -------------------------------------------------------------------
class SessionUser(CamelModel):
    id: str
    username: str
    full_name: str
    role: Literal["LECTURER", "STUDENT"]
    group_name: Optional[str] = None
    department: Department
    server_name: str
    is_student: bool = False

