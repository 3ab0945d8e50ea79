# portal/core/rbac.py

from enum import Enum

from fastapi import Depends

from portal.api.deps import get_current_session
from portal.core.errors import PortalError
from portal.schemas.auth import SessionUser


class DashboardPage(str, Enum):
    CLASSES = "classes"
    STUDENTS = "students"
    SUBJECTS = "subjects"
    CREDIT_CLASSES = "credit-classes"
    STUDENT_GRADES = "student-grades"
    REPORTS = "reports"
    COURSE_REGISTRATION = "course-registration"
    TUITION_PAYMENT = "tuition-payment"
    TUITION_REPORTS = "tuition-reports"
    DEPARTMENTS = "departments"
    SETTINGS = "settings"


class Role(str, Enum):
    LECTURER = "LECTURER"
    DEPARTMENT = "DEPARTMENT"
    STUDENT = "STUDENT"
    FINANCE = "FINANCE"


_ACADEMIC_PAGES = [
    DashboardPage.CLASSES,
    DashboardPage.STUDENTS,
    DashboardPage.SUBJECTS,
    DashboardPage.CREDIT_CLASSES,
    DashboardPage.STUDENT_GRADES,
    DashboardPage.REPORTS,
    DashboardPage.DEPARTMENTS,
    DashboardPage.SETTINGS,
]

_FINANCE_PAGES = [DashboardPage.TUITION_PAYMENT, DashboardPage.TUITION_REPORTS]


# ------------------------------------------------------------
# Role -> page table
# ------------------------------------------------------------
ROLE_PERMISSIONS: dict[Role, dict] = {
    Role.LECTURER: {
        "allowed": _ACADEMIC_PAGES,
        "restricted": _FINANCE_PAGES + [DashboardPage.COURSE_REGISTRATION],
        "display_name": "Lecturer",
        "description": "Access to academic management features",
    },
    Role.DEPARTMENT: {
        "allowed": _ACADEMIC_PAGES,
        "restricted": _FINANCE_PAGES + [DashboardPage.COURSE_REGISTRATION],
        "display_name": "Department",
        "description": "Access to departmental management features",
    },
    Role.STUDENT: {
        "allowed": [DashboardPage.COURSE_REGISTRATION],
        "restricted": _ACADEMIC_PAGES + _FINANCE_PAGES,
        "display_name": "Student",
        "description": "Access to course registration only",
    },
    Role.FINANCE: {
        "allowed": _FINANCE_PAGES,
        "restricted": _ACADEMIC_PAGES + [DashboardPage.COURSE_REGISTRATION],
        "display_name": "Finance",
        "description": "Access to financial management features",
    },
}

_ROLE_ALIASES = {
    "PGV": Role.LECTURER,
    "LECTURER": Role.LECTURER,
    "KHOA": Role.DEPARTMENT,
    "DEPARTMENT": Role.DEPARTMENT,
    "SV": Role.STUDENT,
    "STUDENT": Role.STUDENT,
    "PKT": Role.FINANCE,
    "FINANCE": Role.FINANCE,
}


def map_auth_role(auth_role) -> Role:
    """Maps database role names (PGV, KHOA, SV, PKT) to a Role. Unknown -> STUDENT."""
    if isinstance(auth_role, Role):
        return auth_role
    return _ROLE_ALIASES.get(str(auth_role or "").strip().upper(), Role.STUDENT)


def _page(page) -> DashboardPage:
    return page if isinstance(page, DashboardPage) else DashboardPage(page)


def has_page_access(role, page) -> bool:
    try:
        page = _page(page)
    except ValueError:
        return False
    return page in ROLE_PERMISSIONS[map_auth_role(role)]["allowed"]


def get_allowed_pages(role) -> list[DashboardPage]:
    return list(ROLE_PERMISSIONS[map_auth_role(role)]["allowed"])


def get_restricted_pages(role) -> list[DashboardPage]:
    return list(ROLE_PERMISSIONS[map_auth_role(role)]["restricted"])


def get_role_info(role) -> dict:
    role = map_auth_role(role)
    permissions = ROLE_PERMISSIONS[role]
    return {
        "role": role.value,
        "displayName": permissions["display_name"],
        "description": permissions["description"],
        "allowedPages": [p.value for p in permissions["allowed"]],
        "restrictedPages": [p.value for p in permissions["restricted"]],
    }


def landing_page(role) -> str:
    """First page a role may open; used as the redirect target after a denial."""
    allowed = get_allowed_pages(role)
    return f"/dashboard/{allowed[0].value}" if allowed else "/login"


def permission_role(user: SessionUser) -> Role:
    """
    The stored procedure's role name (group_name: PGV, KHOA, PKT...) decides
    when it is a known alias. Otherwise the login's own role is used.
    """
    if user.group_name and user.group_name.strip().upper() in _ROLE_ALIASES:
        return map_auth_role(user.group_name)
    return map_auth_role(user.role)


# ------------------------------------------------------------
# Route dependency
# ------------------------------------------------------------
def AllowPages(*pages):
    """
    Admits the session when its role may open ANY of `pages`.
    Rejected sessions get 403 with a redirect hint to their landing page.
    """
    allowed_pages = {_page(p) for p in pages}

    async def page_checker(current_user: SessionUser = Depends(get_current_session)):
        role = permission_role(current_user)

        if not any(has_page_access(role, p) for p in allowed_pages):
            display = ROLE_PERMISSIONS[role]["display_name"]
            raise PortalError(
                f"Access denied. {display} role cannot access this page.",
                status_code=403,
                redirectTo=landing_page(role),
            )

        return current_user

    return page_checker
