# portal/api/endpoints/access.py

from fastapi import APIRouter, Depends

from portal.api.deps import get_current_session
from portal.core.errors import PortalError
from portal.core.rbac import (
    DashboardPage,
    ROLE_PERMISSIONS,
    get_role_info,
    has_page_access,
    landing_page,
    permission_role,
)
from portal.schemas.auth import SessionUser

router = APIRouter(prefix="/api/access", tags=["Page Access"])


@router.get("/pages")
async def list_pages(current_user: SessionUser = Depends(get_current_session)):
    role = permission_role(current_user)
    info = get_role_info(role)
    return {
        "success": True,
        **info,
        "landingPage": landing_page(role),
    }


@router.get("/pages/{page}")
async def check_page(page: str, current_user: SessionUser = Depends(get_current_session)):
    """Whether the caller's role may open `page`, with a redirect when it may not."""
    valid_pages = {p.value for p in DashboardPage}
    if page not in valid_pages:
        raise PortalError(f"Unknown page: {page}", status_code=404)

    role = permission_role(current_user)
    allowed = has_page_access(role, page)

    response = {"success": True, "page": page, "role": role.value, "hasAccess": allowed}
    if not allowed:
        display = ROLE_PERMISSIONS[role]["display_name"]
        response["message"] = f"Access denied. {display} role cannot access this page."
        response["redirectTo"] = landing_page(role)
    return response
