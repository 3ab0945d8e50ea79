# portal/api/deps.py

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from portal.core.security import decode_token
from portal.schemas.auth import SessionUser


# ------------------------------------------------------------
# HTTP Bearer Authentication
# ------------------------------------------------------------
bearer_scheme = HTTPBearer(auto_error=True)


# ------------------------------------------------------------
# Session user from JWT
# ------------------------------------------------------------
async def get_current_session(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> SessionUser:
    """
    Sessions are stateless: the token carries the whole SessionUser,
    so no database round-trip is needed per request.
    """
    token = credentials.credentials

    try:
        payload = decode_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(401, "Session expired")
    except jwt.InvalidTokenError:
        raise HTTPException(401, "Could not validate credentials")

    if not payload.get("sub") or not payload.get("user"):
        raise HTTPException(401, "Invalid token payload")

    return SessionUser.model_validate(payload["user"])
