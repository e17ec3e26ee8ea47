from __future__ import annotations
from uuid import UUID
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from geocache.errors import AuthorizationError
from geocache.security import decode_token

security = HTTPBearer(auto_error=False)

async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> UUID | None:
    """Resolved owner id, or None when no bearer token was sent."""
    if credentials is None:
        return None
    try:
        data = decode_token(credentials.credentials)
    except jwt.PyJWTError:
        raise AuthorizationError("Invalid token")
    if data.get("type") != "access":
        raise AuthorizationError("Wrong token type")
    try:
        return UUID(str(data.get("sub")))
    except ValueError:
        raise AuthorizationError("Invalid subject")
