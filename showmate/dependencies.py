from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from showmate.core.security import verify_token
from showmate.core.exceptions import UnauthorizedException

# auto_error=False so a missing header gets the same 401 body as a bad token
security = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """
    FastAPI dependency resolving the authenticated principal.

    Flow:
    1. Extract token from Authorization: Bearer <token>
    2. Validate it using the shared SECRET_KEY
    3. Return the uid from the 'sub' claim

    Raises:
        UnauthorizedException: If the header is missing or the token invalid or expired
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedException("Missing authentication token")
    return verify_token(credentials.credentials)
