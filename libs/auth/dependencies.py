from datetime import timedelta
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError

from libs.auth.models import AuthUser, Role
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.errors import AuthenticationError, AuthorizationError

settings = get_settings()
security = HTTPBearer(auto_error=False)


def create_access_token(
    user_id: str,
    role: Role = "user",
    email: Optional[str] = None,
    expires_in: timedelta = timedelta(hours=12),
) -> str:
    """Issue a signed token for ``user_id``. Used by tooling and tests."""
    payload = {
        "sub": user_id,
        "role": role,
        "exp": int((utc_now() + expires_in).timestamp()),
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


async def get_current_user(
    token: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> AuthUser:
    """
    Validate the bearer JWT and return the authenticated user.
    """
    if token is None:
        raise AuthenticationError("Not authenticated")

    try:
        payload = jwt.decode(
            token.credentials,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
        return AuthUser(**payload)
    except (JWTError, ValidationError):
        raise AuthenticationError("Could not validate credentials")


async def require_admin(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
) -> AuthUser:
    """
    Ensure the caller carries the ``admin`` role.
    """
    if not current_user.is_admin:
        raise AuthorizationError("Admin privileges required")
    return current_user
