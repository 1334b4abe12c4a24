from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from ..errors import AuthError
from ..models import User
from ..services.auth import AuthService
from .services import get_auth_service

bearer = HTTPBearer(auto_error=False)


def get_current_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """Resolve the ``Authorization: Bearer <token>`` header to a user.

    Raises AuthError before any route logic runs when the header is missing
    or the token does not verify.
    """
    if creds is None or not creds.credentials:
        raise AuthError("Access token required")
    return auth.authenticate(creds.credentials)
