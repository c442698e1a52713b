"""Authentication dependencies.

    ``require_auth``  -- AuthContext or 401.
    ``optional_auth`` -- AuthContext, or None for anonymous callers.

When ``settings.auth_enabled`` is False both return the development user, so
local work does not need tokens.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .token_factory import decode_token
from ..exceptions import AuthenticationError

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """Identity of the caller. ``user_id`` is the owner id for private nodes."""

    user_id: str
    role: str = "user"


def _dev_context() -> AuthContext:
    return AuthContext(user_id=settings.dev_user_id, role="user")


def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthContext:
    if not settings.auth_enabled:
        return _dev_context()

    if credentials is None:
        raise AuthenticationError("Missing authentication token")

    payload = decode_token(credentials.credentials, settings.jwt_secret_key)
    if payload is None:
        raise AuthenticationError("Invalid or expired token")

    return AuthContext(user_id=payload.sub, role=payload.role)


def optional_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> Optional[AuthContext]:
    """Like require_auth, but anonymous (or badly authenticated) callers get None."""
    if not settings.auth_enabled:
        return _dev_context()

    if credentials is None:
        return None

    payload = decode_token(credentials.credentials, settings.jwt_secret_key)
    if payload is None:
        logger.debug("Ignoring invalid token on optional-auth route")
        return None

    return AuthContext(user_id=payload.sub, role=payload.role)
