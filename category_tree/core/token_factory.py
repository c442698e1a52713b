"""Create and decode HS256 bearer tokens.

Session management lives outside this service; the tokens only carry the
caller's user id (``sub``) so requests can be scoped to an owner.
"""

import base64
import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

_ISSUER = "category-tree"


@dataclass(frozen=True)
class TokenPayload:
    """Decoded token payload."""
    sub: str
    role: str
    exp: datetime


def create_token(
    subject: str,
    secret: str,
    role: str = "user",
    expires_hours: int = 24,
) -> str:
    """Create a signed token for ``subject`` that expires after ``expires_hours``."""
    now = time.time()
    payload = {
        "sub": subject,
        "role": role,
        "iat": int(now),
        "exp": int(now + expires_hours * 3600),
        "iss": _ISSUER,
    }
    header = {"alg": "HS256", "typ": "JWT"}

    signing_input = b".".join([
        _b64encode(json.dumps(header).encode()),
        _b64encode(json.dumps(payload).encode()),
    ])
    signature = hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()
    return (signing_input + b"." + _b64encode(signature)).decode()


def decode_token(token: str, secret: str) -> Optional[TokenPayload]:
    """Validate signature and expiry.

    Returns ``None`` on any failure (bad signature, expired, malformed,
    missing subject); callers decide what absence means.
    """
    try:
        parts = token.encode().split(b".")
        if len(parts) != 3:
            return None

        expected_sig = hmac.new(secret.encode(), parts[0] + b"." + parts[1], hashlib.sha256).digest()
        if not hmac.compare_digest(expected_sig, _b64decode(parts[2])):
            return None

        payload = json.loads(_b64decode(parts[1]))
        exp = payload.get("exp", 0)
        if time.time() > exp or not payload.get("sub"):
            return None

        return TokenPayload(
            sub=payload["sub"],
            role=payload.get("role", "user"),
            exp=datetime.fromtimestamp(exp, tz=timezone.utc),
        )
    except (json.JSONDecodeError, KeyError, ValueError, IndexError):
        return None


def _b64encode(data: bytes) -> bytes:
    return base64.urlsafe_b64encode(data).rstrip(b"=")


def _b64decode(data: bytes) -> bytes:
    padding = 4 - len(data) % 4
    if padding != 4:
        data += b"=" * padding
    return base64.urlsafe_b64decode(data)
