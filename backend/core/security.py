# backend/core/security.py
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

import jwt

from config.settings import get_settings
from config.logging import get_logger, log_security_event

logger = get_logger(__name__)
settings = get_settings()


@dataclass(frozen=True)
class SessionContext:
    """Read-only view of the caller, passed explicitly into services.

    The bearer token is kept so that calls to the remote API are made on the
    caller's behalf; the remote API stays the authority for every action.
    """
    user_id: str
    role: str
    branch: str
    token: str
    name: str = ""
    email: str = ""

    @property
    def normalized_role(self) -> str:
        return (self.role or "").lower()


# JWT Token handling
def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token (used by tooling and tests; production tokens come from the remote API)."""
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=30))

    to_encode.update({
        "exp": expire,
        "iat": now,
        "type": "access"
    })

    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify JWT token and return payload."""
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        log_security_event(SecurityEvent.TOKEN_EXPIRED)
        return None
    except jwt.InvalidTokenError as e:
        log_security_event(SecurityEvent.INVALID_TOKEN, details=str(e))
        return None


def session_from_token(token: str) -> Optional[SessionContext]:
    """Build the caller context from a verified token, or None when the token is unusable."""
    payload = verify_token(token)
    if not payload:
        return None

    user_id = payload.get("sub") or payload.get("_id")
    role = payload.get("role")
    branch = payload.get("branch")
    if not user_id or not role or not branch:
        log_security_event(SecurityEvent.INCOMPLETE_TOKEN, user_id=user_id, details="missing sub, role or branch claim")
        return None

    return SessionContext(
        user_id=str(user_id),
        role=str(role),
        branch=str(branch),
        token=token,
        name=payload.get("name", ""),
        email=payload.get("email", ""),
    )


# Security headers
def get_security_headers() -> Dict[str, str]:
    """Get security headers."""
    return {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin"
    }


# Security event types
class SecurityEvent:
    UNAUTHORIZED_ACCESS = "UNAUTHORIZED_ACCESS"
    FORBIDDEN_ACTION = "FORBIDDEN_ACTION"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INVALID_TOKEN = "INVALID_TOKEN"
    INCOMPLETE_TOKEN = "INCOMPLETE_TOKEN"


__all__ = [
    "SessionContext",
    "create_access_token",
    "verify_token",
    "session_from_token",
    "get_security_headers",
    "SecurityEvent"
]
