import hmac
import os
from typing import Optional

from fastapi import Header, HTTPException, status

ADMIN_TOKEN_ENV = "MARKETPLACE_ADMIN_TOKEN"


def parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


def configured_admin_token() -> str:
    # Read per request so the token can be rotated without a restart.
    return os.getenv(ADMIN_TOKEN_ENV, "").strip()


def require_admin(authorization: Optional[str] = Header(default=None)) -> None:
    """Guard for administrative operations such as completing a booking.

    Open when no admin token is configured.
    """
    expected = configured_admin_token()
    if not expected:
        return
    token = parse_bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Admin token required")
    if not hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid admin token")
