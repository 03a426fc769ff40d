from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from mmc_admin.database.engine import get_db
from mmc_admin.core.auth import verify_access_token
from mmc_admin.core.audit_log import get_audit_logger
from mmc_admin.core.exceptions import MissingTokenError, PermissionDeniedError, InvalidTokenError
from mmc_admin.schemas.auth import Principal

# auto_error=False so a missing header maps to our own 401 body
bearer_scheme = HTTPBearer(auto_error=False)


def get_client_ip(request: Request) -> Optional[str]:
    """Extract client IP address from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


def get_current_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> Principal:
    if credentials is None or not credentials.credentials:
        raise MissingTokenError()
    try:
        return verify_access_token(db, credentials.credentials)
    except InvalidTokenError as e:
        get_audit_logger().log_token_rejected(e.message, get_client_ip(request))
        raise


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role != "admin":
        raise PermissionDeniedError()
    return principal
