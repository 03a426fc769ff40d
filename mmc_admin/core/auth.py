from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Dict, Any, Union, Tuple
import logging

import bcrypt
from jose import JWTError, jwt
from sqlmodel import Session, select

from mmc_admin.core.config import settings
from mmc_admin.core.clock import as_utc, utcnow
from mmc_admin.core.audit_log import get_audit_logger
from mmc_admin.core.exceptions import (
    InvalidCredentialsError,
    AccountLockedError,
    InvalidTokenError,
    AccountNotFoundError,
)
from mmc_admin.models.user import User
from mmc_admin.schemas.auth import Principal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SuperuserAccount:
    """The built-in administrator. Never stored, never locked out."""
    id: str
    username: str
    role: str

    def to_principal(self) -> Principal:
        return Principal(id=self.id, username=self.username, role=self.role)


# Result of an account lookup: the superuser, a stored account, or nothing
AccountLookup = Union[SuperuserAccount, User, None]


def get_superuser() -> SuperuserAccount:
    return SuperuserAccount(
        id=settings.SUPERUSER_ID,
        username=settings.SUPERUSER_USERNAME,
        role=settings.SUPERUSER_ROLE,
    )


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))

def get_password_hash(password: str) -> str:
    salt = bcrypt.gensalt()
    hashed_password = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed_password.decode('utf-8')

def user_principal(user: User) -> Principal:
    return Principal(
        id=str(user.id),
        username=user.username,
        email=user.email,
        role=user.role.value if hasattr(user.role, "value") else str(user.role),
        profile=user.profile,
    )

def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
    issued_at: Optional[datetime] = None
) -> str:
    """
    Create a signed access token.

    Args:
        data: Token payload data (must include 'sub' for the account id)
        expires_delta: Custom lifetime, defaults to ACCESS_TOKEN_EXPIRE_HOURS
        issued_at: Issue time, defaults to now

    Returns:
        Encoded JWT access token
    """
    to_encode = data.copy()
    now = as_utc(issued_at or utcnow())

    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS)

    # Ensure 'sub' is a string as required by JWT spec
    if "sub" in to_encode:
        to_encode["sub"] = str(to_encode["sub"])

    to_encode.update({
        "exp": expire,
        "iat": now,
        "type": "access",
    })

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def issue_token(principal: Principal, issued_at: Optional[datetime] = None) -> str:
    return create_access_token(
        {"sub": principal.id, "username": principal.username, "role": principal.role},
        issued_at=issued_at,
    )

def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Check signature and expiry and return the claims.

    Raises:
        InvalidTokenError: tampered, expired, malformed or not an access token
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.info(f"Rejected access token: {e}")
        raise InvalidTokenError()

    if payload.get("type") != "access" or not payload.get("sub"):
        raise InvalidTokenError()
    return payload

def verify_access_token(db: Session, token: str) -> Principal:
    """
    Resolve a bearer token to the principal it was issued for.

    The superuser is rebuilt from the claims alone; stored accounts must
    still exist and be active.
    """
    payload = decode_access_token(token)
    subject = payload["sub"]

    if subject == settings.SUPERUSER_ID:
        return Principal(
            id=subject,
            username=payload.get("username", settings.SUPERUSER_USERNAME),
            role=payload.get("role", settings.SUPERUSER_ROLE),
        )

    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise InvalidTokenError()

    user = db.get(User, user_id)
    if not user or not user.active:
        raise AccountNotFoundError()
    return user_principal(user)

def lookup_account(db: Session, username: str) -> AccountLookup:
    if username == settings.SUPERUSER_USERNAME:
        return get_superuser()
    return db.exec(select(User).where(User.username == username)).first()

def is_user_locked(user: User, now: Optional[datetime] = None) -> bool:
    if not user.locked_until:
        return False
    return as_utc(user.locked_until) > as_utc(now or utcnow())

def increment_login_attempts(db: Session, user: User, now: Optional[datetime] = None) -> bool:
    """Count a failed attempt. Returns True when this attempt locked the account."""
    now = as_utc(now or utcnow())
    user.login_attempts = (user.login_attempts or 0) + 1
    locked = False

    if user.login_attempts >= settings.MAX_LOGIN_ATTEMPTS:
        user.locked_until = now + timedelta(minutes=settings.LOCKOUT_DURATION_MINUTES)
        locked = True

    user.updated_at = now
    db.add(user)
    db.commit()
    return locked

def reset_login_attempts(db: Session, user: User, now: Optional[datetime] = None):
    now = as_utc(now or utcnow())
    user.login_attempts = 0
    user.locked_until = None
    user.last_login = now
    user.updated_at = now
    db.add(user)
    db.commit()

def authenticate(
    db: Session,
    username: str,
    password: str,
    ip_address: Optional[str] = None,
    now: Optional[datetime] = None
) -> Tuple[Principal, str]:
    """
    Check credentials and issue a token.

    Returns:
        Tuple of (principal, access_token)

    Raises:
        InvalidCredentialsError: unknown account, wrong password or inactive account
        AccountLockedError: stored account inside its lock window
    """
    audit_logger = get_audit_logger()
    now = as_utc(now or utcnow())
    account = lookup_account(db, username)

    if isinstance(account, SuperuserAccount):
        if password != settings.SUPERUSER_PASSWORD:
            audit_logger.log_login_failed(username, "invalid_password", ip_address)
            raise InvalidCredentialsError()
        principal = account.to_principal()

    elif account is None:
        audit_logger.log_login_failed(username, "unknown_account", ip_address)
        raise InvalidCredentialsError()

    else:
        user = account
        if is_user_locked(user, now):
            audit_logger.log_login_locked(str(user.id), user.username, ip_address)
            raise AccountLockedError()

        # Lock window elapsed: start counting again from zero
        if user.locked_until:
            user.login_attempts = 0
            user.locked_until = None

        if not verify_password(password, user.password_hash):
            if increment_login_attempts(db, user, now):
                audit_logger.log_account_locked(str(user.id), user.username, user.login_attempts, ip_address)
            audit_logger.log_login_failed(username, "invalid_password", ip_address)
            raise InvalidCredentialsError()

        if not user.active:
            audit_logger.log_login_failed(username, "inactive_account", ip_address)
            raise InvalidCredentialsError()

        reset_login_attempts(db, user, now)
        db.refresh(user)
        principal = user_principal(user)

    token = issue_token(principal)
    audit_logger.log_login_success(principal.id, principal.username, ip_address)
    audit_logger.log_token_issued(principal.id, principal.username, ip_address)
    return principal, token
