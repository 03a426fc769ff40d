# mmc_admin/routers/auth.py
import logging
from fastapi import APIRouter, Depends, Request, status
from sqlmodel import Session

from mmc_admin.core.auth import authenticate, user_principal
from mmc_admin.core.audit_log import get_audit_logger
from mmc_admin.core.deps import get_current_principal, get_client_ip, require_admin
from mmc_admin.crud.user import user_crud
from mmc_admin.database.engine import get_db
from mmc_admin.schemas.auth import (
    LoginRequest, RegisterRequest, Principal,
    LoginResponse, RegisterResponse, VerifyResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: LoginRequest,
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Exchange username and password for a 24 hour access token.

    Stored accounts are locked for a while after repeated failures;
    the built-in administrator is never locked.
    """
    principal, token = authenticate(
        db, login_data.username, login_data.password, ip_address=get_client_ip(request)
    )
    logger.info(f"Login succeeded for {principal.username}")
    return LoginResponse(token=token, user=principal)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    register_data: RegisterRequest,
    db: Session = Depends(get_db),
    current_principal: Principal = Depends(require_admin)
):
    """
    Create an admin account.

    **Permissions**: Admin only
    """
    user = user_crud.create_user(db, register_data)
    get_audit_logger().log_account_created(str(user.id), user.username, current_principal.username)
    logger.info(f"Account {user.username} created by {current_principal.username}")
    return RegisterResponse(message="User created successfully", user=user_principal(user))


@router.get("/verify", response_model=VerifyResponse)
async def verify(current_principal: Principal = Depends(get_current_principal)):
    """Return the principal behind the bearer token."""
    return VerifyResponse(user=current_principal)
