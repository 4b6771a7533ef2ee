"""Authentication endpoints: register, login, refresh, tenant switch, current user."""

from fastapi import APIRouter, status

from workhub.api.deps import Ctx, Session
from workhub.models.account import AccountCreate
from workhub.models.auth import (
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    SwitchTenantRequest,
    UserInfo,
)
from workhub.services import accounts

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(body: AccountCreate, session: Session) -> AuthResponse:
    return await accounts.register(session, body)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, session: Session) -> AuthResponse:
    """Authenticate with phone number + password, receive a token pair."""
    return await accounts.login(session, body.phone_num, body.password)


@router.post("/refresh", response_model=AuthResponse)
async def refresh(body: RefreshRequest, session: Session) -> AuthResponse:
    return await accounts.refresh(session, body.refresh_token)


@router.post("/switch-tenant", response_model=AuthResponse)
async def switch_tenant(body: SwitchTenantRequest, ctx: Ctx, session: Session) -> AuthResponse:
    return await accounts.switch_tenant(ctx, session, body.tenant_id)


@router.get("/me", response_model=UserInfo)
async def get_me(ctx: Ctx, session: Session) -> UserInfo:
    return await accounts.me(ctx, session)
