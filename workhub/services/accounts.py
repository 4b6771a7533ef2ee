"""Identity & credential service: registration, login, refresh, tenant switching.

Token claims are the authoritative record of who the caller is; the
``UserInfo`` payload returned alongside them is derived for client
convenience only.
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from workhub.core.config import get_settings
from workhub.core.context import RequestContext
from workhub.core.exceptions import (
    AlreadyExistsError,
    InvalidCredentialsError,
    InvalidPasswordError,
    NotFoundError,
    PasswordMismatchError,
    TokenInvalidError,
    UnauthorizedError,
)
from workhub.core.security import (
    Principal,
    decode_refresh_token,
    dummy_verify,
    hash_password,
    issue_access_token,
    issue_refresh_token,
    verify_password,
)
from workhub.models.account import (
    Account,
    AccountCreate,
    AccountRead,
    AccountRole,
    AccountSecurityUpdate,
    AccountUpdate,
)
from workhub.models.auth import AuthResponse, UserInfo
from workhub.models.employee import Employee, EmployeeTenant
from workhub.models.tenant import Tenant, TenantInfo
from workhub.services import repository, roles

logger = logging.getLogger(__name__)

settings = get_settings()


# ── Principal resolution ─────────────────────────────────────

async def _find_by_phone(session: AsyncSession, phone_num: str) -> Account | None:
    stmt = select(Account).where(
        Account.phone_num == phone_num,
        Account.deleted.is_(False),  # type: ignore[attr-defined]
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def _employee_for(session: AsyncSession, account_id: uuid.UUID) -> Employee | None:
    stmt = select(Employee).where(
        Employee.account_id == account_id,
        Employee.deleted.is_(False),  # type: ignore[attr-defined]
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def available_tenants(session: AsyncSession, employee_id: uuid.UUID) -> list[TenantInfo]:
    """Live, active tenant memberships, oldest membership first."""
    stmt = (
        select(Tenant.id, Tenant.name)
        .join(EmployeeTenant, EmployeeTenant.tenant_id == Tenant.id)  # type: ignore[arg-type]
        .where(
            EmployeeTenant.employee_id == employee_id,
            Tenant.deleted.is_(False),  # type: ignore[attr-defined]
            Tenant.is_active.is_(True),  # type: ignore[attr-defined]
        )
        .order_by(EmployeeTenant.created_at, Tenant.name)  # type: ignore[arg-type]
    )
    result = await session.execute(stmt)
    return [TenantInfo(tenant_id=tid, tenant_name=name) for tid, name in result.all()]


async def load_principal(session: AsyncSession, account: Account) -> Principal:
    authorities = await roles.resolve_authorities(session, account.id)
    employee = await _employee_for(session, account.id)

    tenant_ids: tuple[uuid.UUID, ...] = ()
    if employee is not None and employee.is_active:
        tenant_ids = tuple(t.tenant_id for t in await available_tenants(session, employee.id))

    return Principal(
        account_id=account.id,
        phone_num=account.phone_num,
        first_name=account.first_name,
        last_name=account.last_name,
        employee_id=employee.id if employee is not None else None,
        authorities=authorities,
        available_tenant_ids=tenant_ids,
        enabled=account.is_active,
    )


async def _user_info(
    session: AsyncSession, principal: Principal, tenant_id: uuid.UUID | None
) -> UserInfo:
    tenants: list[TenantInfo] = []
    if principal.employee_id is not None and principal.available_tenant_ids:
        tenants = await available_tenants(session, principal.employee_id)
    return UserInfo(
        account_id=principal.account_id,
        phone_num=principal.phone_num,
        first_name=principal.first_name,
        last_name=principal.last_name,
        employee_id=principal.employee_id,
        current_tenant_id=tenant_id,
        tenants=tenants,
        authorities=list(principal.authorities),
    )


async def build_auth_response(
    session: AsyncSession, principal: Principal, tenant_id: uuid.UUID | None
) -> AuthResponse:
    return AuthResponse(
        access_token=issue_access_token(principal, tenant_id),
        refresh_token=issue_refresh_token(principal.account_id),
        token_type=settings.token_type,
        expires_in=settings.access_token_expire_minutes * 60,
        user=await _user_info(session, principal, tenant_id),
    )


# ── Credential flows ─────────────────────────────────────────

async def register(session: AsyncSession, body: AccountCreate) -> AuthResponse:
    if await repository.exists(session, Account, Account.phone_num == body.phone_num):
        raise AlreadyExistsError(f"Account already exists with phone number {body.phone_num}")
    if body.password != body.confirm_password:
        raise PasswordMismatchError("Passwords do not match")

    account = Account(
        phone_num=body.phone_num,
        password_hash=hash_password(body.password),
        first_name=body.first_name,
        last_name=body.last_name,
    )
    default_role = await roles.get_by_code(session, roles.DEFAULT_ROLE_CODE)
    session.add(account)
    await repository.flush_unique(
        session, f"Account already exists with phone number {body.phone_num}"
    )
    session.add(AccountRole(account_id=account.id, role_id=default_role.id))
    await session.commit()

    logger.info("Registered account %s", account.id)
    principal = await load_principal(session, account)
    return await build_auth_response(session, principal, None)


async def login(session: AsyncSession, phone_num: str, password: str) -> AuthResponse:
    """Unknown phone, wrong password and disabled account all fail identically."""
    account = await _find_by_phone(session, phone_num)
    if account is None:
        dummy_verify()
        logger.info("Login failed: unknown phone number")
        raise InvalidCredentialsError()

    if not verify_password(password, account.password_hash):
        logger.info("Login failed: bad password for account %s", account.id)
        raise InvalidCredentialsError()

    if not account.is_active:
        logger.info("Login failed: account %s is disabled", account.id)
        raise InvalidCredentialsError()

    principal = await load_principal(session, account)
    return await build_auth_response(session, principal, principal.default_tenant_id)


async def refresh(session: AsyncSession, refresh_token: str) -> AuthResponse:
    claims = decode_refresh_token(refresh_token)

    account = await repository.fetch_live(session, Account, claims.subject)
    if account is None or not account.is_active:
        logger.warning("Refresh rejected: account %s is gone or disabled", claims.subject)
        raise TokenInvalidError()

    principal = await load_principal(session, account)
    return await build_auth_response(session, principal, principal.default_tenant_id)


async def switch_tenant(
    ctx: RequestContext, session: AsyncSession, tenant_id: uuid.UUID
) -> AuthResponse:
    account = await _current_account(ctx, session)
    principal = await load_principal(session, account)

    if not principal.has_access_to_tenant(tenant_id):
        logger.warning("Account %s tried to switch to foreign tenant %s", account.id, tenant_id)
        raise UnauthorizedError("You do not have access to this tenant")

    logger.info("Account %s switched to tenant %s", account.id, tenant_id)
    return await build_auth_response(session, principal, tenant_id)


async def me(ctx: RequestContext, session: AsyncSession) -> UserInfo:
    account = await _current_account(ctx, session)
    principal = await load_principal(session, account)
    return await _user_info(session, principal, ctx.current_tenant())


# ── Account management ───────────────────────────────────────

async def _current_account(ctx: RequestContext, session: AsyncSession) -> Account:
    account = await repository.fetch_live(session, Account, ctx.require_account())
    if account is None:
        raise NotFoundError("Account not found")
    return account


async def to_read(session: AsyncSession, account: Account) -> AccountRead:
    return AccountRead(
        id=account.id,
        phone_num=account.phone_num,
        first_name=account.first_name,
        last_name=account.last_name,
        is_active=account.is_active,
        roles=await roles.roles_read_for(session, account.id),
        created_at=account.created_at,
    )


async def update_profile(
    ctx: RequestContext, session: AsyncSession, body: AccountUpdate
) -> AccountRead:
    account = await _current_account(ctx, session)
    for field, value in body.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(account, field, value)
    repository.touch(session, account)
    await session.commit()
    return await to_read(session, account)


async def update_security(
    ctx: RequestContext, session: AsyncSession, body: AccountSecurityUpdate
) -> AccountRead:
    account = await _current_account(ctx, session)

    if body.phone_num is not None and body.phone_num != account.phone_num:
        if await repository.exists(session, Account, Account.phone_num == body.phone_num):
            raise AlreadyExistsError(f"Account already exists with phone number {body.phone_num}")
        account.phone_num = body.phone_num

    if body.new_password is not None:
        if not body.old_password or not verify_password(body.old_password, account.password_hash):
            raise InvalidPasswordError("The old password was entered incorrectly")
        if body.new_password != body.confirm_password:
            raise PasswordMismatchError("The new passwords did not match")
        account.password_hash = hash_password(body.new_password)

    repository.touch(session, account)
    await repository.commit_unique(session, "Phone number is already taken")
    logger.info("Security settings updated for account %s", account.id)
    return await to_read(session, account)


async def grant_role(session: AsyncSession, account_id: uuid.UUID, role_code: str) -> AccountRead:
    account = await repository.get_live_or_404(session, Account, account_id, "Account")
    role = await roles.get_by_code(session, role_code)
    if await roles.assign_role(session, account.id, role):
        await session.commit()
        logger.info("Granted role %s to account %s", role.code, account.id)
    return await to_read(session, account)


async def get_account(session: AsyncSession, account_id: uuid.UUID) -> AccountRead:
    account = await repository.get_live_or_404(session, Account, account_id, "Account")
    return await to_read(session, account)


async def get_by_phone(session: AsyncSession, phone_num: str) -> AccountRead:
    account = await _find_by_phone(session, phone_num)
    if account is None:
        raise NotFoundError(f"Account not found with phone number: {phone_num}")
    return await to_read(session, account)


async def list_accounts(session: AsyncSession) -> list[AccountRead]:
    accounts = await repository.list_live(session, Account, order_by=Account.created_at)
    return [await to_read(session, a) for a in accounts]


async def delete_account(session: AsyncSession, account_id: uuid.UUID) -> None:
    account = await repository.get_live_or_404(session, Account, account_id, "Account")
    repository.soft_delete(session, account)
    await session.commit()
    logger.info("Account %s deleted", account_id)
