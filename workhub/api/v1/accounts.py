"""Account management: own profile and security, plus platform-level admin."""

import uuid

from fastapi import APIRouter, Depends, status

from workhub.api.deps import Ctx, PlatformAdmin, Session, SuperAdmin
from workhub.models.account import (
    AccountRead,
    AccountRoleGrant,
    AccountSecurityUpdate,
    AccountUpdate,
)
from workhub.services import accounts

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.patch("/me", response_model=AccountRead)
async def update_profile(body: AccountUpdate, ctx: Ctx, session: Session) -> AccountRead:
    return await accounts.update_profile(ctx, session, body)


@router.patch("/me/security", response_model=AccountRead)
async def update_security(
    body: AccountSecurityUpdate, ctx: Ctx, session: Session
) -> AccountRead:
    return await accounts.update_security(ctx, session, body)


# ── Platform admin ───────────────────────────────────────────

@router.get("", response_model=list[AccountRead], dependencies=[Depends(PlatformAdmin)])
async def list_accounts(session: Session) -> list[AccountRead]:
    return await accounts.list_accounts(session)


@router.get(
    "/by-phone/{phone_num}",
    response_model=AccountRead,
    dependencies=[Depends(PlatformAdmin)],
)
async def get_by_phone(phone_num: str, session: Session) -> AccountRead:
    return await accounts.get_by_phone(session, phone_num)


@router.get("/{account_id}", response_model=AccountRead, dependencies=[Depends(PlatformAdmin)])
async def get_account(account_id: uuid.UUID, session: Session) -> AccountRead:
    return await accounts.get_account(session, account_id)


@router.post(
    "/{account_id}/roles",
    response_model=AccountRead,
    dependencies=[Depends(SuperAdmin)],
)
async def grant_role(
    account_id: uuid.UUID, body: AccountRoleGrant, session: Session
) -> AccountRead:
    return await accounts.grant_role(session, account_id, body.role_code)


@router.delete(
    "/{account_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(PlatformAdmin)],
)
async def delete_account(account_id: uuid.UUID, session: Session) -> None:
    await accounts.delete_account(session, account_id)
