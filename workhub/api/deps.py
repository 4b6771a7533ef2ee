"""FastAPI dependencies for authentication, request context and rank checks."""

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from workhub.core.context import RequestContext
from workhub.core.database import get_session
from workhub.core.exceptions import ContextNotSetError, UnauthorizedError
from workhub.core.security import decode_access_token
from workhub.core.storage import LocalFileStorage, get_storage
from workhub.models.employee import Employee, Position
from workhub.services import tenant_guard

logger = logging.getLogger(__name__)

# auto_error=False so public routes can run without a header
bearer_scheme = HTTPBearer(auto_error=False)


async def get_request_context(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> AsyncGenerator[RequestContext, None]:
    """Populate a fresh context from the bearer token, and always clear it.

    A missing header yields an unset context; routes that need identity fail
    with ``ContextNotSetError`` when they touch it. An invalid token fails the
    request immediately.
    """
    ctx = RequestContext()
    try:
        if credentials is not None:
            claims = decode_access_token(credentials.credentials)
            ctx.begin(
                account_id=claims.subject,
                tenant_id=claims.tenant_id,
                employee_id=claims.employee_id,
                authorities=claims.roles or (),
            )
        yield ctx
    finally:
        ctx.clear()


async def require_context(
    ctx: Annotated[RequestContext, Depends(get_request_context)],
) -> RequestContext:
    if not ctx.is_active:
        raise ContextNotSetError("Authentication required")
    return ctx


class RequireRank:
    """Route dependency: the acting employee holds at least ``minimum`` in the current tenant."""

    def __init__(self, minimum: Position) -> None:
        self.minimum = minimum

    async def __call__(
        self,
        ctx: Annotated[RequestContext, Depends(require_context)],
        session: Annotated[AsyncSession, Depends(get_session)],
    ) -> Employee:
        return await tenant_guard.require_rank(ctx, session, self.minimum)


class RequireAuthority:
    """Route dependency: the token carries at least one of ``authorities``."""

    def __init__(self, *authorities: str) -> None:
        self.authorities = authorities

    async def __call__(
        self, ctx: Annotated[RequestContext, Depends(require_context)]
    ) -> RequestContext:
        if not ctx.has_authority(*self.authorities):
            logger.warning(
                "Authority denied for account %s: needs one of %s",
                ctx.account_id,
                ", ".join(self.authorities),
            )
            raise UnauthorizedError("Insufficient privileges")
        return ctx


PlatformAdmin = RequireAuthority(*tenant_guard.PLATFORM_AUTHORITIES)
SuperAdmin = RequireAuthority("ROLE_SUPER_ADMIN")

# Typed shorthand for use in route signatures
Ctx = Annotated[RequestContext, Depends(require_context)]
Session = Annotated[AsyncSession, Depends(get_session)]
Storage = Annotated[LocalFileStorage, Depends(get_storage)]
