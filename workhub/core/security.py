"""Security utilities: password hashing and the bearer-token codec."""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError
from passlib.context import CryptContext

from workhub.core.config import get_settings
from workhub.core.exceptions import TokenInvalidError

logger = logging.getLogger(__name__)

settings = get_settings()

REFRESH_TOKEN_TYPE = "refresh"

# ── Password hashing (Argon2) ────────────────────────────────

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def dummy_verify() -> None:
    """Burn the same time as a real verify when the account is unknown."""
    pwd_context.dummy_verify()


# ── Identity carried into tokens ──────────────────────────────

@dataclass(frozen=True)
class Principal:
    """Resolved identity of an account, the input to token issuance."""

    account_id: uuid.UUID
    phone_num: str
    first_name: str
    last_name: str
    employee_id: uuid.UUID | None = None
    authorities: tuple[str, ...] = ()
    available_tenant_ids: tuple[uuid.UUID, ...] = ()
    enabled: bool = True

    def has_access_to_tenant(self, tenant_id: uuid.UUID) -> bool:
        return tenant_id in self.available_tenant_ids

    @property
    def default_tenant_id(self) -> uuid.UUID | None:
        return self.available_tenant_ids[0] if self.available_tenant_ids else None


@dataclass(frozen=True)
class TokenClaims:
    """Verified claim set of an access or refresh token."""

    subject: uuid.UUID
    issuer: str
    issued_at: datetime
    expires_at: datetime
    phone_num: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    employee_id: uuid.UUID | None = None
    roles: tuple[str, ...] | None = None
    tenant_id: uuid.UUID | None = None
    token_type: str | None = None

    @property
    def is_refresh(self) -> bool:
        return self.token_type == REFRESH_TOKEN_TYPE


# ── JWT ───────────────────────────────────────────────────────

def _signing_key() -> str:
    if not settings.jwt_secret_key:
        raise RuntimeError("JWT_SECRET_KEY is not configured")
    return settings.jwt_secret_key


def issue_access_token(
    principal: Principal,
    tenant_id: uuid.UUID | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload: dict = {
        "sub": str(principal.account_id),
        "phoneNum": principal.phone_num,
        "firstName": principal.first_name,
        "lastName": principal.last_name,
        "roles": list(principal.authorities),
        "iss": settings.jwt_issuer,
        "iat": now,
        "exp": expire,
    }
    if principal.employee_id is not None:
        payload["employeeId"] = str(principal.employee_id)
    if tenant_id is not None:
        payload["tenantId"] = str(tenant_id)
    return jwt.encode(payload, _signing_key(), algorithm=settings.jwt_algorithm)


def issue_refresh_token(
    account_id: uuid.UUID, expires_delta: timedelta | None = None
) -> str:
    """Refresh tokens carry no authority or tenant claims."""
    now = datetime.now(timezone.utc)
    expire = now + (
        expires_delta or timedelta(days=settings.refresh_token_expire_days)
    )
    payload = {
        "sub": str(account_id),
        "type": REFRESH_TOKEN_TYPE,
        "iss": settings.jwt_issuer,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(payload, _signing_key(), algorithm=settings.jwt_algorithm)


def _optional_uuid(value) -> uuid.UUID | None:
    return uuid.UUID(value) if value is not None else None


def _claims_from_payload(payload: dict) -> TokenClaims:
    roles = payload.get("roles")
    if roles is not None and not isinstance(roles, list):
        raise ValueError("roles claim must be a list")
    return TokenClaims(
        subject=uuid.UUID(payload["sub"]),
        issuer=payload["iss"],
        issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        phone_num=payload.get("phoneNum"),
        first_name=payload.get("firstName"),
        last_name=payload.get("lastName"),
        employee_id=_optional_uuid(payload.get("employeeId")),
        roles=tuple(roles) if roles is not None else None,
        tenant_id=_optional_uuid(payload.get("tenantId")),
        token_type=payload.get("type"),
    )


def decode_token(token: str) -> TokenClaims:
    """Verify signature, issuer and expiry, then parse the claim set.

    Every failure raises the same ``TokenInvalidError``; the reason is only
    logged. A token is still accepted during the second equal to its ``exp``.
    """
    try:
        payload = jwt.decode(
            token,
            _signing_key(),
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            options={
                "require_sub": True,
                "require_iat": True,
                "require_exp": True,
                "require_iss": True,
            },
        )
    except ExpiredSignatureError:
        logger.info("Rejected expired token")
        raise TokenInvalidError() from None
    except JWTClaimsError as exc:
        logger.warning("Rejected token with invalid claims: %s", exc)
        raise TokenInvalidError() from None
    except JWTError as exc:
        logger.warning("Rejected malformed or unsigned token: %s", exc)
        raise TokenInvalidError() from None

    try:
        return _claims_from_payload(payload)
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("Rejected token with malformed payload: %s", exc)
        raise TokenInvalidError() from None


def is_refresh_token(token: str) -> bool:
    try:
        return decode_token(token).is_refresh
    except TokenInvalidError:
        return False


def decode_access_token(token: str) -> TokenClaims:
    claims = decode_token(token)
    if claims.is_refresh:
        logger.warning("Refresh token presented as access token (sub=%s)", claims.subject)
        raise TokenInvalidError()
    return claims


def decode_refresh_token(token: str) -> TokenClaims:
    claims = decode_token(token)
    if not claims.is_refresh:
        logger.warning("Non-refresh token presented for refresh (sub=%s)", claims.subject)
        raise TokenInvalidError()
    return claims
