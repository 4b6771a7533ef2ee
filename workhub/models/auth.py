"""Request / response schemas for the credential endpoints (no tables)."""

import uuid

from pydantic import BaseModel, Field

from workhub.models.tenant import TenantInfo


class LoginRequest(BaseModel):
    phone_num: str = Field(max_length=32)
    password: str = Field(max_length=128)


class RefreshRequest(BaseModel):
    refresh_token: str


class SwitchTenantRequest(BaseModel):
    tenant_id: uuid.UUID


class UserInfo(BaseModel):
    """Denormalized convenience payload. The token claims are authoritative."""

    account_id: uuid.UUID
    phone_num: str
    first_name: str
    last_name: str
    employee_id: uuid.UUID | None = None
    current_tenant_id: uuid.UUID | None = None
    tenants: list[TenantInfo] = []
    authorities: list[str] = []


class AuthResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int  # seconds
    user: UserInfo
