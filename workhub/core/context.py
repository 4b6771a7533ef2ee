"""Request-scoped security context.

One ``RequestContext`` is created per request by the auth dependency and
handed explicitly to every service call. It is never stored globally, and
``clear()`` is guaranteed to run when the request finishes.
"""

import uuid

from workhub.core.exceptions import (
    ContextNotSetError,
    EmployeeNotSetError,
    TenantNotSelectedError,
)


class RequestContext:
    """Resolved identity carried through a request.

    Two states are distinguished: *unset* (``begin`` never ran, or ``clear``
    already ran) and *set without a tenant/employee* (authenticated caller who
    has not selected a tenant or has no employee record).
    """

    __slots__ = ("_active", "account_id", "tenant_id", "employee_id", "authorities")

    def __init__(self) -> None:
        self._active = False
        self.account_id: uuid.UUID | None = None
        self.tenant_id: uuid.UUID | None = None
        self.employee_id: uuid.UUID | None = None
        self.authorities: frozenset[str] = frozenset()

    @classmethod
    def for_account(
        cls,
        account_id: uuid.UUID,
        tenant_id: uuid.UUID | None = None,
        employee_id: uuid.UUID | None = None,
        authorities: frozenset[str] | set[str] | tuple[str, ...] = (),
    ) -> "RequestContext":
        ctx = cls()
        ctx.begin(account_id, tenant_id, employee_id, authorities)
        return ctx

    @property
    def is_active(self) -> bool:
        return self._active

    def begin(
        self,
        account_id: uuid.UUID,
        tenant_id: uuid.UUID | None = None,
        employee_id: uuid.UUID | None = None,
        authorities: frozenset[str] | set[str] | tuple[str, ...] = (),
    ) -> None:
        self.account_id = account_id
        self.tenant_id = tenant_id
        self.employee_id = employee_id
        self.authorities = frozenset(authorities)
        self._active = True

    def _ensure_active(self) -> None:
        if not self._active:
            raise ContextNotSetError("Request context is not set")

    def current_tenant(self) -> uuid.UUID | None:
        """Selected tenant, or None when the caller has not selected one."""
        self._ensure_active()
        return self.tenant_id

    def require_account(self) -> uuid.UUID:
        self._ensure_active()
        if self.account_id is None:
            raise ContextNotSetError("Request context has no account")
        return self.account_id

    def require_tenant(self) -> uuid.UUID:
        self._ensure_active()
        if self.tenant_id is None:
            raise TenantNotSelectedError("No tenant selected. Switch to a tenant first.")
        return self.tenant_id

    def require_employee(self) -> uuid.UUID:
        self._ensure_active()
        if self.employee_id is None:
            raise EmployeeNotSetError("Current account has no employee record")
        return self.employee_id

    def has_authority(self, *authorities: str) -> bool:
        return self._active and any(a in self.authorities for a in authorities)

    def clear(self) -> None:
        self._active = False
        self.account_id = None
        self.tenant_id = None
        self.employee_id = None
        self.authorities = frozenset()

    def __repr__(self) -> str:
        if not self._active:
            return "RequestContext(unset)"
        return (
            f"RequestContext(account={self.account_id}, tenant={self.tenant_id}, "
            f"employee={self.employee_id})"
        )
