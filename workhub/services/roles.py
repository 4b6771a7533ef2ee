"""Role / permission lookups, authority resolution and the boot-time seed."""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from workhub.core.config import get_settings
from workhub.core.exceptions import NotFoundError
from workhub.core.security import hash_password
from workhub.models.account import Account, AccountRole
from workhub.models.role import Permission, PermissionRead, Role, RolePermission, RoleRead

logger = logging.getLogger(__name__)

DEFAULT_ROLE_CODE = "USER"
SUPER_ADMIN_ROLE_CODE = "SUPER_ADMIN"

PERMISSIONS: dict[str, str] = {
    "USER_READ": "Read User",
    "USER_CREATE": "Create User",
    "USER_UPDATE": "Update User",
    "USER_DELETE": "Delete User",
    "TENANT_READ": "Read Tenant",
    "TENANT_CREATE": "Create Tenant",
    "TENANT_UPDATE": "Update Tenant",
    "TENANT_DELETE": "Delete Tenant",
    "TENANT_MANAGE_SUBSCRIPTION": "Manage Subscription",
    "EMPLOYEE_READ": "Read Employee",
    "EMPLOYEE_CREATE": "Create Employee",
    "EMPLOYEE_UPDATE": "Update Employee",
    "EMPLOYEE_DELETE": "Delete Employee",
    "EMPLOYEE_ASSIGN_TENANT": "Assign Tenant",
    "PROJECT_READ": "Read Project",
    "PROJECT_CREATE": "Create Project",
    "PROJECT_UPDATE": "Update Project",
    "PROJECT_DELETE": "Delete Project",
    "BOARD_READ": "Read Board",
    "BOARD_CREATE": "Create Board",
    "BOARD_UPDATE": "Update Board",
    "BOARD_DELETE": "Delete Board",
    "TASK_READ": "Read Task",
    "TASK_CREATE": "Create Task",
    "TASK_UPDATE": "Update Task",
    "TASK_DELETE": "Delete Task",
    "TASK_ASSIGN": "Assign Task",
    "TASK_CHANGE_STATE": "Change Task State",
    "FILE_UPLOAD": "Upload File",
    "FILE_DOWNLOAD": "Download File",
    "FILE_DELETE": "Delete File",
}

_TASK_WORK = ("TASK_READ", "TASK_CREATE", "TASK_UPDATE", "TASK_ASSIGN", "TASK_CHANGE_STATE")
_FILES = ("FILE_UPLOAD", "FILE_DOWNLOAD", "FILE_DELETE")
_READS = ("USER_READ", "EMPLOYEE_READ", "PROJECT_READ", "BOARD_READ")

# code -> (name, permission codes)
ROLES: dict[str, tuple[str, tuple[str, ...]]] = {
    "USER": (
        "User",
        ("PROJECT_READ", "BOARD_READ", "TASK_READ", "TASK_CREATE", "TASK_UPDATE",
         "FILE_UPLOAD", "FILE_DOWNLOAD"),
    ),
    "EMPLOYEE": ("Employee", _READS + _TASK_WORK + _FILES),
    "TEAM_LEAD": (
        "Team Lead",
        _READS + ("PROJECT_CREATE", "PROJECT_UPDATE", "BOARD_CREATE", "BOARD_UPDATE",
                  "TASK_DELETE") + _TASK_WORK + _FILES,
    ),
    "MANAGER": (
        "Manager",
        _READS + ("EMPLOYEE_CREATE", "EMPLOYEE_UPDATE", "PROJECT_CREATE", "PROJECT_UPDATE",
                  "PROJECT_DELETE", "BOARD_CREATE", "BOARD_UPDATE", "BOARD_DELETE",
                  "TASK_DELETE") + _TASK_WORK + _FILES,
    ),
    "ADMIN": (
        "Admin",
        tuple(code for code in PERMISSIONS
              if code not in ("TENANT_CREATE", "TENANT_DELETE", "TENANT_MANAGE_SUBSCRIPTION")),
    ),
    "OWNER": ("Owner", tuple(PERMISSIONS)),
    "PLATFORM_ADMIN": ("Platform Admin", tuple(PERMISSIONS)),
    "SUPER_ADMIN": ("Super Admin", tuple(PERMISSIONS)),
}


# ── Lookups ──────────────────────────────────────────────────

async def get_by_code(session: AsyncSession, code: str) -> Role:
    stmt = select(Role).where(Role.code == code, Role.deleted.is_(False))  # type: ignore[attr-defined]
    result = await session.execute(stmt)
    role = result.scalar_one_or_none()
    if role is None:
        raise NotFoundError(f"Role not found with code: {code}")
    return role


async def role_codes_for(session: AsyncSession, account_id: uuid.UUID) -> list[str]:
    stmt = (
        select(Role.code)
        .join(AccountRole, AccountRole.role_id == Role.id)  # type: ignore[arg-type]
        .where(AccountRole.account_id == account_id, Role.deleted.is_(False))  # type: ignore[attr-defined]
        .order_by(Role.code)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def resolve_authorities(session: AsyncSession, account_id: uuid.UUID) -> tuple[str, ...]:
    """``ROLE_<code>`` for every held role, then every reachable permission code."""
    role_codes = await role_codes_for(session, account_id)

    stmt = (
        select(Permission.code)
        .join(RolePermission, RolePermission.permission_id == Permission.id)  # type: ignore[arg-type]
        .join(AccountRole, AccountRole.role_id == RolePermission.role_id)  # type: ignore[arg-type]
        .where(AccountRole.account_id == account_id, Permission.deleted.is_(False))  # type: ignore[attr-defined]
        .distinct()
        .order_by(Permission.code)
    )
    result = await session.execute(stmt)
    permission_codes = list(result.scalars().all())

    return tuple(f"ROLE_{code}" for code in role_codes) + tuple(permission_codes)


async def roles_read_for(session: AsyncSession, account_id: uuid.UUID) -> list[RoleRead]:
    stmt = (
        select(Role)
        .join(AccountRole, AccountRole.role_id == Role.id)  # type: ignore[arg-type]
        .where(AccountRole.account_id == account_id, Role.deleted.is_(False))  # type: ignore[attr-defined]
        .order_by(Role.code)
    )
    roles = (await session.execute(stmt)).scalars().all()

    out: list[RoleRead] = []
    for role in roles:
        perm_stmt = (
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)  # type: ignore[arg-type]
            .where(RolePermission.role_id == role.id)
            .order_by(Permission.code)
        )
        perms = (await session.execute(perm_stmt)).scalars().all()
        out.append(
            RoleRead(
                code=role.code,
                name=role.name,
                permissions=[PermissionRead(code=p.code, name=p.name) for p in perms],
            )
        )
    return out


async def assign_role(session: AsyncSession, account_id: uuid.UUID, role: Role) -> bool:
    """Link ``role`` to the account. Returns False when already held. Caller commits."""
    if await session.get(AccountRole, (account_id, role.id)) is not None:
        return False
    session.add(AccountRole(account_id=account_id, role_id=role.id))
    return True


# ── Seeding ──────────────────────────────────────────────────

async def create_permission_if_not_exists(
    session: AsyncSession, code: str, name: str
) -> Permission:
    stmt = select(Permission).where(Permission.code == code)
    existing = (await session.execute(stmt)).scalar_one_or_none()
    if existing is not None:
        return existing
    permission = Permission(code=code, name=name)
    session.add(permission)
    await session.flush()
    return permission


async def create_role_if_not_exists(
    session: AsyncSession, code: str, name: str, permissions: list[Permission]
) -> Role:
    """Roles that already exist are left untouched, including their grants."""
    stmt = select(Role).where(Role.code == code)
    existing = (await session.execute(stmt)).scalar_one_or_none()
    if existing is not None:
        return existing
    role = Role(code=code, name=name)
    session.add(role)
    await session.flush()
    for permission in permissions:
        session.add(RolePermission(role_id=role.id, permission_id=permission.id))
    return role


async def seed_security_data(session: AsyncSession) -> None:
    """Idempotently create every permission and role."""
    logger.info("Initializing security data (roles and permissions)...")

    permissions = {
        code: await create_permission_if_not_exists(session, code, name)
        for code, name in PERMISSIONS.items()
    }
    for code, (name, permission_codes) in ROLES.items():
        await create_role_if_not_exists(
            session, code, name, [permissions[c] for c in permission_codes]
        )
    await session.commit()

    logger.info("Seeded %d permissions and %d roles", len(permissions), len(ROLES))


async def seed_bootstrap_admin(session: AsyncSession) -> Account | None:
    """Create the SUPER_ADMIN account named in settings, if configured and absent."""
    settings = get_settings()
    if not settings.bootstrap_admin_phone or not settings.bootstrap_admin_password:
        return None

    stmt = select(Account).where(Account.phone_num == settings.bootstrap_admin_phone)
    if (await session.execute(stmt)).scalar_one_or_none() is not None:
        return None

    account = Account(
        phone_num=settings.bootstrap_admin_phone,
        password_hash=hash_password(settings.bootstrap_admin_password),
        first_name="Super",
        last_name="Admin",
    )
    session.add(account)
    await session.flush()
    await assign_role(session, account.id, await get_by_code(session, DEFAULT_ROLE_CODE))
    await assign_role(session, account.id, await get_by_code(session, SUPER_ADMIN_ROLE_CODE))
    await session.commit()

    logger.info("Bootstrap super admin created for phone %s", account.phone_num)
    return account
