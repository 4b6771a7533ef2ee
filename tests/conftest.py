"""Shared test fixtures: async SQLite in-memory DB, test client, data builders."""

import itertools
import os
import uuid
from collections.abc import AsyncGenerator
from dataclasses import dataclass

# Settings are read at import time
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

# Import all models so metadata is populated
import workhub.models  # noqa: F401
from workhub.core.context import RequestContext
from workhub.core.database import get_session
from workhub.core.security import hash_password, issue_access_token
from workhub.core.storage import LocalFileStorage, get_storage
from workhub.main import app
from workhub.models.account import Account, AccountRole
from workhub.models.board import Board, BoardCreate
from workhub.models.employee import Employee, EmployeeTenant, Position
from workhub.models.project import Project
from workhub.models.tenant import Tenant, TenantPlan
from workhub.services import accounts, boards, roles

PASSWORD = "Secret#123"


@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as sess:
        await roles.seed_security_data(sess)
        yield sess
        await sess.rollback()


@pytest.fixture
def storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(tmp_path / "uploads")


@pytest.fixture
async def client(session, storage) -> AsyncGenerator[AsyncClient, None]:
    """HTTPX async test client with DB session and storage overrides."""

    async def _override_session():
        yield session

    app.dependency_overrides[get_session] = _override_session
    app.dependency_overrides[get_storage] = lambda: storage

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ── Data builders ────────────────────────────────────────────

@dataclass
class Member:
    account: Account
    employee: Employee
    tenant: Tenant
    headers: dict[str, str]

    @property
    def ctx(self) -> RequestContext:
        return RequestContext.for_account(
            self.account.id, self.tenant.id, self.employee.id
        )


class World:
    """Builds accounts, tenants and employees straight through the session."""

    _phones = itertools.count(1)
    password = PASSWORD

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def next_phone(self) -> str:
        return f"998{next(self._phones):09d}"

    async def account(self, *role_codes: str, first_name: str = "Test") -> Account:
        account = Account(
            phone_num=self.next_phone(),
            password_hash=hash_password(PASSWORD),
            first_name=first_name,
            last_name="User",
        )
        self.session.add(account)
        await self.session.flush()
        for code in role_codes or (roles.DEFAULT_ROLE_CODE,):
            role = await roles.get_by_code(self.session, code)
            self.session.add(AccountRole(account_id=account.id, role_id=role.id))
        await self.session.commit()
        return account

    async def tenant(self, name: str | None = None, plan: TenantPlan = TenantPlan.FREE) -> Tenant:
        tenant = Tenant(
            name=name or f"Tenant {uuid.uuid4().hex[:8]}",
            subscription_plan=plan,
            max_users=plan.max_users,
        )
        self.session.add(tenant)
        await self.session.commit()
        return tenant

    async def employee(
        self, account: Account, tenants: list[Tenant], position: Position
    ) -> Employee:
        employee = Employee(
            code=f"EMP-{uuid.uuid4().hex[:8].upper()}",
            account_id=account.id,
            position=position,
        )
        self.session.add(employee)
        await self.session.flush()
        for tenant in tenants:
            self.session.add(EmployeeTenant(employee_id=employee.id, tenant_id=tenant.id))
        await self.session.commit()
        return employee

    async def headers(self, account: Account, tenant_id: uuid.UUID | None = None) -> dict[str, str]:
        principal = await accounts.load_principal(self.session, account)
        token = issue_access_token(principal, tenant_id)
        return {"Authorization": f"Bearer {token}"}

    async def member(
        self, tenant: Tenant, position: Position = Position.OWNER, first_name: str = "Test"
    ) -> Member:
        account = await self.account(first_name=first_name)
        employee = await self.employee(account, [tenant], position)
        return Member(account, employee, tenant, await self.headers(account, tenant.id))

    async def platform_admin(self) -> dict[str, str]:
        account = await self.account(roles.DEFAULT_ROLE_CODE, roles.SUPER_ADMIN_ROLE_CODE)
        return await self.headers(account)

    async def board(self, member: Member, name: str = "Board") -> Board:
        project = Project(tenant_id=member.tenant.id, name=f"Project {uuid.uuid4().hex[:6]}")
        self.session.add(project)
        await self.session.commit()
        read = await boards.create(
            member.ctx, self.session, BoardCreate(name=name, project_id=project.id)
        )
        return await self.session.get(Board, read.id)


@pytest.fixture
def world(session) -> World:
    return World(session)
