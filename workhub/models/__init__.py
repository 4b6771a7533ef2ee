"""Import all models so SQLModel.metadata picks them up."""

from workhub.models.account import (
    Account,
    AccountCreate,
    AccountRead,
    AccountRole,
    AccountRoleGrant,
    AccountSecurityUpdate,
    AccountUpdate,
)
from workhub.models.auth import (
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    SwitchTenantRequest,
    UserInfo,
)
from workhub.models.board import Board, BoardCreate, BoardRead, BoardUpdate
from workhub.models.employee import (
    ChangePositionRequest,
    Employee,
    EmployeeCreate,
    EmployeeRead,
    EmployeeTenant,
    EmployeeUpdate,
    Position,
)
from workhub.models.file import FileRead, FileType, StoredFile
from workhub.models.project import Project, ProjectCreate, ProjectRead, ProjectUpdate
from workhub.models.role import Permission, PermissionRead, Role, RolePermission, RoleRead
from workhub.models.task import (
    Task,
    TaskAction,
    TaskActionRead,
    TaskActionType,
    TaskAssignee,
    TaskCreate,
    TaskFile,
    TaskPriority,
    TaskRead,
    TaskStateChange,
    TaskUpdate,
)
from workhub.models.task_state import (
    TaskState,
    TaskStateCopy,
    TaskStateCreate,
    TaskStateRead,
    TaskStateUpdate,
)
from workhub.models.tenant import (
    ChangePlanRequest,
    Tenant,
    TenantCreate,
    TenantInfo,
    TenantPlan,
    TenantRead,
    TenantUpdate,
)

__all__ = [
    "Account",
    "AccountCreate",
    "AccountRead",
    "AccountRole",
    "AccountRoleGrant",
    "AccountSecurityUpdate",
    "AccountUpdate",
    "AuthResponse",
    "Board",
    "BoardCreate",
    "BoardRead",
    "BoardUpdate",
    "ChangePlanRequest",
    "ChangePositionRequest",
    "Employee",
    "EmployeeCreate",
    "EmployeeRead",
    "EmployeeTenant",
    "EmployeeUpdate",
    "FileRead",
    "FileType",
    "LoginRequest",
    "Permission",
    "PermissionRead",
    "Position",
    "Project",
    "ProjectCreate",
    "ProjectRead",
    "ProjectUpdate",
    "RefreshRequest",
    "Role",
    "RolePermission",
    "RoleRead",
    "StoredFile",
    "SwitchTenantRequest",
    "Task",
    "TaskAction",
    "TaskActionRead",
    "TaskActionType",
    "TaskAssignee",
    "TaskCreate",
    "TaskFile",
    "TaskPriority",
    "TaskRead",
    "TaskState",
    "TaskStateChange",
    "TaskStateCopy",
    "TaskStateCreate",
    "TaskStateRead",
    "TaskStateUpdate",
    "TaskUpdate",
    "Tenant",
    "TenantCreate",
    "TenantInfo",
    "TenantPlan",
    "TenantRead",
    "TenantUpdate",
    "UserInfo",
]
