"""
Role Management Models
----------------------
Request and response schemas for the admin role endpoints.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from auth_service.models.domain_models import Role


class RoleCreateRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {"name": "editor", "permissions": ["posts:read", "posts:write"]}
        }
    )

    name: str = Field(..., min_length=1, max_length=64, description="Unique role name")
    permissions: List[str] = Field(
        default_factory=list, description="Permission names granted by the role"
    )


class RoleUpdateRequest(BaseModel):
    """
    Partial role update.

    ``permissions`` replaces the whole set when supplied; omitting it keeps the
    current permissions.
    """

    name: Optional[str] = Field(default=None, min_length=1, max_length=64)
    permissions: Optional[List[str]] = None


class AssignRoleRequest(BaseModel):
    user_id: UUID = Field(..., description="User receiving the role")
    role_id: UUID = Field(..., description="Role to assign")


class PermissionResponse(BaseModel):
    id: UUID
    name: str


class RoleResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "7c9e6679-7425-40de-944b-e07fc1f90ae7",
                "name": "moderator",
                "permissions": [
                    {"id": "16fd2706-8baf-433b-82eb-8c7fada847da", "name": "posts:read"}
                ],
                "created_at": "2025-10-13T10:30:00Z",
                "updated_at": "2025-10-13T10:30:00Z",
            }
        }
    )

    id: UUID
    name: str
    permissions: List[PermissionResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_role(cls, role: Role) -> "RoleResponse":
        return cls(
            id=role.id,
            name=role.name,
            permissions=[
                PermissionResponse(id=permission.id, name=permission.name)
                for permission in role.permissions
            ],
            created_at=role.created_at,
            updated_at=role.updated_at,
        )
