"""
Role Management Endpoints
-------------------------
Admin-only CRUD for roles and role assignment.

The route gate checks the ``admin`` role claim of the access token. Mutations
additionally re-check the caller's stored role, so a token issued before the
caller lost admin cannot change roles.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from auth_service.api.providers import get_role_use_cases
from auth_service.auth.dependencies import AuthenticatedPrincipal, require_admin
from auth_service.core.exceptions import AuthServiceError, ValidationError
from auth_service.models.auth_models import MessageResponse
from auth_service.models.role_models import (
    AssignRoleRequest,
    RoleCreateRequest,
    RoleResponse,
    RoleUpdateRequest,
)
from auth_service.services.role_use_cases import RoleUseCases

router = APIRouter(prefix="/api/v1/admin/roles", tags=["Role Management"])


def _parse_role_id(role_id: str) -> UUID:
    try:
        return UUID(role_id)
    except ValueError as e:
        raise ValidationError(f"invalid role id '{role_id}'") from e


def _internal_error(action: str, error: Exception) -> HTTPException:
    logger.error(f"Error while trying to {action}: {error}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )


@router.get("", response_model=List[RoleResponse], summary="List roles")
async def list_roles(
    principal: AuthenticatedPrincipal = Depends(require_admin),
    use_cases: RoleUseCases = Depends(get_role_use_cases),
):
    try:
        roles = await use_cases.list_roles()
    except AuthServiceError:
        raise
    except Exception as e:
        raise _internal_error("list roles", e)
    return [RoleResponse.from_role(role) for role in roles]


@router.post(
    "",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a role",
)
async def create_role(
    request: RoleCreateRequest,
    principal: AuthenticatedPrincipal = Depends(require_admin),
    use_cases: RoleUseCases = Depends(get_role_use_cases),
):
    """
    Create a role with its permission set.

    Raises:
        ConflictError (400): A role with this name exists
    """
    try:
        role = await use_cases.create_role(
            principal.user_id, request.name, request.permissions
        )
    except AuthServiceError:
        raise
    except Exception as e:
        raise _internal_error("create role", e)
    return RoleResponse.from_role(role)


@router.post("/assign", response_model=MessageResponse, summary="Assign a role to a user")
async def assign_role(
    request: AssignRoleRequest,
    principal: AuthenticatedPrincipal = Depends(require_admin),
    use_cases: RoleUseCases = Depends(get_role_use_cases),
):
    try:
        await use_cases.assign_role_to_user(
            principal.user_id, request.user_id, request.role_id
        )
    except AuthServiceError:
        raise
    except Exception as e:
        raise _internal_error("assign role", e)
    return MessageResponse(message="Role assigned successfully")


@router.get("/{role_id}", response_model=RoleResponse, summary="Get a role")
async def get_role(
    role_id: str,
    principal: AuthenticatedPrincipal = Depends(require_admin),
    use_cases: RoleUseCases = Depends(get_role_use_cases),
):
    try:
        role = await use_cases.get_role(_parse_role_id(role_id))
    except AuthServiceError:
        raise
    except Exception as e:
        raise _internal_error("get role", e)
    return RoleResponse.from_role(role)


@router.put("/{role_id}", response_model=RoleResponse, summary="Update a role")
async def update_role(
    role_id: str,
    request: RoleUpdateRequest,
    principal: AuthenticatedPrincipal = Depends(require_admin),
    use_cases: RoleUseCases = Depends(get_role_use_cases),
):
    """
    Rename a role and/or replace its permissions.

    Raises:
        ForbiddenError (403): Target is the admin role
        ConflictError (400): New name belongs to another role
    """
    try:
        role = await use_cases.update_role(
            principal.user_id,
            _parse_role_id(role_id),
            name=request.name,
            permissions=request.permissions,
        )
    except AuthServiceError:
        raise
    except Exception as e:
        raise _internal_error("update role", e)
    return RoleResponse.from_role(role)


@router.delete("/{role_id}", response_model=MessageResponse, summary="Delete a role")
async def delete_role(
    role_id: str,
    principal: AuthenticatedPrincipal = Depends(require_admin),
    use_cases: RoleUseCases = Depends(get_role_use_cases),
):
    try:
        await use_cases.delete_role(principal.user_id, _parse_role_id(role_id))
    except AuthServiceError:
        raise
    except Exception as e:
        raise _internal_error("delete role", e)
    return MessageResponse(message="Role deleted successfully")
