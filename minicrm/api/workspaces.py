"""
Workspace API routes - tenants and membership.
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from minicrm.database import get_session
from minicrm.services.workspace_service import WorkspaceService, WorkspaceAccess
from minicrm.schemas.workspace import (
    WorkspaceCreate, WorkspaceUpdate, WorkspaceResponse, MemberAdd, MemberResponse
)
from minicrm.api.deps import get_current_user, get_workspace_access
from minicrm.models.user import User

router = APIRouter(prefix="/api/workspaces", tags=["workspaces"])


@router.post("", response_model=WorkspaceResponse, status_code=201)
async def create_workspace(
    data: WorkspaceCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """Create a workspace with the default pipeline stages."""
    return await WorkspaceService(session).create_workspace(current_user, data.name)


@router.get("", response_model=List[WorkspaceResponse])
async def list_workspaces(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    """List workspaces of the current user."""
    return await WorkspaceService(session).list_workspaces(current_user)


@router.patch("/{workspace_id}", response_model=WorkspaceResponse)
async def rename_workspace(
    data: WorkspaceUpdate,
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    """Rename a workspace (admin only)."""
    return await WorkspaceService(session).rename_workspace(access, data.name)


@router.post("/{workspace_id}/members", response_model=MemberResponse, status_code=201)
async def add_member(
    data: MemberAdd,
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    """Add an existing user to the workspace (admin only)."""
    return await WorkspaceService(session).add_member(access, data.email, data.role)
