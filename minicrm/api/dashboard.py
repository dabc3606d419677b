"""
Dashboard API routes.
"""
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from minicrm.database import get_session
from minicrm.services.pipeline_service import PipelineService
from minicrm.services.workspace_service import WorkspaceAccess
from minicrm.schemas.pipeline import DashboardResponse
from minicrm.api.deps import get_workspace_access

router = APIRouter(prefix="/api/workspaces/{workspace_id}/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    """Lead counts per pipeline stage."""
    return await PipelineService(session).dashboard(access)
