"""
Campaigns API routes.
"""
import uuid
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from minicrm.database import get_session
from minicrm.services.campaign_service import CampaignService
from minicrm.services.workspace_service import WorkspaceAccess
from minicrm.schemas.campaign import CampaignCreate, CampaignUpdate, CampaignResponse
from minicrm.core.pagination import PaginatedResponse
from minicrm.api.deps import get_workspace_access

router = APIRouter(prefix="/api/workspaces/{workspace_id}/campaigns", tags=["campaigns"])


@router.post("", response_model=CampaignResponse, status_code=201)
async def create_campaign(
    campaign_data: CampaignCreate,
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    """Create a new campaign."""
    campaign_service = CampaignService(session)
    return await campaign_service.create(access, campaign_data)


@router.get("", response_model=PaginatedResponse[CampaignResponse])
async def list_campaigns(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    active: Optional[bool] = None,
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    """List campaigns with optional active filter."""
    campaign_service = CampaignService(session)
    return await campaign_service.list(access, active, page, limit)


@router.get("/{campaign_id}", response_model=CampaignResponse)
async def get_campaign(
    campaign_id: uuid.UUID,
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    """Get a campaign by ID."""
    campaign_service = CampaignService(session)
    return await campaign_service.get(access, campaign_id)


@router.patch("/{campaign_id}", response_model=CampaignResponse)
async def update_campaign(
    campaign_id: uuid.UUID,
    campaign_data: CampaignUpdate,
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    """Update a campaign."""
    campaign_service = CampaignService(session)
    return await campaign_service.update(access, campaign_id, campaign_data)


@router.delete("/{campaign_id}", status_code=204)
async def delete_campaign(
    campaign_id: uuid.UUID,
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    """Delete a campaign; its generated messages are kept."""
    campaign_service = CampaignService(session)
    await campaign_service.delete(access, campaign_id)
