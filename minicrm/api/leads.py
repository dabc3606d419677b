"""
Leads API routes, including custom fields.
"""
import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from minicrm.database import get_session
from minicrm.services.lead_service import LeadService
from minicrm.services.trigger_dispatcher import TriggerDispatcher
from minicrm.services.workspace_service import WorkspaceAccess
from minicrm.schemas.lead import (
    LeadCreate, LeadUpdate, LeadMoveRequest, LeadResponse, LeadDetailResponse, LeadSaveResponse,
    LeadFilter, CustomFieldCreate, CustomFieldResponse
)
from minicrm.core.pagination import PaginatedResponse
from minicrm.api.deps import get_workspace_access, get_dispatcher

router = APIRouter(prefix="/api/workspaces/{workspace_id}", tags=["leads"])


@router.get("/custom-fields", response_model=List[CustomFieldResponse])
async def list_custom_fields(
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    return await LeadService(session).list_custom_fields(access)


@router.post("/custom-fields", response_model=CustomFieldResponse, status_code=201)
async def create_custom_field(
    data: CustomFieldCreate,
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    return await LeadService(session).create_custom_field(access, data)


@router.delete("/custom-fields/{field_id}", status_code=204)
async def delete_custom_field(
    field_id: uuid.UUID,
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    """Delete a custom field together with its values."""
    await LeadService(session).delete_custom_field(access, field_id)


@router.post("/leads", response_model=LeadSaveResponse, status_code=201)
async def create_lead(
    lead_data: LeadCreate,
    access: WorkspaceAccess = Depends(get_workspace_access),
    dispatcher: TriggerDispatcher = Depends(get_dispatcher),
    session: AsyncSession = Depends(get_session)
):
    """Create a new lead and fire the campaigns of its stage."""
    lead_service = LeadService(session, dispatcher)
    lead, report = await lead_service.create(access, lead_data)
    return {"lead": lead, "generation": report}


@router.get("/leads", response_model=PaginatedResponse[LeadResponse])
async def list_leads(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    stage_id: Optional[uuid.UUID] = None,
    campaign_id: Optional[uuid.UUID] = None,
    search: Optional[str] = None,
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    """List leads with filtering and pagination."""
    filters = LeadFilter(stage_id=stage_id, campaign_id=campaign_id, search=search)
    return await LeadService(session).list(access, filters, page, limit)


@router.get("/leads/{lead_id}", response_model=LeadDetailResponse)
async def get_lead(
    lead_id: uuid.UUID,
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    return await LeadService(session).get(access, lead_id)


@router.patch("/leads/{lead_id}", response_model=LeadSaveResponse)
async def update_lead(
    lead_id: uuid.UUID,
    lead_data: LeadUpdate,
    access: WorkspaceAccess = Depends(get_workspace_access),
    dispatcher: TriggerDispatcher = Depends(get_dispatcher),
    session: AsyncSession = Depends(get_session)
):
    """Update a lead. A stage change fires the target stage's campaigns."""
    lead_service = LeadService(session, dispatcher)
    lead, report = await lead_service.update(access, lead_id, lead_data)
    return {"lead": lead, "generation": report}


@router.post("/leads/{lead_id}/move", response_model=LeadSaveResponse)
async def move_lead(
    lead_id: uuid.UUID,
    data: LeadMoveRequest,
    access: WorkspaceAccess = Depends(get_workspace_access),
    dispatcher: TriggerDispatcher = Depends(get_dispatcher),
    session: AsyncSession = Depends(get_session)
):
    """Kanban move to another stage."""
    lead_service = LeadService(session, dispatcher)
    lead, report = await lead_service.move(access, lead_id, data.stage_id)
    return {"lead": lead, "generation": report}


@router.delete("/leads/{lead_id}", status_code=204)
async def delete_lead(
    lead_id: uuid.UUID,
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    await LeadService(session).delete(access, lead_id)
