"""
Pipeline stage API routes, including per-stage required fields.
"""
import uuid
from typing import List
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from minicrm.database import get_session
from minicrm.services.pipeline_service import PipelineService
from minicrm.services.workspace_service import WorkspaceAccess
from minicrm.schemas.pipeline import (
    StageCreate, StageUpdate, StageResponse, RequiredFieldsUpdate, RequiredFieldsResponse
)
from minicrm.api.deps import get_workspace_access

router = APIRouter(prefix="/api/workspaces/{workspace_id}/stages", tags=["stages"])


@router.get("", response_model=List[StageResponse])
async def list_stages(
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    """List stages in pipeline order."""
    return await PipelineService(session).list_stages(access)


@router.post("", response_model=StageResponse, status_code=201)
async def create_stage(
    data: StageCreate,
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    return await PipelineService(session).create_stage(access, data)


@router.patch("/{stage_id}", response_model=StageResponse)
async def update_stage(
    stage_id: uuid.UUID,
    data: StageUpdate,
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    return await PipelineService(session).update_stage(access, stage_id, data)


@router.delete("/{stage_id}", status_code=204)
async def delete_stage(
    stage_id: uuid.UUID,
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    """Delete a stage; its leads move to the first remaining stage."""
    await PipelineService(session).delete_stage(access, stage_id)


@router.get("/{stage_id}/required-fields", response_model=RequiredFieldsResponse)
async def get_required_fields(
    stage_id: uuid.UUID,
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    field_keys = await PipelineService(session).get_required_fields(access, stage_id)
    return RequiredFieldsResponse(stage_id=stage_id, field_keys=field_keys)


@router.put("/{stage_id}/required-fields", response_model=RequiredFieldsResponse)
async def set_required_fields(
    stage_id: uuid.UUID,
    data: RequiredFieldsUpdate,
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    """Replace the fields a lead must have filled to enter this stage."""
    field_keys = await PipelineService(session).set_required_fields(access, stage_id, data.field_keys)
    return RequiredFieldsResponse(stage_id=stage_id, field_keys=field_keys)
