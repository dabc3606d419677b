"""
Message generation and generated message API routes.
"""
import json
import uuid
from typing import Any, List, Tuple
from fastapi import APIRouter, Depends, Request
from sqlmodel.ext.asyncio.session import AsyncSession

from minicrm.database import get_session
from minicrm.core.exceptions import raise_validation_error
from minicrm.services.generation_service import MessageGenerationService
from minicrm.services.message_service import MessageService
from minicrm.services.integrations.base import CompletionProvider
from minicrm.services.workspace_service import WorkspaceAccess
from minicrm.schemas.message import (
    GenerateMessagesRequest, GenerateMessagesResponse, GeneratedMessageResponse, GeneratedMessageUpdate
)
from minicrm.schemas.common import ErrorResponse
from minicrm.api.deps import get_current_user, get_workspace_access, get_provider
from minicrm.models.user import User

router = APIRouter(tags=["messages"])

GENERATION_ERRORS = {
    code: {"model": ErrorResponse} for code in (400, 401, 403, 404, 500)
}

# Body is read by hand, so publish its schema explicitly
GENERATION_BODY = {
    "requestBody": {
        "content": {"application/json": {"schema": GenerateMessagesRequest.model_json_schema()}}
    }
}


async def read_generation_ids(request: Request) -> Tuple[Any, Any]:
    """
    Raw lead_id and campaign_id from the body.
    Malformed JSON or a non-object body is a 400 here instead of FastAPI's 422;
    the ids themselves are validated by the generation service.
    """
    raw = await request.body()
    if not raw.strip():
        return None, None
    try:
        payload = json.loads(raw)
    except ValueError:
        raise_validation_error("Request body is not valid JSON")
    if not isinstance(payload, dict):
        raise_validation_error("Request body must be a JSON object")
    return payload.get("lead_id"), payload.get("campaign_id")


@router.post(
    "/generate-messages",
    response_model=GenerateMessagesResponse,
    responses=GENERATION_ERRORS,
    openapi_extra=GENERATION_BODY
)
@router.post(
    "/api/generate-messages",
    response_model=GenerateMessagesResponse,
    responses=GENERATION_ERRORS,
    openapi_extra=GENERATION_BODY
)
async def generate_messages(
    current_user: User = Depends(get_current_user),
    ids: Tuple[Any, Any] = Depends(read_generation_ids),
    provider: CompletionProvider = Depends(get_provider),
    session: AsyncSession = Depends(get_session)
):
    """Draft up to three outreach messages for a lead with a campaign and store them."""
    lead_id, campaign_id = ids
    service = MessageGenerationService(session, provider)
    messages = await service.generate(lead_id, campaign_id, current_user.id)
    return {"messages": messages}


@router.get(
    "/api/workspaces/{workspace_id}/leads/{lead_id}/messages",
    response_model=List[GeneratedMessageResponse]
)
async def list_lead_messages(
    lead_id: uuid.UUID,
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    """Generated messages of a lead, newest first."""
    return await MessageService(session).list_for_lead(access, lead_id)


@router.patch("/api/workspaces/{workspace_id}/messages/{message_id}", response_model=GeneratedMessageResponse)
async def update_message(
    message_id: uuid.UUID,
    data: GeneratedMessageUpdate,
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    """Edit a generated message before sending it."""
    return await MessageService(session).update_content(access, message_id, data.content)


@router.delete("/api/workspaces/{workspace_id}/messages/{message_id}", status_code=204)
async def delete_message(
    message_id: uuid.UUID,
    access: WorkspaceAccess = Depends(get_workspace_access),
    session: AsyncSession = Depends(get_session)
):
    await MessageService(session).delete(access, message_id)
