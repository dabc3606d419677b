"""
Generated message service - reviewing and editing stored drafts.
"""
import uuid
from typing import List

from sqlmodel.ext.asyncio.session import AsyncSession

from minicrm.core.exceptions import raise_not_found, raise_validation_error
from minicrm.models.message import GeneratedMessage
from minicrm.repositories.lead_repo import LeadRepository
from minicrm.repositories.message_repo import GeneratedMessageRepository
from minicrm.services.workspace_service import WorkspaceAccess


class MessageService:
    """Service for generated message operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.lead_repo = LeadRepository(session)
        self.message_repo = GeneratedMessageRepository(session)

    async def list_for_lead(self, access: WorkspaceAccess, lead_id: uuid.UUID) -> List[GeneratedMessage]:
        if not await self.lead_repo.get_in_workspace(lead_id, access.workspace_id):
            raise_not_found("Lead", str(lead_id))
        return await self.message_repo.get_by_lead(access.workspace_id, lead_id)

    async def get(self, access: WorkspaceAccess, message_id: uuid.UUID) -> GeneratedMessage:
        message = await self.message_repo.get_in_workspace(message_id, access.workspace_id)
        if not message:
            raise_not_found("Message", str(message_id))
        return message

    async def update_content(self, access: WorkspaceAccess, message_id: uuid.UUID, content: str) -> GeneratedMessage:
        """Replace the text of a draft after manual review."""
        await self.get(access, message_id)
        content = (content or "").strip()
        if not content:
            raise_validation_error("Message content cannot be empty", "content")
        return await self.message_repo.update(message_id, {"content": content})

    async def delete(self, access: WorkspaceAccess, message_id: uuid.UUID) -> bool:
        await self.get(access, message_id)
        return await self.message_repo.delete(message_id)
