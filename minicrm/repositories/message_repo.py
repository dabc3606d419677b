"""
Generated message repository.
"""
import uuid
from typing import Optional, List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from minicrm.models.message import GeneratedMessage
from minicrm.repositories.base import BaseRepository


class GeneratedMessageRepository(BaseRepository[GeneratedMessage]):
    """Repository for GeneratedMessage operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(GeneratedMessage, session)

    async def bulk_create(
        self,
        workspace_id: uuid.UUID,
        lead_id: uuid.UUID,
        campaign_id: Optional[uuid.UUID],
        contents: List[str]
    ) -> List[GeneratedMessage]:
        """Insert one batch of messages in a single commit."""
        messages = [
            GeneratedMessage(
                workspace_id=workspace_id,
                lead_id=lead_id,
                campaign_id=campaign_id,
                content=content
            )
            for content in contents
        ]
        self.session.add_all(messages)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return messages

    async def get_by_lead(self, workspace_id: uuid.UUID, lead_id: uuid.UUID) -> List[GeneratedMessage]:
        """Messages of a lead, newest first."""
        query = select(GeneratedMessage).where(
            GeneratedMessage.workspace_id == workspace_id,
            GeneratedMessage.lead_id == lead_id
        ).order_by(GeneratedMessage.created_at.desc())
        result = await self.session.exec(query)
        return list(result.all())

    async def delete_for_lead(self, lead_id: uuid.UUID) -> None:
        result = await self.session.exec(
            select(GeneratedMessage).where(GeneratedMessage.lead_id == lead_id)
        )
        for row in result.all():
            await self.session.delete(row)
        await self.session.commit()

    async def detach_campaign(self, campaign_id: uuid.UUID) -> None:
        """Keep messages of a deleted campaign, dropping the reference."""
        result = await self.session.exec(
            select(GeneratedMessage).where(GeneratedMessage.campaign_id == campaign_id)
        )
        for row in result.all():
            row.campaign_id = None
            self.session.add(row)
        await self.session.commit()
