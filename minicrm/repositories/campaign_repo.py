"""
Campaign repository.
"""
import uuid
from typing import List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from minicrm.models.campaign import Campaign
from minicrm.repositories.base import BaseRepository


class CampaignRepository(BaseRepository[Campaign]):
    """Repository for Campaign operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Campaign, session)

    async def get_active(self, workspace_id: uuid.UUID) -> List[Campaign]:
        """Get all active campaigns for a workspace, oldest first."""
        query = select(Campaign).where(
            Campaign.workspace_id == workspace_id,
            Campaign.active == True
        ).order_by(Campaign.created_at)
        result = await self.session.exec(query)
        return list(result.all())

    async def clear_trigger_stage(self, stage_id: uuid.UUID) -> None:
        """Detach campaigns from a stage that is being removed."""
        query = select(Campaign).where(Campaign.trigger_stage_id == stage_id)
        result = await self.session.exec(query)
        for campaign in result.all():
            campaign.trigger_stage_id = None
            self.session.add(campaign)
        await self.session.commit()
