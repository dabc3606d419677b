"""
Campaign service - campaign management.
"""
import uuid
import logging
from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from minicrm.core.exceptions import raise_not_found, raise_validation_error
from minicrm.repositories.campaign_repo import CampaignRepository
from minicrm.repositories.pipeline_repo import PipelineStageRepository
from minicrm.repositories.message_repo import GeneratedMessageRepository
from minicrm.models.campaign import Campaign
from minicrm.schemas.campaign import CampaignCreate, CampaignUpdate
from minicrm.services.workspace_service import WorkspaceAccess

logger = logging.getLogger(__name__)


class CampaignService:
    """Service for campaign operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.campaign_repo = CampaignRepository(session)
        self.stage_repo = PipelineStageRepository(session)
        self.message_repo = GeneratedMessageRepository(session)

    async def create(self, access: WorkspaceAccess, campaign_data: CampaignCreate) -> Campaign:
        """Create a new campaign."""
        data = campaign_data.model_dump()
        data["name"] = data["name"].strip()
        if not data["name"]:
            raise_validation_error("Campaign name is required", "name")
        await self._check_trigger_stage(access, data.get("trigger_stage_id"))

        data["workspace_id"] = access.workspace_id
        campaign = await self.campaign_repo.create(data)
        logger.info(f"Campaign '{campaign.name}' created in workspace {access.workspace_id}")
        return campaign

    async def get(self, access: WorkspaceAccess, campaign_id: uuid.UUID) -> Campaign:
        """Get a campaign by ID."""
        campaign = await self.campaign_repo.get_in_workspace(campaign_id, access.workspace_id)
        if not campaign:
            raise_not_found("Campaign", str(campaign_id))
        return campaign

    async def list(
        self,
        access: WorkspaceAccess,
        active: Optional[bool] = None,
        page: int = 1,
        limit: int = 20
    ) -> dict:
        """List campaigns with optional active filter."""
        filters = {}
        if active is not None:
            filters["active"] = active

        return await self.campaign_repo.list_paginated(
            workspace_id=access.workspace_id,
            filters=filters,
            page=page,
            limit=limit
        )

    async def update(
        self,
        access: WorkspaceAccess,
        campaign_id: uuid.UUID,
        campaign_data: CampaignUpdate
    ) -> Campaign:
        """Update a campaign."""
        await self.get(access, campaign_id)

        update_data = campaign_data.model_dump(exclude_unset=True)
        if "name" in update_data:
            update_data["name"] = (update_data["name"] or "").strip()
            if not update_data["name"]:
                raise_validation_error("Campaign name is required", "name")
        if update_data.get("active") is None:
            update_data.pop("active", None)
        if "trigger_stage_id" in update_data:
            await self._check_trigger_stage(access, update_data["trigger_stage_id"])

        return await self.campaign_repo.update(campaign_id, update_data)

    async def delete(self, access: WorkspaceAccess, campaign_id: uuid.UUID) -> bool:
        """Delete a campaign. Messages it produced stay on their leads."""
        campaign = await self.get(access, campaign_id)
        await self.message_repo.detach_campaign(campaign.id)
        success = await self.campaign_repo.delete(campaign.id)
        if success:
            logger.info(f"Campaign {campaign_id} deleted from workspace {access.workspace_id}")
        return success

    async def _check_trigger_stage(self, access: WorkspaceAccess, stage_id: Optional[uuid.UUID]) -> None:
        if stage_id is None:
            return
        if not await self.stage_repo.get_in_workspace(stage_id, access.workspace_id):
            raise_validation_error("Trigger stage does not belong to this workspace", "trigger_stage_id")
