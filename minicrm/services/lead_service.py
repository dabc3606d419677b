"""
Lead service - lead management, required field checks and stage triggers.
"""
import uuid
import logging
from typing import Dict, List, Optional, Tuple

from sqlmodel.ext.asyncio.session import AsyncSession

from minicrm.core.exceptions import raise_not_found, raise_validation_error
from minicrm.models.lead import Lead, LeadCustomField
from minicrm.repositories.lead_repo import (
    LeadRepository,
    LeadCustomFieldRepository,
    LeadCustomValueRepository
)
from minicrm.repositories.pipeline_repo import PipelineStageRepository, StageRequiredFieldRepository
from minicrm.repositories.campaign_repo import CampaignRepository
from minicrm.repositories.message_repo import GeneratedMessageRepository
from minicrm.repositories.user_repo import WorkspaceMemberRepository
from minicrm.schemas.lead import LeadCreate, LeadUpdate, LeadFilter, CustomFieldCreate
from minicrm.schemas.message import GenerationReport
from minicrm.services.campaign_trigger import match_campaigns
from minicrm.services.pipeline_service import CUSTOM_FIELD_PREFIX, find_missing_required_fields
from minicrm.services.trigger_dispatcher import TriggerDispatcher
from minicrm.services.workspace_service import WorkspaceAccess

logger = logging.getLogger(__name__)

STANDARD_ATTRIBUTES = [
    "name", "email", "phone", "company", "job_title", "source", "notes", "responsible_user_id"
]


class LeadService:
    """Service for lead operations."""

    def __init__(self, session: AsyncSession, dispatcher: Optional[TriggerDispatcher] = None):
        self.session = session
        self.dispatcher = dispatcher
        self.lead_repo = LeadRepository(session)
        self.custom_field_repo = LeadCustomFieldRepository(session)
        self.custom_value_repo = LeadCustomValueRepository(session)
        self.stage_repo = PipelineStageRepository(session)
        self.required_repo = StageRequiredFieldRepository(session)
        self.campaign_repo = CampaignRepository(session)
        self.message_repo = GeneratedMessageRepository(session)
        self.member_repo = WorkspaceMemberRepository(session)

    async def create(
        self,
        access: WorkspaceAccess,
        lead_data: LeadCreate
    ) -> Tuple[dict, Optional[GenerationReport]]:
        """Create a lead, store its custom values and fire campaigns of its stage."""
        data = lead_data.model_dump(exclude={"custom_values", "campaign_ids"})
        data["name"] = (data.get("name") or "").strip()
        if not data["name"]:
            raise_validation_error("Lead name is required", "name")

        if data.get("stage_id") is None:
            stages = await self.stage_repo.get_ordered(access.workspace_id)
            if not stages:
                raise_validation_error("Workspace has no pipeline stages", "stage_id")
            data["stage_id"] = stages[0].id
        else:
            await self._check_stage(access, data["stage_id"])

        await self._check_responsible(access, data.get("responsible_user_id"))
        data["campaign_ids"] = await self._check_campaigns(access, lead_data.campaign_ids)

        custom_values = await self._check_custom_values(access, lead_data.custom_values)
        custom_values = {field_id: value for field_id, value in custom_values.items() if value}

        await self._check_required(access, data["stage_id"], data, custom_values)

        data["workspace_id"] = access.workspace_id
        lead = await self.lead_repo.create(data)
        await self.custom_value_repo.upsert_many(lead.id, custom_values)
        logger.info(f"Lead {lead.id} created in workspace {access.workspace_id}")

        report = await self._fire_stage_triggers(access, lead)
        return await self.get(access, lead.id), report

    async def get(self, access: WorkspaceAccess, lead_id: uuid.UUID) -> dict:
        """Get a lead with its custom values."""
        lead = await self._get_lead(access, lead_id)
        values = await self.custom_value_repo.get_for_lead(lead.id)
        detail = lead.model_dump()
        detail["custom_values"] = {str(row.field_id): row.value for row in values}
        return detail

    async def list(
        self,
        access: WorkspaceAccess,
        filters: Optional[LeadFilter] = None,
        page: int = 1,
        limit: int = 20
    ) -> dict:
        return await self.lead_repo.search(access.workspace_id, filters, page, limit)

    async def update(
        self,
        access: WorkspaceAccess,
        lead_id: uuid.UUID,
        lead_data: LeadUpdate
    ) -> Tuple[dict, Optional[GenerationReport]]:
        """
        Update a lead. A change of stage is validated against the target
        stage's required fields and fires that stage's campaigns.
        """
        lead = await self._get_lead(access, lead_id)
        update_data = lead_data.model_dump(exclude_unset=True, exclude={"custom_values"})

        if "name" in update_data:
            update_data["name"] = (update_data["name"] or "").strip()
            if not update_data["name"]:
                raise_validation_error("Lead name is required", "name")

        if update_data.get("stage_id") is None:
            update_data.pop("stage_id", None)
        else:
            await self._check_stage(access, update_data["stage_id"])

        if "responsible_user_id" in update_data:
            await self._check_responsible(access, update_data["responsible_user_id"])

        if "campaign_ids" in update_data:
            update_data["campaign_ids"] = await self._check_campaigns(access, lead_data.campaign_ids)

        new_custom_values = await self._check_custom_values(access, lead_data.custom_values)

        target_stage_id = update_data.get("stage_id", lead.stage_id)
        merged_values = {attr: getattr(lead, attr) for attr in STANDARD_ATTRIBUTES}
        merged_values.update({k: v for k, v in update_data.items() if k in STANDARD_ATTRIBUTES})
        merged_custom = {
            str(row.field_id): row.value for row in await self.custom_value_repo.get_for_lead(lead.id)
        }
        merged_custom.update({str(k): v for k, v in new_custom_values.items()})
        await self._check_required(access, target_stage_id, merged_values, merged_custom)

        stage_changed = target_stage_id != lead.stage_id
        if update_data:
            lead = await self.lead_repo.update(lead.id, update_data)
        await self.custom_value_repo.upsert_many(lead.id, new_custom_values)

        report = None
        if stage_changed:
            logger.info(f"Lead {lead.id} moved to stage {target_stage_id}")
            report = await self._fire_stage_triggers(access, lead)
        return await self.get(access, lead.id), report

    async def move(
        self,
        access: WorkspaceAccess,
        lead_id: uuid.UUID,
        stage_id: uuid.UUID
    ) -> Tuple[dict, Optional[GenerationReport]]:
        """Kanban move; moving to the current stage changes nothing."""
        return await self.update(access, lead_id, LeadUpdate(stage_id=stage_id))

    async def delete(self, access: WorkspaceAccess, lead_id: uuid.UUID) -> bool:
        lead = await self._get_lead(access, lead_id)
        await self.custom_value_repo.delete_for_lead(lead.id)
        await self.message_repo.delete_for_lead(lead.id)
        return await self.lead_repo.delete(lead.id)

    async def list_custom_fields(self, access: WorkspaceAccess) -> List[LeadCustomField]:
        return await self.custom_field_repo.get_for_workspace(access.workspace_id)

    async def create_custom_field(self, access: WorkspaceAccess, data: CustomFieldCreate) -> LeadCustomField:
        name = data.name.strip()
        if not name:
            raise_validation_error("Custom field name is required", "name")
        return await self.custom_field_repo.create({
            "workspace_id": access.workspace_id,
            "name": name,
            "field_type": data.field_type
        })

    async def delete_custom_field(self, access: WorkspaceAccess, field_id: uuid.UUID) -> bool:
        """Delete a custom field with its values and any stage requirement on it."""
        field = await self.custom_field_repo.get_in_workspace(field_id, access.workspace_id)
        if not field:
            raise_not_found("Custom field", str(field_id))
        await self.custom_value_repo.delete_for_field(field.id)
        await self.required_repo.delete_for_key(access.workspace_id, f"{CUSTOM_FIELD_PREFIX}{field.id}")
        return await self.custom_field_repo.delete(field.id)

    async def _fire_stage_triggers(self, access: WorkspaceAccess, lead: Lead) -> Optional[GenerationReport]:
        """Match campaigns for the lead's current stage and generate for each."""
        campaigns = await self.campaign_repo.get_active(access.workspace_id)
        match = match_campaigns(lead.stage_id, campaigns, lead.campaign_ids)

        if match.assign_campaign_ids is not None:
            lead = await self.lead_repo.update(lead.id, {"campaign_ids": match.assign_campaign_ids})

        if not match.campaigns:
            return None
        if self.dispatcher is None:
            logger.warning(f"No dispatcher configured, skipping {len(match.campaigns)} campaigns for lead {lead.id}")
            return None
        return await self.dispatcher.dispatch(lead.id, match.campaigns, access)

    async def _get_lead(self, access: WorkspaceAccess, lead_id: uuid.UUID) -> Lead:
        lead = await self.lead_repo.get_in_workspace(lead_id, access.workspace_id)
        if not lead:
            raise_not_found("Lead", str(lead_id))
        return lead

    async def _check_stage(self, access: WorkspaceAccess, stage_id: uuid.UUID) -> None:
        if not await self.stage_repo.get_in_workspace(stage_id, access.workspace_id):
            raise_validation_error("Stage does not belong to this workspace", "stage_id")

    async def _check_responsible(self, access: WorkspaceAccess, user_id: Optional[uuid.UUID]) -> None:
        if user_id is not None and not await self.member_repo.is_member(user_id, access.workspace_id):
            raise_validation_error("Responsible user is not a workspace member", "responsible_user_id")

    async def _check_campaigns(
        self,
        access: WorkspaceAccess,
        campaign_ids: Optional[List[uuid.UUID]]
    ) -> List[str]:
        result = []
        for campaign_id in campaign_ids or []:
            if not await self.campaign_repo.get_in_workspace(campaign_id, access.workspace_id):
                raise_validation_error(f"Campaign {campaign_id} does not belong to this workspace", "campaign_ids")
            if str(campaign_id) not in result:
                result.append(str(campaign_id))
        return result

    async def _check_custom_values(
        self,
        access: WorkspaceAccess,
        values: Optional[Dict[uuid.UUID, Optional[str]]]
    ) -> Dict[uuid.UUID, Optional[str]]:
        if not values:
            return {}
        field_ids = {field.id for field in await self.custom_field_repo.get_for_workspace(access.workspace_id)}
        cleaned = {}
        for field_id, value in values.items():
            if field_id not in field_ids:
                raise_validation_error(f"Custom field {field_id} does not belong to this workspace", "custom_values")
            cleaned[field_id] = value.strip() if isinstance(value, str) else value
        return cleaned

    async def _check_required(
        self,
        access: WorkspaceAccess,
        stage_id: uuid.UUID,
        lead_values: dict,
        custom_values: dict
    ) -> None:
        required_keys = await self.required_repo.get_keys(stage_id)
        if not required_keys:
            return
        custom_fields = await self.custom_field_repo.get_for_workspace(access.workspace_id)
        missing = find_missing_required_fields(
            lead_values,
            {str(k): v for k, v in custom_values.items()},
            required_keys,
            custom_fields
        )
        if missing:
            raise_validation_error(f"Required fields missing: {', '.join(missing)}")
