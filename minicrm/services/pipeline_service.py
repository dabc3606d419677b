"""
Pipeline service - stages and per-stage required fields.
"""
import uuid
from typing import Dict, Iterable, List, Mapping, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from minicrm.core.exceptions import raise_not_found, raise_validation_error
from minicrm.models.lead import LeadCustomField
from minicrm.models.pipeline import PipelineStage
from minicrm.repositories.pipeline_repo import PipelineStageRepository, StageRequiredFieldRepository
from minicrm.repositories.lead_repo import LeadRepository, LeadCustomFieldRepository
from minicrm.repositories.campaign_repo import CampaignRepository
from minicrm.schemas.pipeline import StageCreate, StageUpdate
from minicrm.services.workspace_service import WorkspaceAccess

CUSTOM_FIELD_PREFIX = "custom:"

STANDARD_FIELD_LABELS = {
    "name": "Name",
    "email": "Email",
    "phone": "Phone",
    "company": "Company",
    "job_title": "Job title",
    "source": "Source",
    "notes": "Notes",
    "responsible_user_id": "Responsible",
}


def _is_blank(value) -> bool:
    return value is None or str(value).strip() == ""


def find_missing_required_fields(
    lead_values: Mapping[str, object],
    custom_values: Mapping[str, Optional[str]],
    required_keys: Iterable[str],
    custom_fields: Iterable[LeadCustomField] = ()
) -> List[str]:
    """
    Labels of required fields that are null or blank.

    lead_values maps standard attribute names to values; custom_values maps
    custom field ids (as strings) to values.
    """
    names = {str(field.id): field.name for field in custom_fields}
    missing = []
    for key in required_keys:
        if key.startswith(CUSTOM_FIELD_PREFIX):
            field_id = key[len(CUSTOM_FIELD_PREFIX):]
            if _is_blank(custom_values.get(field_id)):
                name = names.get(field_id)
                missing.append(f"{name} (custom)" if name else f"Field {field_id}")
        elif _is_blank(lead_values.get(key)):
            missing.append(STANDARD_FIELD_LABELS.get(key, key))
    return missing


class PipelineService:
    """Service for pipeline stage operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.stage_repo = PipelineStageRepository(session)
        self.required_repo = StageRequiredFieldRepository(session)
        self.custom_field_repo = LeadCustomFieldRepository(session)
        self.lead_repo = LeadRepository(session)
        self.campaign_repo = CampaignRepository(session)

    async def list_stages(self, access: WorkspaceAccess) -> List[PipelineStage]:
        return await self.stage_repo.get_ordered(access.workspace_id)

    async def get_stage(self, access: WorkspaceAccess, stage_id: uuid.UUID) -> PipelineStage:
        stage = await self.stage_repo.get_in_workspace(stage_id, access.workspace_id)
        if not stage:
            raise_not_found("Stage", str(stage_id))
        return stage

    async def create_stage(self, access: WorkspaceAccess, data: StageCreate) -> PipelineStage:
        name = data.name.strip()
        if not name:
            raise_validation_error("Stage name is required", "name")
        sort_order = data.sort_order
        if sort_order is None:
            sort_order = await self.stage_repo.next_sort_order(access.workspace_id)
        return await self.stage_repo.create({
            "workspace_id": access.workspace_id,
            "name": name,
            "sort_order": sort_order
        })

    async def update_stage(self, access: WorkspaceAccess, stage_id: uuid.UUID, data: StageUpdate) -> PipelineStage:
        await self.get_stage(access, stage_id)
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in update_data:
            update_data["name"] = update_data["name"].strip()
            if not update_data["name"]:
                raise_validation_error("Stage name is required", "name")
        return await self.stage_repo.update(stage_id, update_data)

    async def delete_stage(self, access: WorkspaceAccess, stage_id: uuid.UUID) -> bool:
        """
        Delete a stage. Its leads move to the first remaining stage and
        campaigns triggered by it lose their trigger.
        """
        await self.get_stage(access, stage_id)
        remaining = [s for s in await self.stage_repo.get_ordered(access.workspace_id) if s.id != stage_id]
        if not remaining:
            raise_validation_error("A workspace needs at least one stage")

        await self.lead_repo.reassign_stage(stage_id, remaining[0].id)
        await self.campaign_repo.clear_trigger_stage(stage_id)
        await self.required_repo.delete_for_stage(stage_id)
        return await self.stage_repo.delete(stage_id)

    async def get_required_fields(self, access: WorkspaceAccess, stage_id: uuid.UUID) -> List[str]:
        await self.get_stage(access, stage_id)
        return await self.required_repo.get_keys(stage_id)

    async def set_required_fields(
        self,
        access: WorkspaceAccess,
        stage_id: uuid.UUID,
        field_keys: List[str]
    ) -> List[str]:
        """Replace the required field set after validating every key."""
        await self.get_stage(access, stage_id)
        custom_ids = {
            str(field.id) for field in await self.custom_field_repo.get_for_workspace(access.workspace_id)
        }

        for key in field_keys:
            if key.startswith(CUSTOM_FIELD_PREFIX):
                if key[len(CUSTOM_FIELD_PREFIX):] not in custom_ids:
                    raise_validation_error(f"Unknown custom field in '{key}'", "field_keys")
            elif key not in STANDARD_FIELD_LABELS:
                raise_validation_error(f"Unknown field key '{key}'", "field_keys")

        rows = await self.required_repo.replace_keys(access.workspace_id, stage_id, field_keys)
        return [row.field_key for row in rows]

    async def dashboard(self, access: WorkspaceAccess) -> Dict:
        """Lead counts per stage in pipeline order."""
        counts = await self.lead_repo.count_by_stage(access.workspace_id)
        stages = await self.stage_repo.get_ordered(access.workspace_id)
        return {
            "total_leads": sum(counts.values()),
            "stages": [
                {
                    "stage_id": stage.id,
                    "name": stage.name,
                    "sort_order": stage.sort_order,
                    "lead_count": counts.get(stage.id, 0)
                }
                for stage in stages
            ]
        }
