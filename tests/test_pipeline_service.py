import uuid

import pytest

from minicrm.core.exceptions import ValidationError
from minicrm.models.lead import LeadCustomField
from minicrm.schemas.pipeline import StageCreate
from minicrm.services.pipeline_service import PipelineService, find_missing_required_fields
from minicrm.services.workspace_service import DEFAULT_STAGES


def test_missing_fields_use_human_labels():
    field = LeadCustomField(id=uuid.uuid4(), workspace_id=uuid.uuid4(), name="Budget")
    unknown = uuid.uuid4()

    missing = find_missing_required_fields(
        {"name": "Ana", "email": "  ", "job_title": None, "responsible_user_id": None},
        {str(field.id): ""},
        ["name", "email", "job_title", "responsible_user_id", f"custom:{field.id}", f"custom:{unknown}"],
        [field]
    )

    assert missing == ["Email", "Job title", "Responsible", "Budget (custom)", f"Field {unknown}"]


def test_filled_fields_are_not_missing():
    assert find_missing_required_fields({"company": "Acme"}, {"abc": "x"}, ["company", "custom:abc"]) == []


async def test_new_workspace_has_default_stages_in_order(workspace):
    assert [stage.name for stage in workspace.stages] == DEFAULT_STAGES
    assert [stage.sort_order for stage in workspace.stages] == list(range(len(DEFAULT_STAGES)))


async def test_new_stage_is_appended(session, workspace):
    stage = await PipelineService(session).create_stage(workspace.access, StageCreate(name="Won"))

    assert stage.sort_order == len(DEFAULT_STAGES)


async def test_unknown_required_field_keys_are_rejected(session, workspace):
    service = PipelineService(session)
    stage_id = workspace.stages[1].id

    with pytest.raises(ValidationError):
        await service.set_required_fields(workspace.access, stage_id, ["favourite_colour"])
    with pytest.raises(ValidationError):
        await service.set_required_fields(workspace.access, stage_id, [f"custom:{uuid.uuid4()}"])


async def test_required_fields_are_replaced(session, workspace):
    service = PipelineService(session)
    stage_id = workspace.stages[1].id

    await service.set_required_fields(workspace.access, stage_id, ["email", "phone"])
    await service.set_required_fields(workspace.access, stage_id, ["company", "company"])

    assert await service.get_required_fields(workspace.access, stage_id) == ["company"]


async def test_deleting_a_stage_moves_its_leads(session, workspace, make_lead, make_campaign):
    service = PipelineService(session)
    doomed = workspace.stages[2]
    lead = await make_lead(workspace, stage_id=doomed.id)
    campaign = await make_campaign(workspace, trigger_stage_id=doomed.id)

    await service.delete_stage(workspace.access, doomed.id)

    await session.refresh(lead)
    await session.refresh(campaign)
    assert lead.stage_id == workspace.stages[0].id
    assert campaign.trigger_stage_id is None


async def test_dashboard_counts_leads_per_stage(session, workspace, make_lead):
    await make_lead(workspace)
    await make_lead(workspace, name="Bruno")
    await make_lead(workspace, name="Carla", stage_id=workspace.stages[3].id)

    dashboard = await PipelineService(session).dashboard(workspace.access)

    assert dashboard["total_leads"] == 3
    counts = [stage["lead_count"] for stage in dashboard["stages"]]
    assert counts == [2, 0, 0, 1, 0, 0, 0]
