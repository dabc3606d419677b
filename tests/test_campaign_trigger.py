import uuid

from minicrm.models.campaign import Campaign
from minicrm.services.campaign_trigger import match_campaigns, is_triggered_by

STAGE = uuid.uuid4()
OTHER_STAGE = uuid.uuid4()


def make_campaign(name, active=True, trigger_stage_id=STAGE):
    return Campaign(
        id=uuid.uuid4(),
        workspace_id=uuid.uuid4(),
        name=name,
        active=active,
        trigger_stage_id=trigger_stage_id
    )


def test_inactive_campaign_never_matches():
    campaign = make_campaign("Paused", active=False)

    assert not is_triggered_by(campaign, STAGE)
    assert match_campaigns(STAGE, [campaign]).campaigns == []


def test_campaign_without_trigger_stage_never_matches():
    campaign = make_campaign("Manual", trigger_stage_id=None)

    assert match_campaigns(STAGE, [campaign]).campaigns == []
    assert match_campaigns(None, [campaign]).campaigns == []


def test_only_campaigns_for_the_target_stage_match_in_input_order():
    a = make_campaign("A")
    elsewhere = make_campaign("Elsewhere", trigger_stage_id=OTHER_STAGE)
    b = make_campaign("B")

    match = match_campaigns(STAGE, [a, elsewhere, b])

    assert match.campaigns == [a, b]


def test_lead_without_association_gets_matched_ids_assigned():
    a = make_campaign("A")
    b = make_campaign("B")

    match = match_campaigns(STAGE, [a, b], [])

    assert match.assign_campaign_ids == [str(a.id), str(b.id)]
    assert match.campaign_ids == [str(a.id), str(b.id)]


def test_lead_association_narrows_matches_and_is_not_reassigned():
    a = make_campaign("A")
    b = make_campaign("B")

    match = match_campaigns(STAGE, [a, b], [str(a.id)])

    assert match.campaigns == [a]
    assert match.assign_campaign_ids is None


def test_association_accepts_uuid_values():
    a = make_campaign("A")

    assert match_campaigns(str(STAGE), [a], [a.id]).campaigns == [a]


def test_no_match_is_empty_and_assigns_nothing():
    match = match_campaigns(OTHER_STAGE, [make_campaign("A")])

    assert match.campaigns == []
    assert match.assign_campaign_ids is None
