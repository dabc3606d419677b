"""
Stage-triggered campaign matching.
"""
import uuid
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Union

from minicrm.models.campaign import Campaign

IdLike = Union[str, uuid.UUID]


@dataclass
class TriggerMatch:
    """
    Campaigns to fire for one stage transition.

    assign_campaign_ids is set only when the lead had no campaign association
    and at least one workspace trigger matched; the caller records it on the lead.
    """
    campaigns: List[Campaign] = field(default_factory=list)
    assign_campaign_ids: Optional[List[str]] = None

    @property
    def campaign_ids(self) -> List[str]:
        return [str(campaign.id) for campaign in self.campaigns]


def _normalize_ids(ids: Optional[Iterable[IdLike]]) -> List[str]:
    return [str(value) for value in (ids or []) if value]


def is_triggered_by(campaign: Campaign, stage_id: IdLike) -> bool:
    """Active campaigns with a trigger stage fire on entry into that stage."""
    if not campaign.active or campaign.trigger_stage_id is None:
        return False
    return str(campaign.trigger_stage_id) == str(stage_id)


def match_campaigns(
    stage_id: IdLike,
    campaigns: Iterable[Campaign],
    lead_campaign_ids: Optional[Iterable[IdLike]] = None
) -> TriggerMatch:
    """
    Select the campaigns that fire when a lead enters `stage_id`.

    A lead with an explicit campaign association only fires the triggered
    campaigns it is associated with. A lead without one fires every triggered
    campaign, and the matched ids become its association.
    """
    triggered = [campaign for campaign in campaigns if is_triggered_by(campaign, stage_id)]
    associated = _normalize_ids(lead_campaign_ids)

    if associated:
        allowed = set(associated)
        return TriggerMatch(campaigns=[c for c in triggered if str(c.id) in allowed])

    if not triggered:
        return TriggerMatch()

    return TriggerMatch(
        campaigns=triggered,
        assign_campaign_ids=[str(campaign.id) for campaign in triggered]
    )
