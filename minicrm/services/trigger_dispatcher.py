"""
Concurrent fan-out of message generation for triggered campaigns.
"""
import asyncio
import uuid
import logging
from typing import Callable, List

from minicrm.core.exceptions import MiniCRMException
from minicrm.models.campaign import Campaign
from minicrm.schemas.message import CampaignOutcome, GenerationReport
from minicrm.services.integrations.base import CompletionProvider
from minicrm.services.integrations.completion import get_completion_provider
from minicrm.services.generation_service import MessageGenerationService
from minicrm.services.workspace_service import WorkspaceAccess

logger = logging.getLogger(__name__)


def summarize(outcomes: List[CampaignOutcome]) -> str:
    succeeded = sum(1 for outcome in outcomes if outcome.status == "generated")
    parts = [f"{succeeded} of {len(outcomes)} campaigns generated messages"]
    for outcome in outcomes:
        if outcome.status == "failed":
            parts.append(f"campaign {outcome.campaign_name} failed: {outcome.error}")
    return "; ".join(parts)


class TriggerDispatcher:
    """
    Runs one generation per campaign in parallel.
    Every task gets its own session; one failure never cancels the others.
    The provider is only resolved once some campaign actually fires.
    """

    def __init__(
        self,
        session_factory: Callable,
        provider_factory: Callable[[], CompletionProvider] = get_completion_provider
    ):
        self.session_factory = session_factory
        self.provider_factory = provider_factory

    async def _generate(
        self,
        provider: CompletionProvider,
        lead_id: uuid.UUID,
        campaign: Campaign,
        access: WorkspaceAccess
    ) -> List[str]:
        async with self.session_factory() as session:
            service = MessageGenerationService(session, provider)
            return await service.generate(lead_id, campaign.id, access.user_id, access=access)

    async def dispatch(
        self,
        lead_id: uuid.UUID,
        campaigns: List[Campaign],
        access: WorkspaceAccess
    ) -> GenerationReport:
        try:
            provider = self.provider_factory() if campaigns else None
        except MiniCRMException as e:
            logger.error(f"No completion provider for lead {lead_id}: {e.message}")
            results = [e] * len(campaigns)
        else:
            results = await asyncio.gather(
                *(self._generate(provider, lead_id, campaign, access) for campaign in campaigns),
                return_exceptions=True
            )

        outcomes = []
        for campaign, result in zip(campaigns, results):
            if isinstance(result, MiniCRMException):
                logger.warning(f"Campaign {campaign.id} failed for lead {lead_id}: {result.message}")
                outcomes.append(CampaignOutcome(
                    campaign_id=campaign.id,
                    campaign_name=campaign.name,
                    status="failed",
                    messages=getattr(result, "messages", []),
                    error=result.message,
                    code=result.code,
                    retryable=result.retryable
                ))
            elif isinstance(result, Exception):
                logger.exception(f"Campaign {campaign.id} crashed for lead {lead_id}", exc_info=result)
                outcomes.append(CampaignOutcome(
                    campaign_id=campaign.id,
                    campaign_name=campaign.name,
                    status="failed",
                    error="Unexpected error",
                    code="error"
                ))
            elif isinstance(result, BaseException):
                raise result
            else:
                outcomes.append(CampaignOutcome(
                    campaign_id=campaign.id,
                    campaign_name=campaign.name,
                    status="generated",
                    messages=result
                ))

        succeeded = sum(1 for outcome in outcomes if outcome.status == "generated")
        report = GenerationReport(
            requested=len(outcomes),
            succeeded=succeeded,
            failed=len(outcomes) - succeeded,
            summary=summarize(outcomes),
            outcomes=outcomes
        )
        logger.info(f"Lead {lead_id}: {report.summary}")
        return report
