"""
Message generation service.

Runs one generation request end to end: load and authorize, extract lead facts,
build the prompt, call the completion provider, parse and sanitize the reply,
then store the surviving messages as one batch. Stateless per call; retrying
produces new rows.
"""
import uuid
import logging
from typing import Any, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from minicrm.config import settings
from minicrm.core.exceptions import (
    AuthError,
    EmptyResultError,
    ForbiddenError,
    MiniCRMException,
    NotFoundError,
    ProviderError,
    StorageError,
    ValidationError,
)
from minicrm.repositories.lead_repo import (
    LeadRepository,
    LeadCustomFieldRepository,
    LeadCustomValueRepository
)
from minicrm.repositories.campaign_repo import CampaignRepository
from minicrm.repositories.message_repo import GeneratedMessageRepository
from minicrm.repositories.user_repo import WorkspaceMemberRepository
from minicrm.services.integrations.base import CompletionProvider
from minicrm.services.fact_extractor import extract_lead_facts
from minicrm.services.prompt_builder import build_prompt
from minicrm.services.message_parser import parse_messages
from minicrm.services.workspace_service import WorkspaceAccess

logger = logging.getLogger(__name__)


def parse_id(value: Any, field: str) -> uuid.UUID:
    """Parse a request id, raising ValidationError when missing or malformed."""
    if isinstance(value, uuid.UUID):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required", field)
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string id", field)
    try:
        return uuid.UUID(value.strip())
    except ValueError:
        raise ValidationError(f"'{value}' is not a valid id", field)


class MessageGenerationService:
    """Service that turns (lead, campaign) into stored outreach drafts."""

    def __init__(
        self,
        session: AsyncSession,
        provider: CompletionProvider,
        language: Optional[str] = None,
        max_messages: Optional[int] = None
    ):
        self.session = session
        self.provider = provider
        self.language = language or settings.GENERATION_LANGUAGE
        self.max_messages = max_messages or settings.MAX_GENERATED_MESSAGES
        self.lead_repo = LeadRepository(session)
        self.campaign_repo = CampaignRepository(session)
        self.custom_field_repo = LeadCustomFieldRepository(session)
        self.custom_value_repo = LeadCustomValueRepository(session)
        self.message_repo = GeneratedMessageRepository(session)
        self.member_repo = WorkspaceMemberRepository(session)

    async def generate(
        self,
        lead_id: Any,
        campaign_id: Any,
        user_id: Optional[uuid.UUID],
        access: Optional[WorkspaceAccess] = None
    ) -> List[str]:
        """
        Generate, store and return up to max_messages messages.

        Raises AuthError, ValidationError, NotFoundError, ForbiddenError,
        ProviderError, ConfigurationError, EmptyResultError or StorageError.
        """
        if user_id is None:
            raise AuthError()

        lead_uuid = parse_id(lead_id, "lead_id")
        campaign_uuid = parse_id(campaign_id, "campaign_id")

        lead = await self.lead_repo.get(lead_uuid)
        if not lead:
            raise NotFoundError("Lead", str(lead_uuid))

        campaign = await self.campaign_repo.get(campaign_uuid)
        if not campaign:
            raise NotFoundError("Campaign", str(campaign_uuid))

        if campaign.workspace_id != lead.workspace_id:
            raise ValidationError("Campaign and lead belong to different workspaces")

        await self._authorize(user_id, lead.workspace_id, access)

        custom_fields = await self.custom_field_repo.get_for_workspace(lead.workspace_id)
        custom_values = await self.custom_value_repo.get_for_lead(lead.id)

        lead_facts = extract_lead_facts(lead, custom_fields, custom_values)
        prompt = build_prompt(campaign, lead_facts, self.language)
        logger.info(f"Generating messages for lead {lead.id} with campaign {campaign.id}")
        logger.debug(f"Prompt for lead {lead.id}:\n{prompt}")

        raw = await self._complete(prompt)

        messages = parse_messages(raw, self.max_messages)
        if not messages:
            logger.warning(f"Completion for lead {lead.id} / campaign {campaign.id} had no usable messages")
            raise EmptyResultError()

        try:
            await self.message_repo.bulk_create(lead.workspace_id, lead.id, campaign.id, messages)
        except SQLAlchemyError as e:
            logger.error(f"Storing generated messages for lead {lead.id} failed: {e}")
            raise StorageError(messages=messages) from e

        logger.info(f"Stored {len(messages)} generated messages for lead {lead.id}")
        return messages

    async def _authorize(
        self,
        user_id: uuid.UUID,
        workspace_id: uuid.UUID,
        access: Optional[WorkspaceAccess]
    ) -> None:
        if access is not None and access.covers(user_id, workspace_id):
            return
        if not await self.member_repo.is_member(user_id, workspace_id):
            raise ForbiddenError("You are not a member of this workspace")

    async def _complete(self, prompt: str) -> str:
        try:
            return await self.provider.generate(prompt)
        except MiniCRMException:
            raise
        except Exception as e:
            logger.error(f"{self.provider.name} call failed: {e}")
            raise ProviderError(self.provider.name, str(e)) from e
