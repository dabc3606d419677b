"""
Message generation schemas.
"""
import uuid
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel


class GenerateMessagesRequest(BaseModel):
    """
    Generation request body, as documented.
    The route reads it leniently so every malformed value surfaces as a 400.
    """
    lead_id: Optional[str] = None
    campaign_id: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "lead_id": "550e8400-e29b-41d4-a716-446655440000",
                "campaign_id": "6ba7b810-9dad-11d1-80b4-00c04fd430c8"
            }
        }


class GenerateMessagesResponse(BaseModel):
    messages: List[str]


class GeneratedMessageResponse(BaseModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    lead_id: uuid.UUID
    campaign_id: Optional[uuid.UUID]
    content: str
    created_at: datetime

    class Config:
        from_attributes = True


class GeneratedMessageUpdate(BaseModel):
    content: str


class CampaignOutcome(BaseModel):
    """Outcome of one campaign inside a triggered batch."""
    campaign_id: uuid.UUID
    campaign_name: str
    status: str  # generated, failed
    messages: List[str] = []
    error: Optional[str] = None
    code: Optional[str] = None
    retryable: bool = False


class GenerationReport(BaseModel):
    """Per-campaign outcomes of one stage transition or lead creation."""
    requested: int
    succeeded: int
    failed: int
    summary: str
    outcomes: List[CampaignOutcome] = []
