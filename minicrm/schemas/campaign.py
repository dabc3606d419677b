"""
Campaign schemas.
"""
import uuid
from typing import Optional
from datetime import datetime
from pydantic import BaseModel


class CampaignCreate(BaseModel):
    """Create a new campaign."""
    name: str
    context: Optional[str] = None
    prompt: Optional[str] = None
    active: bool = True
    trigger_stage_id: Optional[uuid.UUID] = None

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Intro",
                "context": "B2B SaaS outreach for sales teams",
                "prompt": "Mention our free 14-day pilot.",
                "active": True,
                "trigger_stage_id": "550e8400-e29b-41d4-a716-446655440000"
            }
        }


class CampaignUpdate(BaseModel):
    """Update an existing campaign. Send trigger_stage_id null to remove the trigger."""
    name: Optional[str] = None
    context: Optional[str] = None
    prompt: Optional[str] = None
    active: Optional[bool] = None
    trigger_stage_id: Optional[uuid.UUID] = None


class CampaignResponse(BaseModel):
    """Campaign response."""
    id: uuid.UUID
    workspace_id: uuid.UUID
    name: str
    context: Optional[str]
    prompt: Optional[str]
    active: bool
    trigger_stage_id: Optional[uuid.UUID]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
