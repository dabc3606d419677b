"""
Lead and custom field schemas.
"""
import uuid
from typing import Optional, List, Dict, Literal
from datetime import datetime
from pydantic import BaseModel

from minicrm.schemas.message import GenerationReport


class LeadCreate(BaseModel):
    """Create a new lead. Without stage_id the lead lands in the first stage."""
    name: str
    stage_id: Optional[uuid.UUID] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    job_title: Optional[str] = None
    source: Optional[str] = None
    notes: Optional[str] = None
    responsible_user_id: Optional[uuid.UUID] = None
    campaign_ids: Optional[List[uuid.UUID]] = []
    custom_values: Optional[Dict[uuid.UUID, Optional[str]]] = {}

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Ana Souza",
                "company": "Acme",
                "job_title": "Head of Sales",
                "email": "ana@acme.com",
                "custom_values": {"7f9c24e8-3b1a-4a4f-9c2e-1b2d3c4d5e6f": "50-200"}
            }
        }


class LeadUpdate(BaseModel):
    """Update an existing lead."""
    name: Optional[str] = None
    stage_id: Optional[uuid.UUID] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    job_title: Optional[str] = None
    source: Optional[str] = None
    notes: Optional[str] = None
    responsible_user_id: Optional[uuid.UUID] = None
    campaign_ids: Optional[List[uuid.UUID]] = None
    custom_values: Optional[Dict[uuid.UUID, Optional[str]]] = None


class LeadMoveRequest(BaseModel):
    """Move a lead to another pipeline stage."""
    stage_id: uuid.UUID


class LeadResponse(BaseModel):
    """Lead response."""
    id: uuid.UUID
    workspace_id: uuid.UUID
    stage_id: uuid.UUID
    campaign_ids: List[str]
    name: str
    email: Optional[str]
    phone: Optional[str]
    company: Optional[str]
    job_title: Optional[str]
    source: Optional[str]
    notes: Optional[str]
    responsible_user_id: Optional[uuid.UUID]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LeadDetailResponse(LeadResponse):
    """Lead with its custom values keyed by field id."""
    custom_values: Dict[str, Optional[str]] = {}


class LeadSaveResponse(BaseModel):
    """Result of a save that may have fired stage-triggered campaigns."""
    lead: LeadDetailResponse
    generation: Optional[GenerationReport] = None


class LeadFilter(BaseModel):
    """Lead filtering options."""
    stage_id: Optional[uuid.UUID] = None
    campaign_id: Optional[uuid.UUID] = None
    search: Optional[str] = None  # Search in name, email, company, job title, source, notes


class CustomFieldCreate(BaseModel):
    """Create a lead custom field."""
    name: str
    field_type: Literal["text", "number", "date", "select"] = "text"


class CustomFieldResponse(BaseModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    name: str
    field_type: str
    created_at: datetime

    class Config:
        from_attributes = True
