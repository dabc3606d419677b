"""
Pipeline stage schemas.
"""
import uuid
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel


class StageCreate(BaseModel):
    name: str
    sort_order: Optional[int] = None  # appended at the end when omitted


class StageUpdate(BaseModel):
    name: Optional[str] = None
    sort_order: Optional[int] = None


class StageResponse(BaseModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    name: str
    sort_order: int
    created_at: datetime

    class Config:
        from_attributes = True


class RequiredFieldsUpdate(BaseModel):
    """Replace the required field set of a stage."""
    field_keys: List[str]

    class Config:
        json_schema_extra = {
            "example": {"field_keys": ["email", "company", "custom:7f9c24e8-3b1a-4a4f-9c2e-1b2d3c4d5e6f"]}
        }


class RequiredFieldsResponse(BaseModel):
    stage_id: uuid.UUID
    field_keys: List[str]


class StageCount(BaseModel):
    stage_id: uuid.UUID
    name: str
    sort_order: int
    lead_count: int


class DashboardResponse(BaseModel):
    total_leads: int
    stages: List[StageCount]
