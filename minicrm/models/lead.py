"""
Lead model plus the workspace-scoped custom field schema extension.
"""
import uuid
from datetime import datetime
from typing import Optional, List

from sqlmodel import SQLModel, Field, UniqueConstraint
from sqlalchemy import Column, JSON
from sqlalchemy.dialects.postgresql import JSONB

from minicrm.models.timestamps import timestamp_field


class Lead(SQLModel, table=True):
    """
    Lead entity - a contact moving through the workspace pipeline.
    A change of stage_id is the event that fires stage-triggered campaigns.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspace.id", index=True)
    stage_id: uuid.UUID = Field(foreign_key="pipeline_stage.id", index=True)

    # Campaigns the lead has opted into; empty means "follow workspace triggers"
    campaign_ids: List[str] = Field(
        default_factory=list,
        sa_column=Column(JSON().with_variant(JSONB(), "postgresql"))
    )

    # Contact info
    name: str = Field(index=True)
    email: Optional[str] = Field(default=None, index=True)
    phone: Optional[str] = None
    company: Optional[str] = Field(default=None, index=True)
    job_title: Optional[str] = None
    source: Optional[str] = None
    notes: Optional[str] = None
    responsible_user_id: Optional[uuid.UUID] = Field(default=None, foreign_key="user.id")

    # Timestamps
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()


class LeadCustomField(SQLModel, table=True):
    """Custom field definition for every lead of a workspace."""
    __tablename__ = "lead_custom_field"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspace.id", index=True)
    name: str
    field_type: str = Field(default="text")  # text, number, date, select

    created_at: datetime = timestamp_field()


class LeadCustomValue(SQLModel, table=True):
    """Value of one custom field for one lead. At most one row per pair."""
    __tablename__ = "lead_custom_value"
    __table_args__ = (UniqueConstraint("lead_id", "field_id"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    lead_id: uuid.UUID = Field(foreign_key="lead.id", index=True)
    field_id: uuid.UUID = Field(foreign_key="lead_custom_field.id", index=True)
    value: Optional[str] = None

    created_at: datetime = timestamp_field()
