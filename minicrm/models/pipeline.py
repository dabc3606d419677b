"""
Pipeline models - ordered stages and per-stage required fields.
"""
import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field, UniqueConstraint

from minicrm.models.timestamps import timestamp_field


class PipelineStage(SQLModel, table=True):
    """A step of the workspace pipeline, ordered by sort_order."""
    __tablename__ = "pipeline_stage"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspace.id", index=True)
    name: str
    sort_order: int = Field(default=0, index=True)

    created_at: datetime = timestamp_field()


class StageRequiredField(SQLModel, table=True):
    """
    Declares that a lead field must be filled before a lead is saved into a stage.
    field_key is a standard lead attribute name or "custom:<field_id>".
    """
    __tablename__ = "stage_required_field"
    __table_args__ = (UniqueConstraint("stage_id", "field_key"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspace.id", index=True)
    stage_id: uuid.UUID = Field(foreign_key="pipeline_stage.id", index=True)
    field_key: str

    created_at: datetime = timestamp_field()
