"""
Campaign model - outreach context and prompt, optionally stage-triggered.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from minicrm.models.timestamps import timestamp_field


class Campaign(SQLModel, table=True):
    """
    Campaign entity - configured outreach the message generator writes for.
    Auto-fires only when active and trigger_stage_id equals the lead's new stage.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspace.id", index=True)

    name: str = Field(index=True)
    context: Optional[str] = None
    prompt: Optional[str] = None

    active: bool = Field(default=True, index=True)
    trigger_stage_id: Optional[uuid.UUID] = Field(default=None, foreign_key="pipeline_stage.id", index=True)

    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
