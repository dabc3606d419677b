"""
Generated message model - AI drafted outreach, editable by the user.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from minicrm.models.timestamps import timestamp_field


class GeneratedMessage(SQLModel, table=True):
    __tablename__ = "generated_message"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspace.id", index=True)
    lead_id: uuid.UUID = Field(foreign_key="lead.id", index=True)
    campaign_id: Optional[uuid.UUID] = Field(default=None, foreign_key="campaign.id", index=True)

    content: str

    created_at: datetime = timestamp_field()
