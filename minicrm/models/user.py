"""
User and Workspace models.
Core entities for multi-tenant support with many-to-many membership.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field, UniqueConstraint

from minicrm.models.timestamps import timestamp_field


class Workspace(SQLModel, table=True):
    """
    Workspace/Tenant model.
    All CRM records are scoped to exactly one workspace.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True)
    owner_id: uuid.UUID = Field(foreign_key="user.id", index=True)

    created_at: datetime = timestamp_field()
    archived_at: Optional[datetime] = timestamp_field(nullable=True)


class WorkspaceMember(SQLModel, table=True):
    """Junction table for the User-Workspace membership."""
    __tablename__ = "workspace_member"
    __table_args__ = (UniqueConstraint("workspace_id", "user_id"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspace.id", index=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", index=True)

    role: str = Field(default="member")  # admin, member

    created_at: datetime = timestamp_field()


class User(SQLModel, table=True):
    """User model with authentication and profile info."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    # Auth
    email: str = Field(unique=True, index=True)
    password_hash: str

    # Profile
    full_name: Optional[str] = None
    is_active: bool = Field(default=True)

    # Timestamps
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
    last_login_at: Optional[datetime] = timestamp_field(nullable=True)
