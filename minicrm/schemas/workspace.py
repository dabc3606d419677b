"""
Workspace schemas.
"""
import uuid
from typing import Literal
from datetime import datetime
from pydantic import BaseModel, EmailStr


class WorkspaceCreate(BaseModel):
    name: str


class WorkspaceUpdate(BaseModel):
    name: str


class WorkspaceResponse(BaseModel):
    id: uuid.UUID
    name: str
    owner_id: uuid.UUID
    role: str
    created_at: datetime


class MemberAdd(BaseModel):
    """Add an existing user to a workspace."""
    email: EmailStr
    role: Literal["admin", "member"] = "member"


class MemberResponse(BaseModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    user_id: uuid.UUID
    role: str
    created_at: datetime

    class Config:
        from_attributes = True
