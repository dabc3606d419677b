"""
Workspace service - tenants, membership and access resolution.
"""
import uuid
import logging
from dataclasses import dataclass
from typing import List

from sqlmodel.ext.asyncio.session import AsyncSession

from minicrm.core.exceptions import (
    raise_not_found,
    raise_forbidden,
    raise_already_exists,
    raise_validation_error
)
from minicrm.repositories.user_repo import (
    UserRepository,
    WorkspaceRepository,
    WorkspaceMemberRepository
)
from minicrm.repositories.pipeline_repo import PipelineStageRepository
from minicrm.models.user import User, Workspace, WorkspaceMember

logger = logging.getLogger(__name__)

DEFAULT_STAGES = [
    "Base",
    "Lead Mapeado",
    "Tentando Contato",
    "Conexão Iniciada",
    "Desqualificado",
    "Qualificado",
    "Reunião Agendada",
]


@dataclass(frozen=True)
class WorkspaceAccess:
    """
    A user's verified membership in one workspace.
    Resolved once per request or stage transition and passed down explicitly.
    """
    user_id: uuid.UUID
    workspace_id: uuid.UUID
    role: str = "member"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def covers(self, user_id: uuid.UUID, workspace_id: uuid.UUID) -> bool:
        return self.user_id == user_id and self.workspace_id == workspace_id


async def resolve_access(
    session: AsyncSession,
    user_id: uuid.UUID,
    workspace_id: uuid.UUID
) -> WorkspaceAccess:
    """Verify membership or raise ForbiddenError."""
    membership = await WorkspaceMemberRepository(session).get_membership(user_id, workspace_id)
    if membership is None:
        raise_forbidden("You are not a member of this workspace")
    return WorkspaceAccess(user_id=user_id, workspace_id=workspace_id, role=membership.role)


class WorkspaceService:
    """Service for workspace management."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)
        self.workspace_repo = WorkspaceRepository(session)
        self.member_repo = WorkspaceMemberRepository(session)
        self.stage_repo = PipelineStageRepository(session)

    async def create_workspace(self, user: User, name: str) -> dict:
        """Create a workspace with the default pipeline; the creator becomes admin."""
        name = (name or "").strip()
        if not name:
            raise_validation_error("Workspace name is required", "name")

        workspace = Workspace(name=name, owner_id=user.id)
        self.session.add(workspace)
        await self.session.flush()

        membership = WorkspaceMember(workspace_id=workspace.id, user_id=user.id, role="admin")
        self.session.add(membership)
        await self.session.commit()
        await self.session.refresh(workspace)

        await self.stage_repo.bulk_create(workspace.id, DEFAULT_STAGES)
        logger.info(f"Workspace {workspace.id} created by user {user.id}")

        return self._to_dict(workspace, membership.role)

    async def list_workspaces(self, user: User) -> List[dict]:
        """Get all workspaces the user belongs to."""
        rows = await self.workspace_repo.get_for_user(user.id)
        return [self._to_dict(workspace, membership.role) for workspace, membership in rows]

    async def rename_workspace(self, access: WorkspaceAccess, name: str) -> dict:
        if not access.is_admin:
            raise_forbidden("Only admins can rename the workspace")
        name = (name or "").strip()
        if not name:
            raise_validation_error("Workspace name is required", "name")

        workspace = await self.workspace_repo.update(access.workspace_id, {"name": name})
        if not workspace:
            raise_not_found("Workspace", str(access.workspace_id))
        return self._to_dict(workspace, access.role)

    async def add_member(self, access: WorkspaceAccess, email: str, role: str = "member") -> WorkspaceMember:
        """Add an existing user to the workspace."""
        if not access.is_admin:
            raise_forbidden("Only admins can add members")

        invitee = await self.user_repo.get_by_email(email)
        if not invitee:
            raise_not_found("User", email)

        if await self.member_repo.is_member(invitee.id, access.workspace_id):
            raise_already_exists("Member", "email", email)

        return await self.member_repo.create({
            "workspace_id": access.workspace_id,
            "user_id": invitee.id,
            "role": role
        })

    @staticmethod
    def _to_dict(workspace: Workspace, role: str) -> dict:
        return {
            "id": workspace.id,
            "name": workspace.name,
            "owner_id": workspace.owner_id,
            "role": role,
            "created_at": workspace.created_at
        }
