"""
User and Workspace repositories.
"""
import uuid
from typing import Optional, List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from minicrm.models.user import User, Workspace, WorkspaceMember
from minicrm.repositories.base import BaseRepository
from minicrm.models.timestamps import utc_now


class UserRepository(BaseRepository[User]):
    """Repository for User operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        query = select(User).where(User.email == email.lower())
        result = await self.session.exec(query)
        return result.first()

    async def update_last_login(self, user_id: uuid.UUID) -> None:
        """Update user's last login timestamp."""
        user = await self.get(user_id)
        if user:
            user.last_login_at = utc_now()
            self.session.add(user)
            await self.session.commit()


class WorkspaceRepository(BaseRepository[Workspace]):
    """Repository for Workspace operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Workspace, session)

    async def get_for_user(self, user_id: uuid.UUID) -> List[tuple[Workspace, WorkspaceMember]]:
        """Get all workspaces a user belongs to, with the membership row."""
        query = (
            select(Workspace, WorkspaceMember)
            .join(WorkspaceMember, WorkspaceMember.workspace_id == Workspace.id)
            .where(WorkspaceMember.user_id == user_id, Workspace.archived_at == None)
            .order_by(Workspace.created_at)
        )
        result = await self.session.exec(query)
        return list(result.all())


class WorkspaceMemberRepository(BaseRepository[WorkspaceMember]):
    """Repository for WorkspaceMember (junction table) operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(WorkspaceMember, session)

    async def get_membership(
        self,
        user_id: uuid.UUID,
        workspace_id: uuid.UUID
    ) -> Optional[WorkspaceMember]:
        """Get specific membership record."""
        query = select(WorkspaceMember).where(
            WorkspaceMember.user_id == user_id,
            WorkspaceMember.workspace_id == workspace_id
        )
        result = await self.session.exec(query)
        return result.first()

    async def is_member(self, user_id: uuid.UUID, workspace_id: uuid.UUID) -> bool:
        """Check if user is a member of the workspace."""
        membership = await self.get_membership(user_id, workspace_id)
        return membership is not None
