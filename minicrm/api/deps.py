"""
API dependencies - shared across all routes.
"""
import uuid
from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel.ext.asyncio.session import AsyncSession

from minicrm.database import get_session, get_session_factory
from minicrm.core.security import resolve_user_id
from minicrm.core.exceptions import raise_unauthorized
from minicrm.models.user import User
from minicrm.repositories.user_repo import UserRepository
from minicrm.services.integrations.base import CompletionProvider
from minicrm.services.integrations.completion import get_completion_provider
from minicrm.services.trigger_dispatcher import TriggerDispatcher
from minicrm.services.workspace_service import WorkspaceAccess, resolve_access


# auto_error=False so a missing header becomes our 401, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_session)
) -> User:
    """Get current authenticated user from the bearer token."""
    if credentials is None:
        raise_unauthorized("Missing bearer token")

    user_id = resolve_user_id(credentials.credentials)
    if user_id is None:
        raise_unauthorized("Could not validate credentials")

    user = await UserRepository(session).get(user_id)
    if not user:
        raise_unauthorized("User not found")

    if not user.is_active:
        raise_unauthorized("User account is deactivated")

    return user


async def get_workspace_access(
    workspace_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
) -> WorkspaceAccess:
    """Membership of the current user in the workspace named by the path."""
    return await resolve_access(session, current_user.id, workspace_id)


def get_provider() -> CompletionProvider:
    return get_completion_provider()


def get_dispatcher(session_factory: Callable = Depends(get_session_factory)) -> TriggerDispatcher:
    # Provider stays unresolved so lead writes never depend on its configuration
    return TriggerDispatcher(session_factory, get_completion_provider)
