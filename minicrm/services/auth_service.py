"""
Authentication service - handles all auth operations.
"""
import logging
from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from minicrm.config import settings
from minicrm.core.security import get_password_hash, verify_password, create_access_token
from minicrm.core.exceptions import raise_already_exists, raise_unauthorized, raise_validation_error
from minicrm.repositories.user_repo import UserRepository
from minicrm.services.workspace_service import WorkspaceService

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)
        self.workspace_service = WorkspaceService(session)

    async def register(
        self,
        email: str,
        password: str,
        full_name: Optional[str] = None,
        workspace_name: Optional[str] = None
    ) -> dict:
        """Register a new user, optionally with a first workspace."""
        if not password or len(password) < 8:
            raise_validation_error("Password must have at least 8 characters", "password")

        # Check if email already exists
        existing = await self.user_repo.get_by_email(email)
        if existing:
            raise_already_exists("User", "email", email)

        user = await self.user_repo.create({
            "email": email.lower(),
            "password_hash": get_password_hash(password),
            "full_name": full_name
        })
        logger.info(f"User {user.id} registered")

        response = {
            "message": "User registered successfully",
            "user_id": str(user.id),
            "workspace_id": None
        }

        if workspace_name and workspace_name.strip():
            workspace = await self.workspace_service.create_workspace(user, workspace_name)
            response["workspace_id"] = str(workspace["id"])

        return response

    async def login(self, email: str, password: str) -> dict:
        """Authenticate user and return an access token."""
        user = await self.user_repo.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise_unauthorized("Incorrect email or password")

        if not user.is_active:
            raise_unauthorized("User account is deactivated")

        access_token = create_access_token({"sub": user.email, "user_id": str(user.id)})
        await self.user_repo.update_last_login(user.id)

        return {
            "access_token": access_token,
            "token_type": "bearer",
            "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
        }
