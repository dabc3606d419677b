"""
Authentication API routes.
"""
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from minicrm.database import get_session
from minicrm.services.auth_service import AuthService
from minicrm.schemas.auth import RegisterRequest, LoginRequest, TokenResponse, UserResponse
from minicrm.api.deps import get_current_user
from minicrm.models.user import User

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", status_code=201)
async def register(
    request: RegisterRequest,
    session: AsyncSession = Depends(get_session)
):
    """Register a new user, optionally creating a first workspace."""
    auth_service = AuthService(session)
    return await auth_service.register(
        email=request.email,
        password=request.password,
        full_name=request.full_name,
        workspace_name=request.workspace_name
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    session: AsyncSession = Depends(get_session)
):
    """Login and get an access token."""
    auth_service = AuthService(session)
    return await auth_service.login(email=request.email, password=request.password)


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    """Get the authenticated user."""
    return current_user
