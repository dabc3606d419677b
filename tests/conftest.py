import os

# Must be set before minicrm.config is imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./minicrm-unused.db"
os.environ["GEMINI_API_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""

from types import SimpleNamespace

import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from minicrm.main import app
from minicrm.api.deps import get_dispatcher, get_provider
from minicrm.database import get_session, get_session_factory
from minicrm.core.security import create_access_token, get_password_hash
from minicrm.models.campaign import Campaign
from minicrm.models.lead import Lead
from minicrm.repositories.user_repo import UserRepository
from minicrm.repositories.pipeline_repo import PipelineStageRepository
from minicrm.services.integrations.base import CompletionProvider
from minicrm.services.trigger_dispatcher import TriggerDispatcher
from minicrm.services.workspace_service import WorkspaceService, WorkspaceAccess

ANA_COMPLETION = (
    '```json\n{"messages":["Ola Ana, vi que Acme pode se beneficiar.",'
    '"Ola, notei uma oportunidade para a Acme."]}\n```'
)


class FakeProvider(CompletionProvider):
    """Scripted completion provider that records every prompt it receives."""

    name = "Fake"

    def __init__(self, reply=ANA_COMPLETION):
        self.reply = reply
        self.prompts = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        reply = self.reply(prompt) if callable(self.reply) else self.reply
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'minicrm.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
async def client(session_factory, provider):
    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_provider] = lambda: provider
    app.dependency_overrides[get_dispatcher] = lambda: TriggerDispatcher(session_factory, lambda: provider)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def _create_user(session, email):
    return await UserRepository(session).create({
        "email": email,
        "password_hash": get_password_hash("correct-horse"),
        "full_name": email.split("@")[0].title()
    })


def auth_headers(user):
    token = create_access_token({"sub": user.email, "user_id": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def workspace(session):
    """A user owning one workspace with the default pipeline."""
    user = await _create_user(session, "sdr@example.com")
    created = await WorkspaceService(session).create_workspace(user, "Outbound")
    stages = await PipelineStageRepository(session).get_ordered(created["id"])
    return SimpleNamespace(
        id=created["id"],
        user=user,
        stages=stages,
        access=WorkspaceAccess(user_id=user.id, workspace_id=created["id"], role="admin"),
        headers=auth_headers(user)
    )


@pytest.fixture
async def other_workspace(session):
    """A second tenant with its own owner."""
    user = await _create_user(session, "rival@example.com")
    created = await WorkspaceService(session).create_workspace(user, "Rival")
    stages = await PipelineStageRepository(session).get_ordered(created["id"])
    return SimpleNamespace(
        id=created["id"],
        user=user,
        stages=stages,
        access=WorkspaceAccess(user_id=user.id, workspace_id=created["id"], role="admin"),
        headers=auth_headers(user)
    )


@pytest.fixture
def make_lead(session):
    async def make(ws, **fields):
        fields.setdefault("name", "Ana")
        fields.setdefault("stage_id", ws.stages[0].id)
        lead = Lead(workspace_id=ws.id, **fields)
        session.add(lead)
        await session.commit()
        await session.refresh(lead)
        return lead
    return make


@pytest.fixture
def make_campaign(session):
    async def make(ws, **fields):
        fields.setdefault("name", "Intro")
        campaign = Campaign(workspace_id=ws.id, **fields)
        session.add(campaign)
        await session.commit()
        await session.refresh(campaign)
        return campaign
    return make


@pytest.fixture
async def stranger(session):
    """A registered user who belongs to no workspace."""
    user = await _create_user(session, "stranger@example.com")
    return SimpleNamespace(user=user, headers=auth_headers(user))
