import uuid

from minicrm.api.deps import get_dispatcher
from minicrm.config import settings
from minicrm.main import app


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_register_login_and_me(client):
    registered = await client.post("/api/auth/register", json={
        "email": "Maria@Example.com",
        "password": "securepassword123",
        "full_name": "Maria Silva",
        "workspace_name": "Outbound Team"
    })
    assert registered.status_code == 201
    assert registered.json()["workspace_id"]

    login = await client.post("/api/auth/login", json={
        "email": "maria@example.com",
        "password": "securepassword123"
    })
    assert login.status_code == 200
    headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

    me = await client.get("/api/auth/me", headers=headers)
    assert me.json()["email"] == "maria@example.com"

    workspaces = await client.get("/api/workspaces", headers=headers)
    assert [ws["name"] for ws in workspaces.json()] == ["Outbound Team"]
    assert workspaces.json()[0]["role"] == "admin"


async def test_duplicate_registration_is_409(client):
    payload = {"email": "dup@example.com", "password": "securepassword123"}
    await client.post("/api/auth/register", json=payload)

    response = await client.post("/api/auth/register", json=payload)

    assert response.status_code == 409
    assert response.json()["code"] == "already_exists"


async def test_wrong_password_is_401(client, workspace):
    response = await client.post("/api/auth/login", json={"email": "sdr@example.com", "password": "wrong-password"})

    assert response.status_code == 401


async def test_workspace_routes_require_membership(client, workspace, stranger):
    response = await client.get(f"/api/workspaces/{workspace.id}/stages", headers=stranger.headers)

    assert response.status_code == 403
    assert response.json()["code"] == "forbidden"


async def test_only_admins_add_members(client, workspace, stranger):
    added = await client.post(
        f"/api/workspaces/{workspace.id}/members",
        json={"email": "stranger@example.com", "role": "member"},
        headers=workspace.headers
    )
    assert added.status_code == 201

    response = await client.patch(
        f"/api/workspaces/{workspace.id}", json={"name": "Taken over"}, headers=stranger.headers
    )
    assert response.status_code == 403


async def test_campaign_crud(client, workspace):
    base = f"/api/workspaces/{workspace.id}/campaigns"
    trigger = str(workspace.stages[1].id)

    created = await client.post(base, json={"name": "Intro", "context": "B2B SaaS", "trigger_stage_id": trigger},
                                headers=workspace.headers)
    assert created.status_code == 201
    campaign = created.json()
    assert campaign["active"] is True

    updated = await client.patch(f"{base}/{campaign['id']}", json={"trigger_stage_id": None},
                                 headers=workspace.headers)
    assert updated.json()["trigger_stage_id"] is None

    listed = await client.get(base, headers=workspace.headers)
    assert listed.json()["total"] == 1

    deleted = await client.delete(f"{base}/{campaign['id']}", headers=workspace.headers)
    assert deleted.status_code == 204

    missing = await client.get(f"{base}/{campaign['id']}", headers=workspace.headers)
    assert missing.status_code == 404


async def test_campaign_trigger_stage_from_other_workspace_is_400(client, workspace, other_workspace):
    response = await client.post(
        f"/api/workspaces/{workspace.id}/campaigns",
        json={"name": "Intro", "trigger_stage_id": str(other_workspace.stages[0].id)},
        headers=workspace.headers
    )

    assert response.status_code == 400


async def test_lead_move_returns_generation_report(client, workspace, make_campaign):
    target = workspace.stages[1]
    await make_campaign(workspace, name="Intro", trigger_stage_id=target.id)
    base = f"/api/workspaces/{workspace.id}/leads"

    created = await client.post(base, json={"name": "Ana", "company": "Acme"}, headers=workspace.headers)
    assert created.status_code == 201
    assert created.json()["generation"] is None
    lead_id = created.json()["lead"]["id"]

    moved = await client.post(f"{base}/{lead_id}/move", json={"stage_id": str(target.id)}, headers=workspace.headers)

    assert moved.status_code == 200
    generation = moved.json()["generation"]
    assert generation["succeeded"] == 1
    assert generation["outcomes"][0]["campaign_name"] == "Intro"

    dashboard = await client.get(f"/api/workspaces/{workspace.id}/dashboard", headers=workspace.headers)
    assert dashboard.json()["stages"][1]["lead_count"] == 1


async def test_lead_search(client, workspace, make_lead):
    await make_lead(workspace, name="Ana", company="Acme")
    await make_lead(workspace, name="Bruno", company="Globex")

    response = await client.get(
        f"/api/workspaces/{workspace.id}/leads", params={"search": "acme"}, headers=workspace.headers
    )

    assert [lead["name"] for lead in response.json()["items"]] == ["Ana"]


async def test_message_edit_and_delete(client, workspace, make_lead, make_campaign):
    lead = await make_lead(workspace, name="Ana", company="Acme")
    campaign = await make_campaign(workspace)
    await client.post(
        "/generate-messages",
        json={"lead_id": str(lead.id), "campaign_id": str(campaign.id)},
        headers=workspace.headers
    )
    listed = await client.get(f"/api/workspaces/{workspace.id}/leads/{lead.id}/messages", headers=workspace.headers)
    message_id = listed.json()[0]["id"]
    base = f"/api/workspaces/{workspace.id}/messages/{message_id}"

    blank = await client.patch(base, json={"content": "   "}, headers=workspace.headers)
    assert blank.status_code == 400

    edited = await client.patch(base, json={"content": " Ola Ana! "}, headers=workspace.headers)
    assert edited.json()["content"] == "Ola Ana!"

    deleted = await client.delete(base, headers=workspace.headers)
    assert deleted.status_code == 204

    gone = await client.patch(base, json={"content": "again"}, headers=workspace.headers)
    assert gone.status_code == 404


async def test_unknown_message_in_other_workspace_is_404(client, workspace):
    response = await client.delete(
        f"/api/workspaces/{workspace.id}/messages/{uuid.uuid4()}", headers=workspace.headers
    )

    assert response.status_code == 404


async def test_lead_writes_do_not_resolve_the_provider(client, workspace, monkeypatch):
    app.dependency_overrides.pop(get_dispatcher)
    monkeypatch.setattr(settings, "AI_PROVIDER", "carrier-pigeon")
    base = f"/api/workspaces/{workspace.id}/leads"

    created = await client.post(base, json={"name": "Ana", "company": "Acme"}, headers=workspace.headers)
    assert created.status_code == 201
    lead_id = created.json()["lead"]["id"]

    moved = await client.post(
        f"{base}/{lead_id}/move", json={"stage_id": str(workspace.stages[1].id)}, headers=workspace.headers
    )

    assert moved.status_code == 200
    assert moved.json()["generation"] is None
