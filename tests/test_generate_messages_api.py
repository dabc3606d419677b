import uuid

import pytest

from minicrm.core.exceptions import ConfigurationError

EXPECTED = ["Ola Ana, vi que Acme pode se beneficiar.", "Ola, notei uma oportunidade para a Acme."]


@pytest.fixture
async def ana(workspace, make_lead, make_campaign):
    lead = await make_lead(workspace, name="Ana", company="Acme")
    campaign = await make_campaign(workspace, name="Intro", context="B2B SaaS outreach", prompt="")
    return lead, campaign


def body(lead_id, campaign_id):
    return {"lead_id": str(lead_id), "campaign_id": str(campaign_id)}


@pytest.mark.parametrize("path", ["/generate-messages", "/api/generate-messages"])
async def test_generate_returns_messages(client, workspace, ana, path):
    lead, campaign = ana

    response = await client.post(path, json=body(lead.id, campaign.id), headers=workspace.headers)

    assert response.status_code == 200
    assert response.json() == {"messages": EXPECTED}


async def test_generated_messages_are_listed_for_the_lead(client, workspace, ana):
    lead, campaign = ana
    await client.post("/generate-messages", json=body(lead.id, campaign.id), headers=workspace.headers)

    response = await client.get(
        f"/api/workspaces/{workspace.id}/leads/{lead.id}/messages", headers=workspace.headers
    )

    assert response.status_code == 200
    assert sorted(m["content"] for m in response.json()) == sorted(EXPECTED)


async def test_missing_credential_is_401(client, ana):
    lead, campaign = ana

    response = await client.post("/generate-messages", json=body(lead.id, campaign.id))

    assert response.status_code == 401
    assert response.json()["code"] == "auth_error"


async def test_invalid_credential_is_401(client, ana):
    lead, campaign = ana

    response = await client.post(
        "/generate-messages",
        json=body(lead.id, campaign.id),
        headers={"Authorization": "Bearer not-a-token"}
    )

    assert response.status_code == 401


@pytest.mark.parametrize("request_body", [
    {"json": {}},
    {"json": {"lead_id": "", "campaign_id": ""}},
    {"json": {"lead_id": "abc", "campaign_id": "def"}},
    {"json": {"lead_id": 123, "campaign_id": 456}},
    {"json": ["not", "an", "object"]},
    {"content": b"{not json", "headers": {"Content-Type": "application/json"}},
    {},
])
async def test_missing_or_malformed_ids_are_400(client, workspace, request_body):
    kwargs = dict(request_body)
    headers = {**workspace.headers, **kwargs.pop("headers", {})}

    response = await client.post("/generate-messages", headers=headers, **kwargs)

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"
    assert response.json()["retryable"] is False


async def test_credential_is_checked_before_the_body(client):
    response = await client.post(
        "/generate-messages", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 401


async def test_unknown_lead_is_404(client, workspace, ana):
    _, campaign = ana

    response = await client.post(
        "/generate-messages", json=body(uuid.uuid4(), campaign.id), headers=workspace.headers
    )

    assert response.status_code == 404


async def test_workspace_mismatch_is_400_without_provider_call(
    client, provider, workspace, other_workspace, make_lead, make_campaign
):
    lead = await make_lead(workspace)
    campaign = await make_campaign(other_workspace)

    response = await client.post("/generate-messages", json=body(lead.id, campaign.id), headers=workspace.headers)

    assert response.status_code == 400
    assert provider.prompts == []


async def test_non_member_is_403(client, stranger, ana):
    lead, campaign = ana

    response = await client.post("/generate-messages", json=body(lead.id, campaign.id), headers=stranger.headers)

    assert response.status_code == 403


async def test_empty_result_is_retryable_500(client, provider, workspace, ana):
    lead, campaign = ana
    provider.reply = "not json at all"

    response = await client.post("/generate-messages", json=body(lead.id, campaign.id), headers=workspace.headers)

    assert response.status_code == 500
    assert response.json()["code"] == "empty_result"
    assert response.json()["retryable"] is True

    listed = await client.get(f"/api/workspaces/{workspace.id}/leads/{lead.id}/messages", headers=workspace.headers)
    assert listed.json() == []


async def test_missing_provider_credential_is_500(client, provider, workspace, ana):
    lead, campaign = ana
    provider.reply = ConfigurationError("GEMINI_API_KEY is not configured")

    response = await client.post("/generate-messages", json=body(lead.id, campaign.id), headers=workspace.headers)

    assert response.status_code == 500
    assert response.json()["code"] == "configuration_error"
