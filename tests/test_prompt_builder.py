import uuid

from minicrm.models.campaign import Campaign
from minicrm.services.prompt_builder import build_prompt, build_context


def make_campaign(**fields):
    fields.setdefault("name", "Intro")
    return Campaign(workspace_id=uuid.uuid4(), **fields)


def test_context_lists_labeled_lines_in_order():
    campaign = make_campaign(context="B2B SaaS outreach", prompt="Mention the free pilot.")

    context = build_context(campaign, "Name: Ana | Company: Acme")

    assert context.splitlines() == [
        "Campaign: Intro",
        "Campaign context: B2B SaaS outreach",
        "Campaign instructions: Mention the free pilot.",
        "Lead facts: Name: Ana | Company: Acme",
    ]


def test_empty_context_and_facts_still_name_the_campaign():
    prompt = build_prompt(make_campaign(context="", prompt=None), "", "Brazilian Portuguese")

    assert prompt.strip()
    assert "Campaign: Intro" in prompt
    assert "Campaign context:" not in prompt
    assert "Campaign instructions:" not in prompt
    assert "Lead facts:" not in prompt


def test_instructions_constrain_the_output():
    prompt = build_prompt(make_campaign(), "Name: Ana", "Brazilian Portuguese")

    assert "2 to 3 short outreach messages in Brazilian Portuguese" in prompt
    assert "Never invent facts" in prompt
    assert "[Your Name]" in prompt
    assert "{{name}}" in prompt
    assert "sender's own name" in prompt
    assert "generic greeting" in prompt
    assert '{"messages":' in prompt


def test_instructions_come_before_context():
    prompt = build_prompt(make_campaign(), "Name: Ana", "English")

    assert prompt.index("OUTPUT FORMAT") < prompt.index("CONTEXT:") < prompt.index("Lead facts: Name: Ana")
