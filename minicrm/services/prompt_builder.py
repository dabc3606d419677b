"""
Prompt assembly for outreach message generation.
"""
import json

from minicrm.models.campaign import Campaign

OUTPUT_EXAMPLE = json.dumps(
    {
        "messages": [
            "Hi Ana, I noticed Acme is growing its sales team. Would a quick chat about onboarding new reps make sense?",
            "Hello Ana, teams like Acme often lose time on manual prospecting. Open to seeing how others solved it?",
            "Hi Ana, is improving pipeline visibility a priority for Acme this quarter?",
        ]
    },
    ensure_ascii=False,
)


def build_instructions(language: str) -> str:
    return f"""You are a sales development representative writing first-touch outreach.

INSTRUCTIONS:
- Write 2 to 3 short outreach messages in {language}.
- Use only the facts given in the CONTEXT section. Never invent facts about the lead or the company.
- Never use placeholders or bracketed tokens such as [Your Name], [Company] or {{{{name}}}}.
- Never mention the sender's own name and do not sign the messages.
- If the lead's name is not given, do not address them by name; open with a generic greeting instead.
- Each message must be complete and ready to send as is.

OUTPUT FORMAT:
Reply with valid JSON only, no prose and no markdown, shaped exactly like:
{{"messages": ["<message 1>", "<message 2>", "<message 3>"]}}

EXAMPLE:
{OUTPUT_EXAMPLE}"""


def build_context(campaign: Campaign, lead_facts: str) -> str:
    """Labeled context lines; the campaign line is always present."""
    lines = [f"Campaign: {(campaign.name or '').strip()}"]

    context = (campaign.context or "").strip()
    if context:
        lines.append(f"Campaign context: {context}")

    prompt = (campaign.prompt or "").strip()
    if prompt:
        lines.append(f"Campaign instructions: {prompt}")

    facts = (lead_facts or "").strip()
    if facts:
        lines.append(f"Lead facts: {facts}")

    return "\n".join(lines)


def build_prompt(campaign: Campaign, lead_facts: str, language: str) -> str:
    """Compose the full instruction block sent to the completion provider."""
    return f"{build_instructions(language)}\n\nCONTEXT:\n{build_context(campaign, lead_facts)}"
