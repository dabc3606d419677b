"""
Parsing and sanitization of raw model completions.

The completion is untrusted text. Parsing never raises: anything that is not
a JSON list of messages (bare, or under a "messages" key) yields [].
"""
import json
import logging
import re
from typing import Any, List

logger = logging.getLogger(__name__)

FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)

SQUARE_PLACEHOLDER = re.compile(r"\[[^\]]*\]")
DOUBLE_CURLY_PLACEHOLDER = re.compile(r"\{\{[^}]*\}\}")
SINGLE_CURLY_PLACEHOLDER = re.compile(r"\{[^}]*\}")
MULTI_WHITESPACE = re.compile(r"\s{2,}")
SPACE_BEFORE_PUNCTUATION = re.compile(r"\s+([,.:;!?])")


def extract_payload(raw: str) -> str:
    """Inner content of the first fenced code block, else the whole text."""
    text = raw or ""
    match = FENCED_BLOCK.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def _as_text(item: Any) -> str:
    if isinstance(item, str):
        return item
    return json.dumps(item, ensure_ascii=False)


def parse_completion(raw: str) -> List[str]:
    """Candidate messages from a completion, trimmed, empties dropped."""
    payload = extract_payload(raw)
    if not payload:
        return []

    try:
        data = json.loads(payload)
    except ValueError:
        logger.warning("Completion is not valid JSON")
        return []

    if isinstance(data, dict):
        data = data.get("messages")
    if not isinstance(data, list):
        logger.warning("Completion JSON has no messages list")
        return []

    candidates = []
    for item in data:
        text = _as_text(item).strip()
        if text:
            candidates.append(text)
    return candidates


def _strip_placeholders(text: str) -> str:
    # Repeat until stable so nested leftovers cannot survive a second pass
    while True:
        stripped = SQUARE_PLACEHOLDER.sub("", text)
        stripped = DOUBLE_CURLY_PLACEHOLDER.sub("", stripped)
        stripped = SINGLE_CURLY_PLACEHOLDER.sub("", stripped)
        if stripped == text:
            return stripped
        text = stripped


def sanitize_message(text: str) -> str:
    """
    Remove [..], {{..}} and {..} placeholders, collapse whitespace runs,
    drop whitespace before , . : ; ! ? and trim. Idempotent.
    """
    cleaned = _strip_placeholders(text or "")
    cleaned = MULTI_WHITESPACE.sub(" ", cleaned)
    cleaned = SPACE_BEFORE_PUNCTUATION.sub(r"\1", cleaned)
    return cleaned.strip()


def parse_messages(raw: str, limit: int = 3) -> List[str]:
    """Parse, sanitize, drop empties and keep at most `limit` messages in order."""
    messages = []
    for candidate in parse_completion(raw):
        cleaned = sanitize_message(candidate)
        if cleaned:
            messages.append(cleaned)
    return messages[:limit]
