import pytest

from minicrm.services.message_parser import (
    extract_payload,
    parse_completion,
    parse_messages,
    sanitize_message,
)


def test_fenced_block_content_is_used_and_prose_ignored():
    raw = 'Sure! Here you go:\n```json\n{"messages": ["Hello there."]}\n```\nGood luck!'

    assert extract_payload(raw) == '{"messages": ["Hello there."]}'
    assert parse_messages(raw) == ["Hello there."]


def test_untagged_fence_is_accepted():
    assert parse_messages('```\n["One.", "Two."]\n```') == ["One.", "Two."]


def test_bare_array_is_accepted():
    assert parse_completion('  ["A", "  ", "B"]  ') == ["A", "B"]


@pytest.mark.parametrize("raw", [
    "not json at all",
    '{"foo": 1}',
    '"just a string"',
    "42",
    '{"messages": "not a list"}',
    "",
    None,
])
def test_unusable_completions_yield_nothing(raw):
    assert parse_messages(raw) == []


def test_non_string_items_are_stringified():
    assert parse_completion('{"messages": [42, "ok"]}') == ["42", "ok"]


def test_output_is_truncated_to_three_in_order():
    raw = '{"messages": ["m1", "m2", "m3", "m4", "m5"]}'

    assert parse_messages(raw) == ["m1", "m2", "m3"]


def test_limit_is_configurable():
    assert parse_messages('["a", "b", "c"]', limit=2) == ["a", "b"]


def test_placeholders_are_removed_without_leaving_gaps():
    text = "Hi [First Name], I saw {{company}} is hiring , and {role} matters !"

    cleaned = sanitize_message(text)

    assert cleaned == "Hi, I saw is hiring, and matters!"
    for token in ("[", "]", "{", "}", "  "):
        assert token not in cleaned


def test_adjacent_placeholders_collapse_cleanly():
    assert sanitize_message("Hi [a][b] {{c}}{d}!") == "Hi!"


@pytest.mark.parametrize("text", [
    "Hi [Name] , welcome {{x}} !",
    "Plain message.",
    "  spaced   out  ;  text  ",
    "Hello {{{name}}} and [[x]] friend",
])
def test_sanitize_is_idempotent(text):
    once = sanitize_message(text)

    assert sanitize_message(once) == once


def test_messages_that_sanitize_to_empty_are_dropped():
    raw = '{"messages": ["[Your Name]", "{{greeting}}", "Real message."]}'

    assert parse_messages(raw) == ["Real message."]
