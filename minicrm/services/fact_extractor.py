"""
Lead fact extraction.
Flattens a lead and its custom values into labeled facts for the prompt.
"""
from typing import Iterable, List, Optional

from minicrm.models.lead import Lead, LeadCustomField, LeadCustomValue

FACT_SEPARATOR = " | "

# Standard attributes in the order they are presented to the model
STANDARD_FACT_LABELS = [
    ("name", "Name"),
    ("company", "Company"),
    ("job_title", "Job title"),
    ("email", "Email"),
    ("phone", "Phone"),
    ("source", "Source"),
]


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def standard_facts(lead: Lead) -> List[str]:
    facts = []
    for attribute, label in STANDARD_FACT_LABELS:
        value = _clean(getattr(lead, attribute, None))
        if value:
            facts.append(f"{label}: {value}")
    return facts


def custom_facts(
    custom_fields: Iterable[LeadCustomField],
    custom_values: Iterable[LeadCustomValue]
) -> List[str]:
    """One fact per custom field that has a non-empty value, in field order."""
    value_map = {}
    for row in custom_values:
        value = _clean(row.value)
        if value:
            value_map[row.field_id] = value

    facts = []
    seen = set()
    for field in custom_fields:
        if field.id in seen:
            continue
        seen.add(field.id)
        value = value_map.get(field.id)
        if value:
            facts.append(f"{field.name}: {value}")
    return facts


def extract_lead_facts(
    lead: Lead,
    custom_fields: Iterable[LeadCustomField],
    custom_values: Iterable[LeadCustomValue]
) -> str:
    """
    Build the "lead facts" string: standard facts first, then custom facts,
    joined with " | ". Empty fields are left out; no facts gives "".
    """
    facts = standard_facts(lead) + custom_facts(custom_fields, custom_values)
    return FACT_SEPARATOR.join(facts)
