import uuid

from minicrm.models.lead import Lead, LeadCustomField, LeadCustomValue
from minicrm.services.fact_extractor import extract_lead_facts, standard_facts, custom_facts


def make_lead(**fields):
    fields.setdefault("name", "")
    return Lead(workspace_id=uuid.uuid4(), stage_id=uuid.uuid4(), **fields)


def make_field(name):
    return LeadCustomField(id=uuid.uuid4(), workspace_id=uuid.uuid4(), name=name)


def make_value(field, value):
    return LeadCustomValue(lead_id=uuid.uuid4(), field_id=field.id, value=value)


def test_empty_lead_gives_empty_facts():
    assert extract_lead_facts(make_lead(), [], []) == ""


def test_standard_facts_follow_fixed_order():
    lead = make_lead(
        name="Ana",
        source="LinkedIn",
        phone="+55 11 99999-0000",
        email="ana@acme.com",
        job_title="Head of Sales",
        company="Acme",
        notes="met at a conference"
    )

    assert standard_facts(lead) == [
        "Name: Ana",
        "Company: Acme",
        "Job title: Head of Sales",
        "Email: ana@acme.com",
        "Phone: +55 11 99999-0000",
        "Source: LinkedIn",
    ]


def test_blank_fields_are_left_out():
    lead = make_lead(name="Ana", company="   ", email=None)

    assert extract_lead_facts(lead, [], []) == "Name: Ana"


def test_custom_facts_come_after_standard_facts_in_field_order():
    size = make_field("Company size")
    region = make_field("Region")
    empty = make_field("Budget")
    lead = make_lead(name="Ana", company="Acme")

    facts = extract_lead_facts(
        lead,
        [size, region, empty],
        [make_value(region, "LATAM"), make_value(size, "50-200"), make_value(empty, "  ")]
    )

    assert facts == "Name: Ana | Company: Acme | Company size: 50-200 | Region: LATAM"


def test_custom_values_without_definition_are_ignored():
    known = make_field("Region")
    orphan = make_field("Deleted")

    assert custom_facts([known], [make_value(orphan, "x"), make_value(known, "EU")]) == ["Region: EU"]


def test_duplicate_field_definitions_do_not_duplicate_facts():
    region = make_field("Region")

    assert custom_facts([region, region], [make_value(region, "EU")]) == ["Region: EU"]
