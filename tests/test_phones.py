from datetime import date

from owner_resolution.models import RawContactEntry, RegisteredContact, RegistrationType, Source
from owner_resolution.scoring.phones import rank_phones

TODAY = date(2025, 6, 1)

JOHN = RegisteredContact(RegistrationType.INDIVIDUAL_OWNER, first_name="John", last_name="Smith")
ACME = RegisteredContact(RegistrationType.CORPORATE_OWNER, corporate_name="ACME REALTY LLC")


def _entry(phone, name="", owner=True, when=None, source=Source.DOB_PERMIT_OWNER):
    return RawContactEntry(phone=phone, name=name, is_owner_role=owner, source=source, event_date=when)


def test_owner_phone_matching_registered_owner_is_clamped():
    groups = rank_phones([_entry("212-555-0147", "John Smith", when="2024-06-01")], [JOHN], today=TODAY)
    assert len(groups) == 1
    g = groups[0]
    assert g.score == 100
    assert g.reasons == [
        "Owner phone on filing",
        "Name matches HPD registered owner",
        "Recent filing (last 2 years)",
    ]
    assert g.is_primary


def test_old_applicant_phone_scores_base():
    entry = _entry("718-555-0100", "Bob Builder", owner=False, when="2018-01-01", source=Source.DOB_PERMIT_APPLICANT)
    groups = rank_phones([entry], [JOHN], today=TODAY)
    assert groups[0].score == 50
    assert groups[0].reasons == ["Applicant/contractor phone"]


def test_entity_match_and_five_year_window():
    groups = rank_phones(
        [_entry("2125550199", "Acme Realty LLC", when="2021-03-01")],
        [ACME],
        today=TODAY,
    )
    assert groups[0].score == 50 + 20 + 15 + 10
    assert "Name matches entity owner" in groups[0].reasons
    assert "Filing within last 5 years" in groups[0].reasons


def test_tax_roll_owner_counts_as_entity():
    groups = rank_phones([_entry("2125550199", "SMITH HOLDINGS")], [], "SMITH HOLDINGS LLC", today=TODAY)
    assert groups[0].reasons == ["Owner phone on filing", "Name matches entity owner"]


def test_formats_group_together_and_appearances_are_capped():
    entries = [
        _entry("(212) 555-0147", owner=False),
        _entry("1-212-555-0147", owner=False),
    ]
    groups = rank_phones(entries, today=TODAY)
    assert len(groups) == 1
    assert groups[0].normalized_phone == "2125550147"
    assert groups[0].display_phone == "(212) 555-0147"
    assert groups[0].filing_count == 2
    assert groups[0].score == 60
    assert groups[0].reasons[-1] == "Found in 2 filings"

    many = [_entry("212 555 0147", owner=False) for _ in range(6)]
    capped = rank_phones(many, today=TODAY)[0]
    assert capped.score == 80
    assert capped.reasons[-1] == "Found in 6 filings"


def test_short_and_empty_phones_are_dropped():
    assert rank_phones([_entry("555-01"), _entry("")], today=TODAY) == []
    assert rank_phones([], today=TODAY) == []


def test_single_primary_and_descending_order():
    entries = [
        _entry("7185550100", "Bob Builder", owner=False),
        _entry("2125550147", "John Smith", when="2025-01-10"),
        _entry("3475550123", "Mary Jones", owner=False),
    ]
    groups = rank_phones(entries, [JOHN], today=TODAY)
    scores = [g.score for g in groups]
    assert scores == sorted(scores, reverse=True)
    assert sum(g.is_primary for g in groups) == 1
    assert groups[0].normalized_phone == "2125550147"
    # ties keep input order
    assert [g.normalized_phone for g in groups[1:]] == ["7185550100", "3475550123"]
    assert all(0 <= s <= 100 for s in scores)


def test_adding_owner_entry_never_lowers_score():
    base = [_entry("2125550147", "Bob Builder", owner=False)]
    before = rank_phones(base, today=TODAY)[0].score
    after = rank_phones(base + [_entry("2125550147", "Bob Builder")], today=TODAY)[0].score
    assert after >= before
