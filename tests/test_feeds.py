from __future__ import annotations

from datetime import date
from typing import Any

import pytest
import requests

from owner_resolution.feeds import FEEDS, FeedError, OpenDataClient, dob, hpd, pluto
from owner_resolution.models import ContactRole, PropertyKey, RegistrationType, Source
from owner_resolution.scoring import rank_contacts


class FakeClient:
    def __init__(self, rows: dict[str, list[dict[str, Any]]] | None = None, fail=()) -> None:
        self.rows = rows or {}
        self.fail = set(fail)
        self.calls: list[dict[str, Any]] = []

    def query(self, dataset, where, *, select=None, order=None, limit=50):
        self.calls.append({"dataset": dataset, "where": where, "select": select, "order": order, "limit": limit})
        if dataset in self.fail:
            raise FeedError(f"HTTP 500 for {dataset}")
        return list(self.rows.get(dataset, []))


KEY = PropertyKey("3", "123", "7")


def test_every_slot_has_a_fetcher():
    assert set(FEEDS) == {
        "tax_lot",
        "violations",
        "complaints",
        "permits",
        "registrations",
        "litigation",
        "penalties",
        "rent_stabilization",
        "speculation",
        "job_filings",
        "dob_now_filings",
    }


def test_property_key_parse():
    key = PropertyKey.parse("3", "00123", " 7 ")
    assert key == KEY
    assert key.borough_name == "BROOKLYN"
    assert str(key) == "3-123-7"
    for bad in [("6", "1", "1"), ("1", "12; DROP", "1"), ("1", "0", "1"), ("", "1", "1")]:
        with pytest.raises(ValueError):
            PropertyKey.parse(*bad)


def test_registration_type_labels():
    assert RegistrationType.from_label("Agent") is RegistrationType.MANAGING_AGENT
    assert RegistrationType.from_label("Head Officer") is RegistrationType.HEAD_OFFICER
    assert RegistrationType.from_label("corporateowner") is RegistrationType.CORPORATE_OWNER
    assert RegistrationType.from_label("Lessee") is RegistrationType.OTHER
    assert RegistrationType.from_label(None) is RegistrationType.OTHER


def test_where_clauses_pad_per_dataset():
    client = FakeClient()
    dob.fetch_permits(client, KEY)
    dob.fetch_penalties(client, KEY)
    pluto.fetch_tax_lot(client, KEY)
    wheres = [c["where"] for c in client.calls]
    assert wheres == [
        "borough='BROOKLYN' AND block='00123' AND lot='00007'",
        "boro='3' AND block='00123' AND lot='0007'",
        "borocode='3' AND block='123' AND lot='7'",
    ]


def test_normalize_permits():
    rows = [
        {
            "owner_s_first_name": "John",
            "owner_s_last_name": "Smith",
            "owner_s_business_name": "N/A",
            "owner_s_phone__": "2125550147",
            "permittee_s_first_name": "Bob",
            "permittee_s_last_name": "Builder",
            "permittee_s_phone__": "7185550100",
            "filing_date": "2024-05-01T00:00:00.000",
        },
        {"owner_s_business_name": "N/A"},
        {"owner_s_business_name": "ACME REALTY LLC", "owner_s_phone__": "2125550147"},
    ]
    batch = dob.normalize_permits(rows)
    assert [c.name for c in batch.owner_contacts] == ["John Smith", "ACME REALTY LLC"]
    assert [(e.name, e.is_owner_role, e.source) for e in batch.phone_entries] == [
        ("John Smith", True, Source.DOB_PERMIT_OWNER),
        ("Bob Builder", False, Source.DOB_PERMIT_APPLICANT),
        ("ACME REALTY LLC", True, Source.DOB_PERMIT_OWNER),
    ]
    assert batch.phone_entries[0].event_date == "2024-05-01T00:00:00.000"


def test_normalize_permits_business_without_phone_is_not_a_contact():
    rows = [
        {"owner_s_business_name": "ACME REALTY LLC"},
        {"owner_s_first_name": "Mary", "owner_s_last_name": "Jones", "owner_s_business_name": "ACME REALTY LLC"},
    ]
    batch = dob.normalize_permits(rows)
    assert [(c.name, c.phone) for c in batch.owner_contacts] == [("Mary Jones", "")]
    assert batch.phone_entries == []


def test_normalize_job_filings_uses_person_behind_placeholder():
    rows = [
        {
            "owner_s_business_name": "N/A",
            "owner_s_first_name": "Mary",
            "owner_s_last_name": "Jones",
            "owner_sphone__": "",
            "house__": "12",
            "street_name": "Oak St",
            "latest_action_date": "03/01/2023",
            "job_type": "A2",
        }
    ]
    batch = dob.normalize_job_filings(rows)
    assert len(batch.owner_contacts) == 1
    contact = batch.owner_contacts[0]
    assert (contact.name, contact.phone, contact.address) == ("Mary Jones", "", "12 Oak St")
    assert batch.phone_entries == []
    assert batch.filings[0].source == "DOB BIS"


def test_normalize_dob_now_same_phone_once():
    rows = [
        {
            "owner_business_name": "Acme Realty LLC",
            "owner_phone": "2125550147",
            "permittee_first_name": "Bob",
            "permittee_last_name": "Builder",
            "permittee_phone": "2125550147",
            "filing_date": "2024-09-12T00:00:00.000",
            "proposed_dwelling_units": "8",
        }
    ]
    batch = dob.normalize_dob_now_filings(rows)
    assert len(batch.phone_entries) == 1
    assert batch.phone_entries[0].source is Source.DOB_NOW_OWNER
    assert batch.filings[0].permittee == "Bob Builder"
    assert batch.filings[0].units == 8
    assert batch.owner_contacts[0].source is Source.DOB_NOW_FILING


def test_fetch_registrations_two_step():
    client = FakeClient(
        {
            hpd.HPD_REG: [{"registrationid": "12345"}, {"registrationid": "9 OR 1=1"}],
            hpd.HPD_CONTACTS: [
                {
                    "type": "IndividualOwner",
                    "firstname": "John",
                    "lastname": "Smith",
                    "businesshousenumber": "1",
                    "businessstreetname": "Main St",
                    "businesscity": "Brooklyn",
                    "businessstate": "NY",
                },
                {
                    "type": "Agent",
                    "corporationname": "ABC MGMT",
                    "businesshousenumber": "2",
                    "businessstreetname": "Court St",
                    "businesscity": "Brooklyn",
                    "businessstate": "NY",
                },
                {"type": "CorporateOwner", "corporationname": "SMITH HOLDINGS LLC"},
            ],
        }
    )
    batch = hpd.fetch_registrations(client, KEY)
    assert client.calls[1]["where"] == "registrationid in('12345')"
    assert [c.type for c in batch.registered_contacts] == [
        RegistrationType.INDIVIDUAL_OWNER,
        RegistrationType.MANAGING_AGENT,
        RegistrationType.CORPORATE_OWNER,
    ]
    assert batch.registered_contacts[0].address == "1 Main St, Brooklyn, NY"
    assert batch.owner_contacts == []


def test_registered_agent_ranked_once():
    batch = hpd.normalize_registration_contacts([{"type": "Agent", "corporationname": "ABC MANAGEMENT CORP"}])
    ranked = rank_contacts(batch.owner_contacts, batch.registered_contacts)
    assert [(c.name, c.role, c.source, c.score) for c in ranked] == [
        ("ABC MANAGEMENT CORP", ContactRole.MANAGING_AGENT, Source.HPD_REGISTRATION, 65)
    ]


def test_fetch_registrations_without_registration():
    client = FakeClient()
    batch = hpd.fetch_registrations(client, KEY)
    assert batch.registered_contacts == []
    assert len(client.calls) == 1


def test_hpd_summaries():
    v = hpd.summarize_violations(
        [
            {"currentstatus": "VIOLATION OPEN", "class": "C"},
            {"violationstatus": "Open", "class": "b"},
            {"currentstatus": "VIOLATION CLOSED", "class": "A"},
        ]
    )
    assert (v.total, v.open, v.class_a, v.class_b, v.class_c) == (3, 2, 1, 1, 1)

    c = hpd.summarize_complaints(
        [
            {"receiveddate": "2024-01-01T00:00:00.000", "majorcategory": "HEAT/HOT WATER"},
            {"receiveddate": "2020-01-01T00:00:00.000", "majorcategory": "HEAT/HOT WATER"},
            {"receiveddate": "2023-05-05T00:00:00.000", "majorcategory": "PLUMBING"},
        ],
        today=date(2025, 6, 1),
    )
    assert (c.total, c.recent) == (3, 2)
    assert c.top_types == [("HEAT/HOT WATER", 2), ("PLUMBING", 1)]

    lit = hpd.summarize_litigation(
        [
            {
                "casestatus": "open",
                "casetype": "Tenant Action",
                "findingofharassment": "yes",
                "respondent": "SMITH HOLDINGS LLC",
            },
            {"casestatus": "CLOSED", "casetype": "Heat and Hot Water"},
        ]
    )
    assert (lit.total, lit.open, lit.harassment_finding) == (2, 1, True)
    assert lit.respondents == ["SMITH HOLDINGS LLC"]


def test_speculation_listing():
    assert hpd.fetch_speculation(FakeClient(), KEY) is None
    client = FakeClient({hpd.SPECULATION: [{"deeddate": "2021-04-01", "saleprice": "2500000", "caprate": "3.1"}]})
    listing = hpd.fetch_speculation(client, KEY)
    assert listing.on_watch_list
    assert listing.sale_price == 2_500_000.0


def test_penalty_summary():
    p = dob.summarize_penalties(
        [
            {"ecbviolationstatus": "ACTIVE", "penaltybalancedue": "1,500.50"},
            {"ecbviolationstatus": "RESOLVE", "penaltybalancedue": "0"},
        ]
    )
    assert (p.total, p.active, p.total_penalty) == (2, 1, 1500.5)


def test_pluto_parsers():
    lot = pluto.parse_tax_lot(
        {"address": "350 5 AVENUE", "ownername": "SMITH HOLDINGS LLC", "unitsres": "24", "zipcode": "11215"},
        KEY,
    )
    assert (lot.borough, lot.owner_name, lot.units_res, lot.zip_code) == (
        "Brooklyn",
        "SMITH HOLDINGS LLC",
        24,
        "11215",
    )
    rent = pluto.parse_rent_stabilization({"buildingid": "77", "uc2007": "40", "uc2017": "20", "borough": "BK"})
    assert rent.unit_counts == {2007: 40, 2017: 20}
    assert (rent.baseline(), rent.latest()) == (40, 20)


class FakeResponse:
    def __init__(self, status_code: int, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self.ok = status_code < 400
        self._payload = payload
        self.text = text

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, result: Any) -> None:
        self.result = result
        self.requests: list[tuple[str, dict[str, Any]]] = []

    def get(self, url, params=None, timeout=None):
        self.requests.append((url, params))
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def _client(result: Any) -> OpenDataClient:
    return OpenDataClient(base_url="https://example.test/resource", session=FakeSession(result), timeout=1.0)


def test_client_query_params_and_rows():
    client = _client(FakeResponse(200, [{"a": "1"}, "junk"]))
    rows = client.query("abcd-1234", "x='1'", order="y DESC", limit=5)
    assert rows == [{"a": "1"}]
    url, params = client.session.requests[0]
    assert url == "https://example.test/resource/abcd-1234.json"
    assert params == {"$where": "x='1'", "$limit": 5, "$order": "y DESC"}


@pytest.mark.parametrize(
    "result, message",
    [
        (FakeResponse(500, text="boom"), "HTTP 500 for abcd-1234: boom"),
        (FakeResponse(200, {"error": True}), "Unexpected payload shape"),
        (FakeResponse(200, ValueError("bad json")), "Invalid JSON"),
        (requests.Timeout("slow"), "Timed out after 1.0s"),
        (requests.ConnectionError("down"), "Request failed"),
    ],
)
def test_client_failures_raise_feed_error(result, message):
    with pytest.raises(FeedError, match=message):
        _client(result).query("abcd-1234", "x='1'")
