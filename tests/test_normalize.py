from datetime import date

from owner_resolution.utils.normalize import (
    display_name,
    is_placeholder,
    join_address,
    last_name_token,
    parse_date,
    phone_digits,
    safe_float,
    safe_int,
    to_e164,
    years_before,
)


def test_phone_digits_strips_formatting_and_country_code():
    assert phone_digits("(212) 555-0147") == "2125550147"
    assert phone_digits("+1 212.555.0147") == "2125550147"
    assert phone_digits("") == ""
    assert phone_digits(None) == ""


def test_phone_digits_is_idempotent():
    for raw in ["(718) 555-0100 ext", "1-212-555-0147", "555-01"]:
        once = phone_digits(raw)
        assert phone_digits(once) == once


def test_to_e164():
    assert to_e164("(212) 736-5000") == "+12127365000"
    assert to_e164("not a phone") is None
    assert to_e164(None) is None


def test_display_name_skips_placeholder_business():
    assert display_name("N/A", "John", "Smith") == "John Smith"
    assert display_name("  acme realty llc ", "John", "Smith") == "acme realty llc"
    assert display_name(None, None, "Smith") == "Smith"
    assert is_placeholder(" n/a ")
    assert not is_placeholder("NATHAN")


def test_join_and_tokens():
    assert join_address("350", None, "5 Ave") == "350 5 Ave"
    assert join_address("1 Main St", "Brooklyn", sep=", ") == "1 Main St, Brooklyn"
    assert last_name_token("John  Q  Smith") == "SMITH"
    assert last_name_token("") == ""


def test_safe_numbers():
    assert safe_int("1,200") == 1200
    assert safe_int("12.0") == 12
    assert safe_int("abc") == 0
    assert safe_float("$1,250.50") == 1250.5
    assert safe_float(None) == 0.0


def test_parse_date_formats():
    assert parse_date("2024-03-05T00:00:00.000") == date(2024, 3, 5)
    assert parse_date("03/05/2024") == date(2024, 3, 5)
    assert parse_date("20240305") == date(2024, 3, 5)
    assert parse_date("garbage") is None
    assert parse_date(None) is None


def test_years_before_leap_day():
    assert years_before(date(2024, 2, 29), 1) == date(2023, 2, 28)
    assert years_before(date(2025, 6, 1), 2) == date(2023, 6, 1)
