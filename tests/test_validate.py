from bulk_ingest.normalize import normalize
from bulk_ingest.registry import CONTACT_SCHEMA, OFFER_SCHEMA
from bulk_ingest.schemas import CanonicalRow
from bulk_ingest.validate import is_valid_email, is_valid_url, validate_row


def _offer(**overrides) -> CanonicalRow:
    values = {
        "title": "Summer Deal",
        "target_geo": "US",
        "payout_type": "CPA",
        "payout_value": 10,
        "landing_page_url": "https://example.com",
    }
    values.update(overrides)
    return normalize(CanonicalRow(2, values), OFFER_SCHEMA)


def test_valid_offer_has_no_errors() -> None:
    assert validate_row(_offer(), OFFER_SCHEMA) == []


def test_missing_title_reports_exactly_one_error() -> None:
    errors = validate_row(_offer(title=None), OFFER_SCHEMA)

    assert len(errors) == 1
    assert errors[0].field == "title"
    assert errors[0].code == "REQUIRED_MISSING"
    assert errors[0].row_number == 2


def test_errors_follow_schema_field_order() -> None:
    row = _offer(landing_page_url="ftp://example.com", payout_type="CPX", title="ab")

    errors = validate_row(row, OFFER_SCHEMA)

    assert [(error.field, error.code) for error in errors] == [
        ("title", "TOO_SHORT"),
        ("payout_type", "INVALID_ENUM"),
        ("landing_page_url", "INVALID_URL"),
    ]


def test_non_positive_payout_is_out_of_range() -> None:
    errors = validate_row(_offer(payout_value="-5"), OFFER_SCHEMA)

    assert [error.code for error in errors] == ["OUT_OF_RANGE"]


def test_unrecognized_boolean_is_rejected() -> None:
    errors = validate_row(_offer(private_offer="sometimes"), OFFER_SCHEMA)

    assert [error.code for error in errors] == ["INVALID_BOOLEAN"]


def test_contact_needs_a_name_and_a_valid_email() -> None:
    row = normalize(CanonicalRow(4, {"company": "Acme", "email": "not-an-email"}), CONTACT_SCHEMA)

    errors = validate_row(row, CONTACT_SCHEMA)

    assert [(error.field, error.code) for error in errors] == [
        ("email", "INVALID_EMAIL"),
        (None, "REQUIRED_MISSING"),
    ]


def test_validation_is_deterministic() -> None:
    row = _offer(title=None, payout_type="nope", landing_page_url="http://")

    assert validate_row(row, OFFER_SCHEMA) == validate_row(row, OFFER_SCHEMA)


def test_email_and_url_predicates() -> None:
    assert is_valid_email("ada@example.com")
    assert not is_valid_email("ada@example")
    assert not is_valid_email("a da@example.com")
    assert is_valid_url("https://example.com/path?q=1")
    assert not is_valid_url("https://")
    assert not is_valid_url("https://example.com:abc")
    assert not is_valid_url("javascript:alert(1)")


def test_repaired_email_is_not_flagged() -> None:
    row = normalize(CanonicalRow(3, {"company": "alice@x.com", "email": "", "first_name": "Alice"}), CONTACT_SCHEMA)

    errors = validate_row(row, CONTACT_SCHEMA)

    assert row.get("email") == "alice@x.com"
    assert "INVALID_EMAIL" not in [error.code for error in errors]
    assert [(error.field, error.code) for error in errors] == [("company", "REQUIRED_MISSING")]


def test_company_moved_out_of_email_column_is_valid() -> None:
    row = normalize(CanonicalRow(5, {"company": "", "first_name": "Ada", "email": "Acme Media"}), CONTACT_SCHEMA)

    assert validate_row(row, CONTACT_SCHEMA) == []
    assert row.get("company") == "Acme Media"


def test_numeric_company_is_rejected() -> None:
    row = normalize(CanonicalRow(6, {"company": "12345", "first_name": "Ada"}), CONTACT_SCHEMA)

    errors = validate_row(row, CONTACT_SCHEMA)

    assert [(error.field, error.code) for error in errors] == [("company", "NUMERIC_ONLY")]


def test_overlong_name_is_rejected() -> None:
    row = normalize(CanonicalRow(7, {"company": "Acme", "last_name": "A" * 51}), CONTACT_SCHEMA)

    errors = validate_row(row, CONTACT_SCHEMA)

    assert [(error.field, error.code) for error in errors] == [("last_name", "TOO_LONG")]


def test_digit_only_name_counts_as_missing() -> None:
    row = normalize(CanonicalRow(8, {"company": "Acme", "first_name": "2024"}), CONTACT_SCHEMA)

    errors = validate_row(row, CONTACT_SCHEMA)

    assert [(error.field, error.code) for error in errors] == [(None, "REQUIRED_MISSING")]
