from io import BytesIO

from openpyxl import load_workbook
import pytest

from bulk_ingest.errors import EmptyFileError, UnknownRecordKind
from bulk_ingest.extract import extract_rows, read_headers
from bulk_ingest.preview import preview
from bulk_ingest.registry import OFFER_REQUEST_SCHEMA, record_kinds, schema_for
from bulk_ingest.schemas import ENUM, FieldSpec
from bulk_ingest.template import emit_template, template_headers


def test_schema_lookup_accepts_aliases() -> None:
    assert schema_for("offer").record_kind == "offer"
    assert schema_for(" Offer-Requests ") is OFFER_REQUEST_SCHEMA
    assert schema_for("contacts").record_kind == "contact"
    assert record_kinds() == ("offer", "offer_request", "contact")


def test_unknown_record_kind_raises() -> None:
    with pytest.raises(UnknownRecordKind) as excinfo:
        schema_for("invoice")

    assert excinfo.value.code == "UNKNOWN_RECORD_KIND"
    assert "invoice" in excinfo.value.message


def test_field_spec_rejects_inconsistent_policies() -> None:
    with pytest.raises(ValueError):
        FieldSpec("status", "Status", kind=ENUM)
    with pytest.raises(ValueError):
        FieldSpec("phone", "Phone", synthesizable=True)
    with pytest.raises(ValueError):
        FieldSpec("title", "Title", required=True, synthesizable=True, placeholder="x")


def test_template_headers_follow_declared_order() -> None:
    workbook = load_workbook(BytesIO(emit_template("offer_request")))
    sheet = workbook.active
    header_row = [cell.value for cell in sheet[1]]

    assert header_row == [spec.label for spec in OFFER_REQUEST_SCHEMA.fields]
    assert header_row == template_headers("offer_request")
    assert sheet.title == "Offer Requests"
    assert sheet.max_row == 2


def test_template_emission_is_stable() -> None:
    first = read_headers(emit_template("offer"))
    second = read_headers(emit_template("offer"))

    assert first == second == template_headers("offer")


def test_template_without_example_parses_back_as_empty_file() -> None:
    content = emit_template("contact", include_example=False)

    assert read_headers(content) == ["Company name", "FirstName", "Last Name", "Email Id", "Designation", "Phone"]
    with pytest.raises(EmptyFileError):
        extract_rows(content)


def test_template_example_row_passes_its_own_validation() -> None:
    for kind in record_kinds():
        summary = preview(emit_template(kind), kind)
        assert summary.total_rows == 1
        assert summary.valid_count == 1, summary.errors
