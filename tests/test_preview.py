from bulk_ingest.preview import preview, to_preview_response
from tests.conftest import OFFER_HEADERS, offer_row


def test_preview_classifies_every_row(ten_offer_file) -> None:
    summary = preview(ten_offer_file, "offer")

    assert summary.total_rows == 10
    assert summary.valid_count == 8
    assert summary.invalid_count == 2
    assert [row_errors.row_number for row_errors in summary.errors] == [5, 9]
    for row_errors in summary.errors:
        assert [(error.field, error.code) for error in row_errors.errors] == [("title", "REQUIRED_MISSING")]


def test_preview_counts_always_add_up(workbook_bytes) -> None:
    content = workbook_bytes(
        OFFER_HEADERS,
        [offer_row(), offer_row("ab"), offer_row(payout="free"), offer_row(geo=None), offer_row("Fine offer")],
    )

    summary = preview(content, "offer")

    assert summary.total_rows == 5
    assert summary.valid_count + summary.invalid_count == summary.total_rows
    assert summary.valid_count == 2


def test_preview_response_shape(ten_offer_file) -> None:
    response = to_preview_response(preview(ten_offer_file, "offer"))

    assert response["total"] == 10
    assert response["valid"] == 8
    assert response["invalid"] == 2
    assert response["errors"][0]["row"] == 5
    assert response["errors"][0]["errors"] == ["Missing required field: title"]
    assert response["errors"][0]["details"] == [
        {"field": "title", "code": "REQUIRED_MISSING", "message": "Missing required field: title"}
    ]
    assert response["headers"]["missingRequired"] == []
    assert response["headers"]["ignored"] == []

    samples = response["sampleOffers"]
    assert len(samples) == 5
    assert samples[0] == {
        "row": 2,
        "title": "Offer number 0",
        "payout_type": "CPA",
        "payout_value": 12.5,
        "target_geo": ["US", "CA"],
    }


def test_sample_size_bounds_the_samples(ten_offer_file) -> None:
    summary = preview(ten_offer_file, "offer", sample_size=2)

    assert len(summary.sample_valid_records) == 2
    assert len(summary.sample_invalid_rows) == 2
    assert summary.valid_count == 8


def test_missing_required_column_invalidates_every_row(workbook_bytes) -> None:
    content = workbook_bytes(["Title", "Geo", "Unused"], [["Some offer", "US", "x"], ["Other offer", "CA", "y"]])

    response = to_preview_response(preview(content, "offers"))

    assert response["valid"] == 0
    assert response["invalid"] == 2
    assert response["headers"]["missingRequired"] == ["payout_type", "payout_value", "landing_page_url"]
    assert response["headers"]["ignored"] == ["Unused"]
