import pytest

from bulk_ingest.errors import (
    TRANSPORT_ERROR_CODES,
    EmptyFileError,
    TransportError,
    UnknownRecordKind,
    error_response,
)


def test_transport_codes_pass_through_unchanged() -> None:
    for code in sorted(TRANSPORT_ERROR_CODES):
        response = error_response(TransportError(code, f"upload failed: {code}"))

        assert response == {"success": False, "error": f"upload failed: {code}", "code": code}


def test_transport_code_set_is_fixed() -> None:
    assert TRANSPORT_ERROR_CODES == {
        "NO_FILE",
        "EMPTY_FILE",
        "INVALID_FILE_TYPE",
        "INVALID_MIME_TYPE",
        "FILE_TOO_LARGE",
        "TOO_MANY_FILES",
        "UPLOAD_ERROR",
        "RATE_LIMIT_EXCEEDED",
    }


def test_unknown_transport_code_is_refused() -> None:
    with pytest.raises(ValueError):
        TransportError("TEAPOT", "no")


def test_pipeline_errors_render_the_same_shape() -> None:
    assert error_response(EmptyFileError("Uploaded file is empty.")) == {
        "success": False,
        "error": "Uploaded file is empty.",
        "code": "EMPTY_FILE",
    }
    assert error_response(UnknownRecordKind("nope"))["code"] == "UNKNOWN_RECORD_KIND"
