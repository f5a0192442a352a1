from typing import Any

from bulk_ingest.pipeline import evaluate_file, sample_record
from bulk_ingest.registry import schema_for
from bulk_ingest.schemas import EvaluatedFile, RowErrors, UploadSummary


DEFAULT_SAMPLE_SIZE = 5


def summarize(evaluated: EvaluatedFile, *, sample_size: int = DEFAULT_SAMPLE_SIZE) -> UploadSummary:
    schema = schema_for(evaluated.record_kind)
    valid = evaluated.valid
    errors = tuple(RowErrors(outcome.row_number, outcome.errors) for outcome in evaluated.invalid)

    return UploadSummary(
        record_kind=evaluated.record_kind,
        total_rows=len(evaluated.outcomes),
        valid_count=len(valid),
        invalid_count=len(errors),
        errors=errors,
        sample_valid_records=tuple(sample_record(outcome.row, schema) for outcome in valid[:sample_size]),
        sample_invalid_rows=errors[:sample_size],
        headers=evaluated.headers,
    )


def preview(file_bytes: bytes, record_kind: str, *, sample_size: int = DEFAULT_SAMPLE_SIZE) -> UploadSummary:
    """Dry run: evaluate every row and summarize, without writing anything."""
    return summarize(evaluate_file(file_bytes, record_kind), sample_size=sample_size)


def to_preview_response(summary: UploadSummary) -> dict[str, Any]:
    schema = schema_for(summary.record_kind)
    return {
        "total": summary.total_rows,
        "valid": summary.valid_count,
        "invalid": summary.invalid_count,
        "errors": [
            {
                "row": row_errors.row_number,
                "errors": row_errors.messages,
                "details": [
                    {"field": error.field, "code": error.code, "message": error.message}
                    for error in row_errors.errors
                ],
            }
            for row_errors in summary.errors
        ],
        schema.sample_key: list(summary.sample_valid_records),
        "headers": {
            "matched": dict(summary.headers.matched),
            "ignored": list(summary.headers.ignored),
            "missingRequired": list(summary.headers.missing_required),
        },
    }
