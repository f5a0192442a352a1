import logging
from typing import Any

from bulk_ingest.extract import extract_rows
from bulk_ingest.normalize import normalize
from bulk_ingest.reconcile import build_header_map, reconcile
from bulk_ingest.registry import schema_for
from bulk_ingest.schemas import CanonicalRow, EvaluatedFile, HeaderReport, RawRow, RecordSchema, RowOutcome
from bulk_ingest.validate import validate_row


logger = logging.getLogger(__name__)


def classify_row(raw_row: RawRow, schema: RecordSchema, header_report: HeaderReport) -> RowOutcome:
    canonical = reconcile(raw_row, schema, header_report)
    normalized = normalize(canonical, schema)
    return RowOutcome(row=normalized, errors=tuple(validate_row(normalized, schema)))


def evaluate_file(file_bytes: bytes, record_kind: str) -> EvaluatedFile:
    schema = schema_for(record_kind)
    raw_rows = extract_rows(file_bytes)
    header_report = build_header_map(raw_rows[0].cells.keys(), schema)

    outcomes = tuple(classify_row(raw_row, schema, header_report) for raw_row in raw_rows)
    evaluated = EvaluatedFile(record_kind=schema.record_kind, headers=header_report, outcomes=outcomes)

    logger.info(
        "file evaluated",
        extra={
            "record_kind": schema.record_kind,
            "total_rows": len(outcomes),
            "valid_rows": len(evaluated.valid),
            "invalid_rows": len(evaluated.invalid),
        },
    )
    return evaluated


def to_record(row: CanonicalRow, schema: RecordSchema) -> dict[str, Any]:
    return {name: row.get(name) for name in schema.field_names if row.has(name)}


def sample_record(row: CanonicalRow, schema: RecordSchema) -> dict[str, Any]:
    fields = schema.sample_fields or schema.field_names
    return {"row": row.source_row_number, **{name: row.get(name) for name in fields}}
