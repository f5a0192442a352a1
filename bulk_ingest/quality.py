from dataclasses import dataclass
import logging
from typing import Any

from bulk_ingest.extract import extract_rows
from bulk_ingest.pipeline import classify_row
from bulk_ingest.reconcile import build_header_map
from bulk_ingest.registry import schema_for
from bulk_ingest.schemas import INVALID_EMAIL, HeaderReport


logger = logging.getLogger(__name__)

GOOD = "GOOD"
MODERATE = "MODERATE"
POOR = "POOR"


@dataclass(frozen=True)
class QualityReport:
    record_kind: str
    total_rows: int
    complete_rows: int
    swapped_rows: int
    moved_rows: int
    invalid_emails: int
    backfilled: dict[str, int]
    field_coverage: dict[str, int]
    headers: HeaderReport
    distinct_companies: tuple[str, ...]
    sample_issues: tuple[str, ...]
    grade: str

    @property
    def completeness(self) -> float:
        return self.complete_rows / self.total_rows if self.total_rows else 0.0


def grade_for(completeness: float) -> str:
    if completeness >= 0.8:
        return GOOD
    if completeness >= 0.5:
        return MODERATE
    return POOR


def assess_quality(file_bytes: bytes, record_kind: str = "contact", *, sample_size: int = 5) -> QualityReport:
    schema = schema_for(record_kind)
    raw_rows = extract_rows(file_bytes)
    headers = build_header_map(raw_rows[0].cells.keys(), schema)

    complete_rows = 0
    swapped_rows = 0
    moved_rows = 0
    invalid_emails = 0
    backfilled = {spec.canonical_name: 0 for spec in schema.fields if spec.synthesizable}
    coverage = {name: 0 for name in schema.field_names}
    companies: set[str] = set()
    issues: list[str] = []
    company_field = schema.swap_pairs[0][0] if schema.swap_pairs else None

    for raw_row in raw_rows:
        outcome = classify_row(raw_row, schema, headers)
        row, errors = outcome.row, outcome.errors

        if any(repair.startswith("swapped_") for repair in row.repairs):
            swapped_rows += 1
            if len(issues) < sample_size:
                issues.append(f"Row {row.source_row_number}: company and email appear swapped (repaired)")
        if any(repair.startswith("moved_") for repair in row.repairs):
            moved_rows += 1
            if len(issues) < sample_size:
                issues.append(f"Row {row.source_row_number}: company name found in the email column (moved)")
        for error in errors:
            if error.code == INVALID_EMAIL:
                invalid_emails += 1
            if len(issues) < sample_size:
                issues.append(f"Row {row.source_row_number}: {error.message}")
        for name in row.synthesized_fields:
            backfilled[name] += 1
        for name in schema.field_names:
            if row.has(name) and name not in row.synthesized_fields:
                coverage[name] += 1
        if not errors:
            complete_rows += 1
        company = str(row.get(company_field, "")) if company_field else ""
        if company and "@" not in company and not company.isdigit():
            companies.add(company)

    total = len(raw_rows)
    report = QualityReport(
        record_kind=schema.record_kind,
        total_rows=total,
        complete_rows=complete_rows,
        swapped_rows=swapped_rows,
        moved_rows=moved_rows,
        invalid_emails=invalid_emails,
        backfilled=backfilled,
        field_coverage=coverage,
        headers=headers,
        distinct_companies=tuple(sorted(companies)),
        sample_issues=tuple(issues),
        grade=grade_for(complete_rows / total),
    )
    logger.info(
        "quality assessed",
        extra={"record_kind": report.record_kind, "total_rows": total, "grade": report.grade},
    )
    return report


def quality_to_dict(report: QualityReport) -> dict[str, Any]:
    schema = schema_for(report.record_kind)
    return {
        "recordKind": report.record_kind,
        "totalRows": report.total_rows,
        "completeRows": report.complete_rows,
        "completeness": round(report.completeness, 3),
        "grade": report.grade,
        "swappedRows": report.swapped_rows,
        "movedRows": report.moved_rows,
        "invalidEmails": report.invalid_emails,
        "backfilled": dict(report.backfilled),
        "coverage": dict(report.field_coverage),
        "columns": {name: report.headers.header_for(name) for name in schema.field_names},
        "ignoredColumns": list(report.headers.ignored),
        "missingRequiredColumns": list(report.headers.missing_required),
        "distinctCompanies": len(report.distinct_companies),
        "sampleIssues": list(report.sample_issues),
    }
