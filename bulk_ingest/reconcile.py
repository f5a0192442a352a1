from collections.abc import Callable, Iterable
import logging
import re

from bulk_ingest.schemas import CanonicalRow, FieldSpec, HeaderReport, RawRow, RecordSchema


logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[\s_\-]+")


def _exact(value: str) -> str:
    return value


def _folded(value: str) -> str:
    return value.strip().casefold()


def _compact(value: str) -> str:
    return _SEPARATORS.sub("", value).casefold()


# Strictest pass first, so "Email" never loses to a looser match elsewhere.
_MATCH_PASSES: tuple[Callable[[str], str], ...] = (_exact, _folded, _compact)


def _find_field(header: str, fields: Iterable[FieldSpec], key: Callable[[str], str]) -> FieldSpec | None:
    wanted = key(header)
    if not wanted:
        return None
    for spec in fields:
        if any(key(name) == wanted for name in spec.header_names):
            return spec
    return None


def match_header(header: str, schema: RecordSchema) -> str | None:
    for key in _MATCH_PASSES:
        spec = _find_field(header, schema.fields, key)
        if spec is not None:
            return spec.canonical_name
    return None


def build_header_map(headers: Iterable[str], schema: RecordSchema) -> HeaderReport:
    headers = list(headers)
    matched: dict[str, str] = {}
    claimed: set[str] = set()

    for key in _MATCH_PASSES:
        for header in headers:
            if header in matched:
                continue
            open_fields = [spec for spec in schema.fields if spec.canonical_name not in claimed]
            spec = _find_field(header, open_fields, key)
            if spec is None:
                continue
            matched[header] = spec.canonical_name
            claimed.add(spec.canonical_name)

    # Keep the file's column order in the report.
    ordered = {header: matched[header] for header in headers if header in matched}
    ignored = tuple(header for header in headers if header not in matched)
    missing_required = tuple(name for name in schema.required_fields if name not in claimed)

    if ignored:
        logger.info("headers ignored", extra={"record_kind": schema.record_kind, "headers": list(ignored)})
    if missing_required:
        logger.info(
            "required columns missing",
            extra={"record_kind": schema.record_kind, "fields": list(missing_required)},
        )
    return HeaderReport(matched=ordered, ignored=ignored, missing_required=missing_required)


def reconcile(raw_row: RawRow, schema: RecordSchema, header_report: HeaderReport | None = None) -> CanonicalRow:
    if header_report is None:
        header_report = build_header_map(raw_row.cells.keys(), schema)

    values = {
        canonical_name: raw_row.cells[header]
        for header, canonical_name in header_report.matched.items()
        if header in raw_row.cells
    }
    return CanonicalRow(source_row_number=raw_row.row_number, values=values)
