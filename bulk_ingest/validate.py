import re
from typing import Any
from urllib.parse import urlparse

from bulk_ingest.schemas import (
    BOOLEAN,
    EMAIL,
    ENUM,
    INVALID_BOOLEAN,
    INVALID_EMAIL,
    INVALID_ENUM,
    INVALID_URL,
    NAME,
    NUMBER,
    NUMERIC_ONLY,
    OUT_OF_RANGE,
    REQUIRED_MISSING,
    STRING,
    TOO_LONG,
    TOO_SHORT,
    URL,
    CanonicalRow,
    FieldSpec,
    RecordSchema,
    ValidationError,
)


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and EMAIL_PATTERN.match(value.strip()) is not None


def is_valid_url(value: Any) -> bool:
    if not isinstance(value, str) or any(ch.isspace() for ch in value.strip()):
        return False
    try:
        parsed = urlparse(value.strip())
        # Reading .port raises on malformed ports such as "host:abc".
        parsed.port
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.hostname)


def _field_errors(spec: FieldSpec, row: CanonicalRow) -> list[ValidationError]:
    name = spec.canonical_name
    number = row.source_row_number

    if not row.has(name):
        if spec.required:
            return [ValidationError(number, name, f"Missing required field: {name}", REQUIRED_MISSING)]
        return []

    value = row.get(name)
    if spec.kind == EMAIL and not is_valid_email(value):
        return [ValidationError(number, name, f"Invalid email format: {value}", INVALID_EMAIL)]
    if spec.kind == URL and not is_valid_url(value):
        return [ValidationError(number, name, f"Invalid URL in {name}: {value}", INVALID_URL)]
    if spec.kind == ENUM and value not in spec.allowed_values:
        allowed = ", ".join(spec.allowed_values)
        return [ValidationError(number, name, f"Invalid {name} '{value}'. Must be one of: {allowed}", INVALID_ENUM)]
    if spec.kind == BOOLEAN and not isinstance(value, bool):
        return [ValidationError(number, name, f"{name} must be yes/no or true/false, got '{value}'", INVALID_BOOLEAN)]
    if spec.kind == NUMBER and spec.positive and value <= 0:
        return [ValidationError(number, name, f"{name} must be a positive number", OUT_OF_RANGE)]
    if spec.kind in (STRING, NAME):
        if spec.min_length and len(value) < spec.min_length:
            message = f"{name} must be at least {spec.min_length} characters long"
            return [ValidationError(number, name, message, TOO_SHORT)]
        if spec.max_length and len(value) > spec.max_length:
            message = f"{name} must be at most {spec.max_length} characters long"
            return [ValidationError(number, name, message, TOO_LONG)]
        if spec.reject_numeric and value.isdigit():
            return [ValidationError(number, name, f"{name} cannot be only digits: {value}", NUMERIC_ONLY)]
    return []


def validate_row(row: CanonicalRow, schema: RecordSchema) -> list[ValidationError]:
    errors: list[ValidationError] = []
    for spec in schema.fields:
        errors.extend(_field_errors(spec, row))

    for group in schema.require_any:
        if not any(row.has(name) for name in group):
            message = f"At least one of {', '.join(group)} is required"
            errors.append(ValidationError(row.source_row_number, None, message, REQUIRED_MISSING))
    return errors
