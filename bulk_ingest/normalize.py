from datetime import date, datetime
from decimal import Decimal
import re
from typing import Any

from bulk_ingest.schemas import (
    BOOLEAN,
    DELIMITED_LIST,
    EMAIL,
    ENUM,
    NAME,
    NUMBER,
    PHONE,
    STRING,
    URL,
    CanonicalRow,
    FieldSpec,
    RecordSchema,
)


TRUE_WORDS = {"true", "yes", "y", "1"}
FALSE_WORDS = {"false", "no", "n", "0"}

_LEADING_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_THOUSANDS = re.compile(r"(?<=\d),(?=\d{3}(?:\D|$))")
_PHONE_NOISE = re.compile(r"[^\d+\-().\s]")
# Person names keep letters and the punctuation - ' .
_NAME_NOISE = re.compile(r"[^\w\s\-'.]|[\d_]")
_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")
MIN_PHONE_DIGITS = 7


def clean_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return str(value).replace("\xa0", " ").strip()


def split_list(value: Any) -> list[str]:
    if isinstance(value, (list, tuple)):
        items = [clean_text(item) for item in value]
    else:
        items = [item.strip() for item in clean_text(value).split(",")]
    return [item for item in items if item]


def parse_number(value: Any, *, integer: bool = False) -> int | float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    else:
        raw = _THOUSANDS.sub("", clean_text(value))
        match = _LEADING_NUMBER.match(raw)
        if match is None:
            return None
        number = float(match.group(0))

    if number != number or number in (float("inf"), float("-inf")):
        return None
    if integer:
        return int(number)
    return int(number) if number.is_integer() else number


def normalize_email(value: Any) -> str:
    raw = clean_text(value)
    if not raw:
        return ""
    local, sep, domain = raw.rpartition("@")
    if not sep:
        return raw
    return f"{local}{sep}{domain.lower()}"


def normalize_enum(value: Any, allowed_values: tuple[str, ...]) -> str:
    raw = clean_text(value)
    for allowed in allowed_values:
        if raw.casefold() == allowed.casefold():
            return allowed
    return raw


def normalize_url(value: Any) -> str:
    raw = clean_text(value)
    if raw and not _SCHEME.match(raw):
        return f"https://{raw}"
    return raw


def normalize_boolean(value: Any) -> bool | str:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    raw = clean_text(value)
    if raw.lower() in TRUE_WORDS:
        return True
    if raw.lower() in FALSE_WORDS:
        return False
    return raw


def normalize_name(value: Any) -> str:
    return " ".join(_NAME_NOISE.sub("", clean_text(value)).split())


def normalize_phone(value: Any) -> str:
    cleaned = _PHONE_NOISE.sub("", clean_text(value)).strip()
    if sum(ch.isdigit() for ch in cleaned) < MIN_PHONE_DIGITS:
        return ""
    return cleaned


def normalize_value(spec: FieldSpec, value: Any) -> Any:
    """Return the normalized value, or None when the field should count as absent."""
    if spec.kind == STRING:
        normalized: Any = clean_text(value)
    elif spec.kind == DELIMITED_LIST:
        normalized = split_list(value)
    elif spec.kind == NUMBER:
        return parse_number(value, integer=spec.integer)
    elif spec.kind == EMAIL:
        normalized = normalize_email(value)
    elif spec.kind == ENUM:
        normalized = normalize_enum(value, spec.allowed_values)
    elif spec.kind == URL:
        normalized = normalize_url(value)
    elif spec.kind == BOOLEAN:
        normalized = normalize_boolean(value)
    elif spec.kind == PHONE:
        normalized = normalize_phone(value)
    elif spec.kind == NAME:
        normalized = normalize_name(value)
    else:
        raise ValueError(f"unsupported field kind: {spec.kind}")

    if normalized == "" or normalized == []:
        return None
    return normalized


def repair_swapped_fields(values: dict[str, Any], schema: RecordSchema) -> tuple[dict[str, Any], list[str]]:
    repaired = dict(values)
    repairs: list[str] = []
    for company_field, email_field in schema.swap_pairs:
        company = clean_text(repaired.get(company_field))
        email = clean_text(repaired.get(email_field))
        if "@" in company and "@" not in email:
            repaired[company_field], repaired[email_field] = repaired.get(email_field), repaired.get(company_field)
            repairs.append(f"swapped_{company_field}_{email_field}")
        elif not company and email and "@" not in email:
            # A company name typed into the email column.
            repaired[company_field], repaired[email_field] = repaired.get(email_field), None
            repairs.append(f"moved_{email_field}_{company_field}")
    return repaired, repairs


def normalize(row: CanonicalRow, schema: RecordSchema) -> CanonicalRow:
    # Swap repair must see raw values, before email normalization touches them.
    values, repairs = repair_swapped_fields(row.values, schema)

    normalized: dict[str, Any] = {}
    for spec in schema.fields:
        if spec.canonical_name not in values:
            continue
        value = normalize_value(spec, values[spec.canonical_name])
        if value is not None:
            normalized[spec.canonical_name] = value

    synthesized: list[str] = []
    for spec in schema.fields:
        if spec.synthesizable and spec.canonical_name not in normalized:
            normalized[spec.canonical_name] = spec.placeholder
            synthesized.append(spec.canonical_name)

    return CanonicalRow(
        source_row_number=row.source_row_number,
        values=normalized,
        repairs=(*row.repairs, *repairs),
        synthesized_fields=tuple(synthesized),
    )
