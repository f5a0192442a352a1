from dataclasses import dataclass
from typing import Any


STRING = "string"
NUMBER = "number"
DELIMITED_LIST = "delimited_list"
ENUM = "enum"
EMAIL = "email"
URL = "url"
BOOLEAN = "boolean"
PHONE = "phone"
NAME = "name"

FIELD_KINDS = frozenset({STRING, NUMBER, DELIMITED_LIST, ENUM, EMAIL, URL, BOOLEAN, PHONE, NAME})

REQUIRED_MISSING = "REQUIRED_MISSING"
INVALID_EMAIL = "INVALID_EMAIL"
INVALID_URL = "INVALID_URL"
INVALID_ENUM = "INVALID_ENUM"
INVALID_BOOLEAN = "INVALID_BOOLEAN"
TOO_SHORT = "TOO_SHORT"
TOO_LONG = "TOO_LONG"
NUMERIC_ONLY = "NUMERIC_ONLY"
OUT_OF_RANGE = "OUT_OF_RANGE"


@dataclass(frozen=True)
class FieldSpec:
    canonical_name: str
    label: str
    kind: str = STRING
    synonyms: tuple[str, ...] = ()
    required: bool = False
    allowed_values: tuple[str, ...] = ()
    synthesizable: bool = False
    placeholder: Any = None
    min_length: int | None = None
    max_length: int | None = None
    reject_numeric: bool = False
    positive: bool = False
    integer: bool = False
    example: Any = None

    def __post_init__(self) -> None:
        if self.kind not in FIELD_KINDS:
            raise ValueError(f"unsupported field kind '{self.kind}' for {self.canonical_name}")
        if self.kind == ENUM and not self.allowed_values:
            raise ValueError(f"enum field {self.canonical_name} needs allowed_values")
        if self.synthesizable and self.placeholder is None:
            raise ValueError(f"synthesizable field {self.canonical_name} needs a placeholder")
        if self.synthesizable and self.required:
            raise ValueError(f"field {self.canonical_name} cannot be both required and synthesizable")

    @property
    def header_names(self) -> tuple[str, ...]:
        return (self.canonical_name, self.label, *self.synonyms)


@dataclass(frozen=True)
class RecordSchema:
    record_kind: str
    fields: tuple[FieldSpec, ...]
    sample_key: str
    sample_fields: tuple[str, ...] = ()
    key_fields: tuple[str, ...] = ()
    swap_pairs: tuple[tuple[str, str], ...] = ()
    require_any: tuple[tuple[str, ...], ...] = ()

    def __post_init__(self) -> None:
        names = [spec.canonical_name for spec in self.fields]
        if len(set(names)) != len(names):
            raise ValueError(f"duplicate canonical field in {self.record_kind} schema")
        referenced = [*self.sample_fields, *self.key_fields]
        referenced += [name for pair in self.swap_pairs for name in pair]
        referenced += [name for group in self.require_any for name in group]
        unknown = sorted(set(referenced) - set(names))
        if unknown:
            raise ValueError(f"{self.record_kind} schema references unknown fields: {', '.join(unknown)}")

    def field(self, canonical_name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.canonical_name == canonical_name:
                return spec
        raise KeyError(canonical_name)

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(spec.canonical_name for spec in self.fields)

    @property
    def required_fields(self) -> tuple[str, ...]:
        return tuple(spec.canonical_name for spec in self.fields if spec.required)


@dataclass(frozen=True)
class RawRow:
    row_number: int
    cells: dict[str, Any]


@dataclass(frozen=True)
class CanonicalRow:
    source_row_number: int
    values: dict[str, Any]
    repairs: tuple[str, ...] = ()
    synthesized_fields: tuple[str, ...] = ()

    def get(self, canonical_name: str, default: Any = None) -> Any:
        return self.values.get(canonical_name, default)

    def has(self, canonical_name: str) -> bool:
        return canonical_name in self.values


@dataclass(frozen=True)
class ValidationError:
    row_number: int
    field: str | None
    message: str
    code: str


@dataclass(frozen=True)
class RowErrors:
    row_number: int
    errors: tuple[ValidationError, ...]

    @property
    def messages(self) -> list[str]:
        return [error.message for error in self.errors]


@dataclass(frozen=True)
class HeaderReport:
    matched: dict[str, str]
    ignored: tuple[str, ...] = ()
    missing_required: tuple[str, ...] = ()

    def header_for(self, canonical_name: str) -> str | None:
        for header, name in self.matched.items():
            if name == canonical_name:
                return header
        return None


@dataclass(frozen=True)
class RowOutcome:
    row: CanonicalRow
    errors: tuple[ValidationError, ...]

    @property
    def row_number(self) -> int:
        return self.row.source_row_number

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class EvaluatedFile:
    record_kind: str
    headers: HeaderReport
    outcomes: tuple[RowOutcome, ...]

    @property
    def valid(self) -> list[RowOutcome]:
        return [outcome for outcome in self.outcomes if outcome.is_valid]

    @property
    def invalid(self) -> list[RowOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.is_valid]


@dataclass(frozen=True)
class UploadSummary:
    record_kind: str
    total_rows: int
    valid_count: int
    invalid_count: int
    errors: tuple[RowErrors, ...]
    sample_valid_records: tuple[dict[str, Any], ...]
    sample_invalid_rows: tuple[RowErrors, ...]
    headers: HeaderReport


@dataclass(frozen=True)
class CommitFailure:
    row_number: int
    reason: str
    source: str


@dataclass(frozen=True)
class CommitResult:
    session_id: str
    record_kind: str
    status: str
    total_rows: int
    valid_count: int
    invalid_count: int
    total_attempted: int
    successful_count: int
    failed_count: int
    unattempted_count: int = 0
    failures: tuple[CommitFailure, ...] = ()
