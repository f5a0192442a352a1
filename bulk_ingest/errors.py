from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bulk_ingest.schemas import CommitResult


# Codes raised by the upload transport. They reach callers unchanged.
NO_FILE = "NO_FILE"
EMPTY_FILE = "EMPTY_FILE"
INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
INVALID_MIME_TYPE = "INVALID_MIME_TYPE"
FILE_TOO_LARGE = "FILE_TOO_LARGE"
TOO_MANY_FILES = "TOO_MANY_FILES"
UPLOAD_ERROR = "UPLOAD_ERROR"
RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

TRANSPORT_ERROR_CODES = frozenset(
    {
        NO_FILE,
        EMPTY_FILE,
        INVALID_FILE_TYPE,
        INVALID_MIME_TYPE,
        FILE_TOO_LARGE,
        TOO_MANY_FILES,
        UPLOAD_ERROR,
        RATE_LIMIT_EXCEEDED,
    }
)

UNKNOWN_RECORD_KIND = "UNKNOWN_RECORD_KIND"
STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
COMMIT_ABORTED = "COMMIT_ABORTED"


class IngestError(Exception):
    code = "INGEST_ERROR"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class UnknownRecordKind(IngestError, LookupError):
    code = UNKNOWN_RECORD_KIND


class EmptyFileError(IngestError):
    code = EMPTY_FILE


class UnreadableFileError(IngestError):
    code = INVALID_FILE_TYPE


class TransportError(IngestError):
    def __init__(self, code: str, message: str) -> None:
        if code not in TRANSPORT_ERROR_CODES:
            raise ValueError(f"unknown transport error code: {code}")
        super().__init__(message, code=code)


class RecordRejectedError(IngestError):
    code = "RECORD_REJECTED"


class StoreUnavailableError(IngestError):
    code = STORE_UNAVAILABLE


class CommitAbortedError(IngestError):
    code = COMMIT_ABORTED

    def __init__(self, message: str, result: CommitResult) -> None:
        super().__init__(message)
        self.result = result


def error_response(exc: IngestError) -> dict[str, object]:
    return {"success": False, "error": exc.message, "code": exc.code}
