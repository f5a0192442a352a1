from concurrent.futures import ThreadPoolExecutor
import logging
import threading
from typing import Any
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from bulk_ingest.config import Settings
from bulk_ingest.errors import CommitAbortedError, RecordRejectedError, StoreUnavailableError
from bulk_ingest.ledger import UploadLedger
from bulk_ingest.pipeline import evaluate_file, to_record
from bulk_ingest.registry import schema_for
from bulk_ingest.schemas import CommitFailure, CommitResult, RecordSchema, RowOutcome
from bulk_ingest.store import InsertRequest, RecordStore, SqlRecordStore, natural_key


logger = logging.getLogger(__name__)

PENDING = "pending"
COMMITTING = "committing"
COMPLETED = "completed"
ABORTED = "aborted"

_TRANSITIONS = {
    PENDING: {COMMITTING},
    COMMITTING: {COMPLETED, ABORTED},
    COMPLETED: set(),
    ABORTED: set(),
}

INSERTED = "inserted"
REJECTED = "rejected"
SKIPPED = "skipped"


class CommitSession:
    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        self.state = PENDING

    def advance(self, new_state: str) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"commit session cannot move from {self.state} to {new_state}")
        logger.debug("commit state changed", extra={"session_id": self.session_id, "state": new_state})
        self.state = new_state


class CommitEngine:
    def __init__(
        self,
        settings: Settings,
        session_factory: sessionmaker[Session],
        store: RecordStore | None = None,
    ) -> None:
        self.settings = settings
        self.session_factory = session_factory
        self.store = store if store is not None else SqlRecordStore(session_factory)
        self.ledger = UploadLedger(session_factory, max_limit=settings.history_max_limit)

    def commit(
        self,
        file_bytes: bytes,
        record_kind: str,
        uploader_identity: str,
        *,
        source_name: str | None = None,
    ) -> CommitResult:
        uploader_identity = str(uploader_identity or "").strip()
        if not uploader_identity:
            raise ValueError("uploader identity is required")

        session = CommitSession(uuid4().hex)
        # Always re-read the bytes; a previous preview may describe an older file.
        evaluated = evaluate_file(file_bytes, record_kind)
        schema = schema_for(evaluated.record_kind)

        session.advance(COMMITTING)
        logger.info(
            "commit started",
            extra={"session_id": session.session_id, "record_kind": schema.record_kind, "uploader": uploader_identity},
        )

        failures = [
            CommitFailure(outcome.row_number, "; ".join(error.message for error in outcome.errors), "validation")
            for outcome in evaluated.invalid
        ]
        successful = 0
        unattempted = 0
        abort = threading.Event()

        for outcome, status, reason in self._insert_rows(session, schema, evaluated.valid, uploader_identity, abort):
            if status == INSERTED:
                successful += 1
            elif status == REJECTED:
                failures.append(CommitFailure(outcome.row_number, reason or "Record rejected by store", "store"))
            else:
                unattempted += 1

        failures.sort(key=lambda failure: failure.row_number)
        session.advance(ABORTED if abort.is_set() else COMPLETED)

        result = CommitResult(
            session_id=session.session_id,
            record_kind=schema.record_kind,
            status=session.state,
            total_rows=len(evaluated.outcomes),
            valid_count=len(evaluated.valid),
            invalid_count=len(evaluated.invalid),
            total_attempted=successful + len(failures),
            successful_count=successful,
            failed_count=len(failures),
            unattempted_count=unattempted,
            failures=tuple(failures),
        )
        self._record_session(result, uploader_identity=uploader_identity, source_name=source_name)

        if session.state == ABORTED:
            raise CommitAbortedError(
                f"Record store became unavailable; {unattempted} row(s) were not attempted.",
                result,
            )

        logger.info(
            "commit completed",
            extra={
                "session_id": result.session_id,
                "record_kind": result.record_kind,
                "successful": result.successful_count,
                "failed": result.failed_count,
            },
        )
        return result

    def _insert_rows(
        self,
        session: CommitSession,
        schema: RecordSchema,
        rows: list[RowOutcome],
        uploader_identity: str,
        abort: threading.Event,
    ) -> list[tuple[RowOutcome, str, str | None]]:
        def attempt(outcome: RowOutcome) -> tuple[RowOutcome, str, str | None]:
            if abort.is_set():
                return outcome, SKIPPED, None

            record = to_record(outcome.row, schema)
            request = InsertRequest(
                record_kind=schema.record_kind,
                uploader_identity=uploader_identity,
                upload_session_id=session.session_id,
                row_number=outcome.row_number,
                record=record,
                natural_key=natural_key(record, schema.key_fields),
                synthesized_fields=outcome.row.synthesized_fields,
            )
            try:
                self.store.insert(request)
            except RecordRejectedError as exc:
                logger.warning(
                    "record rejected by store",
                    extra={"session_id": session.session_id, "row_number": outcome.row_number, "reason": exc.message},
                )
                return outcome, REJECTED, exc.message
            except StoreUnavailableError:
                abort.set()
                logger.exception(
                    "record store unavailable, aborting remaining rows",
                    extra={"session_id": session.session_id, "row_number": outcome.row_number},
                )
                return outcome, SKIPPED, None
            except Exception as exc:
                logger.exception(
                    "unexpected store failure",
                    extra={"session_id": session.session_id, "row_number": outcome.row_number},
                )
                return outcome, REJECTED, f"Record rejected by store: {exc}"
            return outcome, INSERTED, None

        if not rows:
            return []

        workers = max(1, min(self.settings.commit_workers, len(rows)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="commit") as executor:
            # map() yields in submission order whatever order the inserts finish in.
            return list(executor.map(attempt, rows))

    def _record_session(self, result: CommitResult, *, uploader_identity: str, source_name: str | None) -> None:
        fields: dict[str, Any] = {
            "session_id": result.session_id,
            "uploader_identity": uploader_identity,
            "record_kind": result.record_kind,
            "status": result.status,
            "total_rows": result.total_rows,
            "valid_rows": result.valid_count,
            "invalid_rows": result.invalid_count,
            "successful_count": result.successful_count,
            "failed_count": result.failed_count,
            "source_name": source_name,
        }
        if result.status == COMPLETED:
            self.ledger.record(**fields)
            return

        try:
            self.ledger.record(**fields)
        except SQLAlchemyError:
            # The ledger usually shares the store's database, so it may be down too.
            logger.exception("could not record aborted upload session", extra={"session_id": result.session_id})


def to_commit_response(result: CommitResult) -> dict[str, Any]:
    return {
        "sessionId": result.session_id,
        "status": result.status,
        "results": {
            "fileProcessing": {
                "total": result.total_rows,
                "valid": result.valid_count,
                "invalid": result.invalid_count,
            },
            "databaseSave": {
                "successful": result.successful_count,
                "failed": result.failed_count,
            },
        },
        "failures": [
            {"row": failure.row_number, "reason": failure.reason, "source": failure.source}
            for failure in result.failures
        ],
    }
