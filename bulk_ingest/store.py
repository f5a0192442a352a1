from dataclasses import dataclass
import json
import logging
from typing import Any, Protocol

from sqlalchemy.exc import DataError, DisconnectionError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from bulk_ingest.db_models import StoredRecord
from bulk_ingest.errors import RecordRejectedError, StoreUnavailableError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InsertRequest:
    record_kind: str
    uploader_identity: str
    upload_session_id: str
    row_number: int
    record: dict[str, Any]
    natural_key: str
    synthesized_fields: tuple[str, ...] = ()


class RecordStore(Protocol):
    def insert(self, request: InsertRequest) -> Any:
        """Persist one record atomically.

        Raise RecordRejectedError when this record alone cannot be stored and
        StoreUnavailableError when the store itself cannot be reached.
        """
        ...


def natural_key(record: dict[str, Any], key_fields: tuple[str, ...]) -> str:
    parts = []
    for name in key_fields:
        value = record.get(name)
        if isinstance(value, str):
            value = value.strip().casefold()
        parts.append(json.dumps(value, sort_keys=True, default=str))
    return "|".join(parts)


class SqlRecordStore:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def insert(self, request: InsertRequest) -> int:
        with self.session_factory() as db:
            stored = StoredRecord(
                record_kind=request.record_kind,
                natural_key=request.natural_key,
                uploader_identity=request.uploader_identity,
                upload_session_id=request.upload_session_id,
                source_row_number=request.row_number,
                payload=json.dumps(request.record, sort_keys=True, default=str),
                synthesized_fields=",".join(request.synthesized_fields),
            )
            db.add(stored)
            try:
                db.commit()
            except (IntegrityError, DataError) as exc:
                db.rollback()
                raise RecordRejectedError(_rejection_reason(exc)) from exc
            except (OperationalError, InterfaceError, DisconnectionError) as exc:
                db.rollback()
                raise StoreUnavailableError(f"record store unavailable: {exc}") from exc
            return stored.id


def _rejection_reason(exc: IntegrityError | DataError) -> str:
    detail = str(exc.orig) if exc.orig is not None else str(exc)
    if isinstance(exc, IntegrityError) and "unique" in detail.lower():
        return "Duplicate record: an identical record already exists"
    return f"Record rejected by store: {detail}"
