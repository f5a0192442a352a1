from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from bulk_ingest.db_models import UploadSession, utc_now


def record_session(
    db: Session,
    *,
    session_id: str,
    uploader_identity: str,
    record_kind: str,
    status: str,
    total_rows: int,
    valid_rows: int,
    invalid_rows: int,
    successful_count: int,
    failed_count: int,
    source_name: str | None = None,
) -> UploadSession:
    session = UploadSession(
        session_id=session_id,
        uploader_identity=uploader_identity,
        record_kind=record_kind,
        status=status,
        source_name=source_name,
        created_at=utc_now(),
        total_rows=total_rows,
        valid_rows=valid_rows,
        invalid_rows=invalid_rows,
        successful_count=successful_count,
        failed_count=failed_count,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def get_session_by_id(db: Session, session_id: str) -> UploadSession | None:
    stmt = select(UploadSession).where(UploadSession.session_id == session_id)
    return db.execute(stmt).scalar_one_or_none()


def list_sessions(db: Session, *, uploader_identity: str, limit: int, offset: int) -> list[UploadSession]:
    stmt = (
        select(UploadSession)
        .where(UploadSession.uploader_identity == uploader_identity)
        .order_by(UploadSession.created_at.desc(), UploadSession.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(db.execute(stmt).scalars().all())


def count_sessions(db: Session, *, uploader_identity: str) -> int:
    stmt = select(func.count(UploadSession.id)).where(UploadSession.uploader_identity == uploader_identity)
    return int(db.execute(stmt).scalar_one())


class UploadLedger:
    def __init__(self, session_factory: sessionmaker[Session], *, max_limit: int = 100) -> None:
        self.session_factory = session_factory
        self.max_limit = max_limit

    def record(self, **fields) -> UploadSession:
        with self.session_factory() as db:
            return record_session(db, **fields)

    def get(self, session_id: str) -> UploadSession | None:
        with self.session_factory() as db:
            return get_session_by_id(db, session_id)

    def list_recent(self, uploader_identity: str, limit: int = 20, offset: int = 0) -> list[UploadSession]:
        if limit < 0 or offset < 0:
            raise ValueError("limit and offset must not be negative")
        with self.session_factory() as db:
            return list_sessions(
                db,
                uploader_identity=uploader_identity,
                limit=min(limit, self.max_limit),
                offset=offset,
            )

    def count(self, uploader_identity: str) -> int:
        with self.session_factory() as db:
            return count_sessions(db, uploader_identity=uploader_identity)


def session_to_dict(session: UploadSession) -> dict[str, object]:
    return {
        "sessionId": session.session_id,
        "uploader": session.uploader_identity,
        "recordKind": session.record_kind,
        "status": session.status,
        "sourceName": session.source_name,
        "createdAt": session.created_at.isoformat(),
        "totalRows": session.total_rows,
        "validRows": session.valid_rows,
        "invalidRows": session.invalid_rows,
        "successful": session.successful_count,
        "failed": session.failed_count,
    }
