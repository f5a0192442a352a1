from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from bulk_ingest.db_models import Base


def build_engine(database_url: str) -> Engine:
    connect_args: dict[str, object] = {}
    if database_url.startswith("sqlite"):
        # Commit workers open sessions from several threads.
        connect_args["check_same_thread"] = False
    # pre_ping turns a dropped connection into OperationalError at checkout.
    return create_engine(database_url, connect_args=connect_args, pool_pre_ping=True)


def build_session_factory(database_url: str) -> sessionmaker[Session]:
    engine = build_engine(database_url)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def dispose_session_factory(session_factory: sessionmaker[Session]) -> None:
    engine = session_factory.kw.get("bind")
    if engine is not None:
        engine.dispose()
