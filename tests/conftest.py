from collections.abc import Callable, Generator
from io import BytesIO
from pathlib import Path
from typing import Any

from openpyxl import Workbook
import pytest
from sqlalchemy.orm import Session, sessionmaker

from bulk_ingest.config import Settings
from bulk_ingest.database import build_session_factory, dispose_session_factory


OFFER_HEADERS = ["Title", "Target Geo", "Payout Type", "Payout Value", "Landing Page URL"]


def build_workbook(headers: list[Any], rows: list[list[Any]]) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(headers)
    for row in rows:
        sheet.append(row)
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def offer_row(title: Any = "Summer Promo", *, payout: Any = 12.5, geo: Any = "US, CA") -> list[Any]:
    return [title, geo, "cpa", payout, "example.com/landing"]


@pytest.fixture()
def workbook_bytes() -> Callable[[list[Any], list[list[Any]]], bytes]:
    return build_workbook


@pytest.fixture()
def ten_offer_file() -> bytes:
    # Rows 2-11: rows 5 and 9 have no title.
    rows = []
    for index in range(10):
        title = None if index in (3, 7) else f"Offer number {index}"
        rows.append(offer_row(title))
    return build_workbook(OFFER_HEADERS, rows)


@pytest.fixture()
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        app_name="bulk-ingest",
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        log_level="INFO",
        preview_sample_size=5,
        commit_workers=1,
        history_page_size=20,
        history_max_limit=100,
    )


@pytest.fixture()
def session_factory(test_settings: Settings) -> Generator[sessionmaker[Session], None, None]:
    factory = build_session_factory(test_settings.database_url)
    yield factory
    dispose_session_factory(factory)
