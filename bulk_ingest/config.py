from dataclasses import dataclass
import os

from dotenv import load_dotenv


load_dotenv()


@dataclass(frozen=True)
class Settings:
    app_name: str
    database_url: str
    log_level: str
    preview_sample_size: int
    commit_workers: int
    history_page_size: int
    history_max_limit: int


def get_settings() -> Settings:
    return Settings(
        app_name=os.getenv("APP_NAME", "bulk-ingest"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./bulk_ingest.db"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        preview_sample_size=int(os.getenv("PREVIEW_SAMPLE_SIZE", "5")),
        commit_workers=max(1, int(os.getenv("COMMIT_WORKERS", "4"))),
        history_page_size=int(os.getenv("HISTORY_PAGE_SIZE", "20")),
        history_max_limit=int(os.getenv("HISTORY_MAX_LIMIT", "100")),
    )
