import argparse
import json
import logging
from pathlib import Path
import sys

from sqlalchemy.orm import Session, sessionmaker

from bulk_ingest.commit import CommitEngine, to_commit_response
from bulk_ingest.config import Settings, get_settings
from bulk_ingest.database import build_session_factory, dispose_session_factory
from bulk_ingest.errors import NO_FILE, CommitAbortedError, IngestError, TransportError, error_response
from bulk_ingest.ledger import UploadLedger, session_to_dict
from bulk_ingest.preview import preview, to_preview_response
from bulk_ingest.quality import assess_quality, quality_to_dict
from bulk_ingest.registry import record_kinds
from bulk_ingest.template import emit_template


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Bulk spreadsheet ingestion and validation")
    subparsers = parser.add_subparsers(dest="command", required=True)

    template_parser = subparsers.add_parser("template", help="write an upload template workbook")
    template_parser.add_argument("kind", help=f"record kind ({', '.join(record_kinds())})")
    template_parser.add_argument("--output", required=True, help="Path of the .xlsx file to write")
    template_parser.add_argument("--no-example", action="store_true", help="omit the example row")

    preview_parser = subparsers.add_parser("preview", help="validate a workbook without saving anything")
    preview_parser.add_argument("kind", help="record kind")
    preview_parser.add_argument("file", help="Path to the .xlsx workbook")

    commit_parser = subparsers.add_parser("commit", help="validate a workbook and save its valid rows")
    commit_parser.add_argument("kind", help="record kind")
    commit_parser.add_argument("file", help="Path to the .xlsx workbook")
    commit_parser.add_argument("--uploader", required=True, help="Identity recorded in the upload history")

    history_parser = subparsers.add_parser("history", help="list recent upload sessions")
    history_parser.add_argument("--uploader", required=True, help="Uploader identity")
    history_parser.add_argument("--limit", type=int, default=None, help="Page size")
    history_parser.add_argument("--offset", type=int, default=0, help="Rows to skip")

    check_parser = subparsers.add_parser("check", help="report data quality of a workbook")
    check_parser.add_argument("file", help="Path to the .xlsx workbook")
    check_parser.add_argument("--kind", default="contact", help="record kind (default: contact)")

    return parser.parse_args(argv)


def _read_upload(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise TransportError(NO_FILE, f"Could not read {path}: {exc.strerror or exc}") from exc


def _emit(payload: dict[str, object]) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _show_history(args: argparse.Namespace, settings: Settings, session_factory: sessionmaker[Session]) -> None:
    if (args.limit is not None and args.limit < 0) or args.offset < 0:
        raise SystemExit("--limit and --offset must not be negative")

    ledger = UploadLedger(session_factory, max_limit=settings.history_max_limit)
    limit = args.limit if args.limit is not None else settings.history_page_size
    sessions = ledger.list_recent(args.uploader, limit=limit, offset=args.offset)
    _emit(
        {
            "success": True,
            "total": ledger.count(args.uploader),
            "sessions": [session_to_dict(session) for session in sessions],
        }
    )


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )

    try:
        if args.command == "template":
            output = Path(args.output)
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_bytes(emit_template(args.kind, include_example=not args.no_example))
            _emit({"success": True, "template": str(output)})
            return

        if args.command == "preview":
            summary = preview(_read_upload(Path(args.file)), args.kind, sample_size=settings.preview_sample_size)
            _emit({"success": True, "preview": to_preview_response(summary)})
            return

        if args.command == "check":
            report = assess_quality(_read_upload(Path(args.file)), args.kind, sample_size=settings.preview_sample_size)
            _emit({"success": True, "quality": quality_to_dict(report)})
            return

        session_factory = build_session_factory(settings.database_url)
        try:
            if args.command == "history":
                _show_history(args, settings, session_factory)
            else:
                path = Path(args.file)
                engine = CommitEngine(settings, session_factory)
                result = engine.commit(_read_upload(path), args.kind, args.uploader, source_name=path.name)
                _emit({"success": True, **to_commit_response(result)})
        finally:
            dispose_session_factory(session_factory)
    except CommitAbortedError as exc:
        _emit({**error_response(exc), **to_commit_response(exc.result)})
        raise SystemExit(1)
    except IngestError as exc:
        _emit(error_response(exc))
        raise SystemExit(1)


if __name__ == "__main__":
    main()
