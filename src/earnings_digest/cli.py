"""Command-line entry point.

Usage:
    python -m earnings_digest analyze transcript.pdf
    python -m earnings_digest analyze notes.txt --mime-type text/plain
    python -m earnings_digest serve --port 8000
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import mimetypes
from pathlib import Path
import sys

from pydantic import ValidationError

from earnings_digest.analyzer import EarningsAnalyzer
from earnings_digest.config import FrozenConfig, resolve_config
from earnings_digest.constants import DEFAULT_MIME_TYPE, TOOL_EARNINGS_SUMMARY
from earnings_digest.core.types import Failure, Success, UploadedDocument
from earnings_digest.logging_setup import configure_logging
from earnings_digest.telemetry import SimpleReporter, TelemetryContext, telemetry_enabled

log = logging.getLogger(__name__)


def guess_mime_type(path: Path) -> str:
    """Guess the declared type of a local file from its name."""
    mime_type, _ = mimetypes.guess_type(path.name)
    return mime_type or DEFAULT_MIME_TYPE


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Summarize earnings call documents with Gemini",
        prog="python -m earnings_digest",
    )
    parser.add_argument(
        "--env-file", help="Optional .env file to read GEMINI_* settings from"
    )
    parser.add_argument(
        "--log-level", default="WARNING", help="Logging level (default: WARNING)"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    analyze = commands.add_parser("analyze", help="Summarize a local document")
    analyze.add_argument("path", type=Path, help="Transcript, slides, or text file")
    analyze.add_argument(
        "--mime-type", help="Declared content type (guessed from the name if omitted)"
    )

    serve = commands.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    return parser


def _load_config(args: argparse.Namespace) -> FrozenConfig | None:
    """Resolve settings, printing an error payload when they are invalid."""
    try:
        return resolve_config(env_file=args.env_file)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        log.error("Invalid configuration: %s", problems)
        print(json.dumps({"error": f"Invalid configuration: {problems}"}), file=sys.stderr)
        return None


def _analyze(args: argparse.Namespace) -> int:
    path: Path = args.path
    try:
        data = path.read_bytes()
    except OSError as e:
        print(json.dumps({"error": f"Cannot read {path}: {e.strerror}"}), file=sys.stderr)
        return 1

    document = UploadedDocument(
        filename=path.name,
        mime_type=args.mime_type or guess_mime_type(path),
        data=data,
    )
    config = _load_config(args)
    if config is None:
        return 1

    reporter = SimpleReporter() if telemetry_enabled() else None
    telemetry = TelemetryContext(reporter) if reporter else TelemetryContext()
    analyzer = EarningsAnalyzer(config, telemetry=telemetry)

    result = asyncio.run(analyzer.analyze(TOOL_EARNINGS_SUMMARY, document))
    if reporter is not None:
        print(reporter.get_report(), file=sys.stderr)

    match result:
        case Success(value=summary):
            print(json.dumps(summary.model_dump(mode="json"), indent=2))
            return 0
        case Failure(error=classified):
            print(json.dumps(classified.to_payload()), file=sys.stderr)
            return 1
    return 1


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    from earnings_digest.api import build_app

    config = _load_config(args)
    if config is None:
        return 1
    app = build_app(config)
    log.info("Serving on %s:%d", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entry point; returns the process exit code."""
    args = _build_parser().parse_args(argv)
    configure_logging(args.log_level.upper())

    if args.command == "serve":
        return _serve(args)
    return _analyze(args)


if __name__ == "__main__":
    sys.exit(main())
