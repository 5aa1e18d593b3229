"""Console front end: upload one document, then question it.

Usage:
    caseinquiry [--base-url http://localhost:5001] path/to/brief.pdf

Reads one inquiry per line until EOF or ``quit``.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import AsyncIterator
from pathlib import Path

from caseinquiry.config import get_settings
from caseinquiry.models import Document, OutcomeKind
from caseinquiry.session import InquirySession

logger = logging.getLogger(__name__)

NO_SUMMARY = "No summary available."


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Upload a case document and question it")
    parser.add_argument("file", type=Path, help="Document to analyze")
    parser.add_argument("--base-url", help="Analysis service URL (overrides SERVICE_BASE_URL)")
    parser.add_argument("--log-level", help="Logging level (overrides LOG_LEVEL)")
    return parser


async def run(
    session: InquirySession,
    document: Document,
    lines: AsyncIterator[str] | None = None,
) -> int:
    """Drive one session: upload, print the summary, then answer inquiries."""
    session.select_document(document)
    print(f"Uploading {document.filename}...")
    outcome = await session.upload()
    if outcome.kind != OutcomeKind.SUCCEEDED:
        print(f"Upload failed: {outcome.error_message}")
        return 1

    print("\nCase Summary\n------------")
    print(outcome.summary or NO_SUMMARY)
    print("\nEnter your inquiry regarding the case ('quit' to exit).")

    if lines is None:
        lines = _stdin_lines()
    async for line in lines:
        if line.strip().lower() in ("quit", "exit"):
            break
        session.set_pending_input(line)
        turn = await session.ask()
        if turn is None:
            print(session.state().last_error_message)
            continue
        print(f"Assistant: {turn.content}")
    return 0


async def _stdin_lines() -> AsyncIterator[str]:
    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except EOFError:
            return
        yield line


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    if args.base_url:
        settings.service_base_url = args.base_url
    if args.log_level:
        settings.log_level = args.log_level

    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s | %(message)s")
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    if not args.file.is_file():
        logger.error("File not found: %s", args.file)
        sys.exit(1)

    async def _main() -> int:
        async with InquirySession(settings) as session:
            return await run(session, Document.from_path(args.file))

    sys.exit(asyncio.run(_main()))
