from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from eventkb.app import ingest_csv, preview_merge, run_merge
from eventkb.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from eventkb.domain.reconciliation import MergePreview

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build and maintain the event knowledge base")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest = subparsers.add_parser("ingest", help="Ingest a CSV file of events")
    ingest.add_argument("file", type=Path, help="CSV file with Actor/Action/DateReceived columns")
    ingest.add_argument(
        "--no-enrichment",
        action="store_true",
        help="Skip Wikidata lookups for new entities",
    )

    dedup = subparsers.add_parser("dedup", help="Merge entities sharing an external id")
    dedup.add_argument(
        "--preview",
        action="store_true",
        help="Only list the duplicate clusters, do not merge",
    )

    return parser.parse_args(list(argv))


def _log_preview(preview: MergePreview) -> None:
    for cluster in preview.clusters:
        log.info(
            "%s %s: keep %r, merge %s",
            cluster.entity_type,
            cluster.external_id,
            cluster.canonical_name,
            ", ".join(repr(name) for name in cluster.member_names[1:]),
        )
    log.info(
        "%s cluster(s), %s duplicate(s) would be removed",
        len(preview.clusters),
        preview.total_duplicates_to_remove,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "ingest":
            if not parsed_args.file.is_file():
                raise ValueError(f"No such file: {parsed_args.file}")  # noqa: TRY301
            result = ingest_csv(parsed_args.file, enrich=not parsed_args.no_enrichment)
            log.info(
                "Ingested %s row(s): %s new entities, %s connections, "
                "%s invalid, %s duplicate, %s failed",
                result.processed,
                result.entities_created,
                result.connections_added,
                result.skipped_invalid,
                result.skipped_duplicates,
                result.failed_rows,
            )
        elif parsed_args.command == "dedup":
            if parsed_args.preview:
                _log_preview(preview_merge())
            else:
                report = run_merge()
                log.info(
                    "Merged %s duplicate group(s), removed %s entities",
                    report.duplicate_groups_found,
                    report.duplicates_removed,
                )
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
