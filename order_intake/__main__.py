"""Run one ingestion batch from the command line: python -m order_intake"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from order_intake.config import Settings
from order_intake.errors import SourceUnreadableError
from order_intake.logging_config import configure_logging
from order_intake.models import summarize_outcomes
from order_intake.wiring import build_orchestrator


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Ingest order emails into validated order records.")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    configure_logging(args.log_level or settings.log_level)

    orchestrator = build_orchestrator(settings)
    try:
        outcomes = orchestrator.run_batch()
    except SourceUnreadableError as exc:
        print(f"Batch aborted: {exc}", file=sys.stderr)
        return 1

    for outcome in outcomes:
        marker = "ok" if outcome.ok else "FAILED"
        detail = outcome.order_id or outcome.error or ""
        print(f"{marker:6} {outcome.source_file} {detail}")
    counts = summarize_outcomes(outcomes)
    print(f"{counts['persisted']}/{counts['total']} orders persisted")
    return 0 if counts["failed"] == 0 else 2


if __name__ == "__main__":
    sys.exit(main())
