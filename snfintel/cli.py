"""
SNF Intel CLI
Ask the narrative engine a question about a saved period snapshot.
"""

import argparse
import json
import logging
from pathlib import Path
import sys
from typing import List, Optional

from snfintel.__version__ import __version__
from snfintel.config.loader import load_settings
from snfintel.narrative.engine import generate_narrative
from snfintel.narrative.schema import NarrativeSnapshot

logger = logging.getLogger(__name__)


# -------------------------------------------------
# PROGRAMMATIC ENTRY
# -------------------------------------------------
def load_snapshot(path: str) -> NarrativeSnapshot:
    snapshot_path = Path(path)
    if not snapshot_path.exists():
        raise FileNotFoundError(snapshot_path)

    with open(snapshot_path, "r", encoding="utf-8") as f:
        payload = json.load(f)

    if not isinstance(payload, dict):
        raise ValueError("Snapshot file must contain a JSON object")

    return NarrativeSnapshot.from_dict(payload)


# -------------------------------------------------
# CLI ENTRY
# -------------------------------------------------
def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description=f"SNF Intel v{__version__}"
    )

    parser.add_argument("snapshot", nargs="?", help="Period snapshot JSON file")
    parser.add_argument("query", nargs="?", help="Question to ask, in plain English")
    parser.add_argument("--config", required=False, help="Path to config YAML")
    parser.add_argument(
        "--scope",
        choices=["facility", "portfolio"],
        default="portfolio",
        help="Answer about the selected facility or the whole portfolio",
    )

    parser.add_argument("--version", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")

    args = parser.parse_args(argv)

    # ---- VERSION ----
    if args.version:
        print(f"SNF Intel v{__version__}")
        return 0

    # ---- LOGGING ----
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    # ---- INPUT VALIDATION ----
    if not args.snapshot or args.query is None:
        parser.error("snapshot and query are required")

    settings = load_settings(args.config)

    try:
        snapshot = load_snapshot(args.snapshot)
    except (OSError, ValueError, KeyError):
        logger.exception("Could not read snapshot %s", args.snapshot)
        raise

    logger.debug(
        "Loaded %s: %d peer records, facility=%s",
        snapshot.period_id,
        len(snapshot.peers),
        snapshot.facility.facility_id if snapshot.facility else None,
    )

    result = generate_narrative(args.query, args.scope, snapshot, settings)

    print(result.text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
