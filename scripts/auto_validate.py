"""Cron entry point: auto-validate the pending anomalies of one merchant.

    python scripts/auto_validate.py --merchant-id 3 [--date 2025-03-10] [--as-of 2025-03-10T23:00]
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.timbrature.timbrature.common.datetime_utils import parse_iso_date, parse_iso_datetime
from src.timbrature.timbrature.container import build_container
from src.timbrature.timbrature.core.exceptions import DomainError
from src.timbrature.timbrature.core.settings import TimbratureSettings

logger = logging.getLogger("timbrature.auto_validate")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Auto-validate pending time-clock anomalies")
    parser.add_argument("--merchant-id", type=int, required=True, help="Merchant whose shifts are swept")
    parser.add_argument("--date", default=None, help="Only sweep shifts planned on this day (YYYY-MM-DD)")
    parser.add_argument("--as-of", default=None, help="Reference time (ISO 8601); defaults to now")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    try:
        as_of = parse_iso_datetime(args.as_of) if args.as_of else None
        work_date = parse_iso_date(args.date) if args.date else None
        container = build_container(
            db_config=dict(settings.DB_CONFIG),
            settings=TimbratureSettings.from_mapping(getattr(settings, "TIMBRATURE", {})),
        )
        result = container.anomaly_service.auto_validate_sweep(args.merchant_id, as_of=as_of, work_date=work_date)
    except DomainError as e:
        logger.error("Sweep failed: %s", e.message)
        return 2

    print(f"{result.to_dict()['message']} (escalated={result.escalated})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
