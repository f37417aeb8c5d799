import csv
import logging
import os
import sys

from csv_io import read_transactions, write_accounts
from ledger import LedgerEngine

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "LEDGER_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


def configure_logging() -> None:
    level_name = os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    configure_logging()

    if len(argv) != 1:
        print("Usage: python main.py <transactions.csv>", file=sys.stderr)
        return 1

    filepath = argv[0]
    engine = LedgerEngine()
    try:
        with open(filepath, "r", newline="", encoding="utf-8") as f:
            stats = engine.apply_all(read_transactions(f))
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        logger.error(f"Cannot read {filepath}: {e}")
        return 1

    logger.info(f"Applied: {stats.applied}, Ignored: {stats.ignored}")
    for reason, count in sorted(stats.ignored_by_reason.items(), key=lambda item: item[0].value):
        logger.info(f"  {reason.value}: {count}")

    write_accounts(engine.snapshot(), sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
