import logging
import os
import sys

from csv_reader import iter_transactions
from csv_writer import write_accounts
from ledger_engine import LedgerEngine
from models import ProcessingReport

LOG_LEVEL_ENV = "LEDGER_LOG_LEVEL"
DEFAULT_LOG_LEVEL = logging.WARNING


def configure_logging() -> None:
    """Configure stderr logging, level taken from LEDGER_LOG_LEVEL (default WARNING)."""
    level_name = os.environ.get(LOG_LEVEL_ENV, "").strip().upper()
    level = logging.getLevelName(level_name) if level_name else DEFAULT_LOG_LEVEL
    if not isinstance(level, int):
        level = DEFAULT_LOG_LEVEL

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def process_file(engine: LedgerEngine, filepath: str) -> ProcessingReport:
    """Feed a CSV file through the engine. Undecodable bytes end up in a malformed row."""
    with open(filepath, "r", newline="", encoding="utf-8", errors="replace") as f:
        return engine.process_transactions(iter_transactions(f))


def main(argv=None) -> int:
    argv = sys.argv if argv is None else argv
    if len(argv) != 2:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        return 1

    configure_logging()

    filepath = argv[1]
    engine = LedgerEngine()
    try:
        report = process_file(engine, filepath)
    except OSError as e:
        print(f"Cannot read {filepath}: {e}", file=sys.stderr)
        return 1

    write_accounts(sys.stdout, engine.accounts())
    print(f"Processed: {report.processed}, Failed: {report.failed}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
