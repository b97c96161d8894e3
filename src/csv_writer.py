import csv
from decimal import Decimal
from typing import Iterable, TextIO

from models import AccountSnapshot

HEADER = ["client", "available", "held", "total", "locked"]


def format_decimal(value: Decimal) -> str:
    """Format decimal without exponent, removing trailing zeros."""
    normalized = value.normalize()
    return f"{normalized:f}"


def write_accounts(destination: TextIO, snapshots: Iterable[AccountSnapshot]) -> None:
    """Write the account table as CSV, one row per client ordered by client id."""
    writer = csv.writer(destination, lineterminator="\n")
    writer.writerow(HEADER)

    for snapshot in sorted(snapshots, key=lambda s: s.client_id):
        writer.writerow([
            snapshot.client_id,
            format_decimal(snapshot.available),
            format_decimal(snapshot.held),
            format_decimal(snapshot.total),
            str(snapshot.locked).lower(),
        ])
