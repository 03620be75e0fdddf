import csv
import sys
import logging
from decimal import Decimal, localcontext
from typing import Dict, TextIO

from toy_ledger.config import get_settings
from toy_ledger.errors import LedgerError
from toy_ledger.models import ClientAccount
from toy_ledger.payments_engine import PaymentsEngine

logger = logging.getLogger(__name__)

OUTPUT_PRECISION = Decimal("0.0001")


def format_decimal(value: Decimal) -> str:
    """Format decimal with up to 4 decimal places, removing trailing zeros."""
    with localcontext() as ctx:
        # integer digits plus the 4 kept fractional digits must fit the context
        ctx.prec = max(ctx.prec, value.adjusted() + 6)
        normalized = value.quantize(OUTPUT_PRECISION).normalize()
    return f"{normalized:f}"


def write_accounts(accounts: Dict[int, ClientAccount], stream: TextIO) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(["client", "available", "held", "total", "locked"])
    for client_id in sorted(accounts.keys()):
        account = accounts[client_id]
        writer.writerow([
            client_id,
            format_decimal(account.available),
            format_decimal(account.held),
            format_decimal(account.total),
            str(account.locked).lower(),
        ])


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if len(argv) != 1:
        print("Usage: toy-ledger <input.csv>", file=sys.stderr)
        return 1

    engine = PaymentsEngine(settings)
    try:
        accounts = engine.process_file(argv[0])
    except LedgerError as e:
        logger.error(f"Run failed: {e}")
        return 2

    write_accounts(accounts, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
