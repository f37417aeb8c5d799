import csv
import logging
from decimal import Decimal, InvalidOperation, localcontext
from typing import Dict, Iterable, Iterator, Optional, TextIO

from models import AccountSnapshot, Transaction, TransactionType

logger = logging.getLogger(__name__)

PRECISION = 4
QUANTUM = Decimal(1).scaleb(-PRECISION)
# Keeps every balance well inside the default 28-digit decimal context.
MAX_INTEGER_DIGITS = 15

OUTPUT_COLUMNS = ("client", "available", "held", "total", "locked")


def read_transactions(stream: TextIO) -> Iterator[Transaction]:
    """Yield a Transaction per parseable CSV row. Malformed rows are logged and skipped."""
    reader = csv.DictReader(stream)
    for row in reader:
        transaction = parse_csv_row(row)
        if transaction is not None:
            yield transaction


def parse_csv_row(row: Dict[Optional[str], Optional[str]]) -> Optional[Transaction]:
    """Parse CSV row into Transaction."""
    try:
        normalized = {
            k.strip(): (v or "").strip()
            for k, v in row.items()
            if k is not None
        }

        transaction_type = TransactionType(normalized["type"].lower())
        client_id = int(normalized["client"])
        transaction_id = int(normalized["tx"])

        amount = None
        amount_str = normalized.get("amount", "")
        if amount_str:
            amount = parse_amount(amount_str)

        return Transaction(
            transaction_type=transaction_type,
            client_id=client_id,
            transaction_id=transaction_id,
            amount=amount,
        )
    except (KeyError, ValueError) as e:
        logger.warning(f"Failed to parse row {row}: {e}")
        return None


def parse_amount(text: str) -> Decimal:
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"invalid amount {text!r}") from None

    if not amount.is_finite():
        raise ValueError(f"invalid amount {text!r}")
    if amount and amount.adjusted() >= MAX_INTEGER_DIGITS:
        raise ValueError(f"amount {text!r} has more than {MAX_INTEGER_DIGITS} integer digits")

    quantized = amount.quantize(QUANTUM)
    if quantized != amount:
        raise ValueError(f"amount {text!r} has more than {PRECISION} decimal places")
    return quantized


def format_amount(value: Decimal) -> str:
    """Format decimal with exactly 4 decimal places."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + PRECISION + 1)
        return f"{value.quantize(QUANTUM):f}"


def write_accounts(accounts: Iterable[AccountSnapshot], stream: TextIO) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_COLUMNS)
    for account in accounts:
        writer.writerow([
            account.client_id,
            format_amount(account.available),
            format_amount(account.held),
            format_amount(account.total),
            str(account.locked).lower(),
        ])
