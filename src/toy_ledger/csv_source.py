import csv
import logging
from typing import Dict, Iterator, Optional, Tuple

from pydantic import ValidationError

from toy_ledger.errors import MalformedRecordError
from toy_ledger.models import RawRecord

logger = logging.getLogger(__name__)

# CSV header -> RawRecord field
COLUMNS = {
    "type": "action",
    "client": "client_id",
    "tx": "tx_id",
    "amount": "amount",
}


def parse_row(row: Dict[Optional[str], object], line: Optional[int] = None) -> RawRecord:
    """Parse CSV row into RawRecord."""
    normalized = {}
    for key, value in row.items():
        if key is None or key.strip() not in COLUMNS:
            continue
        if isinstance(value, str):
            value = value.strip()
        normalized[COLUMNS[key.strip()]] = value

    try:
        return RawRecord(**normalized)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in e.errors()
        )
        raise MalformedRecordError(f"invalid row {row}: {problems}", line=line) from e


def read_rows(filepath: str) -> Iterator[Tuple[int, Dict[Optional[str], object]]]:
    """Yield (line number, raw CSV row) pairs in file order."""
    with open(filepath, "r", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            yield reader.line_num, row
    logger.debug(f"Finished reading {filepath}")
