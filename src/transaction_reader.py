import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, List, Optional, Union

from config import EngineConfig
from exceptions import DecodeError
from models import DecodeFailure, Record, Transaction, TransactionType

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("type", "client", "tx")
AMOUNT_COLUMN = "amount"

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

BYTE_ORDER_MARK = "\ufeff"


class TransactionReader:
    """
    Decodes a CSV transaction log into Transaction / DecodeFailure records, in input order.

    Columns are matched by header name so they may appear in any order. Values are
    whitespace-trimmed. Byte input is decoded as UTF-8 row by row. A row that cannot
    be decoded becomes a DecodeFailure rather than stopping the stream; only an
    unusable header raises.
    """

    def __init__(self, lines: Iterable[Union[str, bytes]], config: Optional[EngineConfig] = None):
        self._lines = lines
        self._config = config or EngineConfig()

    def __iter__(self) -> Iterator[Record]:
        reader = csv.reader(_decode_lines(self._lines))
        columns = self._read_header(reader)

        for fields in reader:
            if not fields or all(not value.strip() for value in fields):
                continue
            try:
                _check_utf8(fields)
                yield self._decode_row(columns, fields)
            except DecodeError as e:
                yield DecodeFailure(
                    line_number=reader.line_num,
                    reason=e.reason,
                    row=dict(zip(columns, fields)),
                )

    def _read_header(self, reader) -> List[str]:
        for fields in reader:
            if fields and any(value.strip() for value in fields):
                columns = [name.strip().lower() for name in fields]
                missing = [name for name in REQUIRED_COLUMNS if name not in columns]
                if missing:
                    raise DecodeError(f"header is missing required columns: {', '.join(missing)}")
                logger.debug(f"Column order: {columns}")
                return columns
        raise DecodeError("input has no header row")

    def _decode_row(self, columns: List[str], fields: List[str]) -> Transaction:
        if len(fields) != len(columns):
            raise DecodeError(f"expected {len(columns)} fields, got {len(fields)}")

        normalized: Dict[str, str] = {name: value.strip() for name, value in zip(columns, fields)}

        try:
            transaction_type = TransactionType(normalized["type"])
        except ValueError:
            raise DecodeError(f"unknown transaction type {normalized['type']!r}")

        client_id = _parse_int(normalized["client"], "client", MAX_CLIENT_ID)
        transaction_id = _parse_int(normalized["tx"], "tx", MAX_TRANSACTION_ID)

        amount = Decimal("0")
        if transaction_type.is_amount_bearing:
            amount = _parse_amount(normalized.get(AMOUNT_COLUMN, ""))
            if not self._config.amount_in_bounds(amount):
                raise DecodeError(f"transaction {transaction_id}: amount out of bounds")

        return Transaction(
            transaction_type=transaction_type,
            client_id=client_id,
            transaction_id=transaction_id,
            amount=amount,
        )


def _parse_int(value: str, name: str, maximum: int) -> int:
    if "_" in value:
        raise DecodeError(f"invalid {name} {value!r}")
    try:
        parsed = int(value)
    except ValueError:
        raise DecodeError(f"invalid {name} {value!r}")
    if not 0 <= parsed <= maximum:
        raise DecodeError(f"{name} {parsed} out of range")
    return parsed


def _parse_amount(value: str) -> Decimal:
    """Unparseable amounts count as zero, which the bounds check then refuses."""
    if "_" in value:
        return Decimal("0")
    try:
        amount = Decimal(value)
    except InvalidOperation:
        return Decimal("0")
    if not amount.is_finite():
        return Decimal("0")
    return amount


def _decode_lines(lines: Iterable[Union[str, bytes]]) -> Iterator[str]:
    # Undecodable bytes are kept as surrogates so only the affected row fails
    first = True
    for line in lines:
        if isinstance(line, bytes):
            line = line.decode("utf-8", errors="surrogateescape")
        if first:
            line = line.removeprefix(BYTE_ORDER_MARK)
            first = False
        yield line


def _check_utf8(fields: List[str]) -> None:
    for value in fields:
        try:
            value.encode("utf-8")
        except UnicodeEncodeError:
            raise DecodeError("row is not valid UTF-8")
