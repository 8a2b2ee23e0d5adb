import sys
import logging
from decimal import Decimal
from typing import Dict, List, Optional, TextIO

from config import EngineConfig
from exceptions import ConfigError, DecodeError
from models import ClientAccount
from payments_engine import PaymentsEngine

logger = logging.getLogger(__name__)

FOUR_PLACES = Decimal("0.0001")
OUTPUT_HEADER = "client,available,held,total,locked"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def format_amount(value: Decimal) -> str:
    """Format decimal with exactly 4 decimal places."""
    return f"{value.quantize(FOUR_PLACES):f}"


def write_accounts(accounts: Dict[int, ClientAccount], stream: TextIO) -> None:
    stream.write(OUTPUT_HEADER + "\n")
    for client_id in sorted(accounts.keys()):
        account = accounts[client_id]
        stream.write(
            f"{client_id},"
            f"{format_amount(account.available)},"
            f"{format_amount(account.held)},"
            f"{format_amount(account.total)},"
            f"{str(account.locked).lower()}\n"
        )


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if len(argv) != 1:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        return 1

    try:
        config = EngineConfig.from_env()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    configure_logging(config.log_level)

    filepath = argv[0]
    engine = PaymentsEngine(config)
    try:
        accounts = engine.process_file(filepath)
    except OSError as e:
        logger.error(f"Cannot read {filepath}: {e}")
        return 1
    except DecodeError as e:
        logger.error(f"Cannot process {filepath}: {e}")
        return 1

    write_accounts(accounts, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
