import logging
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional

from exceptions import ConfigError

MIN_EXCLUSIVE_TRANSACTION_AMOUNT = Decimal("0")
# Large enough for any realistic transaction, small enough to keep balances bounded
MAX_INCLUSIVE_TRANSACTION_AMOUNT = Decimal("1000000000")

# Balances stay within [-MAX_FUNDS, MAX_FUNDS]
MAX_FUNDS = Decimal("1000000000")

DEFAULT_QUEUE_CAPACITY = 1000
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class EngineConfig:
    max_funds: Decimal = MAX_FUNDS
    max_amount: Decimal = MAX_INCLUSIVE_TRANSACTION_AMOUNT
    queue_capacity: int = DEFAULT_QUEUE_CAPACITY
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def min_funds(self) -> Decimal:
        return -self.max_funds

    def funds_in_bounds(self, value: Decimal) -> bool:
        return self.min_funds <= value <= self.max_funds

    def amount_in_bounds(self, value: Decimal) -> bool:
        return MIN_EXCLUSIVE_TRANSACTION_AMOUNT < value <= self.max_amount

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """
        Build a config from PAYMENTS_* environment variables.
        Unset variables keep their defaults.
        """
        if environ is None:
            environ = os.environ

        kwargs = {}

        raw = environ.get("PAYMENTS_MAX_FUNDS")
        if raw is not None:
            kwargs["max_funds"] = _parse_positive_decimal("PAYMENTS_MAX_FUNDS", raw)

        raw = environ.get("PAYMENTS_MAX_AMOUNT")
        if raw is not None:
            kwargs["max_amount"] = _parse_positive_decimal("PAYMENTS_MAX_AMOUNT", raw)

        raw = environ.get("PAYMENTS_QUEUE_CAPACITY")
        if raw is not None:
            try:
                capacity = int(raw)
            except ValueError:
                raise ConfigError("PAYMENTS_QUEUE_CAPACITY", raw, "not an integer")
            if capacity < 1:
                raise ConfigError("PAYMENTS_QUEUE_CAPACITY", raw, "must be at least 1")
            kwargs["queue_capacity"] = capacity

        raw = environ.get("PAYMENTS_LOG_LEVEL")
        if raw is not None:
            level = raw.strip().upper()
            if not isinstance(logging.getLevelName(level), int):
                raise ConfigError("PAYMENTS_LOG_LEVEL", raw, "unknown log level")
            kwargs["log_level"] = level

        return cls(**kwargs)


def _parse_positive_decimal(name: str, raw: str) -> Decimal:
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        raise ConfigError(name, raw, "not a decimal number")
    if not value.is_finite() or value <= 0:
        raise ConfigError(name, raw, "must be a positive number")
    return value
