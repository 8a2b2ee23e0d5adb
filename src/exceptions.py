"""
Typed exceptions for the payments engine.

    PaymentsError (base)
    +-- TransactionRejected   business rule refused a transaction, record is dropped
    +-- DecodeError           input could not be decoded into a transaction
    +-- ConfigError           invalid configuration override
    +-- InvariantViolation    internal state is inconsistent, fatal to the run

Only InvariantViolation escapes the engine. Everything else is reported and the
stream moves on to the next record.
"""


class PaymentsError(Exception):
    code: str = "PAYMENTS_ERROR"


class TransactionRejected(PaymentsError):
    """A transaction was refused and left all state unchanged."""

    code: str = "TRANSACTION_REJECTED"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class DecodeError(PaymentsError):
    code: str = "DECODE_ERROR"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class ConfigError(PaymentsError):
    code: str = "CONFIG_ERROR"

    def __init__(self, name: str, value: str, reason: str):
        self.name = name
        self.value = value
        super().__init__(f"Invalid value {value!r} for {name}: {reason}")


class InvariantViolation(PaymentsError):
    """Ledger state contradicts itself. Indicates a bug, never bad input."""

    code: str = "INVARIANT_VIOLATION"
