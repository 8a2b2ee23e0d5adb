import logging
from decimal import Decimal
from typing import Optional

from config import EngineConfig
from exceptions import InvariantViolation, TransactionRejected
from models import Transaction, TransactionType, ProcessingResult
from state_manager import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to ledger state, one at a time, in arrival order.

    Every handler either commits all of its changes or raises TransactionRejected
    before touching state, so a rejected transaction leaves accounts and history
    exactly as they were. InvariantViolation is not caught here.
    """

    def __init__(self, state: StateManager, config: Optional[EngineConfig] = None):
        self._state = state
        self._config = config or EngineConfig()

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            APPLIED: State was updated
            REJECTED: A business rule refused the transaction, state unchanged
        """
        try:
            account = self._state.get_account(transaction.client_id)
            if account is not None and account.locked:
                raise TransactionRejected("account is locked")

            match transaction.transaction_type:
                case TransactionType.DEPOSIT:
                    self._handle_deposit(transaction)
                case TransactionType.WITHDRAWAL:
                    self._handle_withdrawal(transaction)
                case TransactionType.DISPUTE:
                    self._handle_dispute(transaction)
                case TransactionType.RESOLVE:
                    self._handle_resolve(transaction)
                case TransactionType.CHARGEBACK:
                    self._handle_chargeback(transaction)
                case _:
                    raise InvariantViolation(f"unknown transaction type {transaction.transaction_type!r}")
        except TransactionRejected as e:
            logger.warning(f"Transaction {transaction!r} can not be performed. Reason: {e.reason}")
            return ProcessingResult.REJECTED

        return ProcessingResult.APPLIED

    def _handle_deposit(self, transaction: Transaction) -> None:
        self._check_amount(transaction)

        self._apply_balance_change(transaction.client_id, transaction.amount, Decimal("0"))
        self._state.store_transaction(transaction)

    def _handle_withdrawal(self, transaction: Transaction) -> None:
        self._check_amount(transaction)

        # A failed withdrawal still registers the client
        account = self._state.get_or_create_account(transaction.client_id)
        if account.available < transaction.amount:
            raise TransactionRejected("insufficient funds")

        self._apply_balance_change(transaction.client_id, -transaction.amount, Decimal("0"))
        self._state.store_transaction(transaction)

    def _handle_dispute(self, transaction: Transaction) -> None:
        original = self._state.get_transaction(transaction.transaction_id)
        if original is None or original.under_dispute:
            raise TransactionRejected("transaction does not exist or is already under dispute")
        self._check_same_client(transaction, original)

        disputed_amount = self._disputed_amount(original)
        self._apply_balance_change(original.client_id, -disputed_amount, disputed_amount)
        self._state.set_transaction_under_dispute(original.transaction_id, True)

    def _handle_resolve(self, transaction: Transaction) -> None:
        original = self._get_disputed_original(transaction)

        disputed_amount = self._disputed_amount(original)
        self._apply_balance_change(original.client_id, disputed_amount, -disputed_amount)
        self._state.set_transaction_under_dispute(original.transaction_id, False)

    def _handle_chargeback(self, transaction: Transaction) -> None:
        original = self._get_disputed_original(transaction)

        disputed_amount = self._disputed_amount(original)
        self._apply_balance_change(original.client_id, Decimal("0"), -disputed_amount, lock=True)
        self._state.set_transaction_under_dispute(original.transaction_id, False)

    def _get_disputed_original(self, transaction: Transaction) -> Transaction:
        original = self._state.get_transaction(transaction.transaction_id)
        if original is None or not original.under_dispute:
            raise TransactionRejected("transaction does not exist or is not under dispute")
        self._check_same_client(transaction, original)
        return original

    def _check_amount(self, transaction: Transaction) -> None:
        # Normally enforced by the reader; records can also arrive from other sources
        if not self._config.amount_in_bounds(transaction.amount):
            raise TransactionRejected(f"invalid amount {transaction.amount}")

    @staticmethod
    def _check_same_client(transaction: Transaction, original: Transaction) -> None:
        if transaction.client_id != original.client_id:
            raise TransactionRejected(
                f"client ids of current and referenced transactions do not match "
                f"(expected {original.client_id}, got {transaction.client_id})"
            )

    @staticmethod
    def _disputed_amount(original: Transaction) -> Decimal:
        # Disputing a withdrawal claims the funds should not have left the account,
        # so the held amount is the negation of what was withdrawn.
        match original.transaction_type:
            case TransactionType.DEPOSIT:
                return original.amount
            case TransactionType.WITHDRAWAL:
                return -original.amount
        raise InvariantViolation(
            f"tx {original.transaction_id} of type {original.transaction_type.value} found in transaction history"
        )

    def _apply_balance_change(
        self, client_id: int, available_delta: Decimal, held_delta: Decimal, lock: bool = False
    ) -> None:
        account = self._state.get_account(client_id)
        available = account.available if account is not None else Decimal("0")
        held = account.held if account is not None else Decimal("0")

        new_available = available + available_delta
        new_held = held + held_delta
        if not (self._config.funds_in_bounds(new_available) and self._config.funds_in_bounds(new_held)):
            raise TransactionRejected("accounts out of bounds")

        if account is None:
            account = self._state.get_or_create_account(client_id)
        account.available = new_available
        account.held = new_held
        account.locked = account.locked or lock
