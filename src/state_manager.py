from typing import Dict, Optional

from exceptions import InvariantViolation
from models import Transaction, ClientAccount


class StateManager:
    """
    Ledger state owned by a single processor.
    Stores client accounts and deposit/withdrawal history for dispute lookups.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, Transaction] = {}

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        """Return the account for a client, or None if the client was never seen."""
        return self._accounts.get(client_id)

    def has_account(self, client_id: int) -> bool:
        return client_id in self._accounts

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create a zero-balance one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def store_transaction(self, transaction: Transaction) -> None:
        """Store transaction for future dispute lookups."""
        self._transactions[transaction.transaction_id] = transaction

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Retrieve stored transaction by ID."""
        return self._transactions.get(transaction_id)

    def set_transaction_under_dispute(self, transaction_id: int, under_dispute: bool) -> None:
        transaction = self._transactions.get(transaction_id)
        if transaction is None:
            raise InvariantViolation(
                f"cannot set dispute flag on tx {transaction_id}: not in transaction history"
            )
        transaction.under_dispute = under_dispute

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)

    def client_count(self) -> int:
        return len(self._accounts)

    def transaction_count(self) -> int:
        return len(self._transactions)
