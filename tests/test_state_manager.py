import sys
import os
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from exceptions import InvariantViolation
from models import Transaction, TransactionType
from state_manager import StateManager


class TestStateManager:
    def test_get_account_does_not_create(self):
        state = StateManager()
        assert state.get_account(1) is None
        assert not state.has_account(1)
        assert state.client_count() == 0

    def test_get_or_create_account(self):
        state = StateManager()
        account = state.get_or_create_account(1)
        assert account.available == Decimal("0")
        assert state.get_or_create_account(1) is account
        assert state.client_count() == 1

    def test_store_and_flag_transaction(self):
        state = StateManager()
        transaction = Transaction(TransactionType.DEPOSIT, 1, 5, Decimal("3"))
        state.store_transaction(transaction)

        state.set_transaction_under_dispute(5, True)
        assert state.get_transaction(5).under_dispute is True

        state.set_transaction_under_dispute(5, False)
        assert state.get_transaction(5).under_dispute is False
        assert state.transaction_count() == 1

    def test_flag_unknown_transaction_raises(self):
        state = StateManager()
        with pytest.raises(InvariantViolation):
            state.set_transaction_under_dispute(5, True)

    def test_get_all_accounts_returns_copy(self):
        state = StateManager()
        state.get_or_create_account(1)
        snapshot = state.get_all_accounts()
        snapshot.clear()
        assert state.has_account(1)
