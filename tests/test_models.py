import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models import (
    Transaction,
    TransactionType,
    ClientAccount,
    DecodeFailure,
    ProcessingResult,
    ProcessingStats,
)


class TestTransaction:
    def test_create_deposit(self):
        transaction = Transaction(
            transaction_type=TransactionType.DEPOSIT,
            client_id=1,
            transaction_id=1,
            amount=Decimal("100.0"),
        )
        assert transaction.transaction_type == TransactionType.DEPOSIT
        assert transaction.client_id == 1
        assert transaction.transaction_id == 1
        assert transaction.amount == Decimal("100.0")
        assert transaction.under_dispute is False

    def test_create_dispute_defaults_to_zero_amount(self):
        transaction = Transaction(
            transaction_type=TransactionType.DISPUTE,
            client_id=1,
            transaction_id=1,
        )
        assert transaction.amount == Decimal("0")

    def test_amount_bearing_types(self):
        assert TransactionType.DEPOSIT.is_amount_bearing
        assert TransactionType.WITHDRAWAL.is_amount_bearing
        assert not TransactionType.DISPUTE.is_amount_bearing
        assert not TransactionType.RESOLVE.is_amount_bearing
        assert not TransactionType.CHARGEBACK.is_amount_bearing

    def test_type_from_wire_token(self):
        assert TransactionType("chargeback") == TransactionType.CHARGEBACK


class TestClientAccount:
    def test_default_values(self):
        account = ClientAccount(client_id=1)
        assert account.available == Decimal("0")
        assert account.held == Decimal("0")
        assert account.locked is False

    def test_total_property(self):
        account = ClientAccount(
            client_id=1,
            available=Decimal("100"),
            held=Decimal("50"),
        )
        assert account.total == Decimal("150")

    def test_total_follows_balance_changes(self):
        account = ClientAccount(client_id=1, available=Decimal("10"))
        account.held = Decimal("-50")
        assert account.total == Decimal("-40")


class TestDecodeFailure:
    def test_str_includes_line_and_reason(self):
        failure = DecodeFailure(line_number=7, reason="unknown transaction type 'refund'")
        assert str(failure) == "line 7: unknown transaction type 'refund'"


class TestProcessingStats:
    def test_counts_each_result(self):
        stats = ProcessingStats()
        stats.record(ProcessingResult.APPLIED)
        stats.record(ProcessingResult.APPLIED)
        stats.record(ProcessingResult.REJECTED)
        stats.record(ProcessingResult.MALFORMED)

        assert stats.applied == 2
        assert stats.rejected == 1
        assert stats.malformed == 1
        assert stats.total == 4
        assert str(stats) == "Applied: 2, Rejected: 1, Malformed: 1"
