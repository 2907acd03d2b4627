"""Unit tests for LedgerApplicationService using a mock repository."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from src.tf_common.enums import NetworkType
from src.tf_common.errors import (
    InsufficientBalanceError,
    InvalidAmountError,
    PostNotFoundError,
    ProfileNotFoundError,
    TransactionAlreadyProcessedError,
    TransactionNotFoundError,
    WithdrawBelowMinimumError,
)
from src.tf_common.pagination import cursor_decode
from src.tf_ledger.application.schemas import BalanceResponse, EarningsResponse
from src.tf_ledger.application.service import (
    ADMIN_ADJUST_REFERENCE,
    LedgerApplicationService,
    deposit_reference,
)
from src.tf_ledger.domain.models import Transaction
from src.tf_settings.domain.cache import SettingsCache
from src.tf_settings.domain.models import SiteSettings


def _make_tx(
    tx_id: str = "tx-1",
    kind: str = "DEPOSIT",
    status: str = "COMPLETED",
    amount: int = 5_000_000,
    balance_after: int = 5_000_000,
    minute: int = 0,
) -> Transaction:
    return Transaction(
        id=tx_id,
        user_id="user-1",
        kind=kind,
        amount=amount,
        status=status,
        balance_after=balance_after,
        created_at=datetime(2026, 3, 1, 12, minute, tzinfo=UTC),
    )


def _make_service(repo: AsyncMock, **overrides) -> LedgerApplicationService:
    source = AsyncMock()
    source.get.return_value = SiteSettings(**overrides)
    return LedgerApplicationService(repo=repo, cache=SettingsCache(source))


class TestDepositReference:
    def test_prefix_and_uniqueness(self) -> None:
        refs = {deposit_reference() for _ in range(20)}
        assert len(refs) == 20
        assert all(r.startswith("DEP-") and len(r) == 20 for r in refs)


class TestGetBalance:
    async def test_returns_balance(self) -> None:
        repo = AsyncMock()
        repo.get_balance.return_value = 1_500_000
        svc = _make_service(repo)

        result = await svc.get_balance(AsyncMock(), "user-1")

        assert isinstance(result, BalanceResponse)
        assert result.balance_micros == 1_500_000
        assert result.balance_display == "1.50 USDT"

    async def test_missing_profile_reads_as_zero(self) -> None:
        repo = AsyncMock()
        repo.get_balance.return_value = None
        svc = _make_service(repo)

        result = await svc.get_balance(AsyncMock(), "user-1")

        assert result.balance_micros == 0


class TestDeposit:
    async def test_credits_and_records_completed_row(self) -> None:
        repo = AsyncMock()
        repo.credit.return_value = 5_000_000
        repo.insert_transaction.return_value = _make_tx()
        svc = _make_service(repo)
        db = AsyncMock()

        result = await svc.deposit(db, "user-1", 5_000_000, NetworkType.ERC20)

        repo.credit.assert_awaited_once_with(db, "user-1", 5_000_000)
        args = repo.insert_transaction.call_args
        assert args.args[2:6] == ("DEPOSIT", 5_000_000, "COMPLETED", 5_000_000)
        assert args.kwargs["network"] == "ERC20"
        assert args.kwargs["tx_hash"].startswith("DEP-")
        db.commit.assert_awaited_once()
        assert result.balance_micros == 5_000_000

    async def test_non_positive_amount_rejected(self) -> None:
        repo = AsyncMock()
        svc = _make_service(repo)
        db = AsyncMock()

        with pytest.raises(InvalidAmountError):
            await svc.deposit(db, "user-1", 0, NetworkType.TRC20)

        repo.credit.assert_not_awaited()
        db.rollback.assert_awaited_once()

    async def test_ledger_insert_failure_rolls_back_credit(self) -> None:
        repo = AsyncMock()
        repo.credit.return_value = 5_000_000
        repo.insert_transaction.side_effect = RuntimeError("insert failed")
        svc = _make_service(repo)
        db = AsyncMock()

        with pytest.raises(RuntimeError):
            await svc.deposit(db, "user-1", 5_000_000, NetworkType.TRC20)

        db.commit.assert_not_awaited()
        db.rollback.assert_awaited_once()


class TestRequestWithdraw:
    async def test_debits_and_records_pending_row(self) -> None:
        repo = AsyncMock()
        repo.lock_balance.return_value = 100_000_000
        repo.debit.return_value = 40_000_000
        repo.insert_transaction.return_value = _make_tx(
            kind="WITHDRAW", status="PENDING", amount=60_000_000, balance_after=40_000_000
        )
        svc = _make_service(repo)
        db = AsyncMock()

        result = await svc.request_withdraw(db, "user-1", 60_000_000, NetworkType.TRC20)

        repo.debit.assert_awaited_once_with(db, "user-1", 60_000_000)
        assert repo.insert_transaction.call_args.args[2:5] == ("WITHDRAW", 60_000_000, "PENDING")
        assert result.transaction.status == "PENDING"
        db.commit.assert_awaited_once()

    async def test_below_minimum_rejected_before_debit(self) -> None:
        repo = AsyncMock()
        repo.lock_balance.return_value = 100_000_000
        svc = _make_service(repo, min_withdraw=50_000_000)
        db = AsyncMock()

        with pytest.raises(WithdrawBelowMinimumError):
            await svc.request_withdraw(db, "user-1", 49_999_999, NetworkType.TRC20)

        repo.debit.assert_not_awaited()
        db.rollback.assert_awaited_once()

    async def test_overdraft_below_minimum_reports_insufficient_balance(self) -> None:
        repo = AsyncMock()
        repo.lock_balance.return_value = 5_000_000
        svc = _make_service(repo)
        db = AsyncMock()

        with pytest.raises(InsufficientBalanceError) as exc_info:
            await svc.request_withdraw(db, "user-1", 10_000_000, NetworkType.TRC20)

        assert exc_info.value.code == 2001
        repo.debit.assert_not_awaited()
        db.rollback.assert_awaited_once()

    async def test_minimum_follows_refreshed_settings(self) -> None:
        repo = AsyncMock()
        repo.lock_balance.return_value = 1_000_000
        repo.debit.return_value = 0
        repo.insert_transaction.return_value = _make_tx(kind="WITHDRAW", status="PENDING")
        svc = _make_service(repo, min_withdraw=1_000_000)

        await svc.request_withdraw(AsyncMock(), "user-1", 1_000_000, NetworkType.BEP20)

        repo.debit.assert_awaited_once()

    async def test_unknown_profile(self) -> None:
        repo = AsyncMock()
        repo.lock_balance.return_value = None
        svc = _make_service(repo)

        with pytest.raises(ProfileNotFoundError):
            await svc.request_withdraw(AsyncMock(), "ghost", 60_000_000, NetworkType.TRC20)

        repo.debit.assert_not_awaited()

    async def test_insufficient_balance_from_debit_propagates(self) -> None:
        repo = AsyncMock()
        # The conditional debit stays the final guard
        repo.lock_balance.return_value = 60_000_000
        repo.debit.side_effect = InsufficientBalanceError(60_000_000, 10_000_000)
        svc = _make_service(repo)
        db = AsyncMock()

        with pytest.raises(InsufficientBalanceError):
            await svc.request_withdraw(db, "user-1", 60_000_000, NetworkType.TRC20)

        repo.insert_transaction.assert_not_awaited()
        db.rollback.assert_awaited_once()


class TestProcessWithdrawal:
    async def test_approve_does_not_refund(self) -> None:
        repo = AsyncMock()
        repo.transition_withdrawal.return_value = _make_tx(kind="WITHDRAW", status="COMPLETED")
        svc = _make_service(repo)
        db = AsyncMock()

        result = await svc.process_withdrawal(db, "tx-1", approved=True)

        repo.transition_withdrawal.assert_awaited_once_with(db, "tx-1", "COMPLETED")
        repo.credit.assert_not_awaited()
        assert result.refunded_micros == 0
        assert result.user_balance_micros is None

    async def test_reject_refunds_amount(self) -> None:
        repo = AsyncMock()
        repo.transition_withdrawal.return_value = _make_tx(
            kind="WITHDRAW", status="REJECTED", amount=20_000_000
        )
        repo.credit.return_value = 70_000_000
        svc = _make_service(repo)
        db = AsyncMock()

        result = await svc.process_withdrawal(db, "tx-1", approved=False)

        repo.credit.assert_awaited_once_with(db, "user-1", 20_000_000)
        assert result.refunded_micros == 20_000_000
        assert result.user_balance_micros == 70_000_000
        db.commit.assert_awaited_once()

    async def test_unknown_transaction(self) -> None:
        repo = AsyncMock()
        repo.transition_withdrawal.return_value = None
        repo.get_transaction.return_value = None
        svc = _make_service(repo)

        with pytest.raises(TransactionNotFoundError):
            await svc.process_withdrawal(AsyncMock(), "tx-404", approved=True)

    async def test_non_withdraw_transaction_is_not_found(self) -> None:
        repo = AsyncMock()
        repo.transition_withdrawal.return_value = None
        repo.get_transaction.return_value = _make_tx(kind="DEPOSIT")
        svc = _make_service(repo)

        with pytest.raises(TransactionNotFoundError):
            await svc.process_withdrawal(AsyncMock(), "tx-1", approved=True)

    async def test_already_processed(self) -> None:
        repo = AsyncMock()
        repo.transition_withdrawal.return_value = None
        repo.get_transaction.return_value = _make_tx(kind="WITHDRAW", status="REJECTED")
        svc = _make_service(repo)
        db = AsyncMock()

        with pytest.raises(TransactionAlreadyProcessedError):
            await svc.process_withdrawal(db, "tx-1", approved=False)

        repo.credit.assert_not_awaited()
        db.rollback.assert_awaited_once()


class TestSponsorPost:
    async def test_amount_below_one_view_rejected(self) -> None:
        repo = AsyncMock()
        svc = _make_service(repo, sponsor_price_per_1k=1_000_000)

        with pytest.raises(InvalidAmountError):
            await svc.sponsor_post(AsyncMock(), "user-1", "post-1", 999)

        repo.debit.assert_not_awaited()

    async def test_boost_uses_current_price(self) -> None:
        repo = AsyncMock()
        repo.debit.return_value = 0
        repo.insert_transaction.return_value = _make_tx(kind="AD_SPEND")
        repo.boost_post.return_value = 5_100
        svc = _make_service(repo, sponsor_price_per_1k=2_000_000)
        db = AsyncMock()

        result = await svc.sponsor_post(db, "user-1", "post-1", 10_000_000)

        repo.boost_post.assert_awaited_once_with(db, "post-1", 5_000)
        assert result.views_added == 5_000
        assert result.total_views == 5_100
        assert repo.insert_transaction.call_args.kwargs["post_id"] == "post-1"

    async def test_unknown_post_rejected_before_debit(self) -> None:
        repo = AsyncMock()
        repo.boost_post.return_value = None
        svc = _make_service(repo)
        db = AsyncMock()

        with pytest.raises(PostNotFoundError):
            await svc.sponsor_post(db, "user-1", "post-404", 10_000_000)

        repo.debit.assert_not_awaited()
        repo.insert_transaction.assert_not_awaited()
        db.rollback.assert_awaited_once()


class TestListTransactions:
    async def test_has_more_and_cursor(self) -> None:
        repo = AsyncMock()
        repo.list_transactions.return_value = [
            _make_tx(tx_id=f"tx-{i}", minute=10 - i) for i in range(3)
        ]
        svc = _make_service(repo)

        page = await svc.list_transactions(AsyncMock(), "user-1", None, 2, None)

        assert [t.id for t in page.items] == ["tx-0", "tx-1"]
        assert page.has_more is True
        ts, last_id = cursor_decode(page.next_cursor)
        assert last_id == "tx-1"
        assert ts == datetime(2026, 3, 1, 12, 9, tzinfo=UTC)
        # limit + 1 is requested to detect the next page
        assert repo.list_transactions.call_args.args[4] == 3

    async def test_last_page_has_no_cursor(self) -> None:
        repo = AsyncMock()
        repo.list_transactions.return_value = [_make_tx()]
        svc = _make_service(repo)

        page = await svc.list_transactions(AsyncMock(), "user-1", None, 20, "DEPOSIT")

        assert page.has_more is False
        assert page.next_cursor is None
        assert repo.list_transactions.call_args.args[5] == "DEPOSIT"


class TestEstimateEarnings:
    async def test_estimate_is_display_only(self) -> None:
        repo = AsyncMock()
        repo.total_views.return_value = [("post-1", 200_000), ("post-2", 50_000)]
        svc = _make_service(repo, creator_rate_per_100k=100_000)

        result = await svc.estimate_earnings(AsyncMock(), "user-1")

        assert isinstance(result, EarningsResponse)
        assert result.total_views == 250_000
        assert result.estimated_micros == 250_000
        assert result.estimated_display == "0.25 USDT"
        assert [p.estimated_micros for p in result.posts] == [200_000, 50_000]
        assert result.credited is False
        repo.credit.assert_not_awaited()


class TestAdjustBalance:
    async def test_no_change_writes_nothing(self) -> None:
        repo = AsyncMock()
        repo.lock_balance.return_value = 7_000_000
        svc = _make_service(repo)

        balance, tx = await svc.adjust_balance(AsyncMock(), "user-1", 7_000_000)

        assert (balance, tx) == (7_000_000, None)
        repo.set_balance.assert_not_awaited()

    async def test_decrease_records_withdraw_adjustment(self) -> None:
        repo = AsyncMock()
        repo.lock_balance.return_value = 7_000_000
        repo.set_balance.return_value = 2_000_000
        repo.insert_transaction.return_value = _make_tx(kind="WITHDRAW")
        svc = _make_service(repo)
        db = AsyncMock()

        await svc.adjust_balance(db, "user-1", 2_000_000)

        args = repo.insert_transaction.call_args
        assert args.args[2:6] == ("WITHDRAW", 5_000_000, "COMPLETED", 2_000_000)
        assert args.kwargs["tx_hash"] == ADMIN_ADJUST_REFERENCE
        db.commit.assert_not_awaited()

    async def test_unknown_profile(self) -> None:
        repo = AsyncMock()
        repo.lock_balance.return_value = None
        svc = _make_service(repo)

        with pytest.raises(ProfileNotFoundError):
            await svc.adjust_balance(AsyncMock(), "user-404", 1)
