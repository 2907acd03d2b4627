"""LedgerApplicationService — every balance mutation in one DB transaction.

Each public mutating method performs its repository calls and then commits;
any exception rolls the whole unit back, so a failed ledger insert also
undoes the balance change that preceded it. Methods prefixed with
``record_`` never commit and are composed into other services' units of
work (registration, admin bootstrap).
"""

import logging
import secrets

from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_common.enums import NetworkType, TransactionKind, TransactionStatus
from src.tf_common.errors import (
    InsufficientBalanceError,
    InvalidAmountError,
    PostNotFoundError,
    ProfileNotFoundError,
    TransactionAlreadyProcessedError,
    TransactionNotFoundError,
    WithdrawBelowMinimumError,
)
from src.tf_common.pagination import cursor_decode, cursor_encode
from src.tf_common.units import estimate_earnings, micros_to_display, sponsor_view_boost
from src.tf_ledger.application.schemas import (
    BalanceResponse,
    CampaignItem,
    EarningsResponse,
    LedgerCheckItem,
    PostEarning,
    ProcessWithdrawalResponse,
    ReconcileResponse,
    SponsorResponse,
    TransactionItem,
    TransactionListResponse,
    WalletOperationResponse,
)
from src.tf_ledger.domain.models import Transaction
from src.tf_ledger.domain.repository import LedgerRepositoryProtocol
from src.tf_ledger.infrastructure.persistence import LedgerRepository
from src.tf_settings.application.service import settings_cache
from src.tf_settings.domain.cache import SettingsCache

logger = logging.getLogger(__name__)

ADMIN_ADJUST_REFERENCE = "ADMIN-ADJUST"
SEED_REFERENCE = "ADMIN-SEED"


def deposit_reference() -> str:
    """Opaque reference for a faucet deposit; there is no on-chain hash."""
    return f"DEP-{secrets.token_hex(8).upper()}"


class LedgerApplicationService:
    def __init__(
        self,
        repo: LedgerRepositoryProtocol | None = None,
        cache: SettingsCache | None = None,
    ) -> None:
        self._repo: LedgerRepositoryProtocol = repo or LedgerRepository()
        self._cache = cache or settings_cache

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_balance(self, db: AsyncSession, user_id: str) -> BalanceResponse:
        balance = await self._repo.get_balance(db, user_id)
        # A transient (row-less) profile has a zero balance
        return BalanceResponse.from_micros(user_id, balance or 0)

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str,
        cursor: str | None,
        limit: int,
        kind: str | None,
    ) -> TransactionListResponse:
        cursor_ts, cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        rows = await self._repo.list_transactions(
            db, user_id, cursor_ts, cursor_id, limit + 1, kind
        )
        has_more = len(rows) > limit
        page = rows[:limit]
        next_cursor = None
        if has_more and page and page[-1].created_at is not None:
            next_cursor = cursor_encode(page[-1].created_at, page[-1].id)
        return TransactionListResponse(
            items=[TransactionItem.from_domain(t) for t in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    async def estimate_earnings(self, db: AsyncSession, user_id: str) -> EarningsResponse:
        """Display-only estimate; nothing is credited."""
        await self._cache.refresh(db)
        rate = self._cache.get().creator_rate_per_100k
        per_post = await self._repo.total_views(db, user_id)
        total_views = sum(views for _, views in per_post)
        estimated = estimate_earnings(total_views, rate)
        return EarningsResponse(
            total_views=total_views,
            rate_per_100k_micros=rate,
            rate_per_100k_display=micros_to_display(rate, places=6),
            estimated_micros=estimated,
            estimated_display=micros_to_display(estimated),
            posts=[
                PostEarning(
                    post_id=post_id,
                    views=views,
                    estimated_micros=estimate_earnings(views, rate),
                    estimated_display=micros_to_display(estimate_earnings(views, rate)),
                )
                for post_id, views in per_post
            ],
        )

    async def list_campaigns(self, db: AsyncSession, user_id: str) -> list[CampaignItem]:
        return [CampaignItem.from_domain(c) for c in await self._repo.list_campaigns(db, user_id)]

    async def list_pending_withdrawals(
        self, db: AsyncSession, limit: int
    ) -> list[TransactionItem]:
        rows = await self._repo.list_pending_withdrawals(db, limit)
        return [TransactionItem.from_domain(t) for t in rows]

    async def reconcile(self, db: AsyncSession, user_id: str | None = None) -> ReconcileResponse:
        checks = await self._repo.check_ledger(db, user_id)
        violations = [c for c in checks if not c.ok]
        for v in violations:
            logger.warning(
                "ledger drift for %s: balance=%d expected=%d", v.user_id, v.balance, v.expected
            )
        return ReconcileResponse(
            ok=not violations,
            checked=len(checks),
            violations=[LedgerCheckItem.from_domain(v) for v in violations],
        )

    # ------------------------------------------------------------------
    # Composable steps (no commit)
    # ------------------------------------------------------------------

    async def record_deposit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        network: str | None = None,
        reference: str | None = None,
    ) -> tuple[int, Transaction]:
        if amount <= 0:
            raise InvalidAmountError("deposit must be positive")
        balance = await self._repo.credit(db, user_id, amount)
        tx = await self._repo.insert_transaction(
            db,
            user_id,
            TransactionKind.DEPOSIT.value,
            amount,
            TransactionStatus.COMPLETED.value,
            balance,
            network=network,
            tx_hash=reference or deposit_reference(),
        )
        return balance, tx

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def deposit(
        self, db: AsyncSession, user_id: str, amount: int, network: NetworkType
    ) -> WalletOperationResponse:
        try:
            balance, tx = await self.record_deposit(db, user_id, amount, network.value)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("deposit %s: +%d micros via %s -> %d", user_id, amount, network.value, balance)
        return WalletOperationResponse.from_result(balance, tx)

    async def request_withdraw(
        self, db: AsyncSession, user_id: str, amount: int, network: NetworkType
    ) -> WalletOperationResponse:
        try:
            await self._cache.refresh(db)
            minimum = self._cache.get().min_withdraw
            if amount <= 0:
                raise InvalidAmountError("withdrawal must be positive")
            # An overdraft reports InsufficientBalance even below the minimum
            available = await self._repo.lock_balance(db, user_id)
            if available is None:
                raise ProfileNotFoundError(user_id)
            if amount > available:
                raise InsufficientBalanceError(amount, available)
            if amount < minimum:
                raise WithdrawBelowMinimumError(amount, minimum)
            balance = await self._repo.debit(db, user_id, amount)
            tx = await self._repo.insert_transaction(
                db,
                user_id,
                TransactionKind.WITHDRAW.value,
                amount,
                TransactionStatus.PENDING.value,
                balance,
                network=network.value,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("withdraw requested %s: -%d micros (tx %s)", user_id, amount, tx.id)
        return WalletOperationResponse.from_result(balance, tx)

    async def process_withdrawal(
        self, db: AsyncSession, tx_id: str, approved: bool
    ) -> ProcessWithdrawalResponse:
        new_status = TransactionStatus.COMPLETED if approved else TransactionStatus.REJECTED
        refunded = 0
        user_balance: int | None = None
        try:
            tx = await self._repo.transition_withdrawal(db, tx_id, new_status.value)
            if tx is None:
                existing = await self._repo.get_transaction(db, tx_id)
                if existing is None or existing.kind != TransactionKind.WITHDRAW.value:
                    raise TransactionNotFoundError(tx_id)
                raise TransactionAlreadyProcessedError(tx_id, existing.status)
            if not approved:
                user_balance = await self._repo.credit(db, tx.user_id, tx.amount)
                refunded = tx.amount
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("withdrawal %s -> %s (refunded %d micros)", tx_id, new_status.value, refunded)
        return ProcessWithdrawalResponse(
            transaction=TransactionItem.from_domain(tx),
            refunded_micros=refunded,
            user_balance_micros=user_balance,
        )

    async def sponsor_post(
        self, db: AsyncSession, user_id: str, post_id: str, amount: int
    ) -> SponsorResponse:
        try:
            await self._cache.refresh(db)
            price = self._cache.get().sponsor_price_per_1k
            boost = sponsor_view_boost(amount, price)
            if boost <= 0:
                raise InvalidAmountError("amount buys no views at the current price")
            # The post must exist before the AD_SPEND row references it
            total_views = await self._repo.boost_post(db, post_id, boost)
            if total_views is None:
                raise PostNotFoundError(post_id)
            balance = await self._repo.debit(db, user_id, amount)
            tx = await self._repo.insert_transaction(
                db,
                user_id,
                TransactionKind.AD_SPEND.value,
                amount,
                TransactionStatus.COMPLETED.value,
                balance,
                post_id=post_id,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "post %s sponsored by %s: %d micros -> +%d views", post_id, user_id, amount, boost
        )
        return SponsorResponse(
            post_id=post_id,
            spent_micros=amount,
            spent_display=micros_to_display(amount),
            views_added=boost,
            total_views=total_views,
            balance_micros=balance,
            balance_display=micros_to_display(balance),
            transaction_id=tx.id,
        )

    async def adjust_balance(
        self, db: AsyncSession, user_id: str, target: int
    ) -> tuple[int, Transaction | None]:
        """Move a balance to `target` through a ledger row for the delta.

        Does not commit; the admin service owns the unit of work.
        """
        if target < 0:
            raise InvalidAmountError("balance cannot be negative")
        current = await self._repo.lock_balance(db, user_id)
        if current is None:
            raise ProfileNotFoundError(user_id)
        delta = target - current
        if delta == 0:
            return current, None
        balance = await self._repo.set_balance(db, user_id, target)
        kind = TransactionKind.DEPOSIT if delta > 0 else TransactionKind.WITHDRAW
        tx = await self._repo.insert_transaction(
            db,
            user_id,
            kind.value,
            abs(delta),
            TransactionStatus.COMPLETED.value,
            balance,
            tx_hash=ADMIN_ADJUST_REFERENCE,
        )
        logger.info("balance of %s adjusted %d -> %d", user_id, current, balance)
        return balance, tx
