"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock (or the in-memory fake in tests/unit) that
conforms to this Protocol. Infrastructure layer provides the real one.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_ledger.domain.models import Campaign, LedgerCheck, Transaction


class LedgerRepositoryProtocol(Protocol):
    async def get_balance(self, db: AsyncSession, user_id: str) -> int | None: ...

    async def credit(self, db: AsyncSession, user_id: str, amount: int) -> int: ...

    async def debit(self, db: AsyncSession, user_id: str, amount: int) -> int: ...

    async def lock_balance(self, db: AsyncSession, user_id: str) -> int | None: ...

    async def set_balance(self, db: AsyncSession, user_id: str, balance: int) -> int: ...

    async def insert_transaction(
        self,
        db: AsyncSession,
        user_id: str,
        kind: str,
        amount: int,
        status: str,
        balance_after: int,
        network: str | None = None,
        post_id: str | None = None,
        tx_hash: str | None = None,
    ) -> Transaction: ...

    async def get_transaction(self, db: AsyncSession, tx_id: str) -> Transaction | None: ...

    async def transition_withdrawal(
        self, db: AsyncSession, tx_id: str, new_status: str
    ) -> Transaction | None: ...

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_ts: datetime | None,
        cursor_id: str | None,
        limit: int,
        kind: str | None,
    ) -> list[Transaction]: ...

    async def list_pending_withdrawals(
        self, db: AsyncSession, limit: int
    ) -> list[Transaction]: ...

    async def boost_post(self, db: AsyncSession, post_id: str, views: int) -> int | None: ...

    async def list_campaigns(self, db: AsyncSession, user_id: str) -> list[Campaign]: ...

    async def check_ledger(
        self, db: AsyncSession, user_id: str | None
    ) -> list[LedgerCheck]: ...

    async def total_views(self, db: AsyncSession, user_id: str) -> list[tuple[str, int]]: ...
