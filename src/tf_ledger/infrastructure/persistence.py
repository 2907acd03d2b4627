"""LedgerRepository — concrete implementation of LedgerRepositoryProtocol.

All balance-mutating operations use atomic PostgreSQL UPDATE ... RETURNING.
A result of 0 rows means a business constraint was violated (insufficient
funds, transaction no longer PENDING). The CHECK (balance >= 0) constraint on
profiles is the final guard.

Transaction ownership: the CALLER (application service) commits or rolls back.
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL for optional filters.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_common.errors import InsufficientBalanceError, InternalError, ProfileNotFoundError
from src.tf_ledger.domain.models import Campaign, LedgerCheck, Transaction

# ---------------------------------------------------------------------------
# SQL: balance mutations (profiles.balance, micros)
# ---------------------------------------------------------------------------

_GET_BALANCE_SQL = text("""
    SELECT balance FROM profiles WHERE id = CAST(:user_id AS UUID)
""")

_LOCK_BALANCE_SQL = text("""
    SELECT balance FROM profiles WHERE id = CAST(:user_id AS UUID) FOR UPDATE
""")

_CREDIT_SQL = text("""
    UPDATE profiles
    SET balance = balance + :amount,
        updated_at = NOW()
    WHERE id = CAST(:user_id AS UUID)
    RETURNING balance
""")

_DEBIT_SQL = text("""
    UPDATE profiles
    SET balance = balance - :amount,
        updated_at = NOW()
    WHERE id = CAST(:user_id AS UUID) AND balance >= :amount
    RETURNING balance
""")

_SET_BALANCE_SQL = text("""
    UPDATE profiles
    SET balance = :balance,
        updated_at = NOW()
    WHERE id = CAST(:user_id AS UUID)
    RETURNING balance
""")

# ---------------------------------------------------------------------------
# SQL: transactions
# ---------------------------------------------------------------------------

_TX_COLUMNS = """
    id, user_id, kind, amount, status, balance_after,
    network, post_id, tx_hash, created_at, updated_at
"""

_INSERT_TX_SQL = text(f"""
    INSERT INTO transactions
        (user_id, kind, amount, status, balance_after, network, post_id, tx_hash)
    VALUES
        (CAST(:user_id AS UUID), :kind, :amount, :status, :balance_after,
         :network, CAST(:post_id AS UUID), :tx_hash)
    RETURNING {_TX_COLUMNS}
""")

_GET_TX_SQL = text(f"""
    SELECT {_TX_COLUMNS} FROM transactions WHERE id = CAST(:tx_id AS UUID)
""")

# Only a PENDING withdrawal may transition, and only once
_TRANSITION_WITHDRAWAL_SQL = text(f"""
    UPDATE transactions
    SET status = :new_status,
        updated_at = NOW()
    WHERE id = CAST(:tx_id AS UUID)
      AND kind = 'WITHDRAW'
      AND status = 'PENDING'
    RETURNING {_TX_COLUMNS}
""")

_LIST_TX_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions
    WHERE user_id = CAST(:user_id AS UUID)
      AND (CAST(:kind AS TEXT) IS NULL OR kind = CAST(:kind AS TEXT))
      AND (
          CAST(:cursor_ts AS TIMESTAMPTZ) IS NULL
          OR created_at < CAST(:cursor_ts AS TIMESTAMPTZ)
          OR (
              created_at = CAST(:cursor_ts AS TIMESTAMPTZ)
              AND id < CAST(:cursor_id AS UUID)
          )
      )
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_LIST_PENDING_WITHDRAWALS_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions
    WHERE kind = 'WITHDRAW' AND status = 'PENDING'
    ORDER BY created_at ASC
    LIMIT :limit
""")

# ---------------------------------------------------------------------------
# SQL: posts (sponsorship boost, earnings)
# ---------------------------------------------------------------------------

_BOOST_POST_SQL = text("""
    UPDATE posts
    SET views = views + :views,
        sponsored = TRUE,
        updated_at = NOW()
    WHERE id = CAST(:post_id AS UUID)
    RETURNING views
""")

_POST_VIEWS_SQL = text("""
    SELECT id, views FROM posts
    WHERE user_id = CAST(:user_id AS UUID)
    ORDER BY created_at DESC
""")

_CAMPAIGNS_SQL = text("""
    SELECT p.id AS post_id, p.content, p.views,
           SUM(t.amount) AS total_spend,
           COUNT(t.id) AS sponsorships,
           MAX(t.created_at) AS last_sponsored_at
    FROM transactions t
    JOIN posts p ON p.id = t.post_id
    WHERE t.user_id = CAST(:user_id AS UUID)
      AND t.kind = 'AD_SPEND'
      AND t.status = 'COMPLETED'
    GROUP BY p.id, p.content, p.views
    ORDER BY last_sponsored_at DESC
""")

# ---------------------------------------------------------------------------
# SQL: reconciliation
# balance = completed credits - completed debits - pending withdrawals
# ---------------------------------------------------------------------------

_CHECK_LEDGER_SQL = text("""
    SELECT p.id AS user_id, p.balance,
           COALESCE(SUM(
               CASE
                   WHEN t.status = 'COMPLETED' AND t.kind IN ('DEPOSIT', 'EARNING')
                       THEN t.amount
                   WHEN t.status = 'COMPLETED' AND t.kind IN ('WITHDRAW', 'AD_SPEND')
                       THEN -t.amount
                   WHEN t.status = 'PENDING' AND t.kind = 'WITHDRAW'
                       THEN -t.amount
                   ELSE 0
               END
           ), 0) AS expected
    FROM profiles p
    LEFT JOIN transactions t ON t.user_id = p.id
    WHERE CAST(:user_id AS UUID) IS NULL OR p.id = CAST(:user_id AS UUID)
    GROUP BY p.id, p.balance
    ORDER BY p.id
""")


def _row_to_tx(row: object) -> Transaction:
    return Transaction(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=str(row.user_id),  # type: ignore[attr-defined]
        kind=row.kind,  # type: ignore[attr-defined]
        amount=int(row.amount),  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        balance_after=int(row.balance_after),  # type: ignore[attr-defined]
        network=row.network,  # type: ignore[attr-defined]
        post_id=str(row.post_id) if row.post_id else None,  # type: ignore[attr-defined]
        tx_hash=row.tx_hash,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class LedgerRepository:
    """Concrete repository — every balance change is one atomic statement."""

    async def get_balance(self, db: AsyncSession, user_id: str) -> int | None:
        row = (await db.execute(_GET_BALANCE_SQL, {"user_id": user_id})).fetchone()
        return int(row.balance) if row else None

    async def credit(self, db: AsyncSession, user_id: str, amount: int) -> int:
        row = (
            await db.execute(_CREDIT_SQL, {"user_id": user_id, "amount": amount})
        ).fetchone()
        if row is None:
            raise ProfileNotFoundError(user_id)
        return int(row.balance)

    async def debit(self, db: AsyncSession, user_id: str, amount: int) -> int:
        row = (
            await db.execute(_DEBIT_SQL, {"user_id": user_id, "amount": amount})
        ).fetchone()
        if row is None:
            available = await self.get_balance(db, user_id)
            if available is None:
                raise ProfileNotFoundError(user_id)
            raise InsufficientBalanceError(amount, available)
        return int(row.balance)

    async def lock_balance(self, db: AsyncSession, user_id: str) -> int | None:
        row = (await db.execute(_LOCK_BALANCE_SQL, {"user_id": user_id})).fetchone()
        return int(row.balance) if row else None

    async def set_balance(self, db: AsyncSession, user_id: str, balance: int) -> int:
        row = (
            await db.execute(_SET_BALANCE_SQL, {"user_id": user_id, "balance": balance})
        ).fetchone()
        if row is None:
            raise ProfileNotFoundError(user_id)
        return int(row.balance)

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
    ) -> Transaction:
        result = await db.execute(
            _INSERT_TX_SQL,
            {
                "user_id": user_id,
                "kind": kind,
                "amount": amount,
                "status": status,
                "balance_after": balance_after,
                "network": network,
                "post_id": post_id,
                "tx_hash": tx_hash,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Transaction insert returned no rows")
        return _row_to_tx(row)

    async def get_transaction(self, db: AsyncSession, tx_id: str) -> Transaction | None:
        row = (await db.execute(_GET_TX_SQL, {"tx_id": tx_id})).fetchone()
        return _row_to_tx(row) if row else None

    async def transition_withdrawal(
        self, db: AsyncSession, tx_id: str, new_status: str
    ) -> Transaction | None:
        row = (
            await db.execute(
                _TRANSITION_WITHDRAWAL_SQL, {"tx_id": tx_id, "new_status": new_status}
            )
        ).fetchone()
        return _row_to_tx(row) if row else None

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_ts: datetime | None,
        cursor_id: str | None,
        limit: int,
        kind: str | None,
    ) -> list[Transaction]:
        result = await db.execute(
            _LIST_TX_SQL,
            {
                "user_id": user_id,
                "kind": kind,
                "cursor_ts": cursor_ts,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_tx(r) for r in result.fetchall()]

    async def list_pending_withdrawals(
        self, db: AsyncSession, limit: int
    ) -> list[Transaction]:
        result = await db.execute(_LIST_PENDING_WITHDRAWALS_SQL, {"limit": limit})
        return [_row_to_tx(r) for r in result.fetchall()]

    async def boost_post(self, db: AsyncSession, post_id: str, views: int) -> int | None:
        row = (
            await db.execute(_BOOST_POST_SQL, {"post_id": post_id, "views": views})
        ).fetchone()
        return int(row.views) if row else None

    async def list_campaigns(self, db: AsyncSession, user_id: str) -> list[Campaign]:
        result = await db.execute(_CAMPAIGNS_SQL, {"user_id": user_id})
        return [
            Campaign(
                post_id=str(r.post_id),
                content=r.content,
                views=int(r.views),
                total_spend=int(r.total_spend),
                sponsorships=int(r.sponsorships),
                last_sponsored_at=r.last_sponsored_at,
            )
            for r in result.fetchall()
        ]

    async def check_ledger(
        self, db: AsyncSession, user_id: str | None
    ) -> list[LedgerCheck]:
        result = await db.execute(_CHECK_LEDGER_SQL, {"user_id": user_id})
        return [
            LedgerCheck(
                user_id=str(r.user_id),
                balance=int(r.balance),
                expected=int(r.expected),
            )
            for r in result.fetchall()
        ]

    async def total_views(self, db: AsyncSession, user_id: str) -> list[tuple[str, int]]:
        result = await db.execute(_POST_VIEWS_SQL, {"user_id": user_id})
        return [(str(r.id), int(r.views)) for r in result.fetchall()]
