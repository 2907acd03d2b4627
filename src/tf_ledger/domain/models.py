"""Domain models for tf_ledger — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Transaction:
    id: str
    user_id: str
    kind: str                    # TransactionKind value
    amount: int                  # micros, always positive; direction implied by kind
    status: str                  # TransactionStatus value
    balance_after: int           # micros, balance snapshot right after the effect
    network: str | None = None
    post_id: str | None = None
    tx_hash: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Campaign:
    """Ad spend aggregated per sponsored post."""

    post_id: str
    content: str
    views: int
    total_spend: int             # micros
    sponsorships: int
    last_sponsored_at: datetime | None


@dataclass
class LedgerCheck:
    """Balance vs. ledger-implied balance for one profile."""

    user_id: str
    balance: int
    expected: int

    @property
    def ok(self) -> bool:
        return self.balance == self.expected

    @property
    def drift(self) -> int:
        return self.balance - self.expected
