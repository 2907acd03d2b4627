"""Pydantic schemas for tf_ledger API.

Requests take decimal USDT amounts (max 6 decimal places); responses carry
both the integer `*_micros` value and a `*_display` string.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.tf_common.datetime_utils import to_iso
from src.tf_common.enums import NetworkType
from src.tf_common.units import MAX_AMOUNT_USDT, micros_to_display, usdt_to_micros
from src.tf_ledger.domain.models import Campaign, LedgerCheck, Transaction

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class _AmountRequest(BaseModel):
    amount: Decimal = Field(
        ..., gt=0, le=MAX_AMOUNT_USDT, decimal_places=6, description="Amount in USDT"
    )

    @property
    def amount_micros(self) -> int:
        return usdt_to_micros(self.amount)


class DepositRequest(_AmountRequest):
    network: NetworkType = NetworkType.TRC20


class WithdrawRequest(_AmountRequest):
    network: NetworkType = NetworkType.TRC20


class SponsorRequest(_AmountRequest):
    pass


class ProcessWithdrawalRequest(BaseModel):
    approved: bool


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    user_id: str
    balance_micros: int
    balance_display: str

    @classmethod
    def from_micros(cls, user_id: str, balance: int) -> "BalanceResponse":
        return cls(
            user_id=user_id,
            balance_micros=balance,
            balance_display=micros_to_display(balance),
        )


class TransactionItem(BaseModel):
    id: str
    kind: str
    status: str
    amount_micros: int
    amount_display: str
    balance_after_micros: int
    network: str | None
    post_id: str | None
    tx_hash: str | None
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, tx: Transaction) -> "TransactionItem":
        return cls(
            id=tx.id,
            kind=tx.kind,
            status=tx.status,
            amount_micros=tx.amount,
            amount_display=micros_to_display(tx.amount),
            balance_after_micros=tx.balance_after,
            network=tx.network,
            post_id=tx.post_id,
            tx_hash=tx.tx_hash,
            created_at=to_iso(tx.created_at),
            updated_at=to_iso(tx.updated_at),
        )


class TransactionListResponse(BaseModel):
    items: list[TransactionItem]
    next_cursor: str | None
    has_more: bool


class WalletOperationResponse(BaseModel):
    """Result of deposit / withdraw-request: new balance + the ledger row."""

    balance_micros: int
    balance_display: str
    transaction: TransactionItem

    @classmethod
    def from_result(cls, balance: int, tx: Transaction) -> "WalletOperationResponse":
        return cls(
            balance_micros=balance,
            balance_display=micros_to_display(balance),
            transaction=TransactionItem.from_domain(tx),
        )


class SponsorResponse(BaseModel):
    post_id: str
    spent_micros: int
    spent_display: str
    views_added: int
    total_views: int
    balance_micros: int
    balance_display: str
    transaction_id: str


class ProcessWithdrawalResponse(BaseModel):
    transaction: TransactionItem
    refunded_micros: int
    user_balance_micros: int | None


class PostEarning(BaseModel):
    post_id: str
    views: int
    estimated_micros: int
    estimated_display: str


class EarningsResponse(BaseModel):
    total_views: int
    rate_per_100k_micros: int
    rate_per_100k_display: str
    estimated_micros: int
    estimated_display: str
    posts: list[PostEarning]
    # Earnings are never credited to the ledger
    credited: bool = False


class CampaignItem(BaseModel):
    post_id: str
    content: str
    views: int
    total_spend_micros: int
    total_spend_display: str
    sponsorships: int
    last_sponsored_at: str | None

    @classmethod
    def from_domain(cls, c: Campaign) -> "CampaignItem":
        return cls(
            post_id=c.post_id,
            content=c.content,
            views=c.views,
            total_spend_micros=c.total_spend,
            total_spend_display=micros_to_display(c.total_spend),
            sponsorships=c.sponsorships,
            last_sponsored_at=to_iso(c.last_sponsored_at),
        )


class LedgerCheckItem(BaseModel):
    user_id: str
    balance_micros: int
    expected_micros: int
    drift_micros: int

    @classmethod
    def from_domain(cls, c: LedgerCheck) -> "LedgerCheckItem":
        return cls(
            user_id=c.user_id,
            balance_micros=c.balance,
            expected_micros=c.expected,
            drift_micros=c.drift,
        )


class ReconcileResponse(BaseModel):
    ok: bool
    checked: int
    violations: list[LedgerCheckItem]
