"""Global enums — must match DB CHECK constraints exactly.

Schema: alembic/versions/003..010
"""

from enum import Enum


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    USER = "USER"


class NetworkType(str, Enum):
    ERC20 = "ERC20"
    TRC20 = "TRC20"
    BEP20 = "BEP20"


class TransactionKind(str, Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"
    AD_SPEND = "AD_SPEND"
    # Reserved: earnings are estimate-only and never credited automatically
    EARNING = "EARNING"


class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"


class PostType(str, Enum):
    TEXT = "text"
    LINK = "link"


class ReactionType(str, Enum):
    """Values double as the posts counter column names."""
    LIKES = "likes"
    HEARTS = "hearts"
    HAHAS = "hahas"


class NotificationType(str, Enum):
    LIKE = "LIKE"
    COMMENT = "COMMENT"
    FOLLOW = "FOLLOW"
    SYSTEM = "SYSTEM"
