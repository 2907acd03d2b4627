"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User/Profile
  2xxx: Ledger/Wallet
  3xxx: Content (posts, comments, follows)
  4xxx: Messaging/Notifications
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Email already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid email or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


class ProfileNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(1006, f"Profile not found: {user_id}", 404)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1007, "Admin role required", 403)


# --- 2xxx: Ledger ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required} micros, available {available} micros",
            422,
        )


class TransactionNotFoundError(AppError):
    def __init__(self, tx_id: str) -> None:
        super().__init__(2002, f"Transaction not found: {tx_id}", 404)


class TransactionAlreadyProcessedError(AppError):
    def __init__(self, tx_id: str, status: str) -> None:
        super().__init__(
            2003, f"Transaction {tx_id} already processed (status={status})", 409
        )


class WithdrawBelowMinimumError(AppError):
    def __init__(self, amount: int, minimum: int) -> None:
        super().__init__(
            2004,
            f"Withdrawal of {amount} micros is below the minimum of {minimum} micros",
            422,
        )


class InvalidAmountError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2005, f"Invalid amount: {detail}", 422)


# --- 3xxx: Content ---

class PostNotFoundError(AppError):
    def __init__(self, post_id: str) -> None:
        super().__init__(3001, f"Post not found: {post_id}", 404)


class CommentNotFoundError(AppError):
    def __init__(self, comment_id: str) -> None:
        super().__init__(3002, f"Comment not found: {comment_id}", 404)


class ForbiddenError(AppError):
    def __init__(self, detail: str = "Not allowed to modify this resource") -> None:
        super().__init__(3003, detail, 403)


class CannotFollowSelfError(AppError):
    def __init__(self) -> None:
        super().__init__(3004, "You cannot follow yourself", 422)


class AlreadyFollowingError(AppError):
    def __init__(self, target_id: str) -> None:
        super().__init__(3005, f"Already following user {target_id}", 409)


class NotFollowingError(AppError):
    def __init__(self, target_id: str) -> None:
        super().__init__(3006, f"Not following user {target_id}", 404)


# --- 4xxx: Messaging/Notifications ---

class DirectMessagingDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(4001, "Direct messaging is disabled on this site", 403)


class RecipientNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(4002, f"Recipient not found: {user_id}", 404)


class CannotMessageSelfError(AppError):
    def __init__(self) -> None:
        super().__init__(4003, "You cannot message yourself", 422)


class NotificationNotFoundError(AppError):
    def __init__(self, notification_id: str) -> None:
        super().__init__(4004, f"Notification not found: {notification_id}", 404)


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class SchemaNotInitializedError(AppError):
    def __init__(self) -> None:
        super().__init__(
            9003,
            "Database schema is missing. Run `alembic upgrade head` to set up the tables.",
            503,
        )


class DatabaseError(AppError):
    def __init__(self, detail: str = "Database error") -> None:
        super().__init__(9004, detail, 500)


class MalformedIdentifierError(AppError):
    def __init__(self) -> None:
        super().__init__(9005, "Malformed identifier", 422)
