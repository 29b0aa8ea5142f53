"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Contest
  3xxx: Contestant / Vote package
  4xxx: Vote order
  6xxx: Vote rejections (one code per RejectReason)
  9xxx: System
"""

from src.cv_common.enums import RejectReason


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


class NotFoundError(AppError):
    """Missing entity — kept apart from business-rule rejections."""


# --- 1xxx: Auth/User ---

class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already exists", 409)


class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Email already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid username or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


class ForbiddenError(AppError):
    def __init__(self, detail: str = "Not authorized") -> None:
        super().__init__(1006, detail, 403)


# --- 2xxx: Contest ---

class ContestNotFoundError(NotFoundError):
    def __init__(self, contest_id: str) -> None:
        super().__init__(2001, f"Contest not found: {contest_id}", 404)


class InvalidContestConfigError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2002, f"Invalid contest configuration: {detail}", 422)


# --- 3xxx: Contestant / Vote package ---

class ContestantNotFoundError(NotFoundError):
    def __init__(self, contestant_id: str) -> None:
        super().__init__(3001, f"Contestant not found: {contestant_id}", 404)


class ContestNumberExistsError(AppError):
    def __init__(self, contest_number: str) -> None:
        super().__init__(3002, f"Contest number already exists: {contest_number}", 409)


class VotePackageNotFoundError(NotFoundError):
    def __init__(self, package_id: str) -> None:
        super().__init__(3003, f"Vote package not found: {package_id}", 404)


class VotePackagesLockedError(AppError):
    def __init__(self) -> None:
        super().__init__(
            3004, "Vote packages cannot change after a completed purchase", 409
        )


# --- 4xxx: Vote order ---

class VoteOrderNotFoundError(NotFoundError):
    def __init__(self, order_id: str) -> None:
        super().__init__(4001, f"Vote order not found: {order_id}", 404)


class InvalidPurchaseError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4002, detail, 422)


class PaymentReferenceMismatchError(AppError):
    def __init__(self) -> None:
        super().__init__(4003, "Payment reference does not match the vote order", 422)


class PaymentAlreadyFailedError(AppError):
    def __init__(self, order_id: str) -> None:
        super().__init__(4004, f"Payment for vote order {order_id} already failed", 409)


# --- 6xxx: Vote rejections ---

REJECTION_MESSAGES: dict[RejectReason, str] = {
    RejectReason.CONTESTANT_INACTIVE: "This contestant is not active",
    RejectReason.VOTING_NOT_STARTED: "Voting has not started yet",
    RejectReason.VOTING_ENDED: "Voting has ended",
    RejectReason.WRONG_VOTING_TYPE: "This contest does not accept this type of vote",
    RejectReason.GUEST_VOTING_DISABLED: "Guest voting is disabled for this contest, please log in to vote",
    RejectReason.ALREADY_VOTED: "A guest vote has already been cast from this network in this contest",
    RejectReason.ALREADY_VOTED_CONTESTANT: "You have already voted for this contestant",
    RejectReason.ONE_CONTESTANT_ONLY: "You can only vote for one contestant in this contest",
    RejectReason.VOTE_LIMIT_REACHED: "You have reached the maximum number of votes for this contest",
    RejectReason.ORDER_NOT_OWNED: "Not authorized to use these votes",
    RejectReason.PAYMENT_INCOMPLETE: "Payment not completed for this vote package",
    RejectReason.NO_VOTES_REMAINING: "No votes remaining in this package",
    RejectReason.ORDER_EXPIRED: "Vote package has expired",
}

_REJECTION_CODES: dict[RejectReason, tuple[int, int]] = {
    RejectReason.CONTESTANT_INACTIVE: (6001, 422),
    RejectReason.VOTING_NOT_STARTED: (6002, 422),
    RejectReason.VOTING_ENDED: (6003, 422),
    RejectReason.WRONG_VOTING_TYPE: (6004, 422),
    RejectReason.GUEST_VOTING_DISABLED: (6005, 403),
    RejectReason.ALREADY_VOTED: (6006, 409),
    RejectReason.ALREADY_VOTED_CONTESTANT: (6007, 409),
    RejectReason.ONE_CONTESTANT_ONLY: (6008, 409),
    RejectReason.VOTE_LIMIT_REACHED: (6009, 409),
    RejectReason.ORDER_NOT_OWNED: (6010, 403),
    RejectReason.PAYMENT_INCOMPLETE: (6011, 422),
    RejectReason.NO_VOTES_REMAINING: (6012, 409),
    RejectReason.ORDER_EXPIRED: (6013, 422),
}


class VoteRejectedError(AppError):
    """HTTP rendering of a Rejected decision; raised only at the router edge."""

    def __init__(self, reason: RejectReason) -> None:
        code, http_status = _REJECTION_CODES[reason]
        self.reason = reason
        super().__init__(code, REJECTION_MESSAGES[reason], http_status)


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
