"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class UserRole(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class VotingType(str, Enum):
    FREE = "FREE"
    PAID = "PAID"


class ContestantStatus(str, Enum):
    ACTIVE = "ACTIVE"
    DISQUALIFIED = "DISQUALIFIED"
    WITHDRAWN = "WITHDRAWN"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class NotificationType(str, Enum):
    VOTE_CAST = "VOTE_CAST"
    VOTE_PURCHASED = "VOTE_PURCHASED"


class RejectReason(str, Enum):
    """Business-rule outcomes of a vote attempt (not exceptions)."""

    # Configuration / state
    CONTESTANT_INACTIVE = "CONTESTANT_INACTIVE"
    VOTING_NOT_STARTED = "VOTING_NOT_STARTED"
    VOTING_ENDED = "VOTING_ENDED"
    WRONG_VOTING_TYPE = "WRONG_VOTING_TYPE"
    # Guest path
    GUEST_VOTING_DISABLED = "GUEST_VOTING_DISABLED"
    ALREADY_VOTED = "ALREADY_VOTED"
    # Member path
    ALREADY_VOTED_CONTESTANT = "ALREADY_VOTED_CONTESTANT"
    ONE_CONTESTANT_ONLY = "ONE_CONTESTANT_ONLY"
    VOTE_LIMIT_REACHED = "VOTE_LIMIT_REACHED"
    # Paid orders
    ORDER_NOT_OWNED = "ORDER_NOT_OWNED"
    PAYMENT_INCOMPLETE = "PAYMENT_INCOMPLETE"
    NO_VOTES_REMAINING = "NO_VOTES_REMAINING"
    ORDER_EXPIRED = "ORDER_EXPIRED"
