"""Vote eligibility rules.

evaluate() decides whether a (contest, contestant, voter) triple may cast a
vote of the requested type. Rules are checked in a fixed order and the first
failing rule wins:

  1. contestant not ACTIVE                     -> CONTESTANT_INACTIVE
  2. now before voting_start_date              -> VOTING_NOT_STARTED
  3. now after voting_end_date                 -> VOTING_ENDED
  4. requested type != contest voting type     -> WRONG_VOTING_TYPE
  5. guest:
       guest voting disabled                   -> GUEST_VOTING_DISABLED
       any earlier guest vote from the same IP -> ALREADY_VOTED
       (a guest cannot hold a vote order)      -> ORDER_NOT_OWNED
  6. member, FREE:
       already voted for this contestant       -> ALREADY_VOTED_CONTESTANT
       single-contestant contest, any vote     -> ONE_CONTESTANT_ONLY
       FREE votes >= max_votes_per_user        -> VOTE_LIMIT_REACHED
     member, PAID:
       order belongs to someone else           -> ORDER_NOT_OWNED
       payment not COMPLETED                   -> PAYMENT_INCOMPLETE
       votes_remaining <= 0                    -> NO_VOTES_REMAINING
       order past expires_at                   -> ORDER_EXPIRED
       single-contestant contest, any vote     -> ONE_CONTESTANT_ONLY

Window bounds are inclusive. The function is pure: same snapshot, same answer.
"""

from datetime import datetime

from src.cv_common.datetime_utils import ensure_aware, utc_now
from src.cv_common.enums import PaymentStatus, RejectReason, VotingType
from src.cv_contest.domain.models import Contest, Contestant
from src.cv_order.domain.models import VoteOrder
from src.cv_voting.domain.models import (
    Allowed,
    Decision,
    Guest,
    Member,
    Rejected,
    Voter,
    VoterHistory,
)

_ALLOWED = Allowed()


def check_voting_window(contest: Contest, now: datetime) -> RejectReason | None:
    start = ensure_aware(contest.voting_start_date)
    if start is not None and now < start:
        return RejectReason.VOTING_NOT_STARTED
    end = ensure_aware(contest.voting_end_date)
    if end is not None and now > end:
        return RejectReason.VOTING_ENDED
    return None


def _evaluate_guest(contest: Contest, requested: str, history: VoterHistory) -> Decision:
    if not contest.allow_guest_voting:
        return Rejected(RejectReason.GUEST_VOTING_DISABLED)
    # One vote per IP for the whole contest, whatever allow_multiple_votes says.
    if history.guest_votes_in_contest > 0:
        return Rejected(RejectReason.ALREADY_VOTED)
    if requested == VotingType.PAID.value:
        return Rejected(RejectReason.ORDER_NOT_OWNED)
    return _ALLOWED


def _evaluate_member_free(contest: Contest, history: VoterHistory) -> Decision:
    if history.member_free_votes_for_contestant > 0:
        return Rejected(RejectReason.ALREADY_VOTED_CONTESTANT)
    if not contest.allow_multiple_votes and history.member_votes_in_contest > 0:
        return Rejected(RejectReason.ONE_CONTESTANT_ONLY)
    if (
        contest.max_votes_per_user is not None
        and history.member_free_votes_in_contest >= contest.max_votes_per_user
    ):
        return Rejected(RejectReason.VOTE_LIMIT_REACHED)
    return _ALLOWED


def _evaluate_member_paid(
    contest: Contest,
    member: Member,
    history: VoterHistory,
    order: VoteOrder | None,
    now: datetime,
) -> Decision:
    if order is None or order.user_id != member.user_id:
        return Rejected(RejectReason.ORDER_NOT_OWNED)
    if order.payment_status != PaymentStatus.COMPLETED.value:
        return Rejected(RejectReason.PAYMENT_INCOMPLETE)
    if order.votes_remaining <= 0:
        return Rejected(RejectReason.NO_VOTES_REMAINING)
    if order.is_expired(now):
        return Rejected(RejectReason.ORDER_EXPIRED)
    if not contest.allow_multiple_votes and history.member_votes_in_contest > 0:
        return Rejected(RejectReason.ONE_CONTESTANT_ONLY)
    return _ALLOWED


def evaluate(
    contest: Contest,
    contestant: Contestant,
    voter: Voter,
    requested_vote_type: str,
    history: VoterHistory,
    order: VoteOrder | None = None,
    now: datetime | None = None,
) -> Decision:
    """Allowed() or Rejected(reason); never raises for a business outcome.

    ``history`` and ``order`` are snapshots read by the caller; ``now``
    defaults to the current UTC time.
    """
    now = now or utc_now()

    if not contestant.is_active:
        return Rejected(RejectReason.CONTESTANT_INACTIVE)

    window = check_voting_window(contest, now)
    if window is not None:
        return Rejected(window)

    if requested_vote_type != contest.voting_type:
        return Rejected(RejectReason.WRONG_VOTING_TYPE)

    if isinstance(voter, Guest):
        return _evaluate_guest(contest, requested_vote_type, history)

    if requested_vote_type == VotingType.FREE.value:
        return _evaluate_member_free(contest, history)
    return _evaluate_member_paid(contest, voter, history, order, now)
