"""Contest results: per-contestant percentages, positional rank, revenue."""

from decimal import ROUND_HALF_UP, Decimal

from src.cv_voting.domain.models import ContestantTally, RankedContestant, RevenueSummary

_TWO_PLACES = Decimal("0.01")


def vote_percentage(count: int, total: int) -> float:
    """count / total * 100 rounded half-up to 2 places; 0.0 when total is 0."""
    if total <= 0:
        return 0.0
    pct = Decimal(count) * Decimal(100) / Decimal(total)
    return float(pct.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def rank_contestants(
    tallies: list[ContestantTally], total_votes: int | None = None
) -> list[RankedContestant]:
    """Sort by vote count descending and number 1..n.

    Ties keep their input order and still get distinct ranks (positional,
    not competition ranking). ``total_votes`` defaults to the sum of tallies.
    """
    total = sum(t.vote_count for t in tallies) if total_votes is None else total_votes
    ordered = sorted(tallies, key=lambda t: t.vote_count, reverse=True)
    return [
        RankedContestant(
            contestant_id=t.contestant_id,
            name=t.name,
            contest_number=t.contest_number,
            status=t.status,
            vote_count=t.vote_count,
            percentage=vote_percentage(t.vote_count, total),
            rank=position,
            image_url=t.image_url,
        )
        for position, t in enumerate(ordered, start=1)
    ]


def summarize_revenue(total_amount_cents: int, platform_fee_cents: int) -> RevenueSummary:
    return RevenueSummary(
        total_revenue_cents=total_amount_cents,
        platform_fee_cents=platform_fee_cents,
        net_revenue_cents=total_amount_cents - platform_fee_cents,
    )
