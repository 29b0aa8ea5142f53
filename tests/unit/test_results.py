"""Unit tests for contest result aggregation."""

import pytest

from src.cv_voting.domain.models import ContestantTally
from src.cv_voting.domain.results import rank_contestants, summarize_revenue, vote_percentage


def _tally(contestant_id: str, votes: int, status: str = "ACTIVE") -> ContestantTally:
    return ContestantTally(
        contestant_id=contestant_id,
        name=f"Contestant {contestant_id}",
        contest_number=contestant_id.zfill(3),
        status=status,
        vote_count=votes,
    )


class TestVotePercentage:
    def test_zero_total_is_zero(self) -> None:
        assert vote_percentage(0, 0) == 0.0

    def test_rounds_half_up(self) -> None:
        assert vote_percentage(1, 8) == 12.5
        assert vote_percentage(1, 3) == 33.33
        assert vote_percentage(2, 3) == 66.67
        assert vote_percentage(1, 200) == 0.5
        assert vote_percentage(1, 16) == 6.25

    def test_full_share(self) -> None:
        assert vote_percentage(7, 7) == 100.0


class TestRankContestants:
    def test_thirty_twenty_ten(self) -> None:
        ranked = rank_contestants([_tally("2", 20), _tally("3", 10), _tally("1", 30)])

        assert [r.contestant_id for r in ranked] == ["1", "2", "3"]
        assert [r.percentage for r in ranked] == [50.0, 33.33, 16.67]
        assert [r.rank for r in ranked] == [1, 2, 3]

    def test_no_votes_gives_zero_everywhere(self) -> None:
        ranked = rank_contestants([_tally("1", 0), _tally("2", 0)])
        assert [r.percentage for r in ranked] == [0.0, 0.0]
        assert [r.rank for r in ranked] == [1, 2]

    def test_ties_keep_input_order_with_distinct_ranks(self) -> None:
        ranked = rank_contestants([_tally("a", 5), _tally("b", 9), _tally("c", 5)])
        assert [(r.contestant_id, r.rank) for r in ranked] == [("b", 1), ("a", 2), ("c", 3)]

    def test_explicit_total_overrides_sum(self) -> None:
        ranked = rank_contestants([_tally("1", 10)], total_votes=40)
        assert ranked[0].percentage == 25.0

    def test_disqualified_contestants_keep_their_status(self) -> None:
        ranked = rank_contestants([_tally("1", 3, status="DISQUALIFIED"), _tally("2", 1)])
        assert ranked[0].status == "DISQUALIFIED"
        assert ranked[0].rank == 1

    def test_empty_roster(self) -> None:
        assert rank_contestants([]) == []


class TestSummarizeRevenue:
    @pytest.mark.parametrize(
        ("total", "fee", "net"), [(100_000, 5_000, 95_000), (0, 0, 0), (999, 50, 949)]
    )
    def test_net_is_total_minus_fee(self, total: int, fee: int, net: int) -> None:
        summary = summarize_revenue(total, fee)
        assert summary.total_revenue_cents == total
        assert summary.platform_fee_cents == fee
        assert summary.net_revenue_cents == net
