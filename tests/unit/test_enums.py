"""Tests for cv_common.enums — values must match DB CHECK constraints."""

from src.cv_common.enums import (
    ContestantStatus,
    NotificationType,
    PaymentStatus,
    RejectReason,
    UserRole,
    VotingType,
)


class TestAllEnumsAreStr:
    def test_voting_type(self) -> None:
        assert isinstance(VotingType.FREE, str)
        assert VotingType.PAID == "PAID"

    def test_payment_status(self) -> None:
        assert [s.value for s in PaymentStatus] == ["PENDING", "COMPLETED", "FAILED"]

    def test_contestant_status(self) -> None:
        assert {s.value for s in ContestantStatus} == {"ACTIVE", "DISQUALIFIED", "WITHDRAWN"}

    def test_roles(self) -> None:
        assert {r.value for r in UserRole} == {"USER", "ADMIN"}

    def test_notification_types(self) -> None:
        assert {t.value for t in NotificationType} == {"VOTE_CAST", "VOTE_PURCHASED"}


class TestRejectReason:
    def test_values_equal_names(self) -> None:
        for reason in RejectReason:
            assert reason.value == reason.name

    def test_reason_count(self) -> None:
        assert len(RejectReason) == 13
