"""Tests for cv_common.money — integer minor-unit arithmetic."""

from decimal import Decimal

import pytest

from src.cv_common.money import cents_to_display, percentage_of


class TestCentsToDisplay:
    def test_basic(self) -> None:
        assert cents_to_display(6500) == "NGN 65.00"

    def test_thousands_separator(self) -> None:
        assert cents_to_display(123456789, "NGN") == "NGN 1,234,567.89"

    def test_negative(self) -> None:
        assert cents_to_display(-1200, "USD") == "-USD 12.00"

    def test_zero(self) -> None:
        assert cents_to_display(0) == "NGN 0.00"


class TestPercentageOf:
    def test_five_percent(self) -> None:
        assert percentage_of(100_000, 5) == 5_000

    @pytest.mark.parametrize(
        ("amount", "pct", "expected"),
        [(150, 5, 8), (130, 5, 7), (1, 50, 1), (999, Decimal("2.5"), 25)],
    )
    def test_rounds_half_up(self, amount: int, pct, expected: int) -> None:
        assert percentage_of(amount, pct) == expected

    def test_float_percentage_is_exact(self) -> None:
        assert percentage_of(1000, 0.1) == 1

    def test_zero_short_circuits(self) -> None:
        assert percentage_of(0, 5) == 0
        assert percentage_of(500, 0) == 0
