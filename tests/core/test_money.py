from decimal import Decimal, InvalidOperation

import pytest

from src.shared.utils.money import format_money, round_money, to_decimal


class TestRoundMoney:
    """Half-up to paise; negatives round half toward zero."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (10.125, "10.13"),
            (10.124, "10.12"),
            (10.115, "10.12"),
            (Decimal("99.999"), "100.00"),
            ("33333.333", "33333.33"),
            ("0.001", "0.00"),
            (100, "100.00"),
            (-10.125, "-10.12"),
            (-10.126, "-10.13"),
        ],
    )
    def test_rounding(self, value, expected):
        assert round_money(value) == Decimal(expected)

    def test_always_two_places(self):
        assert str(round_money(10)) == "10.00"
        assert str(round_money(10.1)) == "10.10"


class TestToDecimal:
    def test_float_keeps_printed_value(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_rejects_none_and_bool(self):
        with pytest.raises(InvalidOperation):
            to_decimal(None)
        with pytest.raises(InvalidOperation):
            to_decimal(True)

    def test_rejects_text(self):
        with pytest.raises(InvalidOperation):
            to_decimal("abc")


class TestFormatMoney:
    """Tests for format_money function."""

    def test_rupee_grouping(self):
        assert format_money(Decimal("1234.5"), symbol="₹") == "₹1,234.50"
        assert format_money(1000000, symbol="₹") == "₹1,000,000.00"

    def test_negative(self):
        assert format_money(-700, symbol="₹") == "-₹700.00"

    def test_default_symbol_from_settings(self):
        assert format_money(0) == "₹0.00"

    def test_rounds_before_formatting(self):
        assert format_money("10.125", symbol="₹") == "₹10.13"
