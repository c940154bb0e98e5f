"""
Test suite for currency module

Tests Money class and proper Decimal handling.
All monetary calculations must use Decimal precision.
"""

import pytest
from decimal import Decimal

from bank_ledger.currency import (
    Money, Currency, decimal_from_string, currency_from_code
)


class TestMoney:
    """Test Money class operations"""

    def test_money_creation(self):
        """Test Money object creation and rounding"""
        money = Money(Decimal('100.50'), Currency.INR)
        assert money.amount == Decimal('100.50')
        assert money.currency == Currency.INR

        # Rounded to currency precision
        money_rounded = Money(Decimal('100.555'), Currency.INR)
        assert money_rounded.amount == Decimal('100.56')

    def test_non_decimal_amount_is_converted(self):
        """Ints and strings are converted to Decimal"""
        assert Money(500, Currency.INR).amount == Decimal('500.00')
        assert Money("12.345", Currency.INR).amount == Decimal('12.35')

    def test_money_arithmetic(self):
        """Test Money arithmetic operations"""
        money1 = Money(Decimal('100.50'), Currency.INR)
        money2 = Money(Decimal('50.25'), Currency.INR)

        assert (money1 + money2).amount == Decimal('150.75')
        assert (money1 - money2).amount == Decimal('50.25')
        assert (-money1).amount == Decimal('-100.50')

    def test_money_comparison(self):
        """Test Money comparison operations"""
        money1 = Money(Decimal('100.00'), Currency.INR)
        money2 = Money(Decimal('50.00'), Currency.INR)
        money3 = Money(Decimal('100.00'), Currency.INR)

        assert money1 == money3
        assert money1 != money2
        assert money1 > money2
        assert money2 < money1
        assert money1 >= money3
        assert money1 <= money3
        assert money1 != Decimal('100.00')

    def test_money_currency_mismatch(self):
        """Test that operations with different currencies raise errors"""
        inr_money = Money(Decimal('100.00'), Currency.INR)
        usd_money = Money(Decimal('100.00'), Currency.USD)

        with pytest.raises(ValueError, match="Cannot add INR and USD"):
            inr_money + usd_money

        with pytest.raises(ValueError, match="Cannot subtract INR and USD"):
            inr_money - usd_money

        with pytest.raises(ValueError, match="Cannot compare INR and USD"):
            inr_money < usd_money

    def test_money_state_checks(self):
        """Test Money state checking methods"""
        zero_money = Money.zero(Currency.INR)
        positive_money = Money(Decimal('100.50'), Currency.INR)
        negative_money = Money(Decimal('-50.25'), Currency.INR)

        assert zero_money.is_zero()
        assert not positive_money.is_zero()

        assert positive_money.is_positive()
        assert not zero_money.is_positive()

        assert negative_money.is_negative()
        assert not zero_money.is_negative()

    def test_money_string_formatting(self):
        """Test Money string representations"""
        money = Money(Decimal('1234567.8'), Currency.INR)
        assert money.to_string() == "Rs1,234,567.80"
        assert money.to_plain_string() == "1234567.80"


class TestCurrencyHelpers:
    """Test string parsing helpers"""

    def test_decimal_from_string(self):
        assert decimal_from_string("600") == Decimal('600')
        assert decimal_from_string(" Rs1,000.50 ") == Decimal('1000.50')
        assert decimal_from_string("-25.5") == Decimal('-25.5')
        assert decimal_from_string("$12") == Decimal('12')
        assert decimal_from_string("INR 750") == Decimal('750')
        assert decimal_from_string(".5") == Decimal('0.5')

    @pytest.mark.parametrize("value", ["", "abc", "1.2.3", "-", "1e3", "12abc", "5E3", "NaN", "Infinity", "Rs"])
    def test_decimal_from_string_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            decimal_from_string(value)

    def test_currency_from_code(self):
        assert currency_from_code("inr") == Currency.INR
        assert currency_from_code(" USD ") == Currency.USD

        with pytest.raises(ValueError, match="Unsupported currency code"):
            currency_from_code("XYZ")

    def test_only_ledger_currencies_supported(self):
        assert [c.code for c in Currency] == ["INR", "USD"]

        with pytest.raises(ValueError, match="Unsupported currency code"):
            currency_from_code("JPY")
