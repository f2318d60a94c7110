# services/marketplace-service/src/tests/unit/test_fees.py
"""
Unit Tests for the payment fee split
"""

from decimal import Decimal

import pytest

from apps.core.services import calculate_fees


class TestCalculateFees:

    def test_hundred_dollars(self):
        fees = calculate_fees(Decimal('100.00'))

        assert fees.total == 10000
        assert fees.stripe_fee == 320
        assert fees.platform_fee == 1500
        assert fees.business_payout == 8180

    def test_small_amount_rounds_half_up(self):
        fees = calculate_fees(Decimal('0.50'))

        assert fees.total == 50
        assert fees.stripe_fee == 31
        assert fees.platform_fee == 8
        assert fees.business_payout == 11

    def test_accepts_floats(self):
        assert calculate_fees(19.99).total == 1999

    def test_dollar_amounts(self):
        fees = calculate_fees(Decimal('100.00'))

        assert fees.total_dollars == Decimal('100')
        assert fees.stripe_fee_dollars == Decimal('3.2')
        assert fees.platform_fee_dollars == Decimal('15')
        assert fees.business_payout_dollars == Decimal('81.8')

    @pytest.mark.parametrize('amount', ['0.01', '1.00', '12.34', '45.55', '999.99'])
    def test_parts_sum_to_total(self, amount):
        fees = calculate_fees(Decimal(amount))

        assert fees.stripe_fee + fees.platform_fee + fees.business_payout == fees.total
