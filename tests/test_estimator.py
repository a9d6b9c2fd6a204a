"""
Appliance cost estimator tests.

Marginal figures for a 500 kWh household with a 100 kWh appliance:
  with appliance    2255.67
  without (400 kWh) 1761.44
  difference         494.23
  + service share    24.62 * 1.07 * 100/500 = 5.26868 -> 499.50
"""
from decimal import Decimal

import pytest

from electric_bill_split.bill import compose_bill
from electric_bill_split.datatypes import ApplianceCost, BillSummary, Marginal, ProRata
from electric_bill_split.errors import DivisionByZeroError, InvalidRangeError
from electric_bill_split.estimator import (
    bill_without_appliance,
    estimate_appliance_cost,
    estimate_appliance_cost_marginal,
    estimate_appliance_cost_pro_rata,
    service_share,
)


class TestProRata:

    def test_sample(self):
        summary = BillSummary(total_kwh=500, pre_vat_amount=2000, vat_rate=Decimal('0.07'))
        est = estimate_appliance_cost_pro_rata(summary, 100)
        assert est.avg_rate == Decimal('4.00')
        assert est.ac_pre_vat == Decimal('400.00')
        assert est.ac_total == Decimal('428.00')

    def test_vat_defaults_to_seven_percent(self):
        summary = BillSummary(total_kwh=500, pre_vat_amount=2000)
        assert estimate_appliance_cost_pro_rata(summary, 100).ac_total == Decimal('428.00')

    def test_whole_usage_is_whole_bill(self):
        summary = BillSummary(total_kwh=500, pre_vat_amount='2108.10')
        assert estimate_appliance_cost_pro_rata(summary, 500).ac_total == Decimal('2255.67')

    def test_zero_total_usage(self):
        summary = BillSummary(total_kwh=0, pre_vat_amount=100)
        with pytest.raises(DivisionByZeroError):
            estimate_appliance_cost_pro_rata(summary, 0)

    def test_zero_total_is_also_a_zero_division(self):
        summary = BillSummary(total_kwh=0, pre_vat_amount=100)
        with pytest.raises(ZeroDivisionError):
            estimate_appliance_cost_pro_rata(summary, 0)

    @pytest.mark.parametrize('ac_kwh', [-1, 501])
    def test_out_of_range(self, ac_kwh):
        summary = BillSummary(total_kwh=500, pre_vat_amount=2000)
        with pytest.raises(InvalidRangeError):
            estimate_appliance_cost_pro_rata(summary, ac_kwh)

    def test_summary_validation(self):
        with pytest.raises(InvalidRangeError):
            BillSummary(total_kwh=500, pre_vat_amount=-1)
        with pytest.raises(InvalidRangeError):
            BillSummary(total_kwh=500, pre_vat_amount=100, vat_rate=2)


class TestMarginal:

    def test_difference_only(self, mea_tariff):
        assert estimate_appliance_cost_marginal(500, 100, mea_tariff, False) == Decimal('494.23')

    def test_with_service_share(self, mea_tariff):
        assert estimate_appliance_cost_marginal(500, 100, mea_tariff, True) == Decimal('499.50')

    def test_service_share_is_default(self, mea_tariff):
        assert estimate_appliance_cost_marginal(500, 100, mea_tariff) == Decimal('499.50')

    @pytest.mark.parametrize('total', [0, 120, 500, 900])
    @pytest.mark.parametrize('allocate', [True, False])
    def test_no_appliance_usage_costs_nothing(self, mea_tariff, total, allocate):
        assert estimate_appliance_cost_marginal(total, 0, mea_tariff, allocate, 0) == Decimal('0')

    @pytest.mark.parametrize('total', [120, 500, 900])
    def test_full_removal_with_service_share_is_whole_bill(self, mea_tariff, total):
        assert estimate_appliance_cost_marginal(total, total, mea_tariff, True, 0) == compose_bill(total, mea_tariff, 0).total

    @pytest.mark.parametrize('total', [120, 500, 900])
    def test_full_removal_without_service_share_leaves_fixed_part(self, mea_tariff, total):
        fixed = compose_bill(0, mea_tariff, 0).total
        expected = compose_bill(total, mea_tariff, 0).total - fixed
        assert estimate_appliance_cost_marginal(total, total, mea_tariff, False, 0) == expected

    def test_zero_total_skips_service_share(self, mea_tariff):
        assert service_share(mea_tariff, 0, 0) == Decimal('0')
        assert estimate_appliance_cost_marginal(0, 0, mea_tariff, True) == Decimal('0')

    def test_block_drop_costs_more_than_average(self, mea_tariff):
        # the last 100 kWh are billed at the top rate, above the bill's average
        summary = BillSummary(total_kwh=500, pre_vat_amount=compose_bill(500, mea_tariff).pre_vat)
        pro_rata = estimate_appliance_cost_pro_rata(summary, 100).ac_total
        marginal = estimate_appliance_cost_marginal(500, 100, mea_tariff, False)
        assert marginal > pro_rata

    def test_discount_applies_to_both_bills(self, mea_tariff):
        assert estimate_appliance_cost_marginal(500, 100, mea_tariff, False, 50) == Decimal('494.23')

    @pytest.mark.parametrize('ac_kwh', [-1, 501])
    def test_out_of_range(self, mea_tariff, ac_kwh):
        with pytest.raises(InvalidRangeError):
            estimate_appliance_cost_marginal(500, ac_kwh, mea_tariff)


class TestMethodDispatch:

    def test_marginal(self, mea_tariff):
        cost = estimate_appliance_cost(Marginal(tariff=mea_tariff), 500, 100)
        assert cost == ApplianceCost(method='marginal', amount=Decimal('499.50'))

    def test_marginal_without_service_share(self, mea_tariff):
        method = Marginal(tariff=mea_tariff, allocate_service_proportionally=False)
        assert estimate_appliance_cost(method, 500, 100).amount == Decimal('494.23')

    def test_pro_rata_keeps_detail(self):
        method = ProRata(bill=BillSummary(total_kwh=500, pre_vat_amount=2000))
        cost = estimate_appliance_cost(method, 500, 100)
        assert cost.method == 'pro-rata'
        assert cost.amount == Decimal('428.00')
        assert cost.detail.avg_rate == Decimal('4.00')

    def test_pro_rata_usage_must_match_summary(self):
        method = ProRata(bill=BillSummary(total_kwh=500, pre_vat_amount=2000))
        with pytest.raises(InvalidRangeError):
            estimate_appliance_cost(method, 400, 100)

    def test_unknown_method(self):
        with pytest.raises(TypeError):
            estimate_appliance_cost('marginal', 500, 100)


def test_bill_without_appliance(mea_tariff):
    total = compose_bill(500, mea_tariff).total
    ac_cost = estimate_appliance_cost_marginal(500, 100, mea_tariff)
    assert bill_without_appliance(total, ac_cost) == Decimal('1756.17')
