"""
How much of the bill one appliance is responsible for.

Two methods, chosen by the caller:

* pro-rata: spread the known pre-VAT amount evenly over every kWh and charge
  the appliance its kWh at that average rate. Simple, and usable when only the
  bill totals are known, but blind to block pricing.
* marginal: compose the bill with and without the appliance's kWh and take the
  difference. Removing the appliance may drop the household into a cheaper
  block, which this captures.

The service charge is in both bills of the marginal method and cancels out,
so by default the appliance also picks up its usage share of it.
"""
import logging
from decimal import Decimal

from .bill import compose_bill, round_money
from .datatypes import (
    ApplianceCost,
    ApplianceMethod,
    BillSummary,
    Marginal,
    Money,
    ProRata,
    ProRataEstimate,
    Tariff,
    to_decimal,
)
from .errors import DivisionByZeroError, InvalidRangeError

logger = logging.getLogger(__name__)


def _check_range(total_kwh: Decimal, ac_kwh: Decimal) -> None:
    if ac_kwh < 0 or ac_kwh > total_kwh:
        raise InvalidRangeError(
            f'Appliance usage must be between 0 and the total usage ({total_kwh} kWh), got {ac_kwh}'
        )


def estimate_appliance_cost_pro_rata(bill: BillSummary, ac_kwh) -> ProRataEstimate:
    ac_kwh = to_decimal(ac_kwh, 'ac_kwh')
    if bill.total_kwh <= 0:
        raise DivisionByZeroError('Total usage must be greater than 0 to compute an average rate')
    _check_range(bill.total_kwh, ac_kwh)

    avg_rate = bill.pre_vat_amount / bill.total_kwh
    ac_pre_vat = ac_kwh * avg_rate
    ac_total = ac_pre_vat * (1 + bill.vat_rate)
    logger.debug(f'Pro-rata: {ac_kwh}/{bill.total_kwh} kWh at {avg_rate}/kWh -> {ac_total}')
    return ProRataEstimate(
        avg_rate=round_money(avg_rate),
        ac_pre_vat=round_money(ac_pre_vat),
        ac_total=round_money(ac_total),
    )


def service_share(tariff: Tariff, total_kwh, ac_kwh) -> Decimal:
    """Appliance's usage share of the service charge, VAT included, unrounded"""
    total_kwh = to_decimal(total_kwh, 'total_kwh')
    if total_kwh <= 0:
        return Decimal(0)
    return tariff.service_charge * (1 + tariff.vat_rate) * (to_decimal(ac_kwh, 'ac_kwh') / total_kwh)


def estimate_appliance_cost_marginal(total_kwh, ac_kwh, tariff: Tariff,
                                     allocate_service_proportionally: bool = True,
                                     discount=0) -> Money:
    total_kwh = to_decimal(total_kwh, 'total_kwh')
    ac_kwh = to_decimal(ac_kwh, 'ac_kwh')
    _check_range(total_kwh, ac_kwh)

    with_ac = compose_bill(total_kwh, tariff, discount).total
    without_ac = compose_bill(total_kwh - ac_kwh, tariff, discount).total
    ac_cost = with_ac - without_ac
    if allocate_service_proportionally:
        ac_cost += service_share(tariff, total_kwh, ac_kwh)

    logger.debug(f'Marginal: {with_ac} with vs {without_ac} without {ac_kwh} kWh -> {ac_cost}')
    return round_money(ac_cost)


def estimate_appliance_cost(method: ApplianceMethod, total_kwh, ac_kwh) -> ApplianceCost:
    """Run whichever estimator `method` selects"""
    if isinstance(method, ProRata):
        # the summary carries its own usage figure; keep the two in step
        if to_decimal(total_kwh, 'total_kwh') != method.bill.total_kwh:
            raise InvalidRangeError(
                f'Total usage {total_kwh} does not match the bill summary ({method.bill.total_kwh} kWh)'
            )
        detail = estimate_appliance_cost_pro_rata(method.bill, ac_kwh)
        return ApplianceCost(method='pro-rata', amount=detail.ac_total, detail=detail)
    if isinstance(method, Marginal):
        amount = estimate_appliance_cost_marginal(
            total_kwh, ac_kwh, method.tariff,
            allocate_service_proportionally=method.allocate_service_proportionally,
            discount=method.discount,
        )
        return ApplianceCost(method='marginal', amount=amount)
    raise TypeError(f'Unknown appliance cost method: {method!r}')


def bill_without_appliance(total_bill, ac_cost) -> Money:
    """What the household would pay without the appliance: the same base the split uses"""
    return round_money(to_decimal(total_bill, 'total_bill') - to_decimal(ac_cost, 'ac_cost'))
