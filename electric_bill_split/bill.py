import logging
from decimal import Decimal, ROUND_HALF_UP

from .datatypes import BillBreakdown, Money, Tariff, to_decimal
from .errors import InvalidRangeError
from .tariff import tiered_energy_charge

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def round_money(x) -> Money:
    """Round to cents, half away from zero (2.345 -> 2.35, -2.345 -> -2.35)"""
    return to_decimal(x).quantize(CENT, ROUND_HALF_UP)


def compose_bill(kwh, tariff: Tariff, discount=0) -> BillBreakdown:
    """
    Build the full bill for `kwh` units under `tariff`.

    energy + Ft + service charge gives the pre-VAT amount; VAT is added on top
    and the discount is taken off last. The total never goes below zero, so a
    discount larger than the bill just zeroes it.

    Every field is rounded once, from the unrounded intermediate values.
    """
    kwh = to_decimal(kwh, 'kwh')
    discount = to_decimal(discount, 'discount')
    if discount < 0:
        raise InvalidRangeError(f'Discount must not be negative, got {discount}')

    energy = tiered_energy_charge(kwh, tariff.steps)
    ft = tariff.ft_per_kwh * kwh
    pre_vat = energy + ft + tariff.service_charge
    vat = pre_vat * tariff.vat_rate
    after_vat = pre_vat + vat
    total = max(Decimal(0), after_vat - discount)

    bill = BillBreakdown(
        kwh=kwh,
        energy=round_money(energy),
        ft=round_money(ft),
        service=round_money(tariff.service_charge),
        pre_vat=round_money(pre_vat),
        vat=round_money(vat),
        after_vat=round_money(after_vat),
        discount=round_money(discount),
        total=round_money(total),
    )
    logger.debug(f'Bill for {kwh} kWh on {tariff.name}: total {bill.total}')
    return bill
