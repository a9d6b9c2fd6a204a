"""
Tiered (block) energy charge.

Each kWh is billed at the rate of the block it falls into: the first
`upto` units at the first rate, the next units up to the second cap at the
second rate, and so on. This is true marginal-block pricing, not an average
rate applied to the whole usage.
"""
import logging
from decimal import Decimal
from typing import List, Sequence

from .datatypes import StepCharge, TariffStep, to_decimal
from .errors import InvalidRangeError

logger = logging.getLogger(__name__)


def step_usage(kwh, steps: Sequence[TariffStep]) -> List[StepCharge]:
    """
    Split `kwh` across the tariff blocks.

    Returns one StepCharge per block that received usage, in tariff order.
    Charges are left unrounded so that callers can sum them exactly.
    """
    kwh = to_decimal(kwh, 'kwh')
    if kwh < 0:
        raise InvalidRangeError(f'Usage must not be negative, got {kwh}')

    remaining = kwh
    previous_cap = Decimal(0)
    out = []
    for step in steps:
        if remaining <= 0:
            break
        if step.upto is None:
            quantity = remaining
        else:
            quantity = max(Decimal(0), min(remaining, step.upto - previous_cap))
            previous_cap = step.upto
        out.append(StepCharge(upto=step.upto, rate=step.rate, kwh=quantity, charge=quantity * step.rate))
        remaining -= quantity

    if remaining > 0:
        # last block is capped and usage runs past it
        raise InvalidRangeError(f'Usage {kwh} kWh is beyond the last tariff step ({previous_cap} kWh)')

    return out


def tiered_energy_charge(kwh, steps: Sequence[TariffStep]) -> Decimal:
    """Energy charge for `kwh` under the ordered `steps`, unrounded"""
    blocks = step_usage(kwh, steps)
    total = sum((b.charge for b in blocks), Decimal(0))
    logger.debug(f'Energy charge for {kwh} kWh over {len(blocks)} block(s): {total}')
    return total
