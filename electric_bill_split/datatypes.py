from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Sequence, Union

from .errors import InvalidRangeError, TariffConfigError

Money = Decimal       # keep full precision, round at write time

DEFAULT_VAT_RATE = Decimal('0.07')


def to_decimal(value, what: str = 'value') -> Decimal:
    """Convert user/config numbers to Decimal without float noise (0.1972 stays 0.1972)"""
    if isinstance(value, bool) or value is None:
        raise InvalidRangeError(f'{what} must be a number, got {value!r}')
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError) as e:
            raise InvalidRangeError(f'{what} must be a number, got {value!r}') from e
    # NaN and infinity can't be compared or rounded to cents
    if not result.is_finite():
        raise InvalidRangeError(f'{what} must be a finite number, got {value!r}')
    return result


@dataclass(frozen=True)
class TariffStep:
    upto: Optional[Decimal]      # cap in kWh, None = unbounded
    rate: Decimal                # currency per kWh (energy only)

    def __post_init__(self):
        if self.upto is not None:
            object.__setattr__(self, 'upto', to_decimal(self.upto, 'step cap'))
        object.__setattr__(self, 'rate', to_decimal(self.rate, 'step rate'))


@dataclass(frozen=True)
class Tariff:
    steps: Sequence[TariffStep]          # ordered low -> high
    ft_per_kwh: Decimal                  # Ft surcharge per kWh for the cycle
    service_charge: Decimal              # fixed monthly fee
    vat_rate: Decimal = DEFAULT_VAT_RATE
    name: str = 'custom'

    def __post_init__(self):
        steps = [s if isinstance(s, TariffStep) else TariffStep(**s) for s in self.steps]
        object.__setattr__(self, 'steps', tuple(steps))
        object.__setattr__(self, 'ft_per_kwh', to_decimal(self.ft_per_kwh, 'ft_per_kwh'))
        object.__setattr__(self, 'service_charge', to_decimal(self.service_charge, 'service_charge'))
        vat = DEFAULT_VAT_RATE if self.vat_rate is None else to_decimal(self.vat_rate, 'vat_rate')
        object.__setattr__(self, 'vat_rate', vat)
        _validate_tariff(self)

    @property
    def unbounded(self) -> bool:
        return self.steps[-1].upto is None


def _validate_tariff(tariff: Tariff) -> None:
    if not tariff.steps:
        raise TariffConfigError(f'Tariff {tariff.name!r} has no steps')

    previous_cap = Decimal(0)
    for i, step in enumerate(tariff.steps):
        if step.rate < 0:
            raise TariffConfigError(f'Step {i + 1} of {tariff.name!r} has a negative rate')
        if step.upto is None:
            if i != len(tariff.steps) - 1:
                raise TariffConfigError(f'Only the last step of {tariff.name!r} may be unbounded')
            continue
        if step.upto <= previous_cap:
            raise TariffConfigError(
                f'Step caps of {tariff.name!r} must be strictly ascending '
                f'(step {i + 1}: {step.upto} after {previous_cap})'
            )
        previous_cap = step.upto

    if tariff.ft_per_kwh < 0:
        raise TariffConfigError('ft_per_kwh must not be negative')
    if tariff.service_charge < 0:
        raise TariffConfigError('service_charge must not be negative')
    if not 0 <= tariff.vat_rate <= 1:
        raise TariffConfigError('vat_rate must be between 0 and 1')


@dataclass(frozen=True)
class StepCharge:
    upto: Optional[Decimal]
    rate: Decimal
    kwh: Decimal                 # usage that fell into this block
    charge: Decimal              # kwh * rate, unrounded


@dataclass(frozen=True)
class BillBreakdown:
    kwh: Decimal
    energy: Money
    ft: Money
    service: Money
    pre_vat: Money
    vat: Money
    after_vat: Money
    discount: Money
    total: Money


@dataclass(frozen=True)
class BillSummary:
    """An already known bill, used when the tariff detail isn't modelled"""
    total_kwh: Decimal
    pre_vat_amount: Money
    vat_rate: Decimal = DEFAULT_VAT_RATE

    def __post_init__(self):
        object.__setattr__(self, 'total_kwh', to_decimal(self.total_kwh, 'total_kwh'))
        object.__setattr__(self, 'pre_vat_amount', to_decimal(self.pre_vat_amount, 'pre_vat_amount'))
        vat = DEFAULT_VAT_RATE if self.vat_rate is None else to_decimal(self.vat_rate, 'vat_rate')
        object.__setattr__(self, 'vat_rate', vat)
        if self.pre_vat_amount < 0:
            raise InvalidRangeError('pre_vat_amount must not be negative')
        if not 0 <= self.vat_rate <= 1:
            raise InvalidRangeError('vat_rate must be between 0 and 1')


@dataclass(frozen=True)
class ProRataEstimate:
    avg_rate: Money              # pre-VAT currency per kWh
    ac_pre_vat: Money
    ac_total: Money


# Appliance cost methods, picked by the caller
@dataclass(frozen=True)
class ProRata:
    bill: BillSummary


@dataclass(frozen=True)
class Marginal:
    tariff: Tariff
    allocate_service_proportionally: bool = True
    discount: Money = Money(0)


ApplianceMethod = Union[ProRata, Marginal]


@dataclass(frozen=True)
class ApplianceCost:
    method: str                  # "pro-rata" | "marginal"
    amount: Money                # VAT included, rounded
    detail: Optional[ProRataEstimate] = None


@dataclass
class ShareRow:
    name: str
    amount: Money                # what this person owes
    base: Money = Money(0)       # even share of the non-appliance part
    appliance: Money = Money(0)  # appliance cost carried by this person


@dataclass
class Household:
    participants: List[str] = field(default_factory=list)
    appliance_user: Optional[str] = None
    currency: str = 'THB'
