from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence

from .bill import round_money
from .datatypes import ApplianceCost, BillBreakdown, ShareRow, StepCharge, Tariff, to_decimal

CURRENCY = 'THB'


def format_number(value, min_decimals: int = 2, max_decimals: int = 4) -> str:
    """Thousands separators, at least `min_decimals` and at most `max_decimals` places"""
    value = value if isinstance(value, Decimal) else Decimal(str(value))
    if not value.is_finite():
        return '0'
    text = f'{value.quantize(Decimal(1).scaleb(-max_decimals), ROUND_HALF_UP):,.{max_decimals}f}'
    if max_decimals > min_decimals:
        whole, _, frac = text.partition('.')
        frac = frac.rstrip('0').ljust(min_decimals, '0')
        text = f'{whole}.{frac}' if frac else whole
    return text


def format_money(value, currency: str = CURRENCY) -> str:
    return f'{format_number(value, 2, 2)} {currency}'


def format_rate(value, currency: str = CURRENCY) -> str:
    return f'{format_number(value, 4, 4)} {currency}/kWh'


def format_percentage(value, min_decimals: int = 0, max_decimals: int = 0) -> str:
    """0.07 -> '7%'"""
    return format_number(to_decimal(value) * 100, min_decimals, max_decimals) + '%'


def format_period(bill_date: Optional[date]) -> str:
    if bill_date is None:
        return 'unspecified month'
    return bill_date.strftime('%B %Y')


def _line(label: str, value: str, width: int = 32) -> str:
    return f'{label:<{width}}{value:>22}'


def format_tariff_table(tariff: Tariff, blocks: Sequence[StepCharge], currency: str = CURRENCY) -> str:
    lines = [f'Tariff {tariff.name}']
    previous = Decimal(0)
    used = {b.upto: b for b in blocks}
    for step in tariff.steps:
        if step.upto is None:
            label = f'  over {format_number(previous, 0, 2)} kWh'
        else:
            label = f'  {format_number(previous, 0, 2)}-{format_number(step.upto, 0, 2)} kWh'
            previous = step.upto
        block = used.get(step.upto)
        kwh = block.kwh if block else Decimal(0)
        lines.append(_line(f'{label} @ {format_number(step.rate, 4, 4)}',
                           f'{format_number(kwh, 0, 2)} kWh'))
    lines.append(_line('  Ft', format_rate(tariff.ft_per_kwh, currency)))
    return '\n'.join(lines)


def format_bill_report(bill: BillBreakdown, tariff: Tariff, bill_date: Optional[date] = None,
                       currency: str = CURRENCY) -> str:
    lines = [
        f'=== ELECTRICITY BILL: {format_period(bill_date).upper()} ===',
        '',
        _line('Usage', f'{format_number(bill.kwh, 0, 2)} kWh'),
        _line('Energy charge', format_money(bill.energy, currency)),
        _line('Service charge', format_money(bill.service, currency)),
        _line(f'Ft ({format_number(tariff.ft_per_kwh, 4, 4)}/kWh)', format_money(bill.ft, currency)),
        _line('Total before VAT', format_money(bill.pre_vat, currency)),
        _line(f'VAT {format_percentage(tariff.vat_rate)}', format_money(bill.vat, currency)),
        _line('Total this month', format_money(bill.after_vat, currency)),
    ]
    if bill.discount > 0:
        lines.append(_line('Discount', '-' + format_money(bill.discount, currency)))
    lines.append(_line('Net total', format_money(bill.total, currency)))
    return '\n'.join(lines)


def format_appliance_report(cost: ApplianceCost, total_bill, without_appliance,
                            currency: str = CURRENCY) -> str:
    lines = [f'--- Appliance cost ({cost.method}) ---']
    if cost.detail is not None:
        lines.append(_line('Average rate (before VAT)', format_rate(cost.detail.avg_rate, currency)))
        lines.append(_line('Appliance before VAT', format_money(cost.detail.ac_pre_vat, currency)))
    lines.append(_line('Appliance cost', format_money(cost.amount, currency)))
    lines.append(_line('Bill without appliance', format_money(without_appliance, currency)))
    lines.append(_line('Total', format_money(total_bill, currency)))
    return '\n'.join(lines)


def format_split_report(rows: List[ShareRow], total, currency: str = CURRENCY) -> str:
    lines = ['--- Split ---']
    if not rows:
        lines.append('Select participants to split the bill')
    for row in rows:
        label = row.name + (' (appliance)' if row.appliance else '')
        lines.append(_line(label, format_money(row.amount, currency)))
    lines.append(_line('Total', format_money(round_money(to_decimal(total)), currency)))
    return '\n'.join(lines)
