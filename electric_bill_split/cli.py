'''
To Run:
python -m electric_bill_split.cli --kwh 500 --appliance-kwh 100 -p Ohm -p Freshy -p Kathin --appliance-user Freshy
'''
import click
import logging
from datetime import date, datetime
from pathlib import Path

from electric_bill_split import allocator, config, estimator, exporter, report
from electric_bill_split.bill import compose_bill
from electric_bill_split.datatypes import BillSummary, Marginal, ProRata, to_decimal
from electric_bill_split.errors import BillingError
from electric_bill_split.tariff import step_usage

# Set up logging
logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


def _parse_month(value):
    if value is None:
        return date.today().replace(day=1)
    try:
        month = datetime.strptime(value, '%Y-%m').date()
    except ValueError:
        raise click.BadParameter(f'expected YYYY-MM, got {value!r}', param_hint='--month')
    if month > date.today():
        raise click.BadParameter('bill month cannot be in the future', param_hint='--month')
    return month


@click.command()
@click.option('--kwh', type=click.FloatRange(min=0, min_open=True), required=True, help='Total household usage (kWh)')
@click.option('--appliance-kwh', type=click.FloatRange(min=0), default=0.0, show_default=True, help='Usage of the appliance (kWh)')
@click.option('--discount', type=click.FloatRange(min=0), default=0.0, show_default=True, help='Discount taken off the final bill')
@click.option('--method', type=click.Choice(['marginal', 'pro-rata']), default='marginal', show_default=True, help='How to price the appliance usage')
@click.option('--pre-vat-amount', type=click.FloatRange(min=0), help='Pre-VAT amount from the printed bill (pro-rata only)')
@click.option('--vat-rate', type=click.FloatRange(0, 1), help='VAT rate for pro-rata, defaults to the tariff VAT')
@click.option('--no-service-share', is_flag=True, help='Do not charge the appliance a share of the service charge')
@click.option('-p', '--participant', 'participants', multiple=True, help='Person sharing the bill (repeatable)')
@click.option('--appliance-user', help='Participant who pays for the appliance')
@click.option('--month', help='Bill month as YYYY-MM (default: current month)')
@click.option('--tariff', 'tariff_path', type=click.Path(exists=True, dir_okay=False, path_type=Path), help='Tariff YAML to use instead of the built-in one')
@click.option('--household', 'household_path', type=click.Path(exists=True, dir_okay=False, path_type=Path), help='Household YAML with default participants')
@click.option('--csv', 'csv_path', type=click.Path(dir_okay=False, path_type=Path), help='Also write the split table to this CSV file')
def main(kwh, appliance_kwh, discount, method, pre_vat_amount, vat_rate, no_service_share,
         participants, appliance_user, month, tariff_path, household_path, csv_path):
    """
    Work out the electricity bill and split it between participants.

    This command will:
    1. Compose the bill from the usage and the configured tariff
    2. Estimate the appliance's share of it
    3. Split the rest evenly, adding the appliance cost to its user
    """
    bill_month = _parse_month(month)
    try:
        tariff = config.load_tariff(tariff_path)
        household = config.load_household(household_path)

        # CLI participants replace the household defaults; any non-blank unique name will do
        if participants:
            names = []
            for name in participants:
                names = allocator.add_participant(names, name, min_length=1)
        else:
            names = list(household.participants)
            if appliance_user is None:
                appliance_user = household.appliance_user

        kwh = to_decimal(kwh, 'kwh')
        appliance_kwh = to_decimal(appliance_kwh, 'appliance kwh')
        discount = to_decimal(discount, 'discount')

        # Step 1: the bill
        bill = compose_bill(kwh, tariff, discount)
        click.echo(report.format_bill_report(bill, tariff, bill_month, household.currency))
        click.echo(report.format_tariff_table(tariff, step_usage(kwh, tariff.steps), household.currency))

        # Step 2: the appliance
        if method == 'pro-rata':
            if pre_vat_amount is None:
                raise click.UsageError('--pre-vat-amount is required for the pro-rata method')
            summary = BillSummary(
                total_kwh=kwh,
                pre_vat_amount=to_decimal(pre_vat_amount, 'pre-VAT amount'),
                vat_rate=tariff.vat_rate if vat_rate is None else to_decimal(vat_rate, 'VAT rate'),
            )
            selected = ProRata(bill=summary)
        else:
            selected = Marginal(tariff=tariff, allocate_service_proportionally=not no_service_share,
                                discount=discount)
        cost = estimator.estimate_appliance_cost(selected, kwh, appliance_kwh)
        without = estimator.bill_without_appliance(bill.total, cost.amount)
        click.echo('\n' + report.format_appliance_report(cost, bill.total, without, household.currency))

        # Step 3: the split
        if not names:
            click.echo('\n' + report.format_split_report([], bill.total, household.currency))
            return
        rows = allocator.allocate(bill.total, cost.amount, names, appliance_user)
        click.echo('\n' + report.format_split_report(rows, bill.total, household.currency))
    except BillingError as e:
        logger.debug(f'Calculation failed: {e!r}')
        raise click.ClickException(str(e))

    if csv_path is not None:
        exporter.write_split_csv(csv_path, rows, report.format_period(bill_month))
        click.echo(f'✔ Split written to {csv_path}')


if __name__ == '__main__':
    main()
