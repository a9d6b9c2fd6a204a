from decimal import Decimal

import pytest

from electric_bill_split.datatypes import Tariff, TariffStep


@pytest.fixture()
def mea_tariff() -> Tariff:
    """Residential schedule for users over 150 kWh/month, as printed on the sample bill"""
    return Tariff(
        steps=[
            TariffStep(upto=150, rate=Decimal('3.2484')),
            TariffStep(upto=400, rate=Decimal('4.2218')),
            TariffStep(upto=None, rate=Decimal('4.4217')),
        ],
        ft_per_kwh=Decimal('0.1972'),
        service_charge=Decimal('24.62'),
        vat_rate=Decimal('0.07'),
        name='mea-test',
    )
