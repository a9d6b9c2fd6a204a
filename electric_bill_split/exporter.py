import logging
import pandas as pd
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional

from .datatypes import ShareRow

logger = logging.getLogger(__name__)

# Column order of the exported split table
COLUMNS = [
    'Period',
    'Name',
    'Base Share',
    'Appliance Share',
    'Amount',
]


def write_split_csv(csv_path: Path, rows: List[ShareRow], period: str = '') -> None:
    """Write the split table to CSV, replacing any existing file"""
    logger.info(f'Writing {len(rows)} split rows to {csv_path}')
    df = pd.DataFrame([_row_to_dict(row, period) for row in rows], columns=COLUMNS)
    df.to_csv(csv_path, index=False)


def read_split_csv(csv_path: Path) -> List[ShareRow]:
    """Read an exported split table back into ShareRow objects"""
    if not csv_path.exists():
        logger.info(f'Split file {csv_path} does not exist, returning no rows')
        return []

    # keep amounts as text so Decimal sees exactly what was written
    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    logger.debug(f'Read {len(df)} rows from {csv_path}')
    return [
        ShareRow(
            name=row['Name'],
            amount=_parse_money(row['Amount']),
            base=_parse_money(row['Base Share']),
            appliance=_parse_money(row['Appliance Share']),
        )
        for _, row in df.iterrows()
    ]


def _row_to_dict(row: ShareRow, period: str) -> dict:
    return {
        'Period': period,
        'Name': row.name,
        'Base Share': _format_money(row.base),
        'Appliance Share': _format_money(row.appliance),
        'Amount': _format_money(row.amount),
    }


def _format_money(amount) -> str:
    return f'{amount:.2f}'


def _parse_money(money_str: Optional[str]) -> Decimal:
    clean_str = (money_str or '').replace(',', '').strip()
    if clean_str == '':
        return Decimal('0')
    try:
        return Decimal(clean_str)
    except InvalidOperation:
        logger.warning(f'Could not parse money amount: {money_str}')
        return Decimal('0')
