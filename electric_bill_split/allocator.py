import logging
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from .bill import round_money
from .datatypes import Money, ShareRow, to_decimal
from .errors import EmptyParticipantSetError, ParticipantError

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 3


def split_bill(total, ac_cost, participants: Sequence[str],
               appliance_user: Optional[str] = None) -> Dict[str, Money]:
    """
    Split `total` between `participants`.

    Everyone pays an even share of the bill minus the appliance cost; the
    appliance user pays that share plus the whole appliance cost. With no
    appliance user nobody is singled out and the whole total is shared evenly.

    Amounts are full precision; round with `allocate` when writing them out.
    """
    total = to_decimal(total, 'total')
    ac_cost = to_decimal(ac_cost, 'ac_cost')
    _check_participants(participants, appliance_user)

    # Rule A – appliance cost goes to its user, or stays in the pot
    if appliance_user is None:
        ac_cost = Decimal(0)

    # Rule B – everything else split evenly
    base_cost = total - ac_cost
    per_person = base_cost / Decimal(len(participants))

    owed = {}
    for name in participants:
        owed[name] = per_person + (ac_cost if name == appliance_user else Decimal(0))
    return owed


def allocate(total, ac_cost, participants: Sequence[str],
             appliance_user: Optional[str] = None) -> List[ShareRow]:
    """Split the bill and round each person's amount to cents, one row per participant"""
    total = to_decimal(total, 'total')
    owed = split_bill(total, ac_cost, participants, appliance_user)
    ac_cost = to_decimal(ac_cost, 'ac_cost') if appliance_user is not None else Decimal(0)

    rows = []
    for name, amount in owed.items():
        appliance = ac_cost if name == appliance_user else Decimal(0)
        rows.append(ShareRow(
            name=name,
            amount=round_money(amount),
            base=round_money(amount - appliance),
            appliance=round_money(appliance),
        ))

    # Validation: rounded rows should still add up to the bill
    allocated = sum((r.amount for r in rows), Decimal(0))
    tolerance = Decimal('0.01') * len(rows)
    if abs(allocated - total) > tolerance:
        logger.warning(
            f'Allocation mismatch: bill total {total}, allocated {allocated}, '
            f'difference {total - allocated}'
        )
    return rows


def add_participant(participants: Sequence[str], name: str,
                    min_length: int = MIN_NAME_LENGTH) -> List[str]:
    """Return a new participant list with `name` appended (trimmed)"""
    name = (name or '').strip()
    if name == '':
        raise ParticipantError('Participant name is required')
    if len(name) < min_length:
        raise ParticipantError(f'Participant name must be at least {min_length} characters')
    if name in participants:
        raise ParticipantError(f'Participant {name!r} already exists')
    return [*participants, name]


# -------------------- helpers --------------------

def _check_participants(participants, appliance_user):
    if not participants:
        raise EmptyParticipantSetError('Select at least one participant to split the bill')

    seen = set()
    for name in participants:
        if name in seen:
            raise ParticipantError(f'Participant {name!r} is listed twice')
        seen.add(name)

    if appliance_user is not None and appliance_user not in seen:
        raise ParticipantError(f'Appliance user {appliance_user!r} is not one of the participants')
