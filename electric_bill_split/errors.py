"""
Errors raised by the billing engine.

Every error is a local validation failure raised where the bad input is
noticed. Nothing in the engine recovers from them; the presentation layer
catches `BillingError` and shows a corrective message instead of a result.
"""


class BillingError(ValueError):
    """Base class for all billing engine failures"""


class InvalidRangeError(BillingError):
    """A usage or money input is outside its allowed range"""


class DivisionByZeroError(BillingError, ZeroDivisionError):
    """Average rate requested for a bill with no usage"""


class EmptyParticipantSetError(BillingError):
    """Split requested with nobody to split between"""


class ParticipantError(BillingError):
    """Bad participant name, duplicate, or unknown appliance user"""


class TariffConfigError(BillingError):
    """Tariff schedule failed validation"""
