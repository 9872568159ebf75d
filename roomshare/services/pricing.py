from datetime import timedelta

from roomshare.errors import InvalidRateUnitError, ValidationError
from roomshare.services.time_range import TimeRange


class RateUnit:
    HOUR = 'hour'
    DAY = 'day'
    WEEK = 'week'

    ALL = (HOUR, DAY, WEEK)


UNIT_LENGTHS = {
    RateUnit.HOUR: timedelta(hours=1),
    RateUnit.DAY: timedelta(days=1),
    RateUnit.WEEK: timedelta(weeks=1),
}


def unit_length(rate_unit: str) -> timedelta:
    try:
        return UNIT_LENGTHS[rate_unit]
    except (KeyError, TypeError):
        raise InvalidRateUnitError(rate_unit)


def billable_units(rate_unit: str, time_range: TimeRange) -> int:
    """Partial units are billed as full units: 1h01 at an hourly rate is 2 hours."""
    whole, remainder = divmod(time_range.duration, unit_length(rate_unit))
    return whole + 1 if remainder else whole


def compute_price(rate_amount, rate_unit: str, time_range: TimeRange) -> float:
    if rate_amount is None or rate_amount < 0:
        raise ValidationError('Rate amount must be a non-negative number.', rate_amount=rate_amount)
    return billable_units(rate_unit, time_range) * rate_amount
