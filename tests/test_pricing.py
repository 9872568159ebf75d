import pytest
from datetime import datetime, timedelta
from roomshare.errors import InvalidRateUnitError, ValidationError, InvalidRangeError
from roomshare.services.booking_service import BookingService
from roomshare.services.pricing import billable_units, compute_price
from roomshare.services.time_range import TimeRange

START = datetime(2024, 1, 1, 10, 0)

def span(**kwargs):
    return TimeRange(START, START + timedelta(**kwargs))

def test_hourly_rate_rounds_partial_hours_up():
    # 10:00-11:30 at 20/hour
    assert BookingService.compute_price(20, 'hour', START, datetime(2024, 1, 1, 11, 30)) == 40

def test_one_minute_over_bills_a_full_unit():
    assert billable_units('hour', span(hours=1, minutes=1)) == 2
    assert billable_units('hour', span(hours=1)) == 1
    assert billable_units('hour', span(minutes=1)) == 1

def test_daily_and_weekly_rates():
    assert compute_price(100, 'day', span(days=2)) == 200
    assert compute_price(100, 'day', span(days=2, seconds=1)) == 300
    assert compute_price(500, 'week', span(days=6)) == 500
    assert compute_price(500, 'week', span(days=8)) == 1000

def test_free_room_costs_nothing():
    assert compute_price(0, 'hour', span(hours=5)) == 0

def test_unknown_unit_is_rejected():
    with pytest.raises(InvalidRateUnitError):
        compute_price(20, 'month', span(hours=1))
    with pytest.raises(InvalidRateUnitError):
        compute_price(20, None, span(hours=1))

def test_negative_amount_is_rejected():
    with pytest.raises(ValidationError):
        compute_price(-1, 'hour', span(hours=1))

def test_invalid_range_fails_before_pricing():
    with pytest.raises(InvalidRangeError):
        BookingService.compute_price(20, 'hour', START, START)

@pytest.mark.parametrize("unit", ['hour', 'day', 'week'])
def test_price_never_decreases_as_end_moves_later(unit):
    previous = 0
    for minutes in range(15, 60 * 24 * 9, 97):
        price = compute_price(7.5, unit, span(minutes=minutes))
        assert price >= previous
        previous = price
