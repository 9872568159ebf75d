import pytest
from datetime import datetime, timedelta, timezone
from roomshare.errors import InvalidRangeError
from roomshare.services.time_range import TimeRange

BASE = datetime(2024, 1, 1, 10, 0)

def hours(a, b):
    return TimeRange(BASE + timedelta(hours=a), BASE + timedelta(hours=b))

def three_clause_overlap(candidate, existing):
    """The three boundary cases a document-store query would spell out."""
    starts_inside = existing.start <= candidate.start and existing.end > candidate.start
    ends_inside = existing.start < candidate.end and existing.end >= candidate.end
    contained = existing.start >= candidate.start and existing.end <= candidate.end
    return starts_inside or ends_inside or contained

def test_end_must_be_after_start():
    with pytest.raises(InvalidRangeError):
        TimeRange(BASE, BASE)
    with pytest.raises(InvalidRangeError):
        TimeRange(BASE, BASE - timedelta(minutes=1))

def test_naive_and_aware_inputs_are_utc():
    naive = TimeRange(BASE, BASE + timedelta(hours=1))
    aware = TimeRange(BASE.replace(tzinfo=timezone.utc), BASE.replace(tzinfo=timezone.utc) + timedelta(hours=1))
    assert naive == aware
    shifted = TimeRange(datetime(2024, 1, 1, 11, 0, tzinfo=timezone(timedelta(hours=1))),
                        datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=1))))
    assert shifted == naive

def test_duration():
    assert hours(0, 1.5).duration == timedelta(minutes=90)

def test_touching_ranges_do_not_overlap():
    # [10:00, 12:00) and [12:00, 13:00)
    assert not hours(0, 2).overlaps(hours(2, 3))
    assert not hours(2, 3).overlaps(hours(0, 2))

@pytest.mark.parametrize("a, b", [
    ((0, 2), (1, 3)),   # other ends inside
    ((1, 3), (0, 2)),   # other starts inside
    ((0, 4), (1, 2)),   # contains the other
    ((1, 2), (0, 4)),   # contained in the other
    ((0, 2), (0, 2)),   # identical
])
def test_overlap_is_symmetric(a, b):
    assert hours(*a).overlaps(hours(*b))
    assert hours(*b).overlaps(hours(*a))

def test_single_rule_agrees_with_three_clause_form():
    points = range(0, 5)
    ranges = [hours(s, e) for s in points for e in points if e > s]
    for candidate in ranges:
        for existing in ranges:
            assert candidate.overlaps(existing) == three_clause_overlap(candidate, existing), (candidate, existing)
