import pytest
from datetime import date

from shiftboard.services.scheduling.conflicts import (
    find_blocked_entry,
    find_duplicate_shift,
    find_overlapping_shifts,
    has_approved_time_off,
    has_blocked_entry,
    overlaps,
)
from shiftboard.services.scheduling.types import Shift, TimeOffRequest, TimeOffStatus

MONDAY = date(2024, 6, 3)


class TestOverlaps:
    def test_no_overlap(self):
        assert overlaps(8, 10, 12, 14) is False

    def test_touching_endpoints_do_not_overlap(self):
        assert overlaps(9, 17, 17, 20) is False
        assert overlaps(17, 20, 9, 17) is False

    def test_partial_overlap(self):
        assert overlaps(9, 17, 16, 18) is True

    def test_containment(self):
        assert overlaps(9, 17, 10, 11) is True

    @pytest.mark.parametrize("a,b", [((9, 17), (16, 18)), ((9, 12), (12, 15)), ((6, 7), (20, 22))])
    def test_symmetric(self, a, b):
        assert overlaps(*a, *b) == overlaps(*b, *a)

    def test_reflexive(self):
        assert overlaps(9, 17, 9, 17) is True


class TestFindOverlappingShifts:
    def test_reports_every_conflicting_shift(self, split_day):
        found = find_overlapping_shifts(1, MONDAY, 16, 18, split_day)
        assert sorted(s.id for s in found) == [11, 12]

    def test_adjacent_slot_is_free(self, split_day):
        assert find_overlapping_shifts(1, MONDAY, 20, 22, split_day) == []

    def test_other_employee_or_date_ignored(self, split_day):
        assert find_overlapping_shifts(2, MONDAY, 10, 12, split_day) == []
        assert find_overlapping_shifts(1, date(2024, 6, 4), 10, 12, split_day) == []

    def test_excludes_the_shift_being_edited(self, split_day):
        found = find_overlapping_shifts(1, MONDAY, 10, 16, split_day, exclude_shift_id=11)
        assert found == []

    def test_blocked_entries_are_not_overlaps(self, blocked_wednesday):
        assert find_overlapping_shifts(1, date(2024, 6, 5), 9, 17, [blocked_wednesday]) == []


class TestDuplicates:
    def test_exact_match_is_duplicate(self, split_day):
        assert find_duplicate_shift(1, MONDAY, 9, 17, split_day).id == 11

    def test_partial_match_is_not_duplicate(self, split_day):
        assert find_duplicate_shift(1, MONDAY, 9, 16, split_day) is None


class TestTimeOff:
    def test_covers_inclusive_range(self, approved_time_off):
        assert has_approved_time_off(2, date(2024, 6, 4), [approved_time_off]) is True
        assert has_approved_time_off(2, date(2024, 6, 6), [approved_time_off]) is True
        assert has_approved_time_off(2, date(2024, 6, 7), [approved_time_off]) is False

    def test_other_employee_not_affected(self, approved_time_off):
        assert has_approved_time_off(1, date(2024, 6, 5), [approved_time_off]) is False

    @pytest.mark.parametrize("status", [TimeOffStatus.PENDING, TimeOffStatus.DENIED, TimeOffStatus.CANCELLED])
    def test_only_approved_counts(self, status):
        request = TimeOffRequest(
            id=1, organization_id=1, employee_id=2,
            start_date=MONDAY, end_date=MONDAY, status=status,
        )
        assert has_approved_time_off(2, MONDAY, [request]) is False


class TestBlockedEntries:
    def test_found_on_its_date(self, blocked_wednesday):
        assert has_blocked_entry(1, date(2024, 6, 5), [blocked_wednesday]) is True
        assert find_blocked_entry(1, date(2024, 6, 5), [blocked_wednesday]).blackout_reason == "Wine training"

    def test_regular_shift_is_not_a_block(self, split_day):
        assert has_blocked_entry(1, MONDAY, split_day) is False

    def test_other_date(self, blocked_wednesday):
        assert has_blocked_entry(1, date(2024, 6, 6), [blocked_wednesday]) is False


class TestShiftType:
    def test_clock_properties(self):
        shift = Shift(organization_id=1, employee_id=1, shift_date=MONDAY, start_hour=9.5, end_hour=17)
        assert shift.start_time == "09:30:00"
        assert shift.end_time == "17:00:00"
        assert shift.duration_hours == 7.5
        assert shift.blackout_reason is None
