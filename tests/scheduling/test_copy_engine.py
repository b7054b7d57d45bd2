import pytest
from datetime import date

from shiftboard.db.models import Shifts, WeekStartDay
from shiftboard.services.scheduling import (
    CopyMode,
    CopyRequest,
    PermissionDenied,
    ScheduleState,
    Shift,
    SkipReason,
    ValidationFailed,
    copy_day,
    copy_schedule,
    create_blackout_period,
    plan_copy,
)
from shiftboard.services.scheduling.copy_engine import placement_date, resolve_target_starts, week_start_for

WEEK_START = date(2024, 6, 3)
WEEK_END = date(2024, 6, 9)


def next_week(**kwargs) -> CopyRequest:
    return CopyRequest(mode=CopyMode.NEXT_WEEK, source_start=WEEK_START, source_end=WEEK_END, **kwargs)


def next_day(day: date, **kwargs) -> CopyRequest:
    return CopyRequest(mode=CopyMode.NEXT_DAY, source_start=day, source_end=day, **kwargs)


def drafts_between(db, start: date, end: date) -> list[Shifts]:
    return (
        db.query(Shifts)
        .filter(Shifts.shift_date >= start, Shifts.shift_date <= end, Shifts.is_blocked == False)
        .order_by(Shifts.shift_date, Shifts.start_time)
        .all()
    )


@pytest.fixture
def source_week(org, add_shift):
    # three published shifts, Monday to Wednesday
    return [
        add_shift(org.ali, date(2024, 6, 3), 9, 17, job="Server"),
        add_shift(org.ali, date(2024, 6, 4), 10, 14, job="Host"),
        add_shift(org.bea, date(2024, 6, 5), 8, 16, job="Cook"),
    ]


class TestWeekHelpers:
    def test_week_start_sunday(self):
        assert week_start_for(date(2024, 6, 5), WeekStartDay.SUNDAY) == date(2024, 6, 2)
        assert week_start_for(date(2024, 6, 2), WeekStartDay.SUNDAY) == date(2024, 6, 2)

    def test_week_start_monday(self):
        assert week_start_for(date(2024, 6, 5), WeekStartDay.MONDAY) == date(2024, 6, 3)
        assert week_start_for(date(2024, 6, 9), WeekStartDay.MONDAY) == date(2024, 6, 3)

    def test_resolve_targets(self):
        assert resolve_target_starts(next_week()) == [date(2024, 6, 10)]
        assert resolve_target_starts(next_day(date(2024, 6, 4))) == [date(2024, 6, 5)]
        weeks = CopyRequest(mode=CopyMode.WEEKS_AHEAD, source_start=WEEK_START, source_end=WEEK_END, weeks_ahead=3)
        assert resolve_target_starts(weeks) == [date(2024, 6, 24)]

    def test_resolve_date_range(self):
        request = CopyRequest(
            mode=CopyMode.DATE_RANGE,
            source_start=date(2024, 6, 2), source_end=date(2024, 6, 8),
            target_start=date(2024, 6, 12), target_end=date(2024, 6, 20),
        )
        assert resolve_target_starts(request, WeekStartDay.SUNDAY) == [date(2024, 6, 9), date(2024, 6, 16)]

    def test_resolve_day_to_date(self):
        request = CopyRequest(
            mode=CopyMode.DAY_TO_DATE,
            source_start=date(2024, 6, 4), source_end=date(2024, 6, 4), target_date=date(2024, 6, 20),
        )
        assert resolve_target_starts(request) == [date(2024, 6, 20)]

    def test_date_range_placement_keeps_weekday(self):
        # Monday-to-Sunday source window in a Sunday-start organization
        request = CopyRequest(
            mode=CopyMode.DATE_RANGE,
            source_start=date(2024, 6, 3), source_end=date(2024, 6, 9),
            target_start=date(2024, 6, 10), target_end=date(2024, 6, 16),
        )
        anchor = date(2024, 6, 9)
        assert placement_date(request, date(2024, 6, 3), anchor, WeekStartDay.SUNDAY) == date(2024, 6, 10)
        assert placement_date(request, date(2024, 6, 8), anchor, WeekStartDay.SUNDAY) == date(2024, 6, 15)
        assert placement_date(request, date(2024, 6, 9), anchor, WeekStartDay.SUNDAY) == date(2024, 6, 9)

    def test_shifted_modes_keep_day_offsets(self):
        assert placement_date(next_week(), date(2024, 6, 5), date(2024, 6, 10)) == date(2024, 6, 12)


class TestPlanCopy:
    def _shift(self, on, start, end, **kwargs):
        return Shift(organization_id=1, employee_id=1, shift_date=on, start_hour=start, end_hour=end,
                     schedule_state=ScheduleState.PUBLISHED, **kwargs)

    def test_placements_do_not_collide_with_each_other(self, server):
        # two source Mondays fold onto the same weekday of every target week
        request = CopyRequest(mode=CopyMode.DATE_RANGE, source_start=date(2024, 6, 3), source_end=date(2024, 6, 16))
        source = [self._shift(date(2024, 6, 3), 9, 17), self._shift(date(2024, 6, 10), 12, 20)]

        placements, summary = plan_copy(
            request, [date(2024, 6, 9), date(2024, 6, 16)], source, [], [], {1: server}
        )

        assert [p.shift_date for p in placements] == [date(2024, 6, 10), date(2024, 6, 17)]
        assert summary.created_count == 2
        assert summary.skipped_overlap_count == 2
        assert [s.shift_date for s in summary.skipped] == [date(2024, 6, 10), date(2024, 6, 17)]
        assert all(p.schedule_state == ScheduleState.DRAFT and p.id is None for p in placements)

    def test_preview_is_capped_but_counts_are_complete(self, server):
        source = [self._shift(date(2024, 6, 3 + i), 9, 17) for i in range(3)]
        existing = [self._shift(date(2024, 6, 10 + i), 9, 17, id=100 + i) for i in range(3)]

        _, summary = plan_copy(next_week(), [date(2024, 6, 10)], source, existing, [], {1: server}, preview_limit=1)

        assert summary.skipped_duplicate_count == 3
        assert summary.skipped_count == 3
        assert len(summary.skipped) == 1
        assert summary.skipped_truncated is True

    def test_blocked_source_rows_are_not_copied(self, server, blocked_wednesday):
        placements, summary = plan_copy(next_week(), [date(2024, 6, 10)], [blocked_wednesday], [], [], {1: server})
        assert placements == []
        assert summary.source_count == 0

    def test_pay_snapshot_taken_from_target_employee(self, server):
        source = [self._shift(date(2024, 6, 3), 9, 17, job="Server", pay_rate=99.0)]
        placements, _ = plan_copy(next_week(), [date(2024, 6, 10)], source, [], [], {1: server})
        assert placements[0].pay_rate == 12.5


class TestCopySchedule:
    def test_next_week_copies_every_shift(self, db, org, source_week):
        summary = copy_schedule(db, org.manager_id, org.id, next_week())

        assert summary.source_count == 3
        assert summary.created_count == 3
        assert summary.skipped_count == 0
        assert summary.target_week_starts == [date(2024, 6, 10)]

        created = drafts_between(db, date(2024, 6, 10), date(2024, 6, 16))
        assert [(s.user_id, s.shift_date, s.start_time, s.end_time, s.job) for s in created] == [
            (org.ali, date(2024, 6, 10), "09:00:00", "17:00:00", "Server"),
            (org.ali, date(2024, 6, 11), "10:00:00", "14:00:00", "Host"),
            (org.bea, date(2024, 6, 12), "08:00:00", "16:00:00", "Cook"),
        ]
        assert all(s.schedule_state.value == "draft" for s in created)

    def test_second_copy_only_reports_duplicates(self, db, org, source_week):
        copy_schedule(db, org.manager_id, org.id, next_week())
        again = copy_schedule(db, org.manager_id, org.id, next_week())

        assert again.created_count == 0
        assert again.skipped_duplicate_count == again.source_count == 3
        assert len(drafts_between(db, date(2024, 6, 10), date(2024, 6, 16))) == 3

    def test_blackout_on_target_date_is_skipped_with_reason(self, db, org, add_shift):
        add_shift(org.ali, date(2024, 6, 4), 9, 17)
        create_blackout_period(db, org.manager_id, org.id, org.ali, date(2024, 6, 5), date(2024, 6, 5), "Wine training")

        summary = copy_schedule(db, org.manager_id, org.id, next_day(date(2024, 6, 4)))

        assert summary.created_count == 0
        assert summary.skipped_blocked_count == 1
        skipped = summary.skipped[0]
        assert skipped.reason == SkipReason.BLOCKED
        assert skipped.shift_date == date(2024, 6, 5)
        assert "Wine training" in skipped.message

    def test_blackout_can_be_overridden(self, db, org, add_shift):
        add_shift(org.ali, date(2024, 6, 4), 9, 17)
        create_blackout_period(db, org.manager_id, org.id, org.ali, date(2024, 6, 5), date(2024, 6, 5), "Closed")

        summary = copy_schedule(db, org.manager_id, org.id, next_day(date(2024, 6, 4), allow_override_blocked=True))

        assert summary.created_count == 1
        assert summary.skipped_blocked_count == 0

    def test_approved_time_off_always_wins(self, db, org, source_week, add_time_off):
        add_time_off(org.bea, date(2024, 6, 12), date(2024, 6, 12))

        summary = copy_schedule(db, org.manager_id, org.id, next_week(allow_override_blocked=True))

        assert summary.created_count == 2
        assert summary.skipped_time_off_count == 1
        assert summary.skipped[0].employee_id == org.bea

    def test_existing_draft_overlap_is_skipped(self, db, org, source_week, add_shift):
        add_shift(org.ali, date(2024, 6, 10), 16, 20, schedule_state=ScheduleState.DRAFT)

        summary = copy_schedule(db, org.manager_id, org.id, next_week())

        assert summary.created_count == 2
        assert summary.skipped_overlap_count == 1

    def test_inactive_employee_is_skipped(self, db, org, add_shift):
        add_shift(org.inactive, date(2024, 6, 3), 9, 17)

        summary = copy_schedule(db, org.manager_id, org.id, next_week())

        assert summary.created_count == 0
        assert summary.skipped_inactive_count == 1

    def test_only_published_source_by_default(self, db, org, add_shift):
        add_shift(org.ali, date(2024, 6, 3), 9, 17, schedule_state=ScheduleState.DRAFT)

        assert copy_schedule(db, org.manager_id, org.id, next_week()).source_count == 0

        from_drafts = copy_schedule(
            db, org.manager_id, org.id, next_week(source_schedule_state=ScheduleState.DRAFT)
        )
        assert from_drafts.created_count == 1

    def test_target_state_can_be_published(self, db, org, source_week):
        copy_schedule(db, org.manager_id, org.id, next_week(target_schedule_state=ScheduleState.PUBLISHED))
        created = drafts_between(db, date(2024, 6, 10), date(2024, 6, 16))
        assert {s.schedule_state.value for s in created} == {"published"}

    def test_blackout_in_source_is_not_copied(self, db, org, source_week):
        create_blackout_period(db, org.manager_id, org.id, org.bea, date(2024, 6, 7), date(2024, 6, 7), "Offsite")

        summary = copy_schedule(db, org.manager_id, org.id, next_week())

        assert summary.source_count == 3
        assert db.query(Shifts).filter(Shifts.is_blocked == True).count() == 1

    def test_weeks_ahead(self, db, org, source_week):
        request = CopyRequest(mode=CopyMode.WEEKS_AHEAD, source_start=WEEK_START, source_end=WEEK_END, weeks_ahead=2)
        summary = copy_schedule(db, org.manager_id, org.id, request)
        assert summary.created_count == 3
        assert len(drafts_between(db, date(2024, 6, 17), date(2024, 6, 23))) == 3

    def test_date_range_fills_each_week(self, db, org, add_shift):
        add_shift(org.ali, date(2024, 6, 3), 9, 17)
        request = CopyRequest(
            mode=CopyMode.DATE_RANGE,
            source_start=date(2024, 6, 2), source_end=date(2024, 6, 8),
            target_start=date(2024, 6, 12), target_end=date(2024, 6, 20),
        )

        summary = copy_schedule(db, org.manager_id, org.id, request)

        assert summary.created_count == 2
        assert summary.target_week_starts == [date(2024, 6, 9), date(2024, 6, 16)]
        dates = [s.shift_date for s in drafts_between(db, date(2024, 6, 9), date(2024, 6, 22))]
        assert dates == [date(2024, 6, 10), date(2024, 6, 17)]

    def test_date_range_keeps_weekday_for_unaligned_source(self, db, org, add_shift):
        # Monday-to-Sunday source window in the Sunday-start organization
        add_shift(org.ali, date(2024, 6, 3), 9, 17)
        request = CopyRequest(
            mode=CopyMode.DATE_RANGE,
            source_start=date(2024, 6, 3), source_end=date(2024, 6, 9),
            target_start=date(2024, 6, 10), target_end=date(2024, 6, 16),
        )

        summary = copy_schedule(db, org.manager_id, org.id, request)

        assert summary.target_week_starts == [date(2024, 6, 9), date(2024, 6, 16)]
        created = [s for s in drafts_between(db, date(2024, 6, 9), date(2024, 6, 22)) if s.schedule_state.value == "draft"]
        assert [s.shift_date for s in created] == [date(2024, 6, 10), date(2024, 6, 17)]
        assert {s.shift_date.weekday() for s in created} == {0}

    def test_date_range_sunday_lands_inside_the_target_week(self, db, org, add_shift):
        # Sunday shift copied in the Monday-start organization
        add_shift(org.other_employee, date(2024, 6, 2), 9, 17, organization_id=org.other_org_id)
        request = CopyRequest(
            mode=CopyMode.DATE_RANGE,
            source_start=date(2024, 6, 2), source_end=date(2024, 6, 8),
            target_start=date(2024, 6, 10), target_end=date(2024, 6, 16),
        )

        summary = copy_schedule(db, org.other_manager_id, org.other_org_id, request)

        assert summary.target_week_starts == [date(2024, 6, 10)]
        assert summary.created_count == 1
        assert [s.shift_date for s in drafts_between(db, date(2024, 6, 10), date(2024, 6, 16))] == [date(2024, 6, 16)]

    def test_empty_source(self, db, org):
        summary = copy_schedule(db, org.manager_id, org.id, next_week())
        assert summary.created_count == 0
        assert summary.source_count == 0

    def test_employee_cannot_copy(self, db, org, source_week):
        with pytest.raises(PermissionDenied):
            copy_schedule(db, org.ali_user, org.id, next_week())

    def test_employee_with_invalid_request_is_forbidden(self, db, org):
        request = CopyRequest(mode=CopyMode.WEEKS_AHEAD, source_start=WEEK_START, source_end=WEEK_END, weeks_ahead=20)
        with pytest.raises(PermissionDenied):
            copy_schedule(db, org.ali_user, org.id, request)

    @pytest.mark.parametrize("weeks", [None, 0, 9])
    def test_weeks_ahead_bounds(self, db, org, weeks):
        request = CopyRequest(mode=CopyMode.WEEKS_AHEAD, source_start=WEEK_START, source_end=WEEK_END, weeks_ahead=weeks)
        with pytest.raises(ValidationFailed):
            copy_schedule(db, org.manager_id, org.id, request)

    def test_next_day_needs_single_day(self, db, org):
        request = CopyRequest(mode=CopyMode.NEXT_DAY, source_start=WEEK_START, source_end=WEEK_END)
        with pytest.raises(ValidationFailed):
            copy_schedule(db, org.manager_id, org.id, request)

    def test_date_range_needs_target(self, db, org):
        request = CopyRequest(mode=CopyMode.DATE_RANGE, source_start=WEEK_START, source_end=WEEK_END)
        with pytest.raises(ValidationFailed):
            copy_schedule(db, org.manager_id, org.id, request)


class TestCopyDay:
    def test_copies_onto_any_date(self, db, org, source_week):
        summary = copy_day(db, org.manager_id, org.id, date(2024, 6, 4), date(2024, 6, 20))

        assert summary.created_count == 1
        assert summary.target_week_starts == [date(2024, 6, 20)]
        created = drafts_between(db, date(2024, 6, 20), date(2024, 6, 20))
        assert [(s.user_id, s.start_time, s.end_time, s.job) for s in created] == [
            (org.ali, "10:00:00", "14:00:00", "Host"),
        ]
        assert created[0].schedule_state.value == "draft"

    def test_conflict_rules_apply(self, db, org, source_week, add_time_off):
        add_time_off(org.ali, date(2024, 6, 20), date(2024, 6, 20))

        summary = copy_day(db, org.manager_id, org.id, date(2024, 6, 4), date(2024, 6, 20))

        assert summary.created_count == 0
        assert summary.skipped_time_off_count == 1

    def test_copy_to_an_earlier_date(self, db, org, source_week):
        summary = copy_day(
            db, org.manager_id, org.id, date(2024, 6, 5), date(2024, 5, 29),
            target_schedule_state=ScheduleState.PUBLISHED,
        )

        assert summary.created_count == 1
        assert [s.schedule_state.value for s in drafts_between(db, date(2024, 5, 29), date(2024, 5, 29))] == ["published"]

    def test_same_date_is_rejected(self, db, org):
        with pytest.raises(ValidationFailed):
            copy_day(db, org.manager_id, org.id, date(2024, 6, 4), date(2024, 6, 4))

    def test_employee_cannot_copy_a_day(self, db, org, source_week):
        with pytest.raises(PermissionDenied):
            copy_day(db, org.ali_user, org.id, date(2024, 6, 4), date(2024, 6, 4))
