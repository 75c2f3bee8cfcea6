"""Tests for task filter predicates."""

from datetime import date, datetime, timedelta, timezone

import pytest

from taskboard_cli.models import FilterCriteria
from taskboard_cli.utils import jalali
from taskboard_cli.utils.task_filters import (
    evaluate_all_filters,
    evaluate_date_filter,
    evaluate_text_filter,
    filter_tasks,
    get_active_filter_count,
    has_active_filters,
    is_date_in_range,
    parse_instant,
)
from tests.fakes import make_task


@pytest.fixture
def utc_local(monkeypatch):
    """Pin the system zone used for aware datetimes to UTC."""
    monkeypatch.setattr(jalali.tzlocal, "get_localzone", lambda: timezone.utc)


class TestTextFilter:
    def test_matches_title_case_insensitively(self):
        task = make_task("t1", "Buy Milk")
        assert evaluate_text_filter(task, "milk") is True

    def test_no_match(self):
        task = make_task("t1", "Buy Milk")
        assert evaluate_text_filter(task, "bread") is False

    def test_matches_description(self):
        task = make_task("t1", "Errands", description="Pick up the BREAD")
        assert evaluate_text_filter(task, "bread") is True

    def test_term_is_trimmed(self):
        task = make_task("t1", "Buy Milk")
        assert evaluate_text_filter(task, "  milk  ") is True

    @pytest.mark.parametrize("term", [None, "", "   "])
    def test_empty_term_matches_everything(self, term):
        assert evaluate_text_filter(make_task("t1", "anything"), term) is True

    def test_term_is_not_a_pattern(self):
        task = make_task("t1", "Review a.b")
        assert evaluate_text_filter(task, "a.b") is True
        assert evaluate_text_filter(task, "a*b") is False

    def test_mapping_record(self):
        assert evaluate_text_filter({"title": "Buy Milk"}, "MILK") is True
        assert evaluate_text_filter({"title": None, "description": None}, "milk") is False


class TestDateFilter:
    def test_inclusive_on_both_ends(self):
        task = make_task("t1", due_date=datetime(2024, 3, 15, 18, 30))
        assert evaluate_date_filter(task, "due_date", date(2024, 3, 15), date(2024, 3, 15))

    def test_time_of_day_is_ignored_on_bounds(self):
        task = make_task("t1", due_date=datetime(2024, 3, 15, 0, 0))
        assert evaluate_date_filter(
            task, "due_date", datetime(2024, 3, 15, 23, 59), datetime(2024, 3, 15, 0, 1)
        )

    def test_outside_range(self):
        task = make_task("t1", due_date=datetime(2024, 3, 15))
        assert not evaluate_date_filter(task, "due_date", date(2024, 3, 16), None)
        assert not evaluate_date_filter(task, "due_date", None, date(2024, 3, 14))

    def test_open_ended_ranges(self):
        task = make_task("t1", start_date=datetime(2024, 3, 15))
        assert evaluate_date_filter(task, "start_date", date(2024, 1, 1), None)
        assert evaluate_date_filter(task, "start_date", None, date(2024, 12, 31))

    def test_no_bounds_matches_missing_value(self):
        assert evaluate_date_filter(make_task("t1"), "due_date") is True

    def test_missing_value_never_matches_active_range(self):
        assert evaluate_date_filter(make_task("t1"), "due_date", date(2024, 1, 1)) is False

    def test_iso_string_values(self, utc_local):
        record = {"due_date": "2024-03-15T10:00:00Z"}
        assert evaluate_date_filter(record, "due_date", "2024-03-15", "2024-03-15")

    def test_malformed_value_does_not_match(self):
        record = {"due_date": "next tuesday"}
        assert evaluate_date_filter(record, "due_date", date(2024, 1, 1)) is False

    def test_malformed_bound_does_not_match(self):
        task = make_task("t1", due_date=datetime(2024, 3, 15))
        assert evaluate_date_filter(task, "due_date", "garbage", None) is False

    def test_aware_value_uses_local_day(self, monkeypatch):
        tehran = timezone(timedelta(hours=3, minutes=30))
        monkeypatch.setattr(jalali.tzlocal, "get_localzone", lambda: tehran)
        late = datetime(2024, 3, 15, 22, 0, tzinfo=timezone.utc)

        assert is_date_in_range(late, date(2024, 3, 16), date(2024, 3, 16)) is True
        assert is_date_in_range(late, date(2024, 3, 15), date(2024, 3, 15)) is False


class TestAllFilters:
    def test_and_semantics(self):
        task = make_task("t1", "Buy Milk", due_date=datetime(2024, 3, 15))
        matching = FilterCriteria(text="milk", due_date_to=date(2024, 3, 31))
        failing = FilterCriteria(text="milk", due_date_from=date(2024, 4, 1))

        assert evaluate_all_filters(task, matching) is True
        assert evaluate_all_filters(task, failing) is False

    def test_empty_criteria_matches(self):
        assert evaluate_all_filters(make_task("t1"), FilterCriteria()) is True
        assert evaluate_all_filters(make_task("t1"), {}) is True

    def test_none_inputs_do_not_match(self):
        assert evaluate_all_filters(None, FilterCriteria()) is False
        assert evaluate_all_filters(make_task("t1"), None) is False

    def test_filter_tasks_preserves_order(self):
        tasks = [
            make_task("a", "milk run"),
            make_task("b", "bread"),
            make_task("c", "Milk again"),
        ]
        assert [t.id for t in filter_tasks(tasks, {"text": "milk"})] == ["a", "c"]


class TestActiveFilters:
    def test_none_active(self):
        assert get_active_filter_count(FilterCriteria()) == 0
        assert has_active_filters(FilterCriteria(text="   ")) is False
        assert get_active_filter_count(None) == 0

    def test_range_counts_once(self):
        criteria = FilterCriteria(
            text="milk",
            due_date_from=date(2024, 1, 1),
            due_date_to=date(2024, 12, 31),
        )
        assert get_active_filter_count(criteria) == 2
        assert has_active_filters(criteria) is True

    def test_all_three(self):
        criteria = {
            "text": "x",
            "start_date_to": date(2024, 1, 1),
            "due_date_from": date(2024, 1, 1),
        }
        assert get_active_filter_count(criteria) == 3


class TestParseInstant:
    def test_passthrough(self):
        value = datetime(2024, 3, 15, 9, 0)
        assert parse_instant(value) is value
        assert parse_instant(date(2024, 3, 15)) == date(2024, 3, 15)

    def test_iso_strings(self):
        assert parse_instant("2024-03-15") == datetime(2024, 3, 15)
        assert parse_instant("2024-03-15T10:00:00Z") == datetime(
            2024, 3, 15, 10, 0, tzinfo=timezone.utc
        )

    @pytest.mark.parametrize("value", [None, "", "soon", 42, ["2024-03-15"]])
    def test_unparseable(self, value):
        assert parse_instant(value) is None


class TestDisplayZone:
    """Aware record dates are compared on the day shown in the display zone."""

    TEHRAN = timezone(timedelta(hours=3, minutes=30))

    def test_day_follows_given_zone(self, utc_local):
        due = datetime(2024, 3, 14, 22, 0, tzinfo=timezone.utc)
        shown_day = jalali.alternate_to_canonical("1402/12/25")

        assert jalali.canonical_to_alternate(due, self.TEHRAN) == "1402/12/25"
        assert is_date_in_range(due, shown_day, shown_day, self.TEHRAN) is True
        assert is_date_in_range(due, shown_day, shown_day) is False

    def test_zone_reaches_all_filters(self, utc_local):
        task = make_task("t1", due_date=datetime(2024, 3, 14, 22, 0, tzinfo=timezone.utc))
        criteria = FilterCriteria(due_date_from=date(2024, 3, 15), due_date_to=date(2024, 3, 15))

        assert evaluate_date_filter(
            task, "due_date", date(2024, 3, 15), date(2024, 3, 15), self.TEHRAN
        )
        assert evaluate_all_filters(task, criteria, self.TEHRAN) is True
        assert filter_tasks([task], criteria, self.TEHRAN) == [task]
        assert filter_tasks([task], criteria) == []


class TestEmptyStringBounds:
    def test_empty_bounds_are_absent(self):
        task = make_task("t1")
        assert evaluate_date_filter(task, "due_date", "", "") is True
        assert evaluate_date_filter({"due_date": None}, "due_date", "  ", None) is True

    def test_empty_bound_beside_real_bound(self):
        task = make_task("t1", due_date=datetime(2024, 3, 15))
        assert evaluate_date_filter(task, "due_date", "", "2024-03-31") is True
        assert evaluate_date_filter(task, "due_date", "2024-03-16", "") is False

    def test_empty_bounds_not_counted(self):
        criteria = {"text": "", "start_date_from": "", "due_date_to": ""}

        assert get_active_filter_count(criteria) == 0
        assert has_active_filters(criteria) is False
        assert filter_tasks([make_task("t1")], criteria) == [make_task("t1")]
