"""Tests for availability.py — loading, overlap and candidate times."""

from datetime import date, time

import pytest

from leaguecal.availability import (
    compatible_days, load_team_availability, meets_minimum_availability,
    resolve_date, time_candidates,
)
from leaguecal.config import GeneratorSettings
from leaguecal.models import DayAvailability, DayOfWeek, TeamAvailability

MONDAY = date(2026, 11, 2)
SATURDAY = date(2026, 11, 7)


class _RowStore:
    def __init__(self, rows):
        self.rows = rows

    def get_team_availability(self, league_id):
        return self.rows


def _row(team_id, name, day, available=True, start=None, end=None):
    return {"team_id": team_id, "team_name": name, "day_of_week": day,
            "is_available": available, "start_time": start, "end_time": end}


def _make_team(team_id, **days):
    """_make_team('a', sat=(9, 18), wed=(18, 22))"""
    avail = []
    for day_name, (start_h, end_h) in days.items():
        avail.append(DayAvailability(DayOfWeek.from_str(day_name), True,
                                     time(start_h), time(end_h)))
    return TeamAvailability(team_id, team_id.upper(), avail)


class TestLoadTeamAvailability:
    def test_defaults_applied(self):
        store = _RowStore([_row("a", "A", "saturday")])
        [team] = load_team_availability(store, "L")
        assert team.window(DayOfWeek.Sat) == (time(9, 0), time(18, 0))

    def test_configured_defaults(self):
        store = _RowStore([_row("a", "A", "saturday", end=time(12, 0))])
        settings = GeneratorSettings(default_start_time=time(8, 0))
        [team] = load_team_availability(store, "L", settings)
        assert team.window(DayOfWeek.Sat) == (time(8, 0), time(12, 0))

    def test_unavailable_record_contributes_nothing(self):
        store = _RowStore([
            _row("a", "A", "monday", available=False),
            _row("a", "A", "friday", available=None),
            _row("a", "A", "sunday"),
        ])
        [team] = load_team_availability(store, "L")
        assert team.available_days() == [DayOfWeek.Sun]
        assert len(team.availability) == 3

    def test_invalid_day_skipped(self):
        store = _RowStore([
            _row("a", "A", "funday"),
            _row("a", "A", "Tuesday"),
        ])
        [team] = load_team_availability(store, "L")
        assert team.available_days() == [DayOfWeek.Tue]

    def test_rows_without_team_skipped(self):
        store = _RowStore([
            _row(None, "Ghost", "monday"),
            _row("b", None, "monday"),
            _row("a", "A", "monday"),
        ])
        teams = load_team_availability(store, "L")
        assert [t.team_id for t in teams] == ["a"]

    def test_team_without_records_listed_empty(self):
        store = _RowStore([
            _row("a", "A", "monday"),
            _row("b", "B", None, available=None),
        ])
        teams = load_team_availability(store, "L")
        assert [t.team_id for t in teams] == ["a", "b"]
        assert teams[1].availability == []

    def test_empty_window_is_unavailable(self):
        store = _RowStore([_row("a", "A", "monday", start=time(18, 0), end=time(9, 0))])
        [team] = load_team_availability(store, "L")
        assert team.available_days() == []

    def test_storage_order_kept(self):
        store = _RowStore([_row(t, t.upper(), "saturday") for t in ["z", "m", "a"]])
        assert [t.team_id for t in load_team_availability(store, "L")] == ["z", "m", "a"]


class TestResolveDate:
    def test_later_in_week(self):
        assert resolve_date(MONDAY, DayOfWeek.Sat) == SATURDAY

    def test_same_day_rolls_forward(self):
        assert resolve_date(MONDAY, DayOfWeek.Mon) == date(2026, 11, 9)
        assert resolve_date(SATURDAY, DayOfWeek.Sat) == date(2026, 11, 14)

    def test_wraps_around(self):
        assert resolve_date(SATURDAY, DayOfWeek.Fri) == date(2026, 11, 13)


class TestCompatibleDays:
    def test_overlap_window(self):
        home = _make_team("a", sat=(9, 18))
        away = _make_team("b", sat=(10, 13))
        assert compatible_days(home, away, MONDAY) == [
            (DayOfWeek.Sat, time(10, 0), time(13, 0))
        ]

    def test_touching_windows_do_not_overlap(self):
        home = _make_team("a", wed=(9, 12))
        away = _make_team("b", wed=(12, 15))
        assert compatible_days(home, away, MONDAY) == []

    def test_one_team_unavailable(self):
        home = _make_team("a", sat=(9, 18))
        away = _make_team("b", sun=(9, 18))
        assert compatible_days(home, away, MONDAY) == []

    def test_calendar_order_from_week_start(self):
        home = _make_team("a", mon=(9, 18), sat=(9, 18), sun=(9, 18))
        away = _make_team("b", mon=(9, 18), sat=(9, 18), sun=(9, 18))
        days = [d for d, _, _ in compatible_days(home, away, MONDAY)]
        # Monday itself rolls to next week, so it comes last
        assert days == [DayOfWeek.Sat, DayOfWeek.Sun, DayOfWeek.Mon]


class TestTimeCandidates:
    def test_two_hour_window_single_slot(self):
        assert time_candidates(time(9, 0), time(11, 0)) == [time(9, 0)]

    def test_full_day(self):
        slots = time_candidates(time(9, 0), time(18, 0))
        assert slots == [time(h, 0) for h in range(9, 17)]

    def test_half_past_start(self):
        assert time_candidates(time(9, 30), time(12, 0)) == [time(9, 30), time(10, 30)]

    def test_one_hour_window_offers_start(self):
        assert time_candidates(time(9, 0), time(10, 0)) == [time(9, 0)]

    def test_short_window_offers_start(self):
        assert time_candidates(time(9, 0), time(9, 30)) == [time(9, 0)]

    def test_empty_window(self):
        assert time_candidates(time(9, 0), time(9, 0)) == []

    def test_longer_matches(self):
        assert time_candidates(time(9, 0), time(13, 0), 90) == [time(9, 0), time(10, 0), time(11, 0)]


class TestMinimumAvailability:
    def test_simple_needs_two_days(self):
        assert not meets_minimum_availability(_make_team("a", sat=(9, 18)), "simple")
        assert meets_minimum_availability(_make_team("a", sat=(9, 18), sun=(9, 18)), "simple")

    def test_strict_needs_three_weekdays(self):
        team = _make_team("a", mon=(18, 22), tue=(18, 22), sat=(9, 18))
        assert not meets_minimum_availability(team, "strict")

    def test_strict_late_weekday(self):
        team = _make_team("a", mon=(18, 22), tue=(18, 20), wed=(18, 20))
        assert meets_minimum_availability(team, "strict")

    def test_strict_weekend_morning(self):
        team = _make_team("a", mon=(18, 20), tue=(18, 20), wed=(18, 20), sun=(9, 12))
        assert meets_minimum_availability(team, "strict")

    def test_strict_neither(self):
        team = _make_team("a", mon=(18, 20), tue=(18, 20), wed=(18, 20), sat=(10, 14))
        assert not meets_minimum_availability(team, "strict")

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            meets_minimum_availability(_make_team("a", sat=(9, 18)), "lenient")
