"""Team availability loading and slot discovery helpers."""

import logging
from datetime import date, time, timedelta

from leaguecal.config import GeneratorSettings
from leaguecal.models import DayAvailability, DayOfWeek, TeamAvailability

logger = logging.getLogger("leaguecal.availability")

LATE_WEEKDAY_END = time(21, 0)
WEEKEND_MORNING_START = time(9, 0)
WEEKEND_MORNING_END = time(12, 0)


def load_team_availability(store, league_id: str,
                           settings: GeneratorSettings | None = None,
                           ) -> list[TeamAvailability]:
    """Group availability rows by team and apply defaults.

    Every team of the league appears once, in storage order. Rows without a
    team id or name and rows with an unrecognized day are logged and
    skipped. Missing time bounds default to the configured 09:00-18:00.
    """
    settings = settings or GeneratorSettings()
    rows = store.get_team_availability(league_id)
    logger.debug(f"Found {len(rows)} team availability rows for league {league_id}")

    teams: dict[str, TeamAvailability] = {}
    for row in rows:
        team_id = row.get("team_id")
        team_name = row.get("team_name")
        if not team_id or not team_name:
            logger.warning(f"Skipping availability row with missing team data: {row}")
            continue

        team = teams.get(team_id)
        if team is None:
            team = TeamAvailability(team_id=team_id, team_name=team_name)
            teams[team_id] = team

        day_name = row.get("day_of_week")
        if not day_name:
            continue
        try:
            day = DayOfWeek.from_str(day_name)
        except ValueError:
            logger.warning(f"Invalid day of week {day_name!r} for team {team_name}, skipping")
            continue

        if any(a.day == day for a in team.availability):
            logger.warning(f"Duplicate {day.full_name} record for team {team_name}, keeping the first")
            continue

        start = row.get("start_time") or settings.default_start_time
        end = row.get("end_time") or settings.default_end_time
        is_available = bool(row.get("is_available"))
        if is_available and start >= end:
            logger.warning(
                f"Empty window {start}-{end} on {day.full_name} for team "
                f"{team_name}, treating as unavailable"
            )
            is_available = False

        team.availability.append(DayAvailability(
            day=day, is_available=is_available, start_time=start, end_time=end,
        ))

    for team in teams.values():
        team.availability.sort(key=lambda a: a.day.value)

    result = list(teams.values())
    logger.info(f"Loaded availability for {len(result)} teams")
    return result


def resolve_date(week_start: date, day: DayOfWeek) -> date:
    """Next date strictly after week_start that falls on day."""
    days_until = ((day.value - week_start.weekday() + 7) % 7) or 7
    return week_start + timedelta(days=days_until)


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def _from_minutes(m: int) -> time:
    return time(m // 60, m % 60)


def compatible_days(home: TeamAvailability, away: TeamAvailability,
                    week_start: date) -> list[tuple[DayOfWeek, time, time]]:
    """Days both teams are available with overlapping windows.

    Returns (day, overlap_start, overlap_end) in calendar order from week_start.
    """
    result = []
    for day in DayOfWeek:
        home_window = home.window(day)
        away_window = away.window(day)
        if home_window is None or away_window is None:
            continue
        home_start, home_end = home_window
        away_start, away_end = away_window
        if home_start < away_end and away_start < home_end:
            result.append((day, max(home_start, away_start), min(home_end, away_end)))
    result.sort(key=lambda entry: resolve_date(week_start, entry[0]))
    return result


def time_candidates(window_start: time, window_end: time,
                    match_length_minutes: int = 60) -> list[time]:
    """Hourly kickoff times inside a window, starting at its start.

    Times stop before window_end - match length. If no hourly boundary fits
    but the window is non-empty, the window start is the only candidate.
    """
    start = _minutes(window_start)
    end = _minutes(window_end)
    last = end - match_length_minutes

    candidates = []
    t = start
    while t < last:
        candidates.append(_from_minutes(t))
        t += 60
    if not candidates and end > start:
        candidates.append(window_start)
    return candidates


def meets_minimum_availability(team: TeamAvailability, policy: str = "simple") -> bool:
    """Availability bar used by the fallback step of slot assignment.

    simple: at least two available days.
    strict: at least three available weekdays, and either a weekday
    available until 21:00 or later, or a weekend day covering 09:00-12:00.
    """
    days = team.available_days()
    if policy == "simple":
        return len(days) >= 2
    if policy != "strict":
        raise ValueError(f"Unknown availability policy: {policy}")

    weekdays = [d for d in days if d.is_weekday()]
    if len(weekdays) < 3:
        return False
    late_weekday = any(team.window(d)[1] >= LATE_WEEKDAY_END for d in weekdays)
    weekend_morning = any(
        team.window(d)[0] <= WEEKEND_MORNING_START
        and team.window(d)[1] >= WEEKEND_MORNING_END
        for d in days if d.is_weekend()
    )
    return late_weekday or weekend_morning
