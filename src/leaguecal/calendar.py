"""Calendar retrieval, manual date assignment, standings and clearing.

These operate on a persisted calendar; generation itself lives in
scheduler.py.
"""

import logging
from datetime import date

from leaguecal.config import parse_date, parse_time
from leaguecal.conflicts import PlayerConflictChecker
from leaguecal.errors import (
    InvalidMatchDate, LeagueNotFound, MatchNotFound, PlayerConflictDetected,
)
from leaguecal.models import PLACEHOLDER_DATE, Match, Standing, is_placeholder_date

logger = logging.getLogger("leaguecal.calendar")

UNKNOWN_TEAM = "Unknown Team"


def get_calendar(store, league_id: str,
                 placeholder_date: date = PLACEHOLDER_DATE) -> dict:
    """Stored calendar for a league.

    Returns dict with:
    - matches: dated matches, ordered by week then date
    - needs_assignment: matches still on the placeholder date (date None)
    - byes: bye weeks, minus any team that has a dated match that week
    Each match entry is {match, match_date, home_team_name, away_team_name}.
    """
    if store.get_league(league_id) is None:
        raise LeagueNotFound(league_id)

    names = {t.id: t.name for t in store.get_teams_for_league(league_id)}
    stored = store.get_matches_for_league(league_id)

    def _entry(m: Match, dated: bool) -> dict:
        return {
            "match": m,
            "match_date": m.match_date if dated else None,
            "home_team_name": names.get(m.home_team_id, UNKNOWN_TEAM),
            "away_team_name": names.get(m.away_team_id, UNKNOWN_TEAM),
        }

    assigned = [m for m in stored if not is_placeholder_date(m.match_date, placeholder_date)]
    pending = [m for m in stored if is_placeholder_date(m.match_date, placeholder_date)]

    playing: set[tuple[str, int]] = set()
    for m in assigned:
        playing.add((m.home_team_id, m.week_number))
        playing.add((m.away_team_id, m.week_number))

    byes = [
        b for b in store.get_bye_weeks_for_league(league_id)
        if (b.team_id, b.week_number) not in playing
    ]

    logger.info(
        f"Calendar for league {league_id}: {len(assigned)} dated, "
        f"{len(pending)} awaiting assignment, {len(byes)} byes"
    )
    return {
        "matches": [_entry(m, True) for m in assigned],
        "needs_assignment": [_entry(m, False) for m in pending],
        "byes": byes,
    }


def assign_match_date(store, league_id: str, match_id: str,
                      match_date, match_time,
                      placeholder_date: date = PLACEHOLDER_DATE) -> Match:
    """Give a placeholder-dated match a real date and time.

    The date must lie within the league's start/end dates, and no player of
    either team may already play on it in any other match.
    """
    try:
        match_date = parse_date(match_date)
        match_time = parse_time(match_time)
    except (TypeError, ValueError, IndexError):
        raise InvalidMatchDate(f"Invalid match date or time: {match_date!r} {match_time!r}")

    match = store.get_match(match_id)
    if match is None or match.league_id != league_id:
        raise MatchNotFound(match_id)
    if not is_placeholder_date(match.match_date, placeholder_date):
        raise InvalidMatchDate(
            f"Match {match_id} already has an assigned date ({match.match_date})"
        )

    league = store.get_league(league_id)
    if league is None:
        raise LeagueNotFound(league_id)

    if is_placeholder_date(match_date, placeholder_date):
        raise InvalidMatchDate(f"{match_date} is reserved for unassigned matches")
    if league.start_date and match_date < league.start_date:
        raise InvalidMatchDate("Match date cannot be before league start date")
    if league.end_date and match_date > league.end_date:
        raise InvalidMatchDate("Match date cannot be after league end date")

    checker = PlayerConflictChecker(store, placeholder_date)
    if checker.has_player_conflict(match.home_team_id, match.away_team_id,
                                   match_date, exclude_match_id=match_id):
        raise PlayerConflictDetected(match_date)

    with store.transaction():
        store.update_match_date(match_id, match_date, match_time)
    logger.info(f"Assigned match {match_id} to {match_date} {match_time}")

    match.match_date = match_date
    match.match_time = match_time
    return match


def get_classifications(store, league_id: str) -> list[Standing]:
    """League table. Results aren't recorded, so every counter is zero."""
    if store.get_league(league_id) is None:
        raise LeagueNotFound(league_id)

    standings = [Standing(team_id=t.id, team_name=t.name)
                 for t in store.get_teams_for_league(league_id)]
    standings.sort(key=lambda s: (-s.points, -s.goal_difference,
                                  -s.goals_for, s.team_name))
    for i, s in enumerate(standings, 1):
        s.position = i
    return standings


def clear_calendar(store, league_id: str) -> int:
    """Delete all matches and byes of a league; returns matches removed."""
    if store.get_league(league_id) is None:
        raise LeagueNotFound(league_id)
    with store.transaction():
        removed = store.delete_calendar(league_id)
    logger.info(f"Cleared calendar for league {league_id} ({removed} matches)")
    return removed
