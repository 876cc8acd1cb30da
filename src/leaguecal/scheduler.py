"""Calendar generation engine.

Four stages run in sequence for one league:
1. Validate inputs — league exists, start date in the future, enough teams,
   every team has availability
2. Load availability — per-team weekly windows with defaults applied
3. Round robin — pairings per week and byes (roundrobin.py)
4. Slot assignment — home/away alternation, then a concrete date and time
   both teams can attend without double-booking a player; fallbacks when no
   such slot exists, and manual assignment as the last resort

The result is not persisted here; callers use save_calendar() once they
have inspected it.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from leaguecal.availability import (
    compatible_days, load_team_availability, meets_minimum_availability,
    resolve_date, time_candidates,
)
from leaguecal.config import GeneratorSettings, parse_date
from leaguecal.conflicts import ConflictChecker, PlayerConflictChecker
from leaguecal.errors import (
    InsufficientTeams, InvalidStartDate, InvalidTeamData, LeagueNotFound,
    MissingAvailability,
)
from leaguecal.models import (
    ByeWeek, CalendarGenerationResult, DayOfWeek, GeneratedMatch, League,
    Matchup, Round, TeamAvailability, is_placeholder_date,
)
from leaguecal.roundrobin import compute_total_weeks, generate_round_robin

logger = logging.getLogger("leaguecal.scheduler")

HOME = "home"
AWAY = "away"

COMPATIBLE = "compatible"
FALLBACK = "fallback"
MANUAL = "manual"


@dataclass
class SlotDecision:
    """Outcome of resolving one pairing to a date/time."""
    status: str  # COMPATIBLE, FALLBACK or MANUAL
    match_date: Optional[date] = None
    match_time: Optional[time] = None


# ---------------------------------------------------------------------------
# Stage 1: input validation
# ---------------------------------------------------------------------------

def parse_start_date(value) -> date:
    """Accept a date, datetime or YYYY-MM-DD string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return parse_date(value)
    except (TypeError, ValueError, IndexError):
        raise InvalidStartDate(f"Invalid start date format: {value!r}")


def validate_inputs(store, league_id: str, start_date: date,
                    settings: GeneratorSettings,
                    today: Optional[date] = None,
                    ) -> tuple[League, list[TeamAvailability]]:
    """Run every pre-scheduling check; returns the league and its availability."""
    league = store.get_league(league_id)
    if league is None:
        raise LeagueNotFound(league_id)

    today = today or date.today()
    if start_date <= today:
        raise InvalidStartDate(
            f"Start date must be in the future (got {start_date}, today is {today})"
        )

    teams = store.get_teams_for_league(league_id)
    if len(teams) < settings.min_teams:
        raise InsufficientTeams(len(teams), settings.min_teams)

    availability = load_team_availability(store, league_id, settings)
    loaded = {t.team_id for t in availability}
    missing = [t.name for t in teams if t.id not in loaded]
    missing += [t.team_name for t in availability if not t.available_days()]
    if missing:
        raise MissingAvailability(missing)

    return league, availability


# ---------------------------------------------------------------------------
# Stage 4: slot assignment
# ---------------------------------------------------------------------------

def assign_home_away(matchup: Matchup,
                     last_role: dict[str, str]) -> tuple[str, str]:
    """Pick (home, away) for a pairing from each team's previous role.

    A team that was home last time goes away (and vice versa). With no
    history for either team the lexicographically smaller id hosts.
    """
    a, b = matchup.team_a, matchup.team_b
    role_a = last_role.get(a)
    role_b = last_role.get(b)
    if role_a == HOME or role_b == AWAY:
        return b, a
    if role_a == AWAY or role_b == HOME:
        return a, b
    return (a, b) if a < b else (b, a)


def _fallback_team(home: TeamAvailability, away: TeamAvailability,
                   policy: str) -> Optional[TeamAvailability]:
    """Team whose first available day hosts the match when no common slot exists.

    One team meeting the availability bar wins outright. When both meet it,
    the team with more available days wins. Otherwise there is no fallback.
    """
    home_ok = meets_minimum_availability(home, policy)
    away_ok = meets_minimum_availability(away, policy)
    if home_ok != away_ok:
        return home if home_ok else away
    if not home_ok:
        return None

    home_days = len(home.available_days())
    away_days = len(away.available_days())
    if home_days > away_days:
        return home
    if away_days > home_days:
        return away
    return None


def _fallback_time(team: TeamAvailability, day: DayOfWeek, match_date: date,
                   scheduled_times: set[tuple[date, time]],
                   settings: GeneratorSettings) -> Optional[time]:
    """Default kickoff if free, else the first free hourly kickoff in team's window."""
    if (match_date, settings.default_match_time) not in scheduled_times:
        return settings.default_match_time
    window_start, window_end = team.window(day)
    for t in time_candidates(window_start, window_end, settings.match_length_minutes):
        if (match_date, t) not in scheduled_times:
            return t
    return None


def find_slot(home: TeamAvailability, away: TeamAvailability,
              week_start: date,
              scheduled_times: set[tuple[date, time]],
              checker: ConflictChecker,
              settings: GeneratorSettings) -> SlotDecision:
    """Resolve a pairing to a slot.

    Tries every compatible day in calendar order and every hourly kickoff in
    the shared window, skipping slots already taken this week and dates on
    which a player of either team already plays. Falls back to the priority
    rules, then to manual assignment.
    """
    if not home.available_days() or not away.available_days():
        raise InvalidTeamData(
            f"Invalid team data for {home.team_name} vs {away.team_name}: "
            "no available day"
        )

    for day, window_start, window_end in compatible_days(home, away, week_start):
        match_date = resolve_date(week_start, day)
        free_times = [
            t for t in time_candidates(window_start, window_end,
                                       settings.match_length_minutes)
            if (match_date, t) not in scheduled_times
        ]
        if not free_times:
            continue
        if checker.has_player_conflict(home.team_id, away.team_id, match_date):
            logger.debug(
                f"{home.team_name} vs {away.team_name}: player conflict on {match_date}"
            )
            continue
        return SlotDecision(COMPATIBLE, match_date, free_times[0])

    chosen = _fallback_team(home, away, settings.availability_policy)
    if chosen is not None:
        first_day = chosen.available_days()[0]
        match_date = resolve_date(week_start, first_day)
        match_time = _fallback_time(chosen, first_day, match_date,
                                    scheduled_times, settings)
        if match_time is not None:
            logger.warning(
                f"No compatible slot for {home.team_name} vs {away.team_name}, "
                f"using {chosen.team_name}'s first available day ({first_day.full_name})"
            )
            return SlotDecision(FALLBACK, match_date, match_time)
        logger.debug(f"Every {first_day.full_name} slot of {chosen.team_name} is taken")

    logger.warning(
        f"No slot for {home.team_name} vs {away.team_name}, needs manual assignment"
    )
    return SlotDecision(MANUAL)


def schedule_matches(rounds: list[Round],
                     teams: list[TeamAvailability],
                     start_date: date,
                     checker: ConflictChecker,
                     settings: GeneratorSettings,
                     league_id: str = "",
                     ) -> tuple[list[GeneratedMatch], list[ByeWeek]]:
    """Turn round-robin weeks into dated matches and bye records."""
    team_map = {t.team_id: t for t in teams}
    last_role: dict[str, str] = {}
    matches: list[GeneratedMatch] = []
    byes: list[ByeWeek] = []

    for rnd in rounds:
        week_start = start_date + timedelta(days=7 * (rnd.number - 1))
        scheduled_times: set[tuple[date, time]] = set()

        for matchup in rnd.matchups:
            home_id, away_id = assign_home_away(matchup, last_role)
            last_role[home_id] = HOME
            last_role[away_id] = AWAY

            home = team_map.get(home_id)
            away = team_map.get(away_id)
            if home is None or away is None:
                raise InvalidTeamData(
                    f"Pairing {home_id} vs {away_id} references an unknown team"
                )

            decision = find_slot(home, away, week_start, scheduled_times,
                                 checker, settings)
            needs_manual = decision.status == MANUAL
            match = GeneratedMatch(
                id=str(uuid.uuid4()),
                league_id=league_id,
                home_team_id=home_id,
                away_team_id=away_id,
                match_date=settings.placeholder_date if needs_manual else decision.match_date,
                match_time=settings.default_match_time if needs_manual else decision.match_time,
                week_number=rnd.number,
                home_team_name=home.team_name,
                away_team_name=away.team_name,
                needs_manual_assignment=needs_manual,
            )
            if not needs_manual:
                scheduled_times.add((match.match_date, match.match_time))
            checker.record(match)
            matches.append(match)

        for team_id in rnd.bye_teams:
            team = team_map.get(team_id)
            byes.append(ByeWeek(
                team_id=team_id,
                week_number=rnd.number,
                team_name=team.team_name if team else "",
            ))

    return matches, byes


def compute_end_date(matches: list[GeneratedMatch], start_date: date,
                     total_weeks: int) -> date:
    """One week after the last dated match."""
    dated = [m.match_date for m in matches
             if not m.needs_manual_assignment and not is_placeholder_date(m.match_date)]
    if not dated:
        return start_date + timedelta(days=7 * total_weeks)
    return max(dated) + timedelta(days=7)


def generate_calendar(store, league_id: str, start_date,
                      settings: Optional[GeneratorSettings] = None,
                      today: Optional[date] = None,
                      checker: Optional[ConflictChecker] = None,
                      ) -> CalendarGenerationResult:
    """Generate a full round-robin calendar for a league without persisting it."""
    settings = settings or GeneratorSettings()
    start_date = parse_start_date(start_date)
    logger.info(f"Starting calendar generation for league {league_id}, start {start_date}")

    logger.info("Step 1: validating inputs")
    _, availability = validate_inputs(store, league_id, start_date, settings, today)

    logger.info("Step 2: computing weekly distribution")
    team_ids = [t.team_id for t in availability]
    n = len(team_ids)
    total_weeks = compute_total_weeks(n)
    logger.info(
        f"Teams: {n}, pairings: {n * (n - 1) // 2}, "
        f"matches per week: {n // 2}, total weeks: {total_weeks}"
    )

    logger.info("Step 3: generating round robin")
    rounds = generate_round_robin(team_ids, total_weeks)

    logger.info("Step 4: assigning slots")
    if checker is None:
        checker = PlayerConflictChecker(store, settings.placeholder_date)
    matches, byes = schedule_matches(rounds, availability, start_date,
                                     checker, settings, league_id)

    end_date = compute_end_date(matches, start_date, total_weeks)
    manual = sum(1 for m in matches if m.needs_manual_assignment)
    logger.info(
        f"Calendar generation completed: {len(matches)} matches, {len(byes)} byes, "
        f"{manual} need manual assignment, ends {end_date}"
    )
    return CalendarGenerationResult(
        matches=matches,
        byes=byes,
        total_weeks=len(rounds),
        start_date=start_date,
        end_date=end_date,
    )


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

def save_matches(store, matches: list[GeneratedMatch], league_id: str):
    for m in matches:
        m.league_id = league_id
    store.insert_matches(matches, league_id)


def save_bye_weeks(store, byes: list[ByeWeek], league_id: str):
    if byes:
        store.insert_bye_weeks(byes, league_id)


def update_league_dates(store, league_id: str, start_date: date, end_date: date):
    store.update_league_dates(league_id, start_date, end_date)


def save_calendar(store, result: CalendarGenerationResult, league_id: str):
    """Persist matches, byes and league dates in one transaction."""
    with store.transaction():
        save_matches(store, result.matches, league_id)
        save_bye_weeks(store, result.byes, league_id)
        update_league_dates(store, league_id, result.start_date, result.end_date)
    logger.info(f"Saved calendar for league {league_id}")
