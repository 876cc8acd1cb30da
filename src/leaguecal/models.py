"""Data models for the league calendar generator."""

from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from typing import Optional

# Stored in place of a real date for matches that still need one.
PLACEHOLDER_DATE = date(2099, 12, 31)


def is_placeholder_date(d: Optional[date],
                        placeholder: date = PLACEHOLDER_DATE) -> bool:
    """True for dates that mean "not assigned yet" (None or >= sentinel)."""
    return d is None or d >= placeholder


class DayOfWeek(Enum):
    Mon = 0
    Tue = 1
    Wed = 2
    Thu = 3
    Fri = 4
    Sat = 5
    Sun = 6

    @classmethod
    def from_str(cls, s: str) -> "DayOfWeek":
        """Parse 'monday', 'Mon', 'SATURDAY' ... into a DayOfWeek."""
        key = s.strip().lower()
        for day in cls:
            full = day.full_name
            if key == full or key == full[:3]:
                return day
        raise ValueError(f"Unrecognized day of week: {s!r}")

    @classmethod
    def of(cls, d: date) -> "DayOfWeek":
        return cls(d.weekday())

    @property
    def full_name(self) -> str:
        return _FULL_NAMES[self.value]

    def is_weekday(self) -> bool:
        return self.value < 5

    def is_weekend(self) -> bool:
        return self.value >= 5


_FULL_NAMES = ["monday", "tuesday", "wednesday", "thursday", "friday",
               "saturday", "sunday"]


@dataclass
class League:
    id: str
    name: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass
class Team:
    """A team enrolled in a league."""
    id: str
    name: str
    league_id: str
    level: str = ""
    gender: str = ""


@dataclass
class DayAvailability:
    """One team's window on one day of the week."""
    day: DayOfWeek
    is_available: bool
    start_time: time
    end_time: time


@dataclass
class TeamAvailability:
    """A team with its normalized weekly availability."""
    team_id: str
    team_name: str
    availability: list[DayAvailability] = field(default_factory=list)

    def available_days(self) -> list[DayOfWeek]:
        days = {a.day for a in self.availability if a.is_available}
        return sorted(days, key=lambda d: d.value)

    def window(self, day: DayOfWeek) -> Optional[tuple[time, time]]:
        for a in self.availability:
            if a.day == day and a.is_available:
                return a.start_time, a.end_time
        return None


@dataclass
class Matchup:
    """A pairing of two teams (no home/away yet)."""
    team_a: str
    team_b: str

    def key(self) -> tuple[str, str]:
        return tuple(sorted([self.team_a, self.team_b]))


@dataclass
class Round:
    """One week of the round robin: each team plays at most once."""
    number: int
    matchups: list[Matchup]
    bye_teams: list[str] = field(default_factory=list)


@dataclass
class GeneratedMatch:
    """A match produced by the generator, dated or awaiting manual assignment."""
    id: str
    league_id: str
    home_team_id: str
    away_team_id: str
    match_date: date
    match_time: time
    week_number: int
    home_team_name: str = ""
    away_team_name: str = ""
    needs_manual_assignment: bool = False

    def teams(self) -> tuple[str, str]:
        return self.home_team_id, self.away_team_id


@dataclass
class ByeWeek:
    team_id: str
    week_number: int
    team_name: str = ""


@dataclass
class CalendarGenerationResult:
    matches: list[GeneratedMatch]
    byes: list[ByeWeek]
    total_weeks: int
    start_date: date
    end_date: date


@dataclass
class Match:
    """A match row as persisted in storage."""
    id: str
    league_id: str
    home_team_id: str
    away_team_id: str
    match_date: date
    match_time: time
    week_number: int

    @property
    def is_unassigned(self) -> bool:
        return is_placeholder_date(self.match_date)


@dataclass
class Standing:
    """A classification row. Results are not tracked, so counters stay at zero."""
    team_id: str
    team_name: str
    matches_played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_difference: int = 0
    points: int = 0
    position: int = 0
