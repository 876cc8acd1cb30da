"""Error taxonomy for calendar generation and manual match assignment."""

from datetime import date


class CalendarError(Exception):
    """Base class for every failure the generator reports to its caller."""


class LeagueNotFound(CalendarError):
    def __init__(self, league_id: str):
        self.league_id = league_id
        super().__init__(f"League not found: {league_id}")


class InvalidStartDate(CalendarError):
    pass


class InsufficientTeams(CalendarError):
    def __init__(self, found: int, required: int):
        self.found = found
        self.required = required
        super().__init__(
            f"League must have at least {required} teams to generate "
            f"calendar (found {found})"
        )


class MissingAvailability(CalendarError):
    def __init__(self, team_names: list[str]):
        self.team_names = list(team_names)
        super().__init__(
            f"Teams without availability data: {', '.join(self.team_names)}. "
            "All teams need availability before a calendar can be generated."
        )


class InvalidTeamData(CalendarError):
    pass


class PlayerConflictDetected(CalendarError):
    def __init__(self, conflict_date: date):
        self.conflict_date = conflict_date
        super().__init__(
            "Player conflict detected: a player from this match already has "
            f"another match scheduled on {conflict_date.isoformat()}"
        )


class MatchNotFound(CalendarError):
    def __init__(self, match_id: str):
        self.match_id = match_id
        super().__init__(f"Match not found: {match_id}")


class InvalidMatchDate(CalendarError):
    pass
