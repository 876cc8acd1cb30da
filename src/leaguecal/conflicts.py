"""Player double-booking checks across teams sharing a calendar date."""

import logging
from collections import defaultdict
from datetime import date
from typing import Optional, Protocol

from leaguecal.models import PLACEHOLDER_DATE, GeneratedMatch, is_placeholder_date

logger = logging.getLogger("leaguecal.conflicts")


class ConflictChecker(Protocol):
    def has_player_conflict(self, team_a: str, team_b: str, d: date,
                            exclude_match_id: Optional[str] = None) -> bool: ...

    def record(self, match: GeneratedMatch) -> None: ...


class PlayerConflictChecker:
    """Checks whether any player of two teams already plays on a date.

    Rosters and stored matches are fetched once per team / date and reused
    for the lifetime of the checker, which is one generation run. Matches
    registered with record() count as scheduled even though they are not
    persisted yet. Storage errors propagate to the caller.
    """

    def __init__(self, store, placeholder_date: date = PLACEHOLDER_DATE):
        self.store = store
        self.placeholder_date = placeholder_date
        self._rosters: dict[str, frozenset[str]] = {}
        self._stored: dict[date, list[tuple[str, str]]] = {}
        self._pending: dict[date, list[tuple[str, str]]] = defaultdict(list)

    def roster(self, team_id: str) -> frozenset[str]:
        if team_id not in self._rosters:
            self._rosters[team_id] = frozenset(self.store.get_team_roster_user_ids(team_id))
        return self._rosters[team_id]

    def _stored_matches(self, d: date,
                        exclude_match_id: Optional[str]) -> list[tuple[str, str]]:
        if exclude_match_id is not None:
            return [(m.home_team_id, m.away_team_id)
                    for m in self.store.get_matches_on_date(d, exclude_match_id)]
        if d not in self._stored:
            self._stored[d] = [(m.home_team_id, m.away_team_id)
                               for m in self.store.get_matches_on_date(d)]
        return self._stored[d]

    def has_player_conflict(self, team_a: str, team_b: str, d: date,
                            exclude_match_id: Optional[str] = None) -> bool:
        if is_placeholder_date(d, self.placeholder_date):
            return False
        players = self.roster(team_a) | self.roster(team_b)
        if not players:
            return False

        others = self._stored_matches(d, exclude_match_id) + self._pending.get(d, [])
        for home, away in others:
            shared = players & (self.roster(home) | self.roster(away))
            if shared:
                logger.debug(
                    f"Conflict on {d}: {team_a}/{team_b} share "
                    f"{len(shared)} player(s) with {home} vs {away}"
                )
                return True
        return False

    def record(self, match: GeneratedMatch):
        if match.needs_manual_assignment or is_placeholder_date(match.match_date, self.placeholder_date):
            return
        self._pending[match.match_date].append((match.home_team_id, match.away_team_id))
