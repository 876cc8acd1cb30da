"""Round-robin pairing generation (circle method) for the calendar generator."""

import logging
import math
from collections import Counter
from itertools import combinations

from leaguecal.models import Matchup, Round

logger = logging.getLogger("leaguecal.roundrobin")


def natural_rounds(n: int) -> int:
    """Rounds needed for every pair to meet once: n if odd, n-1 if even."""
    if n < 2:
        return 0
    return n if n % 2 == 1 else n - 1


def compute_total_weeks(n: int) -> int:
    """ceil(total pairings / matches per week)."""
    if n < 2:
        return 0
    total_pairings = n * (n - 1) // 2
    matches_per_week = n // 2
    return math.ceil(total_pairings / matches_per_week)


def generate_round_robin(team_ids: list[str],
                         total_weeks: int | None = None) -> list[Round]:
    """Generate a round-robin schedule using the circle method.

    Seat 0 stays fixed; each round seat i plays seat m-1-i, then the other
    seats rotate one position (last moves to second). For an odd team count
    an empty bye seat takes the fixed position, so the team in the last
    rotating seat sits out and the bye moves every round.

    Generates min(total_weeks, natural rounds) rounds. Deterministic: the
    same team order always yields the same schedule.
    """
    n = len(team_ids)
    if n < 2:
        return []
    if len(set(team_ids)) != n:
        raise ValueError("Team ids must be unique")

    num_rounds = natural_rounds(n)
    if total_weeks is not None:
        num_rounds = min(total_weeks, num_rounds)

    seats: list[str | None] = list(team_ids)
    if n % 2 == 1:
        seats = [None] + seats
    m = len(seats)

    rounds = []
    for r in range(num_rounds):
        matchups = []
        bye_teams = []
        for i in range(m // 2):
            t1 = seats[i]
            t2 = seats[m - 1 - i]
            if t1 is None:
                bye_teams.append(t2)
            elif t2 is None:
                bye_teams.append(t1)
            else:
                matchups.append(Matchup(t1, t2))

        rounds.append(Round(number=r + 1, matchups=matchups, bye_teams=bye_teams))

        # Rotate: keep seat 0 fixed, last seat moves to second
        if m > 2:
            seats = [seats[0], seats[-1]] + seats[1:-1]

    for rnd in rounds:
        seen = set()
        for mt in rnd.matchups:
            for t in (mt.team_a, mt.team_b):
                if t in seen:
                    logger.error(f"Team {t} appears twice in week {rnd.number}")
                seen.add(t)

    logger.info(
        f"Round robin for {n} teams: {len(rounds)} rounds, "
        f"{sum(len(r.matchups) for r in rounds)} pairings"
    )
    return rounds


def verify_round_robin(rounds: list[Round], teams: list[str]) -> dict:
    """Check that a set of weeks is a complete single round robin over teams.

    Returns dict with valid, errors, matchup_counts (sorted pair -> count),
    games_per_team and byes_per_team.
    """
    errors = []
    matchup_counts: Counter = Counter()
    games_per_team: Counter = Counter({t: 0 for t in teams})
    byes_per_team: Counter = Counter({t: 0 for t in teams})

    for rnd in rounds:
        busy = Counter(t for m in rnd.matchups for t in (m.team_a, m.team_b))
        errors.extend(
            f"Round {rnd.number}: {t} appears {c} times"
            for t, c in busy.items() if c > 1
        )
        errors.extend(
            f"Round {rnd.number}: {t} has a bye but also plays"
            for t in rnd.bye_teams if t in busy
        )
        matchup_counts.update(m.key() for m in rnd.matchups)
        games_per_team.update(busy)
        byes_per_team.update(rnd.bye_teams)

    for a, b in combinations(teams, 2):
        count = matchup_counts[tuple(sorted((a, b)))]
        if count != 1:
            errors.append(f"{a} vs {b}: played {count} times (expected 1)")

    return {
        "valid": not errors,
        "errors": errors,
        "matchup_counts": dict(matchup_counts),
        "games_per_team": dict(games_per_team),
        "byes_per_team": dict(byes_per_team),
    }
