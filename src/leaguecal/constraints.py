"""Constraint validation for generated league calendars."""

from collections import defaultdict
from datetime import date, timedelta

from leaguecal.models import CalendarGenerationResult, GeneratedMatch


def _week_bounds(start_date: date, week_number: int) -> tuple[date, date]:
    """First and last date a match of this week may fall on."""
    week_start = start_date + timedelta(days=7 * (week_number - 1))
    return week_start + timedelta(days=1), week_start + timedelta(days=7)


def validate_calendar(result: CalendarGenerationResult,
                      rosters: dict[str, set[str]] | None = None,
                      team_ids: list[str] | None = None) -> dict:
    """Validate a generated calendar against its invariants.

    Returns dict with:
    - valid: bool (True if no hard constraint violations)
    - errors: list of hard constraint violations
    - warnings: list of soft issues (manual assignments, shared slots)
    """
    errors = []
    warnings = []

    if team_ids is None:
        seen = set()
        for m in result.matches:
            seen.update(m.teams())
        seen.update(b.team_id for b in result.byes)
        team_ids = sorted(seen)

    dated = [m for m in result.matches if not m.needs_manual_assignment]
    for m in result.matches:
        if m.needs_manual_assignment:
            warnings.append(
                f"NEEDS MANUAL ASSIGNMENT: {m.home_team_name or m.home_team_id} vs "
                f"{m.away_team_name or m.away_team_id} (week {m.week_number})"
            )

    # Every pair exactly once
    pair_counts: dict[tuple[str, str], int] = defaultdict(int)
    for m in result.matches:
        pair_counts[tuple(sorted(m.teams()))] += 1
    for i, t1 in enumerate(team_ids):
        for t2 in team_ids[i + 1:]:
            count = pair_counts.get(tuple(sorted([t1, t2])), 0)
            if count != 1:
                errors.append(f"{t1} vs {t2}: played {count} times (expected 1)")

    # No team twice in a week; byes don't overlap matches
    teams_by_week: dict[int, list[str]] = defaultdict(list)
    for m in result.matches:
        teams_by_week[m.week_number].extend(m.teams())
    for week, week_teams in sorted(teams_by_week.items()):
        counts = defaultdict(int)
        for t in week_teams:
            counts[t] += 1
        for t, c in counts.items():
            if c > 1:
                errors.append(f"Week {week}: {t} plays {c} times")

    byes_by_week: dict[int, list[str]] = defaultdict(list)
    for b in result.byes:
        byes_by_week[b.week_number].append(b.team_id)
        if b.team_id in teams_by_week.get(b.week_number, []):
            errors.append(f"Week {b.week_number}: {b.team_id} has a bye but also plays")

    if len(team_ids) % 2 == 1:
        for week in range(1, result.total_weeks + 1):
            count = len(byes_by_week.get(week, []))
            if count != 1:
                errors.append(f"Week {week}: {count} byes (expected 1)")
    elif result.byes:
        errors.append(f"{len(result.byes)} byes with an even team count")

    # Dates inside their week, no shared slot within a week
    slots: dict[tuple[int, date, object], list[GeneratedMatch]] = defaultdict(list)
    for m in dated:
        first, last = _week_bounds(result.start_date, m.week_number)
        if not first <= m.match_date <= last:
            errors.append(
                f"{m.home_team_id} vs {m.away_team_id} on {m.match_date} "
                f"outside week {m.week_number} ({first} to {last})"
            )
        slots[(m.week_number, m.match_date, m.match_time)].append(m)
    for (week, d, t), ms in sorted(slots.items(), key=lambda kv: (kv[0][0], kv[0][1])):
        if len(ms) > 1:
            warnings.append(f"Week {week}: {len(ms)} matches share slot {d} {t}")

    # No player in two matches on the same date
    if rosters is not None:
        by_date: dict[date, list[GeneratedMatch]] = defaultdict(list)
        for m in dated:
            by_date[m.match_date].append(m)
        for d, ms in sorted(by_date.items()):
            for i, m1 in enumerate(ms):
                p1 = rosters.get(m1.home_team_id, set()) | rosters.get(m1.away_team_id, set())
                for m2 in ms[i + 1:]:
                    p2 = rosters.get(m2.home_team_id, set()) | rosters.get(m2.away_team_id, set())
                    shared = p1 & p2
                    if shared:
                        errors.append(
                            f"Player conflict on {d}: {', '.join(sorted(shared))} in "
                            f"{m1.home_team_id} vs {m1.away_team_id} and "
                            f"{m2.home_team_id} vs {m2.away_team_id}"
                        )

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
    }


def format_validation_report(result: dict) -> str:
    """Format validation results as text."""
    lines = []
    lines.append("=" * 60)
    lines.append("CALENDAR VALIDATION REPORT")
    lines.append("=" * 60)

    if result["valid"]:
        lines.append("\nRESULT: VALID (no hard constraint violations)")
    else:
        lines.append(f"\nRESULT: INVALID ({len(result['errors'])} violations)")

    if result["errors"]:
        lines.append(f"\n--- ERRORS ({len(result['errors'])}) ---")
        for e in result["errors"]:
            lines.append(f"  ERROR: {e}")

    if result["warnings"]:
        lines.append(f"\n--- WARNINGS ({len(result['warnings'])}) ---")
        for w in result["warnings"]:
            lines.append(f"  WARN: {w}")

    return "\n".join(lines)
