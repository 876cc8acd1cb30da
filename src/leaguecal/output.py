"""Text formatters for generated and stored calendars."""

from datetime import time

from leaguecal.models import CalendarGenerationResult, Standing


def _fmt_time(t: time) -> str:
    return t.strftime("%H:%M")


def _format_weeks(rows: list[tuple], byes: list[tuple[int, str]],
                  title: str) -> list[str]:
    """rows: (week, date, time, home, away, match_id); byes: (week, team)."""
    lines = []
    lines.append("=" * 72)
    lines.append(title)
    lines.append("=" * 72)

    by_week: dict[int, list[tuple]] = {}
    for row in rows:
        by_week.setdefault(row[0], []).append(row)
    bye_by_week: dict[int, list[str]] = {}
    for week, team in byes:
        bye_by_week.setdefault(week, []).append(team)

    for week in sorted(set(by_week) | set(bye_by_week)):
        lines.append(f"\n--- WEEK {week} ---")
        for _, d, t, home, away, match_id in sorted(by_week.get(week, []),
                                                    key=lambda r: (r[1], r[2])):
            day = d.strftime("%a %Y-%m-%d")
            lines.append(f"  {day}  {_fmt_time(t)}  {home:<20} vs {away:<20} [{match_id[:8]}]")
        for team in bye_by_week.get(week, []):
            lines.append(f"  BYE: {team}")
    return lines


def _format_manual(rows: list[tuple]) -> list[str]:
    """rows: (week, home, away, match_id)."""
    if not rows:
        return []
    lines = [f"\n{'=' * 72}", f"NEEDS MANUAL ASSIGNMENT ({len(rows)})", "=" * 72]
    for week, home, away, match_id in sorted(rows):
        lines.append(f"  Week {week:>2}  {home:<20} vs {away:<20} [{match_id}]")
    return lines


def format_result(result: CalendarGenerationResult) -> str:
    """Generated (unsaved) calendar, organized by week."""
    dated = [(m.week_number, m.match_date, m.match_time,
              m.home_team_name, m.away_team_name, m.id)
             for m in result.matches if not m.needs_manual_assignment]
    manual = [(m.week_number, m.home_team_name, m.away_team_name, m.id)
              for m in result.matches if m.needs_manual_assignment]
    byes = [(b.week_number, b.team_name or b.team_id) for b in result.byes]

    lines = _format_weeks(
        dated, byes,
        f"GENERATED CALENDAR  {result.start_date} to {result.end_date} "
        f"({result.total_weeks} weeks)",
    )
    lines.extend(_format_manual(manual))
    return "\n".join(lines)


def format_stored_calendar(calendar: dict, league_name: str = "") -> str:
    """Output of calendar.get_calendar(), organized by week."""
    dated = [(e["match"].week_number, e["match_date"], e["match"].match_time,
              e["home_team_name"], e["away_team_name"], e["match"].id)
             for e in calendar["matches"]]
    manual = [(e["match"].week_number, e["home_team_name"], e["away_team_name"],
               e["match"].id)
              for e in calendar["needs_assignment"]]
    byes = [(b.week_number, b.team_name or b.team_id) for b in calendar["byes"]]

    title = f"CALENDAR {league_name}".rstrip()
    lines = _format_weeks(dated, byes, title)
    lines.extend(_format_manual(manual))
    return "\n".join(lines)


def format_standings(standings: list[Standing]) -> str:
    lines = [f"{'Pos':>3}  {'Team':<24} {'P':>3} {'W':>3} {'D':>3} {'L':>3} "
             f"{'GF':>3} {'GA':>3} {'GD':>4} {'Pts':>4}"]
    for s in standings:
        lines.append(
            f"{s.position:>3}  {s.team_name[:24]:<24} {s.matches_played:>3} {s.wins:>3} "
            f"{s.draws:>3} {s.losses:>3} {s.goals_for:>3} {s.goals_against:>3} "
            f"{s.goal_difference:>4} {s.points:>4}"
        )
    return "\n".join(lines)
