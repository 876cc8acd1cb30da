"""Statistics and balance reporting for generated calendars."""

from collections import defaultdict

from leaguecal.models import CalendarGenerationResult, DayOfWeek


def compute_stats(result: CalendarGenerationResult) -> dict:
    """Per-team match, home/away, bye and break counts.

    A break is two consecutive matches with the same role for one team.
    """
    names: dict[str, str] = {}
    home_counts = defaultdict(int)
    away_counts = defaultdict(int)
    bye_counts = defaultdict(int)
    roles: dict[str, list[str]] = defaultdict(list)
    day_counts = defaultdict(lambda: defaultdict(int))  # team -> day -> count
    manual = 0

    for m in sorted(result.matches, key=lambda m: m.week_number):
        names.setdefault(m.home_team_id, m.home_team_name or m.home_team_id)
        names.setdefault(m.away_team_id, m.away_team_name or m.away_team_id)
        home_counts[m.home_team_id] += 1
        away_counts[m.away_team_id] += 1
        roles[m.home_team_id].append("H")
        roles[m.away_team_id].append("A")
        if m.needs_manual_assignment:
            manual += 1
            continue
        dow = DayOfWeek.of(m.match_date).name
        day_counts[m.home_team_id][dow] += 1
        day_counts[m.away_team_id][dow] += 1

    for b in result.byes:
        names.setdefault(b.team_id, b.team_name or b.team_id)
        bye_counts[b.team_id] += 1

    teams = {}
    for team_id in sorted(names, key=lambda t: names[t]):
        seq = roles.get(team_id, [])
        breaks = sum(1 for prev, cur in zip(seq, seq[1:]) if prev == cur)
        teams[team_id] = {
            "name": names[team_id],
            "matches": home_counts[team_id] + away_counts[team_id],
            "home": home_counts[team_id],
            "away": away_counts[team_id],
            "byes": bye_counts[team_id],
            "breaks": breaks,
            "sequence": "".join(seq),
            "days": dict(day_counts[team_id]),
        }

    return {
        "total_matches": len(result.matches),
        "manual_matches": manual,
        "total_byes": len(result.byes),
        "total_weeks": result.total_weeks,
        "teams": teams,
    }


def format_stats_report(stats: dict) -> str:
    lines = []
    lines.append("=" * 60)
    lines.append("CALENDAR STATISTICS")
    lines.append("=" * 60)
    lines.append(
        f"\nMatches: {stats['total_matches']}  Weeks: {stats['total_weeks']}  "
        f"Byes: {stats['total_byes']}  Manual: {stats['manual_matches']}"
    )
    lines.append(f"\n{'Team':<24} {'GP':>3} {'H':>3} {'A':>3} {'Bye':>4} {'Brk':>4}  Sequence")
    for t in stats["teams"].values():
        lines.append(
            f"{t['name'][:24]:<24} {t['matches']:>3} {t['home']:>3} {t['away']:>3} "
            f"{t['byes']:>4} {t['breaks']:>4}  {t['sequence']}"
        )
    return "\n".join(lines)
