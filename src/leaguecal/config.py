"""Config loading and validation for the league calendar generator."""

import os
from dataclasses import dataclass, field, replace
from datetime import date, time
from pathlib import Path

import yaml

from leaguecal.models import PLACEHOLDER_DATE

POLICIES = ("simple", "strict")


def parse_time(s) -> time:
    """Parse time strings like '5:30pm', '10am', '17:00', '17:00:00'."""
    if isinstance(s, time):
        return s
    if isinstance(s, int):
        # YAML reads unquoted 17:00 as sexagesimal minutes
        return time(s // 60, s % 60)
    s = str(s).strip()
    s_lower = s.lower()

    is_pm = s_lower.endswith("pm")
    is_am = s_lower.endswith("am")

    s_clean = s_lower
    if is_pm or is_am:
        s_clean = s_clean[:-2].strip()

    sec = 0
    if ":" in s_clean:
        parts = s_clean.split(":")
        h = int(parts[0])
        m = int(parts[1])
        if len(parts) > 2:
            sec = int(parts[2])
    else:
        h = int(s_clean)
        m = 0

    if is_pm and h < 12:
        h += 12
    elif is_am and h == 12:
        h = 0

    return time(h, m, sec)


def parse_date(s) -> date:
    """Parse date string YYYY-MM-DD."""
    if isinstance(s, date):
        return s
    parts = str(s).strip().split("-")
    return date(int(parts[0]), int(parts[1]), int(parts[2]))


@dataclass(frozen=True)
class GeneratorSettings:
    availability_policy: str = "simple"
    default_match_time: time = time(10, 0)
    default_start_time: time = time(9, 0)
    default_end_time: time = time(18, 0)
    match_length_minutes: int = 60
    min_teams: int = 2
    placeholder_date: date = PLACEHOLDER_DATE


@dataclass(frozen=True)
class Settings:
    database: str = "leaguecal.db"
    log_level: str = "INFO"
    generator: GeneratorSettings = field(default_factory=GeneratorSettings)


def _load_generator(raw: dict) -> GeneratorSettings:
    defaults = GeneratorSettings()
    policy = str(raw.get("availability_policy", defaults.availability_policy)).lower()
    if policy not in POLICIES:
        raise ValueError(
            f"availability_policy must be one of {', '.join(POLICIES)}, got {policy!r}"
        )
    gen = GeneratorSettings(
        availability_policy=policy,
        default_match_time=parse_time(raw.get("default_match_time", defaults.default_match_time)),
        default_start_time=parse_time(raw.get("default_start_time", defaults.default_start_time)),
        default_end_time=parse_time(raw.get("default_end_time", defaults.default_end_time)),
        match_length_minutes=int(raw.get("match_length_minutes", defaults.match_length_minutes)),
        min_teams=int(raw.get("min_teams", defaults.min_teams)),
        placeholder_date=parse_date(raw.get("placeholder_date", defaults.placeholder_date)),
    )
    if gen.match_length_minutes <= 0:
        raise ValueError("match_length_minutes must be positive")
    if gen.min_teams < 2:
        raise ValueError("min_teams must be at least 2")
    return gen


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings YAML, falling back to defaults when the file is absent.

    LEAGUECAL_DB and LEAGUECAL_LOG_LEVEL override the file.
    """
    raw = {}
    if path is not None and Path(path).exists():
        with open(path) as f:
            raw = yaml.safe_load(f) or {}

    settings = Settings(
        database=str(raw.get("database", Settings.database)),
        log_level=str(raw.get("log_level", Settings.log_level)).upper(),
        generator=_load_generator(raw.get("generator") or {}),
    )

    env_db = os.getenv("LEAGUECAL_DB")
    if env_db:
        settings = replace(settings, database=env_db)
    env_level = os.getenv("LEAGUECAL_LOG_LEVEL")
    if env_level:
        settings = replace(settings, log_level=env_level.upper())
    return settings


def _parse_window(value) -> tuple[bool, time | None, time | None]:
    """Availability entry -> (is_available, start, end).

    Accepts false/true, '9am-6pm', or {start: ..., end: ..., available: ...}.
    Missing bounds stay None so the loader can apply its defaults.
    """
    if value is None or value is False:
        return False, None, None
    if value is True:
        return True, None, None
    if isinstance(value, dict):
        available = bool(value.get("available", True))
        start = parse_time(value["start"]) if value.get("start") is not None else None
        end = parse_time(value["end"]) if value.get("end") is not None else None
        return available, start, end
    s = str(value)
    if "-" in s:
        start_s, end_s = s.split("-", 1)
        return True, parse_time(start_s), parse_time(end_s)
    raise ValueError(f"Cannot parse availability window {value!r}")


def load_fixture(path: str | Path) -> dict:
    """Load a league fixture YAML.

    Returns dict with:
    - leagues: list of {id, name, start_date, end_date}
    - teams: list of {id, name, league_id, level, gender}
    - members: list of (team_id, user_id)
    - availability: list of (team_id, day_name, is_available, start, end)
    """
    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    leagues = []
    teams = []
    members = []
    availability = []
    errors = []
    seen_teams = set()

    for ldata in raw.get("leagues", []):
        league_id = str(ldata["id"])
        leagues.append({
            "id": league_id,
            "name": ldata.get("name", league_id),
            "start_date": parse_date(ldata["start_date"]) if ldata.get("start_date") else None,
            "end_date": parse_date(ldata["end_date"]) if ldata.get("end_date") else None,
        })

        for tdata in ldata.get("teams", []):
            team_id = str(tdata["id"])
            if team_id in seen_teams:
                errors.append(f"Team {team_id} listed more than once")
                continue
            seen_teams.add(team_id)
            teams.append({
                "id": team_id,
                "name": tdata.get("name", team_id),
                "league_id": league_id,
                "level": str(tdata.get("level", "")),
                "gender": str(tdata.get("gender", "")),
            })
            for user_id in tdata.get("members", []):
                members.append((team_id, str(user_id)))
            for day_name, value in (tdata.get("availability") or {}).items():
                # Day names are stored as written; the loader rejects bad ones.
                is_available, start, end = _parse_window(value)
                availability.append((team_id, str(day_name).lower(), is_available, start, end))

    if errors:
        raise ValueError("Fixture validation errors:\n  " + "\n  ".join(errors))

    return {
        "leagues": leagues,
        "teams": teams,
        "members": members,
        "availability": availability,
    }
