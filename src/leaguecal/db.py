"""SQLite storage for leagues, teams, availability and generated calendars."""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, time
from typing import ContextManager, Iterable, Optional, Protocol

from leaguecal.models import (
    PLACEHOLDER_DATE, ByeWeek, GeneratedMatch, League, Match, Team,
)

logger = logging.getLogger("leaguecal.db")


class Store(Protocol):
    """Storage operations the generator and calendar services rely on."""

    def get_league(self, league_id: str) -> Optional[League]: ...
    def get_teams_for_league(self, league_id: str) -> list[Team]: ...
    def get_team_availability(self, league_id: str) -> list[dict]: ...
    def get_team_roster_user_ids(self, team_id: str) -> list[str]: ...
    def get_matches_on_date(self, d: date,
                            exclude_match_id: Optional[str] = None) -> list[Match]: ...
    def insert_matches(self, matches: Iterable[GeneratedMatch], league_id: str) -> None: ...
    def insert_bye_weeks(self, byes: Iterable[ByeWeek], league_id: str) -> None: ...
    def update_league_dates(self, league_id: str, start: date, end: date) -> None: ...
    def transaction(self) -> ContextManager: ...


SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS leagues (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        start_date TEXT,
        end_date TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS teams (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        league_id TEXT NOT NULL,
        level TEXT NOT NULL DEFAULT '',
        gender TEXT NOT NULL DEFAULT '',
        FOREIGN KEY (league_id) REFERENCES leagues(id),
        UNIQUE (league_id, name)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS team_members (
        team_id TEXT NOT NULL,
        user_id TEXT NOT NULL,
        PRIMARY KEY (team_id, user_id),
        FOREIGN KEY (team_id) REFERENCES teams(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS team_availability (
        team_id TEXT NOT NULL,
        day_of_week TEXT NOT NULL,
        is_available INTEGER NOT NULL DEFAULT 0,
        start_time TEXT,
        end_time TEXT,
        UNIQUE (team_id, day_of_week),
        FOREIGN KEY (team_id) REFERENCES teams(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS matches (
        id TEXT PRIMARY KEY,
        league_id TEXT NOT NULL,
        home_team_id TEXT NOT NULL,
        away_team_id TEXT NOT NULL,
        match_date TEXT NOT NULL,
        match_time TEXT NOT NULL,
        week_number INTEGER NOT NULL,
        FOREIGN KEY (league_id) REFERENCES leagues(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS bye_weeks (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        league_id TEXT NOT NULL,
        team_id TEXT NOT NULL,
        week_number INTEGER NOT NULL,
        UNIQUE (league_id, team_id, week_number)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_matches_date ON matches(match_date)",
]


def _to_date(value) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _to_time(value) -> Optional[time]:
    return time.fromisoformat(value) if value else None


def _row_to_match(row: sqlite3.Row) -> Match:
    return Match(
        id=row["id"],
        league_id=row["league_id"],
        home_team_id=row["home_team_id"],
        away_team_id=row["away_team_id"],
        match_date=_to_date(row["match_date"]),
        match_time=_to_time(row["match_time"]),
        week_number=row["week_number"],
    )


class SQLiteStore:
    """Store backed by a single sqlite3 connection.

    Writes commit immediately unless they run inside transaction(), in
    which case the outermost block commits or rolls back as a unit.
    """

    def __init__(self, db_path: str = ":memory:",
                 placeholder_date: date = PLACEHOLDER_DATE):
        self.db_path = db_path
        self.placeholder_date = placeholder_date
        self.conn = sqlite3.connect(db_path)
        self.conn.row_factory = sqlite3.Row
        self._depth = 0

    def close(self):
        self.conn.close()

    def init_db(self):
        """Create tables if they don't exist."""
        logger.info(f"Initializing database at {self.db_path}")
        for statement in SCHEMA:
            self.conn.execute(statement)
        self.conn.commit()

    @contextmanager
    def transaction(self):
        self._depth += 1
        try:
            yield self
        except Exception:
            self._depth -= 1
            if self._depth == 0:
                logger.warning("Rolling back transaction")
                self.conn.rollback()
            raise
        else:
            self._depth -= 1
            if self._depth == 0:
                self.conn.commit()

    def _commit(self):
        if self._depth == 0:
            self.conn.commit()

    # ---------------------------------------------------------------
    # Seeding
    # ---------------------------------------------------------------

    def add_league(self, league_id: str, name: str,
                   start_date: Optional[date] = None,
                   end_date: Optional[date] = None):
        self.conn.execute(
            "INSERT INTO leagues (id, name, start_date, end_date) VALUES (?, ?, ?, ?)",
            (league_id, name,
             start_date.isoformat() if start_date else None,
             end_date.isoformat() if end_date else None),
        )
        self._commit()

    def add_team(self, team_id: str, name: str, league_id: str,
                 level: str = "", gender: str = ""):
        self.conn.execute(
            "INSERT INTO teams (id, name, league_id, level, gender) VALUES (?, ?, ?, ?, ?)",
            (team_id, name, league_id, level, gender),
        )
        self._commit()

    def add_member(self, team_id: str, user_id: str):
        self.conn.execute(
            "INSERT OR IGNORE INTO team_members (team_id, user_id) VALUES (?, ?)",
            (team_id, user_id),
        )
        self._commit()

    def set_availability(self, team_id: str, day_of_week: str,
                         is_available: bool,
                         start_time: Optional[time] = None,
                         end_time: Optional[time] = None):
        """Insert or replace one (team, day) availability record."""
        self.conn.execute(
            """
            INSERT INTO team_availability
                (team_id, day_of_week, is_available, start_time, end_time)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT (team_id, day_of_week) DO UPDATE SET
                is_available = excluded.is_available,
                start_time = excluded.start_time,
                end_time = excluded.end_time
            """,
            (team_id, day_of_week, int(is_available),
             start_time.isoformat() if start_time else None,
             end_time.isoformat() if end_time else None),
        )
        self._commit()

    def load_fixture(self, fixture: dict):
        """Insert everything from config.load_fixture() in one transaction."""
        with self.transaction():
            for league in fixture["leagues"]:
                self.add_league(league["id"], league["name"],
                                league["start_date"], league["end_date"])
            for team in fixture["teams"]:
                self.add_team(team["id"], team["name"], team["league_id"],
                              team["level"], team["gender"])
            for team_id, user_id in fixture["members"]:
                self.add_member(team_id, user_id)
            for team_id, day, is_available, start, end in fixture["availability"]:
                self.set_availability(team_id, day, is_available, start, end)
        logger.info(
            f"Loaded {len(fixture['leagues'])} leagues, "
            f"{len(fixture['teams'])} teams"
        )

    # ---------------------------------------------------------------
    # Reads used by the generator
    # ---------------------------------------------------------------

    def get_league(self, league_id: str) -> Optional[League]:
        row = self.conn.execute(
            "SELECT * FROM leagues WHERE id = ?", (league_id,)
        ).fetchone()
        if row is None:
            return None
        return League(
            id=row["id"], name=row["name"],
            start_date=_to_date(row["start_date"]),
            end_date=_to_date(row["end_date"]),
        )

    def get_teams_for_league(self, league_id: str) -> list[Team]:
        rows = self.conn.execute(
            "SELECT * FROM teams WHERE league_id = ? ORDER BY rowid", (league_id,)
        ).fetchall()
        return [
            Team(id=r["id"], name=r["name"], league_id=r["league_id"],
                 level=r["level"], gender=r["gender"])
            for r in rows
        ]

    def get_team_availability(self, league_id: str) -> list[dict]:
        """Teams LEFT JOIN availability; teams without records yield one row of NULLs."""
        rows = self.conn.execute(
            """
            SELECT t.id AS team_id, t.name AS team_name,
                   a.day_of_week, a.is_available, a.start_time, a.end_time
            FROM teams t
            LEFT JOIN team_availability a ON a.team_id = t.id
            WHERE t.league_id = ?
            ORDER BY t.rowid, a.rowid
            """,
            (league_id,),
        ).fetchall()
        return [
            {
                "team_id": r["team_id"],
                "team_name": r["team_name"],
                "day_of_week": r["day_of_week"],
                "is_available": bool(r["is_available"]) if r["is_available"] is not None else None,
                "start_time": _to_time(r["start_time"]),
                "end_time": _to_time(r["end_time"]),
            }
            for r in rows
        ]

    def get_team_roster_user_ids(self, team_id: str) -> list[str]:
        rows = self.conn.execute(
            "SELECT user_id FROM team_members WHERE team_id = ? ORDER BY user_id",
            (team_id,),
        ).fetchall()
        return [r["user_id"] for r in rows]

    def get_matches_on_date(self, d: date,
                            exclude_match_id: Optional[str] = None) -> list[Match]:
        """All dated matches (any league) on d, placeholders excluded."""
        rows = self.conn.execute(
            """
            SELECT * FROM matches
            WHERE match_date = ? AND match_date < ? AND id != ?
            """,
            (d.isoformat(), self.placeholder_date.isoformat(), exclude_match_id or ""),
        ).fetchall()
        return [_row_to_match(r) for r in rows]

    def get_match(self, match_id: str) -> Optional[Match]:
        row = self.conn.execute(
            "SELECT * FROM matches WHERE id = ?", (match_id,)
        ).fetchone()
        return _row_to_match(row) if row else None

    def get_matches_for_league(self, league_id: str) -> list[Match]:
        rows = self.conn.execute(
            """
            SELECT * FROM matches WHERE league_id = ?
            ORDER BY week_number, match_date, match_time
            """,
            (league_id,),
        ).fetchall()
        return [_row_to_match(r) for r in rows]

    def get_bye_weeks_for_league(self, league_id: str) -> list[ByeWeek]:
        rows = self.conn.execute(
            """
            SELECT b.team_id, b.week_number, t.name AS team_name
            FROM bye_weeks b JOIN teams t ON t.id = b.team_id
            WHERE b.league_id = ?
            ORDER BY b.week_number, b.id
            """,
            (league_id,),
        ).fetchall()
        return [ByeWeek(team_id=r["team_id"], week_number=r["week_number"],
                        team_name=r["team_name"]) for r in rows]

    # ---------------------------------------------------------------
    # Writes
    # ---------------------------------------------------------------

    def insert_matches(self, matches: Iterable[GeneratedMatch], league_id: str):
        records = [
            (m.id, league_id, m.home_team_id, m.away_team_id,
             m.match_date.isoformat(), m.match_time.isoformat(), m.week_number)
            for m in matches
        ]
        self.conn.executemany(
            """
            INSERT INTO matches
                (id, league_id, home_team_id, away_team_id, match_date, match_time, week_number)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            records,
        )
        self._commit()
        logger.info(f"Inserted {len(records)} matches for league {league_id}")

    def insert_bye_weeks(self, byes: Iterable[ByeWeek], league_id: str):
        records = [(league_id, b.team_id, b.week_number) for b in byes]
        self.conn.executemany(
            "INSERT INTO bye_weeks (league_id, team_id, week_number) VALUES (?, ?, ?)",
            records,
        )
        self._commit()
        logger.info(f"Inserted {len(records)} bye weeks for league {league_id}")

    def update_league_dates(self, league_id: str, start: date, end: date):
        self.conn.execute(
            "UPDATE leagues SET start_date = ?, end_date = ? WHERE id = ?",
            (start.isoformat(), end.isoformat(), league_id),
        )
        self._commit()

    def update_match_date(self, match_id: str, match_date: date, match_time: time):
        self.conn.execute(
            "UPDATE matches SET match_date = ?, match_time = ? WHERE id = ?",
            (match_date.isoformat(), match_time.isoformat(), match_id),
        )
        self._commit()

    def delete_calendar(self, league_id: str) -> int:
        """Remove every match and bye of a league; returns matches deleted."""
        self.conn.execute("DELETE FROM bye_weeks WHERE league_id = ?", (league_id,))
        cur = self.conn.execute("DELETE FROM matches WHERE league_id = ?", (league_id,))
        self._commit()
        return cur.rowcount
