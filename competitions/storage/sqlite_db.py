"""
SQLite storage for competitions.

Provides:
- Wholesale JSON storage of each competition with everything it owns
- Atomic transactions for data safety
- Concurrent read access via WAL mode

This is the SQLite implementation of the CompetitionRepository.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Iterator, List, Dict
import threading

from pydantic import ValidationError

from competitions.models.competition import League, parse_competition
from .base import CompetitionRepository
from .exceptions import QueryError, SchemaError

logger = logging.getLogger(__name__)


class SQLiteRepository(CompetitionRepository):
    """
    SQLite repository for competitions, teams and leagues.
    Thread-safe with connection per thread.
    """

    SCHEMA_VERSION = 1

    def __init__(self, db_path: str = "data/competitions.db"):
        """
        Create SQLite repository instance.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = Path(db_path)
        self._local = threading.local()
        self._initialized = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def initialize(self) -> None:
        """Initialize the database connection and schema."""
        if self._initialized:
            return

        # Ensure parent directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            self._init_schema()
        except sqlite3.Error as e:
            raise SchemaError(f"Failed to initialize schema: {e}") from e
        self._initialized = True

    def close(self) -> None:
        """Close database connections and clean up resources."""
        if hasattr(self._local, 'conn') and self._local.conn is not None:
            self._local.conn.close()
            self._local.conn = None

    def health_check(self) -> bool:
        """Check if the database connection is healthy."""
        try:
            conn = self._get_connection()
            conn.execute("SELECT 1")
            return True
        except sqlite3.Error:
            return False

    # =========================================================================
    # CONNECTION MANAGEMENT
    # =========================================================================

    def _get_connection(self) -> sqlite3.Connection:
        """Get thread-local database connection."""
        if not hasattr(self._local, 'conn') or self._local.conn is None:
            self._local.conn = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,
                timeout=30.0
            )
            self._local.conn.row_factory = sqlite3.Row
            # Enable WAL mode for better concurrent access
            self._local.conn.execute("PRAGMA journal_mode=WAL")
            self._local.conn.execute("PRAGMA synchronous=NORMAL")
        return self._local.conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database transactions."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def _init_schema(self) -> None:
        """Initialize database schema."""
        with self.transaction() as conn:
            conn.executescript('''
                -- Metadata table
                CREATE TABLE IF NOT EXISTS metadata (
                    key TEXT PRIMARY KEY,
                    value TEXT,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );

                -- Competitions, stored wholesale with pools, matchups and standings
                CREATE TABLE IF NOT EXISTS competitions (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    format TEXT NOT NULL,
                    league_id TEXT,
                    data JSON NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );

                -- Team registry
                CREATE TABLE IF NOT EXISTS teams (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );

                -- Leagues (seasons)
                CREATE TABLE IF NOT EXISTS leagues (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    data JSON NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );

                CREATE INDEX IF NOT EXISTS idx_competitions_league ON competitions(league_id);
            ''')

            conn.execute(
                "INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)",
                ('schema_version', str(self.SCHEMA_VERSION))
            )

    def _decode_competition(self, row: sqlite3.Row):
        try:
            return parse_competition(row['data'])
        except ValidationError as e:
            raise QueryError(f"Stored competition {row['id']} is invalid: {e}") from e

    # =========================================================================
    # COMPETITIONS
    # =========================================================================

    def save_competition(self, competition) -> None:
        """Insert or replace a competition."""
        with self.transaction() as conn:
            conn.execute('''
                INSERT OR REPLACE INTO competitions (id, name, format, league_id, data, updated_at)
                VALUES (?, ?, ?, ?, ?, CURRENT_TIMESTAMP)
            ''', (
                competition.id,
                competition.name,
                competition.format,
                competition.league_id,
                competition.model_dump_json(),
            ))

    def get_competition(self, competition_id: str):
        """Load a competition by id."""
        conn = self._get_connection()
        row = conn.execute(
            'SELECT id, data FROM competitions WHERE id = ?', (competition_id,)
        ).fetchone()
        return self._decode_competition(row) if row else None

    def list_competitions(self, league_id: Optional[str] = None) -> List:
        """List competitions ordered by name."""
        conn = self._get_connection()
        if league_id is None:
            rows = conn.execute('SELECT id, data FROM competitions ORDER BY name').fetchall()
        else:
            rows = conn.execute(
                'SELECT id, data FROM competitions WHERE league_id = ? ORDER BY name',
                (league_id,)
            ).fetchall()
        return [self._decode_competition(row) for row in rows]

    def delete_competition(self, competition_id: str) -> bool:
        """Delete a competition; its pools and matchups live in the same row."""
        with self.transaction() as conn:
            cursor = conn.execute('DELETE FROM competitions WHERE id = ?', (competition_id,))
        return cursor.rowcount > 0

    # =========================================================================
    # TEAMS
    # =========================================================================

    def save_team(self, team_id: str, name: str) -> None:
        with self.transaction() as conn:
            conn.execute('''
                INSERT OR REPLACE INTO teams (id, name, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
            ''', (team_id, name))

    def get_team_names(self, team_ids: Optional[List[str]] = None) -> Dict[str, str]:
        conn = self._get_connection()
        if team_ids is None:
            rows = conn.execute('SELECT id, name FROM teams').fetchall()
        elif not team_ids:
            return {}
        else:
            placeholders = ','.join('?' * len(team_ids))
            rows = conn.execute(
                f'SELECT id, name FROM teams WHERE id IN ({placeholders})', list(team_ids)
            ).fetchall()
        return {row['id']: row['name'] for row in rows}

    # =========================================================================
    # LEAGUES
    # =========================================================================

    def save_league(self, league: League) -> None:
        with self.transaction() as conn:
            conn.execute('''
                INSERT OR REPLACE INTO leagues (id, name, data, updated_at)
                VALUES (?, ?, ?, CURRENT_TIMESTAMP)
            ''', (league.id, league.name, league.model_dump_json()))

    def get_league(self, league_id: str) -> Optional[League]:
        conn = self._get_connection()
        row = conn.execute('SELECT id, data FROM leagues WHERE id = ?', (league_id,)).fetchone()
        if row is None:
            return None
        try:
            return League.model_validate_json(row['data'])
        except ValidationError as e:
            raise QueryError(f"Stored league {league_id} is invalid: {e}") from e

    # =========================================================================
    # MAINTENANCE
    # =========================================================================

    def get_database_size(self) -> int:
        """Get database file size in bytes."""
        if self.db_path.exists():
            return self.db_path.stat().st_size
        return 0
