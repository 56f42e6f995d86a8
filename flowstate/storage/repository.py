"""
Repository pattern for data access.

Stores profiles, the last daily and weekly logs, and streak counters,
each keyed by user id.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from typing import Dict, Iterator, List, Mapping, Optional

from flowstate.core.streak import StreakState

from .db import DEFAULT_DB_PATH, get_connection
from .models import LeaderboardEntry, PeriodLog, StoredState, UserProfile

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a read or write against the database fails."""


class ProfileNotFound(StorageError):
    """Raised when no profile exists for a user id."""
    def __init__(self, user_id: str):
        super().__init__(f"No profile for user: {user_id}")
        self.user_id = user_id


class StreakConflict(StorageError):
    """Raised when the stored streak changed since it was loaded."""
    def __init__(self, user_id: str):
        super().__init__(f"Streak for user {user_id} was updated concurrently")
        self.user_id = user_id


class FlowStateRepository:
    """Repository for user dashboard data.

    Each write opens its own connection and transaction, so a failed write
    never leaves a partial row behind.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        """Initialize the repository with a database path.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        conn = get_connection(self.db_path)
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(str(e)) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def create_profile(self, profile: UserProfile) -> None:
        """Insert or replace a user's profile.

        Args:
            profile: Profile to store
        """
        with self._transaction() as conn:
            conn.execute("""
                INSERT INTO profiles
                (user_id, username, household_size, monthly_usage, city, country)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    username = excluded.username,
                    household_size = excluded.household_size,
                    city = excluded.city,
                    country = excluded.country
            """, (
                profile.user_id,
                profile.username,
                profile.household_size,
                profile.monthly_usage,
                profile.city,
                profile.country
            ))
        logger.debug("Stored profile for %s", profile.user_id)

    def get_profile(self, user_id: str) -> UserProfile:
        """Get a user's profile.

        Raises:
            ProfileNotFound: If the user has no profile
        """
        with self._transaction() as conn:
            return self._fetch_profile(conn, user_id)

    def load_state(self, user_id: str) -> StoredState:
        """Load everything stored for a user's dashboard.

        Args:
            user_id: User identity

        Returns:
            StoredState; logs and streak are None when never submitted

        Raises:
            ProfileNotFound: If the user has no profile
        """
        with self._transaction() as conn:
            profile = self._fetch_profile(conn, user_id)
            daily = self._fetch_log(conn, "daily_log", user_id)
            weekly = self._fetch_log(conn, "weekly_log", user_id)

            row = conn.execute("""
                SELECT current_streak, longest_streak, last_log_date, total_points
                FROM streak_data WHERE user_id = ?
            """, (user_id,)).fetchone()
            streak = None
            if row:
                streak = StreakState(
                    current_streak=row[0],
                    longest_streak=row[1],
                    last_log_date=date.fromisoformat(row[2]) if row[2] else None,
                    total_points=row[3]
                )

        return StoredState(profile=profile, daily=daily, weekly=weekly, streak=streak)

    def save_daily_log(self, user_id: str, inputs: Mapping[str, float], timestamp: datetime) -> None:
        """Store the submitted daily hygiene inputs.

        Args:
            user_id: User identity
            inputs: Daily field values
            timestamp: Submission time
        """
        self._save_log("daily_log", user_id, inputs, timestamp)

    def save_weekly_log(self, user_id: str, combined_inputs: Mapping[str, float], timestamp: datetime) -> None:
        """Store the submitted weekly log with the combined daily and weekly inputs.

        Args:
            user_id: User identity
            combined_inputs: All usage field values
            timestamp: Submission time
        """
        self._save_log("weekly_log", user_id, combined_inputs, timestamp)

    def save_streak(
        self,
        user_id: str,
        state: StreakState,
        expected_last_log_date: Optional[date] = None
    ) -> None:
        """Store streak counters if nobody else changed them first.

        The write only applies while the stored last_log_date still equals
        `expected_last_log_date`, so two concurrent submissions cannot both
        add a point.

        Args:
            user_id: User identity
            state: New streak state
            expected_last_log_date: last_log_date the new state was computed from

        Raises:
            StreakConflict: If the stored streak moved on in the meantime
        """
        with self._transaction() as conn:
            self._fetch_profile(conn, user_id)
            self._swap_streak(conn, user_id, state, expected_last_log_date)
        logger.debug("Stored streak for %s: %s", user_id, state)

    def save_daily_submission(
        self,
        user_id: str,
        inputs: Mapping[str, float],
        timestamp: datetime,
        state: StreakState,
        expected_last_log_date: Optional[date] = None
    ) -> None:
        """Store a daily log and its streak update in one transaction.

        Either both rows change or neither does, so a submitted daily log
        never exists without the point it earned.

        Args:
            user_id: User identity
            inputs: Daily field values
            timestamp: Submission time
            state: New streak state
            expected_last_log_date: last_log_date the new state was computed from

        Raises:
            ProfileNotFound: If the user has no profile
            StreakConflict: If the stored streak moved on in the meantime
        """
        with self._transaction() as conn:
            self._fetch_profile(conn, user_id)
            self._upsert_log(conn, "daily_log", user_id, inputs, timestamp)
            self._swap_streak(conn, user_id, state, expected_last_log_date)
        logger.debug("Stored daily submission for %s: %s", user_id, state)

    def update_public_usage(self, user_id: str, monthly_estimate: int) -> None:
        """Publish a user's monthly usage estimate to the leaderboard.

        Raises:
            ProfileNotFound: If the user has no profile
        """
        with self._transaction() as conn:
            cursor = conn.execute(
                "UPDATE profiles SET monthly_usage = ? WHERE user_id = ?",
                (monthly_estimate, user_id)
            )
            if cursor.rowcount == 0:
                raise ProfileNotFound(user_id)

    def fetch_leaderboard(self, limit: int = 50) -> List[LeaderboardEntry]:
        """Rank users by published monthly usage, lowest first.

        Users who never published usage are left out.

        Args:
            limit: Maximum number of entries

        Returns:
            Entries ranked from 1
        """
        with self._transaction() as conn:
            rows = conn.execute("""
                SELECT user_id, username, monthly_usage
                FROM profiles
                WHERE monthly_usage > 0
                ORDER BY monthly_usage ASC, username ASC
                LIMIT ?
            """, (limit,)).fetchall()

        return [
            LeaderboardEntry(rank=i, user_id=row[0], username=row[1], monthly_usage=row[2])
            for i, row in enumerate(rows, start=1)
        ]

    def _save_log(self, table: str, user_id: str, inputs: Mapping[str, float], timestamp: datetime) -> None:
        with self._transaction() as conn:
            self._fetch_profile(conn, user_id)
            self._upsert_log(conn, table, user_id, inputs, timestamp)
        logger.debug("Stored %s for %s at %s", table, user_id, timestamp.isoformat())

    @staticmethod
    def _upsert_log(
        conn: sqlite3.Connection,
        table: str,
        user_id: str,
        inputs: Mapping[str, float],
        timestamp: datetime
    ) -> None:
        conn.execute(f"""
            INSERT INTO {table} (user_id, inputs, is_submitted, last_updated)
            VALUES (?, ?, 1, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                inputs = excluded.inputs,
                is_submitted = excluded.is_submitted,
                last_updated = excluded.last_updated
        """, (user_id, json.dumps(dict(inputs), sort_keys=True), timestamp.isoformat()))

    @staticmethod
    def _swap_streak(
        conn: sqlite3.Connection,
        user_id: str,
        state: StreakState,
        expected_last_log_date: Optional[date]
    ) -> None:
        expected = expected_last_log_date.isoformat() if expected_last_log_date else None
        last_log = state.last_log_date.isoformat() if state.last_log_date else None
        cursor = conn.execute("""
            INSERT INTO streak_data
            (user_id, current_streak, longest_streak, last_log_date, total_points)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                current_streak = excluded.current_streak,
                longest_streak = excluded.longest_streak,
                last_log_date = excluded.last_log_date,
                total_points = excluded.total_points
            WHERE streak_data.last_log_date IS ?
        """, (
            user_id,
            state.current_streak,
            state.longest_streak,
            last_log,
            state.total_points,
            expected
        ))
        # Rolls back the surrounding transaction
        if cursor.rowcount == 0:
            raise StreakConflict(user_id)

    @staticmethod
    def _fetch_profile(conn: sqlite3.Connection, user_id: str) -> UserProfile:
        row = conn.execute("""
            SELECT user_id, username, household_size, monthly_usage, city, country
            FROM profiles WHERE user_id = ?
        """, (user_id,)).fetchone()
        if row is None:
            raise ProfileNotFound(user_id)
        return UserProfile(
            user_id=row[0],
            username=row[1],
            household_size=row[2],
            monthly_usage=row[3],
            city=row[4],
            country=row[5]
        )

    @staticmethod
    def _fetch_log(conn: sqlite3.Connection, table: str, user_id: str) -> Optional[PeriodLog]:
        row = conn.execute(
            f"SELECT inputs, is_submitted, last_updated FROM {table} WHERE user_id = ?",
            (user_id,)
        ).fetchone()
        if row is None:
            return None
        inputs: Dict[str, float] = json.loads(row[0])
        return PeriodLog(
            inputs=inputs,
            is_submitted=bool(row[1]),
            last_updated=datetime.fromisoformat(row[2])
        )


# Global repository instance
_default_repository: Optional[FlowStateRepository] = None


def get_repository(db_path: str = DEFAULT_DB_PATH) -> FlowStateRepository:
    """Get a repository instance.

    Returns the process-wide repository, creating it on first use.

    Args:
        db_path: Path to SQLite database file

    Returns:
        An instance of FlowStateRepository
    """
    global _default_repository
    if _default_repository is None or _default_repository.db_path != db_path:
        _default_repository = FlowStateRepository(db_path)
    return _default_repository


def initialize_schema(db_path: str = DEFAULT_DB_PATH) -> None:
    """Create the FlowState tables if they don't exist.

    Every per-user table has one row per user; submissions upsert it.

    Args:
        db_path: Path to SQLite database file
    """
    conn = get_connection(db_path)
    try:
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS profiles (
                user_id TEXT PRIMARY KEY,
                username TEXT NOT NULL,
                household_size INTEGER NOT NULL DEFAULT 1,
                monthly_usage INTEGER NOT NULL DEFAULT 0,
                city TEXT NOT NULL DEFAULT '',
                country TEXT NOT NULL DEFAULT ''
            );
            CREATE TABLE IF NOT EXISTS daily_log (
                user_id TEXT PRIMARY KEY REFERENCES profiles(user_id),
                inputs TEXT NOT NULL,
                is_submitted INTEGER NOT NULL DEFAULT 0,
                last_updated TEXT NOT NULL
            );
            CREATE TABLE IF NOT EXISTS weekly_log (
                user_id TEXT PRIMARY KEY REFERENCES profiles(user_id),
                inputs TEXT NOT NULL,
                is_submitted INTEGER NOT NULL DEFAULT 0,
                last_updated TEXT NOT NULL
            );
            CREATE TABLE IF NOT EXISTS streak_data (
                user_id TEXT PRIMARY KEY REFERENCES profiles(user_id),
                current_streak INTEGER NOT NULL DEFAULT 0,
                longest_streak INTEGER NOT NULL DEFAULT 0,
                last_log_date TEXT,
                total_points INTEGER NOT NULL DEFAULT 0
            );
        """)
        conn.commit()
    finally:
        conn.close()
