"""
SQLite connection for the FlowState store.
"""

import sqlite3
from pathlib import Path


DEFAULT_DB_PATH = "flowstate.db"

# Seconds a writer waits on a locked database before failing
BUSY_TIMEOUT = 5.0


def get_connection(db_path: str = DEFAULT_DB_PATH, timeout: float = BUSY_TIMEOUT) -> sqlite3.Connection:
    """Open the FlowState database, creating its directory if needed.

    Foreign keys are enforced so log and streak rows cannot outlive a
    profile. Concurrent sessions writing the same file wait up to
    `timeout` seconds for the lock.

    Args:
        db_path: Path to SQLite database file
        timeout: Lock wait in seconds

    Returns:
        Open connection
    """
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path), timeout=timeout)
    conn.execute("PRAGMA foreign_keys = ON")
    return conn
