import sqlite3
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schema.sql"

TABLES = (
    "youtube_videos", "reel_analyses", "sync_logs", "profile", "instagram_posts",
)


def get_connection(db_path: str) -> sqlite3.Connection:
    """Open the portfolio database (WAL, foreign keys, dict-like rows).

    The connection may be shared across request threads; the Repository
    serializes access to it.
    """
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, timeout=30, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode = WAL")
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def _schema_script() -> str:
    # PRAGMAs are applied per connection in get_connection
    return "\n".join(
        line for line in SCHEMA_PATH.read_text().splitlines()
        if not line.strip().upper().startswith("PRAGMA")
    )


def init_database(db_path: str) -> sqlite3.Connection:
    """Create every table in schema.sql if needed and check they all exist."""
    conn = get_connection(db_path)
    conn.executescript(_schema_script())

    present = {
        row["name"]
        for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
    }
    missing = [t for t in TABLES if t not in present]
    if missing:
        conn.close()
        raise sqlite3.OperationalError(f"Schema incomplete, missing tables: {missing}")

    logger.debug(f"Database ready at {db_path}")
    return conn
