import os
import sqlite3
from typing import Optional

from .config import settings

SCHEMA = """
CREATE TABLE IF NOT EXISTS vocabularies (
    id TEXT PRIMARY KEY,
    word TEXT NOT NULL UNIQUE,
    meaning TEXT NOT NULL,
    part_of_speech TEXT,
    example_source TEXT,
    example_target TEXT,
    image_url TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS synonyms (
    id TEXT PRIMARY KEY,
    vocabulary_id TEXT NOT NULL REFERENCES vocabularies(id) ON DELETE CASCADE,
    word TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS ix_synonyms_vocabulary_id ON synonyms (vocabulary_id);

CREATE TABLE IF NOT EXISTS review_sessions (
    id TEXT PRIMARY KEY,
    total_questions INTEGER NOT NULL CHECK (total_questions >= 1),
    correct_answers INTEGER NOT NULL DEFAULT 0
        CHECK (correct_answers >= 0 AND correct_answers <= total_questions),
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS review_questions (
    id TEXT PRIMARY KEY,
    review_session_id TEXT NOT NULL REFERENCES review_sessions(id) ON DELETE CASCADE,
    vocabulary_id TEXT REFERENCES vocabularies(id) ON DELETE SET NULL,
    position INTEGER NOT NULL,
    user_answer_word TEXT,
    user_answer_synonyms TEXT,
    is_correct INTEGER,
    answered_at TEXT,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS ix_review_questions_session ON review_questions (review_session_id);
"""


def get_db_connection(db_path: Optional[str] = None, timeout: Optional[float] = None):
    """Establishes a connection to the SQLite database."""
    if db_path is None:
        db_path = settings.database_path
    if timeout is None:
        timeout = settings.DB_TIMEOUT_SECONDS
    conn = sqlite3.connect(db_path, timeout=timeout)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def create_log_table(db_path: Optional[str] = None):
    """Creates the log table if it doesn't exist."""
    conn = get_db_connection(db_path)
    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
                level TEXT,
                logger TEXT,
                message TEXT
            );
        """
        )
    conn.close()


def create_tables(db_path: Optional[str] = None):
    """Creates the vocabulary and review tables if they don't exist."""
    conn = get_db_connection(db_path)
    with conn:
        conn.executescript(SCHEMA)
    conn.close()


def init_db(db_path: Optional[str] = None):
    """Initializes the database and creates necessary tables."""
    if db_path is None:
        db_path = settings.database_path
    directory = os.path.dirname(db_path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory)
    create_tables(db_path)
    create_log_table(db_path)
