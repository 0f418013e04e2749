import logging
from contextlib import closing
from typing import Optional

from .database import get_db_connection


class SQLiteHandler(logging.Handler):
    """
    Persists warning-and-above records into the ``logs`` table so failed
    answer writes can be inspected next to the review data they concern.
    """

    def __init__(self, db_path: Optional[str] = None, level=logging.WARNING):
        super().__init__(level)
        self.db_path = db_path

    def emit(self, record):
        try:
            with closing(get_db_connection(self.db_path)) as conn, conn:
                conn.execute(
                    "INSERT INTO logs (level, logger, message) VALUES (?, ?, ?)",
                    (record.levelname, record.name, self.format(record)),
                )
        except Exception:
            self.handleError(record)
