"""SQLite-backed storage for vocabularies and review sessions.

One ``VocabularyStore`` is built at startup and handed to the services. Each
call opens its own short-lived connection, so the store is safe to share
between the threadpool workers serving requests.
"""

import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .database import get_db_connection, init_db
from .errors import ConflictError, DependencyError
from .models import Synonym, Vocabulary

logger = logging.getLogger(__name__)

VOCABULARY_FIELDS = (
    "word",
    "meaning",
    "part_of_speech",
    "example_source",
    "example_target",
    "image_url",
)


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


def _lower(value):
    return value.lower() if isinstance(value, str) else value


class VocabularyStore:
    def __init__(self, db_path: str, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout

    def init_schema(self) -> None:
        try:
            init_db(self.db_path)
        except sqlite3.Error as exc:
            raise DependencyError("database_unavailable", str(exc)) from exc
        logger.info(f"Database ready at {self.db_path}")

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection; commit on success, roll back on error."""
        try:
            conn = get_db_connection(self.db_path, self.timeout)
            # sqlite's lower() only folds ASCII, Vietnamese meanings need Python's.
            conn.create_function("py_lower", 1, _lower, deterministic=True)
        except sqlite3.Error as exc:
            raise DependencyError("database_unavailable", str(exc)) from exc
        try:
            with conn:
                yield conn
        except sqlite3.IntegrityError as exc:
            if "vocabularies.word" in str(exc):
                raise ConflictError("vocabulary_exists", "Vocabulary already exists") from exc
            raise DependencyError("integrity_error", str(exc)) from exc
        except sqlite3.Error as exc:
            raise DependencyError("database_error", str(exc)) from exc
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Vocabularies
    # ------------------------------------------------------------------
    def count_vocabularies(self) -> int:
        with self.transaction() as conn:
            return conn.execute("SELECT COUNT(*) FROM vocabularies").fetchone()[0]

    def list_vocabulary_ids(self) -> List[str]:
        with self.transaction() as conn:
            rows = conn.execute("SELECT id FROM vocabularies ORDER BY rowid").fetchall()
        return [row["id"] for row in rows]

    def search_vocabularies(
        self,
        word: Optional[str] = None,
        meaning: Optional[str] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Vocabulary], int]:
        """Case-insensitive substring search, newest first, with the total match count."""
        clauses = []
        params: List[Any] = []
        if word:
            clauses.append("instr(py_lower(word), ?) > 0")
            params.append(word.lower())
        if meaning:
            clauses.append("instr(py_lower(meaning), ?) > 0")
            params.append(meaning.lower())
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with self.transaction() as conn:
            total = conn.execute(
                f"SELECT COUNT(*) FROM vocabularies {where}", params
            ).fetchone()[0]
            rows = conn.execute(
                f"SELECT * FROM vocabularies {where} "
                "ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?",
                [*params, limit, offset],
            ).fetchall()
            entries = self._attach_synonyms(conn, rows)
        return entries, total

    def get_vocabulary(self, vocabulary_id: str) -> Optional[Vocabulary]:
        with self.transaction() as conn:
            return self._fetch_vocabulary(conn, vocabulary_id)

    def get_vocabularies(self, vocabulary_ids: Sequence[str]) -> Dict[str, Vocabulary]:
        if not vocabulary_ids:
            return {}
        placeholders = ", ".join("?" for _ in vocabulary_ids)
        with self.transaction() as conn:
            rows = conn.execute(
                f"SELECT * FROM vocabularies WHERE id IN ({placeholders})",
                list(vocabulary_ids),
            ).fetchall()
            entries = self._attach_synonyms(conn, rows)
        return {entry.id: entry for entry in entries}

    def insert_vocabulary(self, fields: Mapping[str, Any], synonyms: Sequence[str]) -> Vocabulary:
        vocabulary_id = new_id()
        now = utcnow_iso()
        columns = [name for name in VOCABULARY_FIELDS if name in fields]
        with self.transaction() as conn:
            conn.execute(
                f"INSERT INTO vocabularies (id, {', '.join(columns)}, created_at, updated_at) "
                f"VALUES (?, {', '.join('?' for _ in columns)}, ?, ?)",
                [vocabulary_id, *(fields[name] for name in columns), now, now],
            )
            self._insert_synonyms(conn, vocabulary_id, synonyms)
            return self._fetch_vocabulary(conn, vocabulary_id)

    def update_vocabulary(
        self,
        vocabulary_id: str,
        fields: Mapping[str, Any],
        synonyms: Optional[Sequence[str]] = None,
    ) -> Optional[Vocabulary]:
        """Apply a partial update; ``synonyms`` replaces the whole list when given."""
        columns = [name for name in VOCABULARY_FIELDS if name in fields]
        with self.transaction() as conn:
            exists = conn.execute(
                "SELECT 1 FROM vocabularies WHERE id = ?", (vocabulary_id,)
            ).fetchone()
            if not exists:
                return None
            assignments = ", ".join(f"{name} = ?" for name in columns + ["updated_at"])
            conn.execute(
                f"UPDATE vocabularies SET {assignments} WHERE id = ?",
                [*(fields[name] for name in columns), utcnow_iso(), vocabulary_id],
            )
            if synonyms is not None:
                conn.execute("DELETE FROM synonyms WHERE vocabulary_id = ?", (vocabulary_id,))
                self._insert_synonyms(conn, vocabulary_id, synonyms)
            return self._fetch_vocabulary(conn, vocabulary_id)

    def delete_vocabulary(self, vocabulary_id: str) -> bool:
        with self.transaction() as conn:
            cursor = conn.execute("DELETE FROM vocabularies WHERE id = ?", (vocabulary_id,))
            return cursor.rowcount > 0

    def _insert_synonyms(self, conn, vocabulary_id: str, synonyms: Sequence[str]) -> None:
        if synonyms:
            conn.executemany(
                "INSERT INTO synonyms (id, vocabulary_id, word) VALUES (?, ?, ?)",
                [(new_id(), vocabulary_id, synonym) for synonym in synonyms],
            )

    def _fetch_vocabulary(self, conn, vocabulary_id: str) -> Optional[Vocabulary]:
        row = conn.execute(
            "SELECT * FROM vocabularies WHERE id = ?", (vocabulary_id,)
        ).fetchone()
        if row is None:
            return None
        return self._attach_synonyms(conn, [row])[0]

    def _attach_synonyms(self, conn, rows) -> List[Vocabulary]:
        if not rows:
            return []
        ids = [row["id"] for row in rows]
        placeholders = ", ".join("?" for _ in ids)
        by_vocabulary: Dict[str, List[Synonym]] = {vocabulary_id: [] for vocabulary_id in ids}
        for syn in conn.execute(
            f"SELECT * FROM synonyms WHERE vocabulary_id IN ({placeholders}) ORDER BY rowid",
            ids,
        ):
            by_vocabulary[syn["vocabulary_id"]].append(Synonym(**dict(syn)))
        return [
            Vocabulary(**dict(row), synonyms=by_vocabulary[row["id"]]) for row in rows
        ]

    # ------------------------------------------------------------------
    # Review sessions
    # ------------------------------------------------------------------
    def create_review_session(
        self, vocabulary_ids: Sequence[str]
    ) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
        """Insert a session and its questions in one transaction."""
        session_id = new_id()
        now = utcnow_iso()
        session = {
            "id": session_id,
            "total_questions": len(vocabulary_ids),
            "correct_answers": 0,
            "created_at": now,
        }
        questions = [
            {
                "id": new_id(),
                "review_session_id": session_id,
                "vocabulary_id": vocabulary_id,
                "position": position,
                "created_at": now,
            }
            for position, vocabulary_id in enumerate(vocabulary_ids)
        ]
        with self.transaction() as conn:
            conn.execute(
                "INSERT INTO review_sessions (id, total_questions, correct_answers, created_at) "
                "VALUES (:id, :total_questions, :correct_answers, :created_at)",
                session,
            )
            conn.executemany(
                "INSERT INTO review_questions "
                "(id, review_session_id, vocabulary_id, position, created_at) "
                "VALUES (:id, :review_session_id, :vocabulary_id, :position, :created_at)",
                questions,
            )
        return session, questions

    def list_review_sessions(self, limit: int) -> List[Dict[str, Any]]:
        with self.transaction() as conn:
            rows = conn.execute(
                "SELECT * FROM review_sessions ORDER BY created_at DESC, rowid DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [dict(row) for row in rows]

    def get_review_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        with self.transaction() as conn:
            row = conn.execute(
                "SELECT * FROM review_sessions WHERE id = ?", (session_id,)
            ).fetchone()
        return dict(row) if row else None

    def get_review_questions(self, session_id: str) -> List[Dict[str, Any]]:
        with self.transaction() as conn:
            rows = conn.execute(
                "SELECT * FROM review_questions WHERE review_session_id = ? ORDER BY position",
                (session_id,),
            ).fetchall()
        return [dict(row) for row in rows]

    def get_review_question(self, session_id: str, question_id: str) -> Optional[Dict[str, Any]]:
        with self.transaction() as conn:
            row = conn.execute(
                "SELECT * FROM review_questions WHERE id = ? AND review_session_id = ?",
                (question_id, session_id),
            ).fetchone()
        return dict(row) if row else None

    def count_answered(self, session_id: str) -> int:
        with self.transaction() as conn:
            return conn.execute(
                "SELECT COUNT(*) FROM review_questions "
                "WHERE review_session_id = ? AND answered_at IS NOT NULL",
                (session_id,),
            ).fetchone()[0]

    def record_answer(
        self,
        session_id: str,
        question_id: str,
        user_word: Optional[str],
        user_synonyms: Optional[str],
        is_correct: bool,
        answered_at: Optional[str] = None,
    ) -> bool:
        """Store the answer and bump the session counter atomically.

        Returns False when the question was already answered, in which case
        nothing is written.
        """
        with self.transaction() as conn:
            cursor = conn.execute(
                "UPDATE review_questions SET user_answer_word = ?, user_answer_synonyms = ?, "
                "is_correct = ?, answered_at = ? "
                "WHERE id = ? AND review_session_id = ? AND answered_at IS NULL",
                (
                    user_word,
                    user_synonyms,
                    int(is_correct),
                    answered_at or utcnow_iso(),
                    question_id,
                    session_id,
                ),
            )
            if cursor.rowcount != 1:
                return False
            self.record_outcome(conn, session_id, is_correct)
        return True

    @staticmethod
    def record_outcome(conn, session_id: str, is_correct: bool) -> None:
        """Add one to the session's correct count when the answer was right.

        A single UPDATE, so concurrent writers cannot lose an increment.
        """
        if not is_correct:
            return
        conn.execute(
            "UPDATE review_sessions SET correct_answers = correct_answers + 1 "
            "WHERE id = ? AND correct_answers < total_questions",
            (session_id,),
        )
