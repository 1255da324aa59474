"""Focus session storage using a SQLite file."""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Union

from focus_cli.core.errors import ErrorKind, FocusError
from focus_cli.core.filters import Filter, SessionFilterField
from focus_cli.core.overlap import overlaps
from focus_cli.core.sorting import SessionSortField, Sort
from focus_cli.core.summary import summarize
from focus_cli.models.session import Session, compute_duration
from focus_cli.models.summary import DailySummary

logger = logging.getLogger(__name__)

SESSIONS_TABLE = "sessions"
_COLUMNS = "id, start_time, stop_time, duration"

_ORDER_COLUMNS = {
    SessionSortField.DATE: "start_time",
    SessionSortField.DURATION: "duration",
}


def _ts(value: datetime) -> str:
    # Fixed precision keeps text order identical to time order.
    return value.isoformat(timespec="microseconds")


class SessionStore:
    """Owns the sessions table and guards its invariants.

    At most one session may be open, and no two closed sessions may cover
    the same time. Every write checks its preconditions inside the same
    transaction before touching the table.

    The store is meant to be used as a context manager; the connection is
    committed on success, rolled back on error, and always closed.
    """

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def conn(self) -> sqlite3.Connection:
        """Get the database connection, opening it if needed."""
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
            self._create_table()
            logger.debug("Opened session store %s", self.db_path)
        return self._conn

    def __enter__(self) -> "SessionStore":
        self.conn  # open eagerly so a bad path fails here
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._conn is not None:
            if exc_type is None:
                self._conn.commit()
            else:
                self._conn.rollback()
        self.close()

    def close(self) -> None:
        """Close the connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # Writes

    def create_session(self, session_id: str, start_time: datetime) -> Session:
        """Insert an open session; fails if another one is running."""
        with self._write() as conn:
            active = self.get_open_session()
            if active is not None:
                raise FocusError(
                    ErrorKind.ALREADY_ACTIVE,
                    f"Session {active.short_id} is already running",
                    [active.id],
                )
            conn.execute(
                f"INSERT INTO {SESSIONS_TABLE} (id, start_time) VALUES (?, ?)",
                (session_id, _ts(start_time)),
            )

        logger.info("Started session %s at %s", session_id, start_time)
        return Session(id=session_id, start_time=start_time)

    def create_closed_session(
        self, session_id: str, start_time: datetime, stop_time: datetime
    ) -> Session:
        """Insert a finished session covering ``[start_time, stop_time)``."""
        with self._write() as conn:
            self._check_interval(start_time, stop_time)
            duration = compute_duration(start_time, stop_time)
            conn.execute(
                f"INSERT INTO {SESSIONS_TABLE} ({_COLUMNS}) VALUES (?, ?, ?, ?)",
                (session_id, _ts(start_time), _ts(stop_time), duration),
            )

        logger.info(
            "Added session %s from %s to %s", session_id, start_time, stop_time
        )
        return Session(
            id=session_id,
            start_time=start_time,
            stop_time=stop_time,
            duration=duration,
        )

    def close_session(self, session_id: str, stop_time: datetime) -> Session:
        """Stop the open session ``session_id`` at ``stop_time``."""
        with self._write() as conn:
            session = self._require(session_id)
            if not session.is_active:
                raise FocusError(
                    ErrorKind.NOT_FOUND,
                    f"Session {session.short_id} is not running",
                    [session.id],
                )
            self._check_interval(session.start_time, stop_time)
            duration = compute_duration(session.start_time, stop_time)
            conn.execute(
                f"UPDATE {SESSIONS_TABLE} SET stop_time = ?, duration = ? "
                "WHERE id = ?",
                (_ts(stop_time), duration, session_id),
            )

        logger.info("Stopped session %s after %ss", session_id, duration)
        return session.model_copy(
            update={"stop_time": stop_time, "duration": duration}
        )

    def update_session(
        self,
        session_id: str,
        start_time: Optional[datetime] = None,
        stop_time: Optional[datetime] = None,
    ) -> Session:
        """Replace the given bounds of a session and recompute its duration."""
        with self._write() as conn:
            session = self._require(session_id)
            new_start = start_time if start_time is not None else session.start_time
            new_stop = stop_time if stop_time is not None else session.stop_time

            duration = None
            if new_stop is not None:
                self._check_interval(new_start, new_stop, exclude_id=session_id)
                duration = compute_duration(new_start, new_stop)

            conn.execute(
                f"UPDATE {SESSIONS_TABLE} "
                "SET start_time = ?, stop_time = ?, duration = ? WHERE id = ?",
                (
                    _ts(new_start),
                    _ts(new_stop) if new_stop is not None else None,
                    duration,
                    session_id,
                ),
            )

        logger.info("Updated session %s: %s - %s", session_id, new_start, new_stop)
        return Session(
            id=session_id,
            start_time=new_start,
            stop_time=new_stop,
            duration=duration,
        )

    def delete_session(self, session_id: str) -> None:
        """Delete a session by its full id."""
        with self._write() as conn:
            cursor = conn.execute(
                f"DELETE FROM {SESSIONS_TABLE} WHERE id = ?", (session_id,)
            )
            if cursor.rowcount == 0:
                raise FocusError(
                    ErrorKind.NOT_FOUND, f"No session with ID {session_id}"
                )

        logger.info("Deleted session %s", session_id)

    # Reads

    def get_open_session(self) -> Optional[Session]:
        """Get the running session, if any."""
        row = self.conn.execute(
            f"SELECT {_COLUMNS} FROM {SESSIONS_TABLE} WHERE stop_time IS NULL "
            "ORDER BY start_time DESC LIMIT 1"
        ).fetchone()
        return self._to_session(row) if row else None

    def find_by_prefix(self, prefix: str) -> List[str]:
        """List the ids of all sessions whose id starts with ``prefix``."""
        if not prefix:
            raise FocusError(ErrorKind.INVALID_FORMAT, "Session ID must not be empty")
        rows = self.conn.execute(
            f"SELECT id FROM {SESSIONS_TABLE} WHERE substr(id, 1, ?) = ? "
            "ORDER BY start_time",
            (len(prefix), prefix),
        ).fetchall()
        ids = [row["id"] for row in rows]
        logger.debug("Prefix %r matched %d session(s)", prefix, len(ids))
        return ids

    def get_session(self, id_or_prefix: str) -> Optional[Session]:
        """Get a session by full id or unique prefix.

        Returns None when nothing matches and raises ``AMBIGUOUS_ID`` when
        the prefix is shared by several sessions.
        """
        ids = self.find_by_prefix(id_or_prefix)
        if not ids:
            return None
        if len(ids) > 1:
            raise FocusError(
                ErrorKind.AMBIGUOUS_ID,
                f"Multiple sessions found with ID starting with '{id_or_prefix}'. "
                "Please use more characters of the ID.",
                ids,
            )
        return self._require(ids[0])

    def resolve_prefix(self, prefix: str) -> Session:
        """Get the single session matching ``prefix`` or raise."""
        session = self.get_session(prefix)
        if session is None:
            raise FocusError(
                ErrorKind.NOT_FOUND,
                f"No session found with ID starting with '{prefix}'",
            )
        return session

    def find_overlapping(
        self,
        start_time: datetime,
        stop_time: datetime,
        exclude_id: Optional[str] = None,
    ) -> List[Session]:
        """Closed sessions intersecting ``[start_time, stop_time)``."""
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM {SESSIONS_TABLE} "
            "WHERE stop_time IS NOT NULL AND start_time < ? AND stop_time > ? "
            "ORDER BY start_time",
            (_ts(stop_time), _ts(start_time)),
        ).fetchall()
        candidates = [self._to_session(row) for row in rows]
        return [
            s
            for s in candidates
            if s.id != exclude_id
            and overlaps(start_time, stop_time, s.start_time, s.stop_time)
        ]

    def list_sessions(
        self, sort: Optional[Sort] = None, filter: Optional[Filter] = None
    ) -> List[Session]:
        """List sessions, filtered on duration and ordered by ``sort``."""
        sort = sort or Sort.default(SessionSortField)
        if not isinstance(sort.field, SessionSortField):
            raise FocusError(
                ErrorKind.INVALID_FORMAT,
                f"Invalid sort field '{sort.field.value}' for sessions",
            )
        query = f"SELECT {_COLUMNS} FROM {SESSIONS_TABLE}"
        params: List[int] = []

        if filter is not None:
            if filter.field is not SessionFilterField.DURATION:
                raise FocusError(
                    ErrorKind.INVALID_FORMAT,
                    f"Invalid filter field '{filter.field.value}' for sessions",
                )
            clause, params = filter.where_clause("duration")
            query += f" WHERE {clause}"

        column = _ORDER_COLUMNS[sort.field]
        direction = "DESC" if sort.descending else "ASC"
        # Open sessions have no duration; keep them at the end
        query += f" ORDER BY {column} IS NULL, {column} {direction}, start_time ASC"

        rows = self.conn.execute(query, params).fetchall()
        return [self._to_session(row) for row in rows]

    def summary(
        self, sort: Optional[Sort] = None, filter: Optional[Filter] = None
    ) -> List[DailySummary]:
        """Per-day totals of closed sessions."""
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM {SESSIONS_TABLE} WHERE stop_time IS NOT NULL "
            "ORDER BY start_time"
        ).fetchall()
        return summarize((self._to_session(row) for row in rows), sort, filter)

    # Helpers

    def _create_table(self) -> None:
        self._conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {SESSIONS_TABLE} (
                id TEXT PRIMARY KEY,
                start_time TEXT NOT NULL,
                stop_time TEXT,
                duration INTEGER
            )
            """
        )
        self._conn.commit()

    @contextmanager
    def _write(self) -> Iterator[sqlite3.Connection]:
        """Run checks and writes as one transaction."""
        conn = self.conn
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
        except BaseException:
            conn.rollback()
            raise
        conn.commit()

    def _require(self, session_id: str) -> Session:
        row = self.conn.execute(
            f"SELECT {_COLUMNS} FROM {SESSIONS_TABLE} WHERE id = ?", (session_id,)
        ).fetchone()
        if row is None:
            raise FocusError(ErrorKind.NOT_FOUND, f"No session with ID {session_id}")
        return self._to_session(row)

    def _check_interval(
        self,
        start_time: datetime,
        stop_time: datetime,
        exclude_id: Optional[str] = None,
    ) -> None:
        if stop_time <= start_time:
            raise FocusError(
                ErrorKind.INVALID_RANGE, "Stop time must be after start time"
            )

        conflicts = self.find_overlapping(start_time, stop_time, exclude_id)
        if conflicts:
            short_ids = ", ".join(s.short_id for s in conflicts)
            raise FocusError(
                ErrorKind.OVERLAP_CONFLICT,
                f"Session overlaps with existing session(s): {short_ids}",
                [s.id for s in conflicts],
            )

    @staticmethod
    def _to_session(row: sqlite3.Row) -> Session:
        return Session(**dict(row))
