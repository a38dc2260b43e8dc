"""SQLite-backed TTL cache for ticker snapshots."""

from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Dict, Optional, Protocol, Tuple

from pydantic import ValidationError

from constants import DEFAULT_DB_PATH, DEFAULT_TTL_DAYS, SNAPSHOT_SCHEMA_VERSION
from domain import TickerSnapshot


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SnapshotStore(Protocol):
    def get(self, ticker: str) -> Optional[TickerSnapshot]: ...

    def set(self, ticker: str, snapshot: TickerSnapshot) -> None: ...

    def close(self) -> None: ...


def _is_fresh(snapshot: TickerSnapshot, fetched_at: datetime, now: datetime, ttl: timedelta) -> bool:
    if snapshot.schema_version != SNAPSHOT_SCHEMA_VERSION:
        return False
    return now - fetched_at <= ttl


class SnapshotCache:
    """Persist snapshots to SQLite; reads past the TTL count as misses.

    One connection is shared by every worker thread, so all access goes
    through ``self._lock``. Each ``set`` commits before returning.
    """

    def __init__(
        self,
        db_path: str | Path = DEFAULT_DB_PATH,
        ttl_days: float = DEFAULT_TTL_DAYS,
        clock: Clock = utc_now,
    ) -> None:
        self._db_path = str(db_path)
        self._ttl = timedelta(days=ttl_days)
        self._clock = clock
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = sqlite3.connect(
            self._db_path, check_same_thread=False
        )
        self._init_db()

    def _init_db(self) -> None:
        with self._lock:
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS compounder_data (
                    ticker TEXT PRIMARY KEY,
                    payload_json TEXT NOT NULL,
                    fetched_at TEXT NOT NULL
                )
                """
            )
            self._conn.commit()

    def get(self, ticker: str) -> Optional[TickerSnapshot]:
        try:
            with self._lock:
                if self._conn is None:
                    return None
                row = self._conn.execute(
                    "SELECT payload_json, fetched_at FROM compounder_data WHERE ticker = ?",
                    (ticker,),
                ).fetchone()
        except sqlite3.Error as exc:
            logger.warning("%s: cache read failed (%s)", ticker, exc)
            return None

        if row is None:
            return None

        payload_json, fetched_at_raw = row
        try:
            fetched_at = datetime.fromisoformat(fetched_at_raw)
            snapshot = TickerSnapshot.model_validate_json(payload_json)
        except (ValueError, ValidationError) as exc:
            logger.warning("%s: discarding unreadable cache entry (%s)", ticker, exc)
            return None

        if fetched_at.tzinfo is None:
            fetched_at = fetched_at.replace(tzinfo=timezone.utc)
        if not _is_fresh(snapshot, fetched_at, self._clock(), self._ttl):
            return None
        return snapshot

    def set(self, ticker: str, snapshot: TickerSnapshot) -> None:
        payload = snapshot.model_dump_json(by_alias=True)
        fetched_at = self._clock().isoformat()
        try:
            with self._lock:
                if self._conn is None:
                    return
                self._conn.execute(
                    "INSERT INTO compounder_data (ticker, payload_json, fetched_at) "
                    "VALUES (?, ?, ?) "
                    "ON CONFLICT(ticker) DO UPDATE SET "
                    "payload_json=excluded.payload_json, fetched_at=excluded.fetched_at",
                    (ticker, payload, fetched_at),
                )
                self._conn.commit()
        except sqlite3.Error as exc:
            logger.warning("%s: cache write failed (%s)", ticker, exc)

    def close(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            self._conn.commit()
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "SnapshotCache":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class InMemorySnapshotCache:
    """Dictionary-backed store with the same staleness rules, for tests and dry runs."""

    def __init__(self, ttl_days: float = DEFAULT_TTL_DAYS, clock: Clock = utc_now) -> None:
        self._ttl = timedelta(days=ttl_days)
        self._clock = clock
        self._lock = threading.Lock()
        self._records: Dict[str, Tuple[str, datetime]] = {}
        self.closed = False

    def get(self, ticker: str) -> Optional[TickerSnapshot]:
        with self._lock:
            record = self._records.get(ticker)
        if record is None:
            return None
        payload, fetched_at = record
        snapshot = TickerSnapshot.model_validate_json(payload)
        if not _is_fresh(snapshot, fetched_at, self._clock(), self._ttl):
            return None
        return snapshot

    def set(self, ticker: str, snapshot: TickerSnapshot) -> None:
        with self._lock:
            self._records[ticker] = (snapshot.model_dump_json(by_alias=True), self._clock())

    def close(self) -> None:
        self.closed = True

    def __len__(self) -> int:
        return len(self._records)
