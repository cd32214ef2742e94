"""Sequence numbers handed out in blocks reserved in a persistent store."""

from __future__ import annotations

import sqlite3
import threading
from dataclasses import dataclass
from typing import Protocol

__all__ = ["SeqRecord", "SqliteSeqStore", "SequenceGenerator"]

DEFAULT_STEP = 1000
INITIAL_SEQ = 1_000_000


@dataclass
class SeqRecord:
    """The reserved upper bound of one sequence."""

    key: str
    min_seq: int
    step: int = DEFAULT_STEP


class SeqStore(Protocol):
    def query(self, key: str) -> SeqRecord | None: ...

    def add_or_update(self, record: SeqRecord) -> None: ...


class SqliteSeqStore:
    """Keeps sequence records in an SQLite ``seq`` table."""

    def __init__(self, path: str = ":memory:") -> None:
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(path, check_same_thread=False)
        with self._lock, self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS seq ("
                "key TEXT PRIMARY KEY, min_seq INTEGER NOT NULL, step INTEGER NOT NULL)"
            )

    def query(self, key: str) -> SeqRecord | None:
        """The record stored under ``key``, or None."""
        with self._lock:
            row = self._conn.execute(
                "SELECT key, min_seq, step FROM seq WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        return SeqRecord(key=row[0], min_seq=row[1], step=row[2])

    def add_or_update(self, record: SeqRecord) -> None:
        """Insert a record; an existing one only has its ``min_seq`` replaced."""
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT INTO seq (key, min_seq, step) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET min_seq = excluded.min_seq",
                (record.key, record.min_seq, record.step),
            )

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> SqliteSeqStore:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


@dataclass
class _Seq:
    cur: int
    max: int


class SequenceGenerator:
    """Generates increasing numbers per flag, reserving ``step`` at a time."""

    def __init__(self, store: SeqStore, step: int = DEFAULT_STEP) -> None:
        if step <= 0:
            raise ValueError("step must be positive")
        self.store = store
        self.step = step
        self._seqs: dict[str, _Seq] = {}
        self._lock = threading.Lock()

    def _load(self, key: str) -> _Seq:
        record = self.store.query(key)
        if record is None:
            self.store.add_or_update(
                SeqRecord(key=key, min_seq=INITIAL_SEQ + self.step, step=self.step)
            )
            return _Seq(cur=INITIAL_SEQ, max=INITIAL_SEQ + self.step)
        return _Seq(cur=record.min_seq, max=record.min_seq)

    def gen_seq(self, flag: str) -> int:
        """The next number of the sequence named ``flag``."""
        key = f"seq:{flag}"
        with self._lock:
            seq = self._seqs.get(flag)
            if seq is None:
                seq = self._load(key)
                self._seqs[flag] = seq
            if seq.cur >= seq.max:
                self.store.add_or_update(
                    SeqRecord(key=key, min_seq=seq.cur + self.step, step=self.step)
                )
                seq.max += self.step
            seq.cur += 1
            return seq.cur