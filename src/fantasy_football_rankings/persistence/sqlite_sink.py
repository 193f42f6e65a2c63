from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from pathlib import Path

    from fantasy_football_rankings.domain.fetch_result import FetchMetadata, SourceTag
    from fantasy_football_rankings.domain.player import Category, Player, ScoringFormat

logger = logging.getLogger(__name__)

_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS snapshots ("
    "  id INTEGER PRIMARY KEY AUTOINCREMENT,"
    "  category TEXT NOT NULL,"
    "  scoring_format TEXT NOT NULL,"
    "  source TEXT NOT NULL,"
    "  fetched_at TEXT NOT NULL,"
    "  player_count INTEGER NOT NULL,"
    "  players TEXT NOT NULL"
    ")"
)


class SqliteSnapshotSink:
    """Appends one row per successful fetch to a SQLite database."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        self._schema_initialized = False

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self._db_path))
        try:
            conn.execute("PRAGMA busy_timeout=5000")
            if not self._schema_initialized:
                conn.execute(_SCHEMA)
                self._schema_initialized = True
            yield conn
            conn.commit()
        finally:
            conn.close()

    def store(
        self,
        category: Category,
        scoring_format: ScoringFormat,
        players: Sequence[Player],
        metadata: FetchMetadata,
        source: SourceTag,
    ) -> None:
        payload = json.dumps([asdict(p) for p in players])
        with self._connection() as conn:
            conn.execute(
                "INSERT INTO snapshots (category, scoring_format, source, fetched_at, player_count, players)"
                " VALUES (?, ?, ?, ?, ?, ?)",
                (
                    category.value,
                    scoring_format.value,
                    source.value,
                    metadata.timestamp.isoformat(),
                    len(players),
                    payload,
                ),
            )
        logger.debug("Stored %d %s players snapshot from %s", len(players), category, source)

    def latest(self, category: Category, scoring_format: ScoringFormat) -> dict[str, Any] | None:
        """Most recent snapshot row for a category and format, players decoded."""
        with self._connection() as conn:
            row = conn.execute(
                "SELECT source, fetched_at, player_count, players FROM snapshots"
                " WHERE category = ? AND scoring_format = ? ORDER BY id DESC LIMIT 1",
                (category.value, scoring_format.value),
            ).fetchone()
        if row is None:
            return None
        source, fetched_at, player_count, players = row
        return {
            "source": source,
            "fetched_at": fetched_at,
            "player_count": player_count,
            "players": json.loads(players),
        }
