"""Persistence layer for leagues, player pools and squads."""

from __future__ import annotations

import json
import os
import sqlite3
import tempfile
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Mapping, Optional

from pyleague.config.league import LeagueSettings
from pyleague.models.player import PlayerPool
from pyleague.models.squad import Squad


DEFAULT_DB_PATH = Path("data") / "pyleague.sqlite"


class SquadStore:
    """SQLite-backed store for league settings, pools and squad documents.

    Records are kept as camelCase JSON documents next to a few indexed
    columns. Reads return ``None`` for unknown ids; callers decide whether
    that is an error.
    """

    def __init__(self, db_path: Path | str | None = None):
        self._use_uri = False
        self._local = threading.local()
        env_db = os.getenv("PYLEAGUE_DB_PATH")
        if env_db:
            if env_db.startswith("file:"):
                self.db_path = env_db
                self._use_uri = True
            else:
                self.db_path = Path(env_db)
        elif db_path is not None:
            if str(db_path).startswith("file:"):
                self.db_path = str(db_path)
                self._use_uri = True
            else:
                self.db_path = Path(db_path)
        elif os.getenv("PYTEST_CURRENT_TEST"):
            test_dir = Path(tempfile.gettempdir()) / "pyleague-test"
            test_dir.mkdir(parents=True, exist_ok=True)
            self.db_path = test_dir / "pyleague.sqlite"
        else:
            self.db_path = DEFAULT_DB_PATH
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
        else:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        active = getattr(self._local, "conn", None)
        if active is not None:
            yield active
            return
        conn = self._connect()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator["SquadStore"]:
        """Hold a write lock across several reads and writes.

        Nested calls reuse the outer transaction. Everything done through the
        store inside the block commits together or not at all.
        """

        if getattr(self._local, "conn", None) is not None:
            yield self
            return
        conn = self._connect()
        conn.isolation_level = None
        conn.execute("BEGIN IMMEDIATE")
        self._local.conn = conn
        try:
            yield self
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        else:
            conn.execute("COMMIT")
        finally:
            self._local.conn = None
            conn.close()

    def _ensure_schema(self) -> None:
        with self._session() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS leagues (
                id TEXT PRIMARY KEY,
                name TEXT,
                settings_json TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS player_pools (
                id TEXT PRIMARY KEY,
                name TEXT,
                pool_json TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS squads (
                id TEXT PRIMARY KEY,
                league_id TEXT NOT NULL,
                user_id TEXT,
                squad_name TEXT,
                total_points REAL NOT NULL DEFAULT 0,
                squad_json TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_squads_league ON squads (league_id)")

    # Leagues -----------------------------------------------------------------

    def save_league(self, settings: LeagueSettings) -> None:
        now = datetime.now(timezone.utc).isoformat()
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO leagues (id, name, settings_json, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    settings_json = excluded.settings_json,
                    updated_at = excluded.updated_at
                """,
                (settings.id, settings.name, json.dumps(settings.to_record()), now, now),
            )

    def get_league(self, league_id: str) -> Optional[LeagueSettings]:
        with self._session() as conn:
            row = conn.execute("SELECT settings_json FROM leagues WHERE id = ?", (league_id,)).fetchone()
        if row is None:
            return None
        return LeagueSettings.model_validate(json.loads(row["settings_json"]))

    def list_leagues(self) -> List[LeagueSettings]:
        with self._session() as conn:
            rows = conn.execute("SELECT settings_json FROM leagues ORDER BY datetime(created_at), id").fetchall()
        return [LeagueSettings.model_validate(json.loads(row["settings_json"])) for row in rows]

    # Player pools ------------------------------------------------------------

    def save_pool(self, pool: PlayerPool) -> None:
        now = datetime.now(timezone.utc).isoformat()
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO player_pools (id, name, pool_json, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    pool_json = excluded.pool_json,
                    updated_at = excluded.updated_at
                """,
                (pool.id, pool.name, json.dumps(pool.to_record()), now),
            )

    def get_pool(self, pool_id: str) -> Optional[PlayerPool]:
        with self._session() as conn:
            row = conn.execute("SELECT pool_json FROM player_pools WHERE id = ?", (pool_id,)).fetchone()
        if row is None:
            return None
        return PlayerPool.model_validate(json.loads(row["pool_json"]))

    def update_pool_points(
        self,
        pool_id: str,
        points: Mapping[str, float],
        *,
        message: Optional[str] = None,
    ) -> PlayerPool:
        """Overwrite current points for the given players, raising KeyError for unknown pools."""

        with self.transaction():
            pool = self.get_pool(pool_id)
            if pool is None:
                raise KeyError(pool_id)
            players = [
                player.model_copy(update={"points": float(points[player.player_id])})
                if player.player_id in points
                else player
                for player in pool.players
            ]
            update = {"players": players}
            if message is not None:
                update["last_update_message"] = message
            pool = pool.model_copy(update=update)
            self.save_pool(pool)
        return pool

    # Squads ------------------------------------------------------------------

    def save_squad(self, squad: Squad) -> None:
        now = datetime.now(timezone.utc).isoformat()
        with self._session() as conn:
            conn.execute(
                """
                INSERT INTO squads (id, league_id, user_id, squad_name, total_points, squad_json, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    league_id = excluded.league_id,
                    user_id = excluded.user_id,
                    squad_name = excluded.squad_name,
                    total_points = excluded.total_points,
                    squad_json = excluded.squad_json,
                    updated_at = excluded.updated_at
                """,
                (
                    squad.id,
                    squad.league_id,
                    squad.user_id,
                    squad.squad_name,
                    squad.total_points,
                    json.dumps(squad.to_record()),
                    now,
                ),
            )

    save = save_squad

    def get_squad(self, squad_id: str) -> Optional[Squad]:
        with self._session() as conn:
            row = conn.execute("SELECT squad_json FROM squads WHERE id = ?", (squad_id,)).fetchone()
        if row is None:
            return None
        return Squad.model_validate(json.loads(row["squad_json"]))

    get = get_squad

    def get_by_league(self, league_id: str) -> List[Squad]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT squad_json FROM squads WHERE league_id = ? ORDER BY total_points DESC, id",
                (league_id,),
            ).fetchall()
        return [Squad.model_validate(json.loads(row["squad_json"])) for row in rows]
