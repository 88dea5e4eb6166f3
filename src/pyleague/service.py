"""Load, run the ledger/transfer core, persist."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import List, Mapping, Optional, Tuple

from pyleague.config.league import DEFAULT_SQUAD_SIZE, LeagueSettings
from pyleague.ledger.audit import (
    DEFAULT_BANKED_WARN_RATIO,
    AuditReport,
    audit_squads,
    repair_role_timestamps,
    sync_pool_points,
)
from pyleague.ledger.points import SquadPoints, compute_squad_points, with_points
from pyleague.models.player import PlayerPool
from pyleague.models.squad import Squad
from pyleague.persistence import SquadStore
from pyleague.transfers.apply import apply_transfer
from pyleague.transfers.errors import ReversalFailed, TransferRejected
from pyleague.transfers.reversal import reverse_transfer
from pyleague.transfers.rules import Proposal


logger = logging.getLogger("uvicorn.error")
logger.setLevel(logging.INFO)

_SQUAD_SIZE_ENV = "PYLEAGUE_SQUAD_SIZE"
_BANKED_WARN_RATIO_ENV = "PYLEAGUE_BANKED_WARN_RATIO"


def _env_float(name: str, default: float, *, clamp_min: float | None = None, clamp_max: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    if clamp_max is not None:
        value = min(clamp_max, value)
    return value


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


def default_squad_size() -> int:
    return _env_int(_SQUAD_SIZE_ENV, DEFAULT_SQUAD_SIZE, min_value=1)


def banked_warn_ratio() -> float:
    return _env_float(_BANKED_WARN_RATIO_ENV, DEFAULT_BANKED_WARN_RATIO, clamp_min=0.0, clamp_max=1.0)


class TransferService:
    """Runs transfers, reversals and recalculations against a :class:`SquadStore`.

    Each mutating call loads, computes and saves inside one store
    transaction, so two requests for the same squad never interleave.
    Unknown squad, league or pool ids raise ``KeyError``.
    """

    def __init__(self, store: SquadStore):
        self.store = store

    def get_squad(self, squad_id: str) -> Squad:
        squad = self.store.get_squad(squad_id)
        if squad is None:
            raise KeyError(squad_id)
        return squad

    def get_league(self, league_id: str) -> LeagueSettings:
        settings = self.store.get_league(league_id)
        if settings is None:
            raise KeyError(league_id)
        return settings

    def get_pool(self, settings: LeagueSettings) -> Optional[PlayerPool]:
        if not settings.player_pool_id:
            return None
        pool = self.store.get_pool(settings.player_pool_id)
        if pool is None:
            raise KeyError(settings.player_pool_id)
        return pool

    def _load(self, squad_id: str) -> Tuple[Squad, LeagueSettings, Optional[PlayerPool]]:
        squad = self.get_squad(squad_id)
        settings = self.get_league(squad.league_id)
        return squad, settings, self.get_pool(settings)

    def squad_points(self, squad_id: str) -> SquadPoints:
        squad = self.get_squad(squad_id)
        settings = self.get_league(squad.league_id)
        return compute_squad_points(squad, settings.squad_size)

    def submit_transfer(
        self,
        squad_id: str,
        transfer_type: str,
        proposal: Proposal,
        *,
        now: Optional[datetime] = None,
    ) -> Squad:
        with self.store.transaction():
            squad, settings, pool = self._load(squad_id)
            try:
                updated = apply_transfer(transfer_type, proposal, squad, settings, pool, now)
            except TransferRejected as exc:
                logger.warning("Transfer rejected for squad %s (%s): %s", squad_id, transfer_type, exc)
                raise
            self.store.save_squad(updated)
        entry = updated.transfer_history[-1]
        logger.info(
            "Applied %s %s for squad %s (banked %.2f, total %.2f)",
            transfer_type,
            entry.change_type,
            squad_id,
            entry.points_banked or 0.0,
            updated.total_points,
        )
        return updated

    def reverse_transfer(self, squad_id: str, history_index: int, *, now: Optional[datetime] = None) -> Squad:
        with self.store.transaction():
            squad = self.get_squad(squad_id)
            settings = self.get_league(squad.league_id)
            try:
                updated = reverse_transfer(squad, history_index, settings.squad_size, now)
            except ReversalFailed as exc:
                logger.warning("Reversal of transfer %s failed for squad %s: %s", history_index, squad_id, exc)
                raise
            self.store.save_squad(updated)
        logger.info("Reversed transfer #%s for squad %s", history_index + 1, squad_id)
        return updated

    def recalculate_squad(self, squad_id: str) -> Squad:
        """Refresh current points from the pool and recompute the stored totals."""

        with self.store.transaction():
            squad, settings, pool = self._load(squad_id)
            updated = self._recalculate(squad, settings, pool)
            self.store.save_squad(updated)
        logger.info("Recalculated squad %s: %.2f -> %.2f", squad_id, squad.total_points, updated.total_points)
        return updated

    def recalculate_league(self, league_id: str) -> List[Squad]:
        with self.store.transaction():
            settings = self.get_league(league_id)
            pool = self.get_pool(settings)
            updated = []
            changed = 0
            for squad in self.store.get_by_league(league_id):
                refreshed = self._recalculate(squad, settings, pool)
                if refreshed.total_points != squad.total_points:
                    changed += 1
                self.store.save_squad(refreshed)
                updated.append(refreshed)
        logger.info("Recalculated %s squads in league %s (%s totals changed)", len(updated), league_id, changed)
        return updated

    def repair_squad(self, squad_id: str) -> Squad:
        """Apply the conservative role-baseline fix suggested by the audit."""

        with self.store.transaction():
            squad, settings, _ = self._load(squad_id)
            updated = with_points(repair_role_timestamps(squad), settings.squad_size)
            self.store.save_squad(updated)
        logger.info("Repaired role baselines for squad %s", squad_id)
        return updated

    def set_transfer_toggles(
        self,
        league_id: str,
        *,
        bench_changes_enabled: Optional[bool] = None,
        flexible_changes_enabled: Optional[bool] = None,
    ) -> LeagueSettings:
        update = {}
        if bench_changes_enabled is not None:
            update["bench_changes_enabled"] = bench_changes_enabled
        if flexible_changes_enabled is not None:
            update["flexible_changes_enabled"] = flexible_changes_enabled
        with self.store.transaction():
            settings = self.get_league(league_id).model_copy(update=update)
            self.store.save_league(settings)
        logger.info(
            "League %s transfer toggles: bench=%s flexible=%s",
            league_id,
            settings.bench_changes_enabled,
            settings.flexible_changes_enabled,
        )
        return settings

    def update_pool_points(
        self,
        pool_id: str,
        points: Mapping[str, float],
        *,
        message: Optional[str] = None,
    ) -> PlayerPool:
        pool = self.store.update_pool_points(pool_id, points, message=message)
        logger.info("Updated points for %s players in pool %s", len(points), pool_id)
        return pool

    def audit_league(self, league_id: str) -> AuditReport:
        settings = self.get_league(league_id)
        report = audit_squads(
            self.store.get_by_league(league_id),
            settings.squad_size,
            league_id=league_id,
            banked_warn_ratio=banked_warn_ratio(),
        )
        if report.issues:
            logger.warning(
                "Audit of league %s: %s of %s squads flagged (%s critical, %s warnings)",
                league_id,
                report.squads_with_issues,
                report.total_squads,
                report.critical_issues,
                report.warnings,
            )
        return report

    @staticmethod
    def _recalculate(squad: Squad, settings: LeagueSettings, pool: Optional[PlayerPool]) -> Squad:
        if pool is not None:
            squad = sync_pool_points(squad, pool)
        return with_points(squad, settings.squad_size)
