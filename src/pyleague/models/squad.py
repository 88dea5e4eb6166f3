"""Squad document: ordered players, role holders, counters and history."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import Field, model_validator

from pyleague.models.history import TransferHistoryEntry
from pyleague.models.player import LeagueModel, PlayerEntry


class SquadRole(str, Enum):
    CAPTAIN = "captain"
    VICE_CAPTAIN = "viceCaptain"
    X_FACTOR = "xFactor"

    @property
    def field_name(self) -> str:
        return _ROLE_FIELDS[self]


_ROLE_FIELDS = {
    SquadRole.CAPTAIN: "captain_id",
    SquadRole.VICE_CAPTAIN: "vice_captain_id",
    SquadRole.X_FACTOR: "x_factor_id",
}


class Squad(LeagueModel):
    """A participant's squad within one league.

    ``players`` is ordered: the first ``squad_size`` entries are the main
    squad and the remainder is the bench. The ledger outputs
    (``total_points`` and the role buckets) are stored alongside so standings
    can be read without recomputation; :func:`pyleague.ledger.points.with_points`
    refreshes them.
    """

    id: str = Field(..., min_length=1)
    league_id: str
    user_id: str = ""
    squad_name: str = ""
    players: List[PlayerEntry] = Field(default_factory=list)
    captain_id: Optional[str] = None
    vice_captain_id: Optional[str] = None
    x_factor_id: Optional[str] = None
    # Kept unconstrained so the auditor can flag corrupted negative balances.
    banked_points: float = 0.0
    bench_transfers_used: int = Field(0, ge=0)
    flexible_transfers_used: int = Field(0, ge=0)
    mid_season_transfers_used: int = Field(0, ge=0)
    transfers_used: int = Field(0, ge=0)
    transfer_history: List[TransferHistoryEntry] = Field(default_factory=list)
    total_points: float = 0.0
    captain_points: float = 0.0
    vice_captain_points: float = 0.0
    x_factor_points: float = 0.0

    @model_validator(mode="after")
    def _distinct_role_holders(self) -> "Squad":
        holders = [pid for pid in (self.captain_id, self.vice_captain_id, self.x_factor_id) if pid]
        if len(holders) != len(set(holders)):
            raise ValueError("captain, vice-captain and x-factor must be different players")
        return self

    def main_squad(self, squad_size: int) -> List[PlayerEntry]:
        return self.players[:squad_size]

    def bench(self, squad_size: int) -> List[PlayerEntry]:
        return self.players[squad_size:]

    def index_of(self, player_id: str) -> Optional[int]:
        for idx, entry in enumerate(self.players):
            if entry.player_id == player_id:
                return idx
        return None

    def find(self, player_id: str) -> Optional[PlayerEntry]:
        idx = self.index_of(player_id)
        return None if idx is None else self.players[idx]

    def in_main_squad(self, player_id: str, squad_size: int) -> bool:
        idx = self.index_of(player_id)
        return idx is not None and idx < squad_size

    def role_holder(self, role: SquadRole) -> Optional[str]:
        return getattr(self, role.field_name)

    def roles_held_by(self, player_id: str) -> List[SquadRole]:
        return [role for role in SquadRole if self.role_holder(role) == player_id]

    def used_for(self, transfer_type: str) -> int:
        """Return the per-type transfer counter."""

        if transfer_type == "bench":
            return self.bench_transfers_used
        if transfer_type == "flexible":
            return self.flexible_transfers_used
        if transfer_type == "midSeason":
            return self.mid_season_transfers_used
        raise ValueError(f"Unknown transfer type {transfer_type!r}")


def counter_field(transfer_type: str) -> str:
    return {
        "bench": "bench_transfers_used",
        "flexible": "flexible_transfers_used",
        "midSeason": "mid_season_transfers_used",
    }[transfer_type]
