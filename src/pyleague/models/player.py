"""Canonical player models shared by squads, pools and the points ledger."""

from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict


PositionalRole = Literal["batsman", "bowler", "allrounder", "wicketkeeper"]

_ROLE_ALIASES = {
    "batter": "batsman",
    "bat": "batsman",
    "all-rounder": "allrounder",
    "all rounder": "allrounder",
    "wk": "wicketkeeper",
    "wicket-keeper": "wicketkeeper",
}


def normalize_role(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    key = value.strip().lower()
    return _ROLE_ALIASES.get(key, key)


class LeagueModel(BaseModel):
    """Base for stored records: frozen, camelCase on the wire."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class PlayerEntry(LeagueModel):
    """A player as held by one squad, with the baselines used for scoring."""

    player_id: str = Field(..., min_length=1)
    player_name: str = ""
    team: str = ""
    role: PositionalRole = "batsman"
    points: float = 0.0
    # Records written before join baselines existed score from zero.
    points_at_joining: float = 0.0
    points_when_role_assigned: Optional[float] = None

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, value: Any) -> Any:
        return normalize_role(value)


class PoolPlayer(LeagueModel):
    """Pool-side record holding a player's current fantasy points."""

    player_id: str = Field(..., min_length=1)
    name: str
    team: str = ""
    role: PositionalRole = "batsman"
    points: float = 0.0

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, value: Any) -> Any:
        return normalize_role(value)

    def to_entry(self) -> PlayerEntry:
        """Build a squad entry that starts contributing from the current points."""

        return PlayerEntry(
            player_id=self.player_id,
            player_name=self.name,
            team=self.team,
            role=self.role,
            points=self.points,
            points_at_joining=self.points,
        )


class PlayerPool(LeagueModel):
    id: str
    name: str = ""
    players: List[PoolPlayer] = Field(default_factory=list)
    last_update_message: Optional[str] = None

    def get(self, player_id: str) -> Optional[PoolPlayer]:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def __contains__(self, player_id: object) -> bool:
        return isinstance(player_id, str) and self.get(player_id) is not None

    def get_current_points(self, player_id: str) -> float:
        player = self.get(player_id)
        if player is None:
            raise KeyError(f"Player {player_id!r} not found in pool {self.id!r}")
        return player.points
