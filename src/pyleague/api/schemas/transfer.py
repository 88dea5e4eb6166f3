from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from pyleague.transfers.proposals import parse_proposal
from pyleague.transfers.rules import Proposal


class TransferRequest(BaseModel):
    transfer_type: Literal["bench", "flexible", "midSeason"]
    change_type: Literal["playerSubstitution", "roleReassignment"]
    player_out: str | None = None
    player_in: str | None = None
    new_vice_captain_id: str | None = None
    new_x_factor_id: str | None = None
    new_captain_id: str | None = None
    timestamp: datetime | None = None

    def to_proposal(self) -> Proposal:
        payload = self.model_dump(
            exclude={"transfer_type", "timestamp"},
            exclude_none=True,
        )
        return parse_proposal({to_camel(key): value for key, value in payload.items()})


class ReversalRequest(BaseModel):
    timestamp: datetime | None = None


class TransferTogglesRequest(BaseModel):
    bench_changes_enabled: bool | None = None
    flexible_changes_enabled: bool | None = None


class PoolPointsRequest(BaseModel):
    points: dict[str, float] = Field(default_factory=dict)
    message: str | None = None


class SquadPointsResponse(BaseModel):
    squad_id: str
    total_points: float
    captain_points: float
    vice_captain_points: float
    x_factor_points: float
    banked_points: float


class RecalculationResponse(BaseModel):
    league_id: str
    squads: int
    standings: list[SquadPointsResponse]
