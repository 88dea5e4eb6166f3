"""Transfer history entries as stored on a squad.

The persisted log is a closed tagged union keyed on ``changeType``. Each
variant forbids foreign fields, so a role reassignment carrying ``playerOut``
(or any ``newCaptainId``) never makes it into a squad document.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import Field, TypeAdapter, model_validator
from pydantic.config import ConfigDict

from pyleague.models.player import LeagueModel


TransferType = Literal["bench", "flexible", "midSeason"]
RoleName = Literal["captain", "viceCaptain", "xFactor"]
ADMIN_REVERSAL = "admin_reversal"


class _HistoryModel(LeagueModel):
    model_config = ConfigDict(extra="forbid")


class SwapSnapshot(_HistoryModel):
    """Baselines a bench swap overwrote on the incoming player.

    ``roles_moved`` lists the roles the outgoing player handed over, so a
    reversal can tell them apart from roles assigned later.
    """

    player_in_points_at_joining: float
    player_in_points_when_role_assigned: Optional[float] = None
    roles_moved: List[RoleName] = Field(default_factory=list)


class SubstitutionEntry(_HistoryModel):
    timestamp: datetime
    transfer_type: TransferType
    change_type: Literal["playerSubstitution"] = "playerSubstitution"
    player_out: str = Field(..., min_length=1)
    player_in: str = Field(..., min_length=1)
    points_banked: Optional[float] = None
    snapshot: Optional[SwapSnapshot] = None


class RoleReassignmentEntry(_HistoryModel):
    timestamp: datetime
    transfer_type: Literal["flexible", "midSeason"]
    change_type: Literal["roleReassignment"] = "roleReassignment"
    new_vice_captain_id: Optional[str] = None
    new_x_factor_id: Optional[str] = None
    points_banked: Optional[float] = None

    @model_validator(mode="after")
    def _exactly_one_role(self) -> "RoleReassignmentEntry":
        if (self.new_vice_captain_id is None) == (self.new_x_factor_id is None):
            raise ValueError("roleReassignment must set exactly one of newViceCaptainId / newXFactorId")
        return self

    @property
    def target_id(self) -> str:
        return self.new_vice_captain_id or self.new_x_factor_id or ""


class ReversalMarkerEntry(_HistoryModel):
    timestamp: datetime
    transfer_type: Literal["admin_reversal"] = ADMIN_REVERSAL
    change_type: Literal["admin_reversal"] = ADMIN_REVERSAL
    note: str
    reversed_transfer_index: int = Field(..., ge=0)


TransferHistoryEntry = Annotated[
    Union[SubstitutionEntry, RoleReassignmentEntry, ReversalMarkerEntry],
    Field(discriminator="change_type"),
]

_ENTRY_ADAPTER: TypeAdapter = TypeAdapter(TransferHistoryEntry)


def parse_history_entry(payload: dict) -> Union[SubstitutionEntry, RoleReassignmentEntry, ReversalMarkerEntry]:
    """Validate a stored (camelCase) history record into its variant."""

    return _ENTRY_ADAPTER.validate_python(payload)
