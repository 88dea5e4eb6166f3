"""Transfer proposals submitted by squad owners."""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import Field, TypeAdapter

from pyleague.models.player import LeagueModel


class SubstitutionProposal(LeagueModel):
    change_type: Literal["playerSubstitution"] = "playerSubstitution"
    player_out: str = Field(..., min_length=1)
    player_in: str = Field(..., min_length=1)


class RoleReassignmentProposal(LeagueModel):
    """Request to move the vice-captaincy or the X-Factor.

    ``new_captain_id`` is accepted on input only so the validator can reject
    it with a specific error; it is never written to history.
    """

    change_type: Literal["roleReassignment"] = "roleReassignment"
    new_vice_captain_id: Optional[str] = None
    new_x_factor_id: Optional[str] = None
    new_captain_id: Optional[str] = None


TransferProposal = Annotated[
    Union[SubstitutionProposal, RoleReassignmentProposal],
    Field(discriminator="change_type"),
]

_PROPOSAL_ADAPTER: TypeAdapter = TypeAdapter(TransferProposal)


def parse_proposal(payload: dict) -> Union[SubstitutionProposal, RoleReassignmentProposal]:
    return _PROPOSAL_ADAPTER.validate_python(payload)
