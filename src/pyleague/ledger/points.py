"""Squad points ledger.

Every path that produces a squad total (transfers, single-squad
recalculation, league-wide repair) goes through :func:`compute_squad_points`
so totals stay stable no matter who computed them.

A main-squad player contributes the points earned since joining. When the
player holds a role, the points earned between joining and the role
assignment count once and the points earned after the assignment are
multiplied::

    joined at 100, made vice-captain at 150, now on 200
    base  = 150 - 100 = 50        (1x)
    bonus = 200 - 150 = 50        (1.5x)
    contribution = 50 + 75 = 125

Bench players never contribute. ``banked_points`` is added on top.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from pyleague.models.player import PlayerEntry
from pyleague.models.squad import Squad, SquadRole


ROLE_MULTIPLIERS: Dict[SquadRole, float] = {
    SquadRole.CAPTAIN: 2.0,
    SquadRole.VICE_CAPTAIN: 1.5,
    SquadRole.X_FACTOR: 1.25,
}


@dataclass(frozen=True)
class SquadPoints:
    total_points: float
    captain_points: float
    vice_captain_points: float
    x_factor_points: float

    def as_dict(self) -> dict:
        return {
            "totalPoints": self.total_points,
            "captainPoints": self.captain_points,
            "viceCaptainPoints": self.vice_captain_points,
            "xFactorPoints": self.x_factor_points,
        }


def role_of(squad: Squad, player_id: str) -> Optional[SquadRole]:
    """Return the role held by ``player_id``; captain wins over VC over X-Factor."""

    if squad.captain_id == player_id:
        return SquadRole.CAPTAIN
    if squad.vice_captain_id == player_id:
        return SquadRole.VICE_CAPTAIN
    if squad.x_factor_id == player_id:
        return SquadRole.X_FACTOR
    return None


def player_contribution(entry: PlayerEntry, role: Optional[SquadRole]) -> float:
    joined = entry.points_at_joining
    if role is None:
        return max(0.0, entry.points - joined)

    assigned = entry.points_when_role_assigned
    if assigned is None:
        assigned = joined
    base = max(0.0, assigned - joined)
    bonus = max(0.0, entry.points - assigned)
    return base + bonus * ROLE_MULTIPLIERS[role]


def compute_squad_points(squad: Squad, squad_size: int) -> SquadPoints:
    total = 0.0
    buckets = {role: 0.0 for role in SquadRole}

    for entry in squad.main_squad(squad_size):
        role = role_of(squad, entry.player_id)
        contribution = player_contribution(entry, role)
        if role is not None:
            buckets[role] += contribution
        total += contribution

    total += squad.banked_points
    return SquadPoints(
        total_points=total,
        captain_points=buckets[SquadRole.CAPTAIN],
        vice_captain_points=buckets[SquadRole.VICE_CAPTAIN],
        x_factor_points=buckets[SquadRole.X_FACTOR],
    )


def with_points(squad: Squad, squad_size: int) -> Squad:
    """Return ``squad`` with its stored ledger fields refreshed."""

    points = compute_squad_points(squad, squad_size)
    return squad.model_copy(
        update={
            "total_points": points.total_points,
            "captain_points": points.captain_points,
            "vice_captain_points": points.vice_captain_points,
            "x_factor_points": points.x_factor_points,
        }
    )
