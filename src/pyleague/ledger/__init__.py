"""Points ledger and squad audit helpers."""

from .audit import (
    AuditReport,
    SquadIssue,
    audit_squad,
    audit_squads,
    repair_role_timestamps,
    sync_pool_points,
    validate_role_timestamp,
)
from .points import (
    ROLE_MULTIPLIERS,
    SquadPoints,
    compute_squad_points,
    player_contribution,
    role_of,
    with_points,
)

__all__ = [
    "AuditReport",
    "ROLE_MULTIPLIERS",
    "SquadIssue",
    "SquadPoints",
    "audit_squad",
    "audit_squads",
    "compute_squad_points",
    "player_contribution",
    "repair_role_timestamps",
    "role_of",
    "sync_pool_points",
    "validate_role_timestamp",
    "with_points",
]
