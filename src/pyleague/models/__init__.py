"""Squad, player and transfer-history models."""

from .history import (
    ADMIN_REVERSAL,
    ReversalMarkerEntry,
    RoleReassignmentEntry,
    SubstitutionEntry,
    SwapSnapshot,
    TransferHistoryEntry,
    parse_history_entry,
)
from .player import LeagueModel, PlayerEntry, PlayerPool, PoolPlayer
from .squad import Squad, SquadRole

__all__ = [
    "ADMIN_REVERSAL",
    "LeagueModel",
    "PlayerEntry",
    "PlayerPool",
    "PoolPlayer",
    "ReversalMarkerEntry",
    "RoleReassignmentEntry",
    "Squad",
    "SquadRole",
    "SubstitutionEntry",
    "SwapSnapshot",
    "TransferHistoryEntry",
    "parse_history_entry",
]
