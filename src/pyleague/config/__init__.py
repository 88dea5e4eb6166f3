"""Configuration helpers for league transfer settings and formation rules."""

from .formation import SquadRules, get_squad_rules, iter_squad_rules, validate_formation
from .league import (
    DEFAULT_SQUAD_SIZE,
    BenchTransferConfig,
    FlexibleTransferConfig,
    LeagueSettings,
    MidSeasonTransferConfig,
    TransferTypeConfig,
)

__all__ = [
    "DEFAULT_SQUAD_SIZE",
    "BenchTransferConfig",
    "FlexibleTransferConfig",
    "LeagueSettings",
    "MidSeasonTransferConfig",
    "SquadRules",
    "TransferTypeConfig",
    "get_squad_rules",
    "iter_squad_rules",
    "validate_formation",
]
