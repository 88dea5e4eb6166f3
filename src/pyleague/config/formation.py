"""Main-squad formation minimums for supported match formats."""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Sequence

from pydantic import Field

from pyleague.models.player import LeagueModel, PlayerEntry


class SquadRules(LeagueModel):
    min_batsmen: int = Field(0, ge=0)
    min_bowlers: int = Field(0, ge=0)
    min_allrounders: int = Field(0, ge=0)
    min_wicketkeepers: int = Field(0, ge=0)

    def minimums(self) -> Dict[str, int]:
        return {
            "batsman": self.min_batsmen,
            "bowler": self.min_bowlers,
            "allrounder": self.min_allrounders,
            "wicketkeeper": self.min_wicketkeepers,
        }


ROLE_PLURALS = {
    "batsman": "batsmen",
    "bowler": "bowlers",
    "allrounder": "allrounders",
    "wicketkeeper": "wicketkeepers",
}


_FORMAT_RULES: Dict[str, SquadRules] = {
    "T20": SquadRules(min_batsmen=3, min_bowlers=3, min_allrounders=1, min_wicketkeepers=1),
    "ODI": SquadRules(min_batsmen=4, min_bowlers=3, min_allrounders=1, min_wicketkeepers=1),
    "TEST": SquadRules(min_batsmen=4, min_bowlers=4, min_allrounders=0, min_wicketkeepers=1),
}


def iter_squad_rules() -> Iterable[SquadRules]:
    """Return an iterator of all preset formation rules."""

    return _FORMAT_RULES.values()


def get_squad_rules(match_format: str) -> SquadRules:
    """Fetch the preset for a match format, raising KeyError if missing."""

    key = match_format.upper()
    if key not in _FORMAT_RULES:
        raise KeyError(f"No squad rules configured for format={match_format!r}")
    return _FORMAT_RULES[key]


def role_counts(players: Sequence[PlayerEntry], squad_size: int) -> Counter:
    return Counter(entry.role for entry in players[:squad_size])


def validate_formation(players: Sequence[PlayerEntry], squad_size: int, rules: SquadRules) -> List[str]:
    """Return one message per unmet minimum in the main squad."""

    counts = role_counts(players, squad_size)
    errors: List[str] = []
    for role, required in rules.minimums().items():
        have = counts.get(role, 0)
        if have < required:
            errors.append(f"Need at least {required} {ROLE_PLURALS[role]} (have {have})")
    return errors
