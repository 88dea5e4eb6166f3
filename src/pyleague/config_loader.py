"""Persist and load league settings profiles."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pyleague.config.formation import get_squad_rules
from pyleague.config.league import LeagueSettings


@dataclass
class LeagueProfile:
    settings: LeagueSettings
    match_format: Optional[str] = None

    @classmethod
    def load(cls, path: Path) -> "LeagueProfile":
        data = json.loads(path.read_text(encoding="utf-8"))
        match_format = data.pop("matchFormat", None)
        if match_format and "squadRules" not in data:
            data["squadRules"] = get_squad_rules(match_format).to_record()
        return cls(settings=LeagueSettings.model_validate(data), match_format=match_format)

    def save(self, path: Path) -> None:
        payload = self.settings.to_record()
        if self.match_format:
            payload["matchFormat"] = self.match_format
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
