"""League-level transfer configuration and admin settings."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Union

from pydantic import Field, model_validator

from pyleague.models.player import LeagueModel
from pyleague.config.formation import SquadRules


DEFAULT_SQUAD_SIZE = 11


class BenchTransferConfig(LeagueModel):
    """Bench swap settings.

    ``bench_slots`` is informational: it tells squad builders how many bench
    places a league offers. Swaps never change the bench length, so neither
    the validator nor the ledger reads it.
    """

    enabled: bool = True
    max_allowed: int = Field(2, ge=0)
    bench_slots: int = Field(4, ge=0)
    description: Optional[str] = None


class FlexibleTransferConfig(LeagueModel):
    enabled: bool = True
    max_allowed: int = Field(1, ge=0)
    description: Optional[str] = None


class MidSeasonTransferConfig(LeagueModel):
    enabled: bool = False
    max_allowed: int = Field(0, ge=0)
    window_start_date: datetime
    window_end_date: datetime
    description: Optional[str] = None

    @model_validator(mode="after")
    def _window_order(self) -> "MidSeasonTransferConfig":
        if as_utc(self.window_start_date) > as_utc(self.window_end_date):
            raise ValueError("windowStartDate must not be after windowEndDate")
        return self

    def is_open(self, now: datetime) -> bool:
        """Inclusive on both ends."""

        moment = as_utc(now)
        return as_utc(self.window_start_date) <= moment <= as_utc(self.window_end_date)


TransferTypeConfigItem = Union[BenchTransferConfig, FlexibleTransferConfig, MidSeasonTransferConfig]


class TransferTypeConfig(LeagueModel):
    bench_transfers: BenchTransferConfig = Field(default_factory=BenchTransferConfig)
    flexible_transfers: FlexibleTransferConfig = Field(default_factory=FlexibleTransferConfig)
    mid_season_transfers: Optional[MidSeasonTransferConfig] = None

    def for_type(self, transfer_type: str) -> Optional[TransferTypeConfigItem]:
        if transfer_type == "bench":
            return self.bench_transfers
        if transfer_type == "flexible":
            return self.flexible_transfers
        if transfer_type == "midSeason":
            return self.mid_season_transfers
        raise ValueError(f"Unknown transfer type {transfer_type!r}")


class LeagueSettings(LeagueModel):
    """Per-league configuration consulted by the transfer validator."""

    id: str = Field(..., min_length=1)
    name: str = ""
    squad_size: int = Field(DEFAULT_SQUAD_SIZE, ge=1)
    player_pool_id: Optional[str] = None
    transfer_types: TransferTypeConfig = Field(default_factory=TransferTypeConfig)
    bench_changes_enabled: bool = True
    flexible_changes_enabled: bool = True
    squad_rules: Optional[SquadRules] = None

    def is_type_enabled(self, transfer_type: str) -> bool:
        config = self.transfer_types.for_type(transfer_type)
        if config is None or not config.enabled:
            return False
        if transfer_type == "bench":
            return self.bench_changes_enabled
        if transfer_type == "flexible":
            return self.flexible_changes_enabled
        return True

    def max_allowed(self, transfer_type: str) -> int:
        config = self.transfer_types.for_type(transfer_type)
        return 0 if config is None else config.max_allowed


def as_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC so window comparisons never mix kinds."""

    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)
