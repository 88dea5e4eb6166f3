from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from pyleague.config.league import LeagueSettings
from pyleague.models.player import PlayerPool
from pyleague.models.squad import Squad
from pyleague.transfers.errors import TransferErrorKind, TransferRejected
from pyleague.transfers.rules import Proposal, Rule, TransferContext, validate_all


TRANSFER_TYPES = ("bench", "flexible", "midSeason")


def build_context(
    transfer_type: str,
    squad: Squad,
    settings: LeagueSettings,
    pool: Optional[PlayerPool] = None,
    now: Optional[datetime] = None,
) -> TransferContext:
    if transfer_type not in TRANSFER_TYPES:
        raise ValueError(f"Unknown transfer type {transfer_type!r}")
    return TransferContext(
        transfer_type=transfer_type,
        squad=squad,
        settings=settings,
        pool=pool,
        now=now or datetime.now(timezone.utc),
    )


def validate_transfer(
    transfer_type: str,
    proposal: Proposal,
    squad: Squad,
    settings: LeagueSettings,
    pool: Optional[PlayerPool] = None,
    now: Optional[datetime] = None,
    rules: Optional[Iterable[Rule]] = None,
) -> None:
    """Raise :class:`TransferRejected` for the first rule the proposal breaks."""

    ctx = build_context(transfer_type, squad, settings, pool, now)
    validate_all(proposal, ctx, rules)


def check_transfer(
    transfer_type: str,
    proposal: Proposal,
    squad: Squad,
    settings: LeagueSettings,
    pool: Optional[PlayerPool] = None,
    now: Optional[datetime] = None,
) -> Optional[TransferErrorKind]:
    try:
        validate_transfer(transfer_type, proposal, squad, settings, pool, now)
    except TransferRejected as exc:
        return exc.kind
    return None
