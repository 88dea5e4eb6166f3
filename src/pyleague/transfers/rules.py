"""Transfer rules evaluated by the validator.

Each rule has a ``rule_id``, a ``priority`` and an ``enabled`` flag and
raises :class:`TransferRejected` from ``validate``. Rules run in ascending
``(priority, rule_id)`` order and the first failure wins, so the priorities
below define which error a proposal that breaks several rules reports.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Protocol, Sequence, Union

from pyleague.config.formation import ROLE_PLURALS, role_counts
from pyleague.config.league import LeagueSettings
from pyleague.models.player import PlayerEntry, PlayerPool
from pyleague.models.squad import Squad
from pyleague.transfers.errors import TransferErrorKind, TransferRejected
from pyleague.transfers.proposals import RoleReassignmentProposal, SubstitutionProposal


Proposal = Union[SubstitutionProposal, RoleReassignmentProposal]


@dataclass
class TransferContext:
    transfer_type: str
    squad: Squad
    settings: LeagueSettings
    now: datetime
    pool: Optional[PlayerPool] = None

    @property
    def squad_size(self) -> int:
        return self.settings.squad_size

    @property
    def is_bench(self) -> bool:
        return self.transfer_type == "bench"


class Rule(Protocol):
    rule_id: str
    priority: int
    enabled: bool

    def validate(self, proposal: Proposal, ctx: TransferContext) -> None:
        ...


def _reject(kind: TransferErrorKind, message: str = "", **details) -> TransferRejected:
    return TransferRejected(kind, message, details or None)


@dataclass
class BenchRoleReassignmentRule:
    rule_id: str = "bench_role_reassignment"
    priority: int = 10
    enabled: bool = True

    def validate(self, proposal: Proposal, ctx: TransferContext) -> None:
        if ctx.is_bench and isinstance(proposal, RoleReassignmentProposal):
            raise _reject(TransferErrorKind.ROLE_REASSIGNMENT_NOT_ALLOWED_FOR_BENCH)


@dataclass
class TransferTypeEnabledRule:
    rule_id: str = "transfer_type_enabled"
    priority: int = 20
    enabled: bool = True

    def validate(self, proposal: Proposal, ctx: TransferContext) -> None:
        if not ctx.settings.is_type_enabled(ctx.transfer_type):
            raise _reject(
                TransferErrorKind.TRANSFER_TYPE_DISABLED,
                f"{ctx.transfer_type} transfers are disabled for this league",
                transfer_type=ctx.transfer_type,
            )


@dataclass
class TransferWindowRule:
    rule_id: str = "transfer_window"
    priority: int = 30
    enabled: bool = True

    def validate(self, proposal: Proposal, ctx: TransferContext) -> None:
        if ctx.transfer_type != "midSeason":
            return
        config = ctx.settings.transfer_types.mid_season_transfers
        if config is None or not config.is_open(ctx.now):
            details = {"now": ctx.now.isoformat()}
            if config is not None:
                details["window_start_date"] = config.window_start_date.isoformat()
                details["window_end_date"] = config.window_end_date.isoformat()
            raise _reject(TransferErrorKind.TRANSFER_WINDOW_CLOSED, **details)


@dataclass
class TransferLimitRule:
    rule_id: str = "transfer_limit"
    priority: int = 40
    enabled: bool = True

    def validate(self, proposal: Proposal, ctx: TransferContext) -> None:
        used = ctx.squad.used_for(ctx.transfer_type)
        allowed = ctx.settings.max_allowed(ctx.transfer_type)
        if used >= allowed:
            raise _reject(
                TransferErrorKind.TRANSFER_LIMIT_EXCEEDED,
                f"{used} of {allowed} {ctx.transfer_type} transfers already used",
                used=used,
                max_allowed=allowed,
            )


@dataclass
class SubstitutionPlayersRule:
    rule_id: str = "substitution_players"
    priority: int = 50
    enabled: bool = True

    def validate(self, proposal: Proposal, ctx: TransferContext) -> None:
        if not isinstance(proposal, SubstitutionProposal):
            return
        squad = ctx.squad
        out_idx = squad.index_of(proposal.player_out)
        if out_idx is None:
            raise _reject(TransferErrorKind.PLAYER_NOT_IN_SQUAD, player_id=proposal.player_out)

        if ctx.is_bench:
            in_idx = squad.index_of(proposal.player_in)
            if in_idx is None or in_idx < ctx.squad_size:
                raise _reject(TransferErrorKind.PLAYER_NOT_ON_BENCH, player_id=proposal.player_in)
            return

        if out_idx >= ctx.squad_size:
            raise _reject(TransferErrorKind.PLAYER_NOT_IN_MAIN_SQUAD, player_id=proposal.player_out)
        if squad.captain_id == proposal.player_out:
            raise _reject(TransferErrorKind.CAPTAIN_REMOVAL_FORBIDDEN, player_id=proposal.player_out)
        if squad.vice_captain_id == proposal.player_out:
            raise _reject(TransferErrorKind.VICE_CAPTAIN_REMOVAL_FORBIDDEN, player_id=proposal.player_out)
        if squad.index_of(proposal.player_in) is not None:
            raise _reject(TransferErrorKind.PLAYER_ALREADY_IN_SQUAD, player_id=proposal.player_in)
        if ctx.pool is None or proposal.player_in not in ctx.pool:
            raise _reject(TransferErrorKind.PLAYER_NOT_IN_POOL, player_id=proposal.player_in)


def substituted_players(proposal: SubstitutionProposal, ctx: TransferContext) -> List[PlayerEntry]:
    """Player list as it would look after the substitution, ignoring points."""

    players = list(ctx.squad.players)
    out_idx = ctx.squad.index_of(proposal.player_out)
    if ctx.is_bench:
        in_idx = ctx.squad.index_of(proposal.player_in)
        players[out_idx], players[in_idx] = players[in_idx], players[out_idx]
    else:
        players[out_idx] = ctx.pool.get(proposal.player_in).to_entry()
    return players


@dataclass
class FormationRule:
    rule_id: str = "formation"
    priority: int = 60
    enabled: bool = True

    def validate(self, proposal: Proposal, ctx: TransferContext) -> None:
        rules = ctx.settings.squad_rules
        if rules is None or not isinstance(proposal, SubstitutionProposal):
            return
        before = role_counts(ctx.squad.players, ctx.squad_size)
        after = role_counts(substituted_players(proposal, ctx), ctx.squad_size)
        short = _new_shortfalls(before, after, rules.minimums())
        if short:
            raise _reject(
                TransferErrorKind.FORMATION_VIOLATION,
                "; ".join(short),
            )


def _new_shortfalls(before: Counter, after: Counter, minimums: dict) -> List[str]:
    messages = []
    for role, required in minimums.items():
        have = after.get(role, 0)
        if have < required and have < before.get(role, 0):
            messages.append(f"Need at least {required} {ROLE_PLURALS[role]} (would have {have})")
    return messages


@dataclass
class RoleReassignmentRule:
    rule_id: str = "role_reassignment"
    priority: int = 70
    enabled: bool = True

    def validate(self, proposal: Proposal, ctx: TransferContext) -> None:
        if not isinstance(proposal, RoleReassignmentProposal):
            return
        if proposal.new_captain_id:
            raise _reject(TransferErrorKind.CAPTAIN_REASSIGNMENT_NOT_SUPPORTED)
        vice, x_factor = proposal.new_vice_captain_id, proposal.new_x_factor_id
        if vice and x_factor:
            raise _reject(TransferErrorKind.MUST_SELECT_EXACTLY_ONE_ROLE)
        if not vice and not x_factor:
            raise _reject(TransferErrorKind.NO_ROLE_SELECTED)

        squad = ctx.squad
        target = vice or x_factor
        if not squad.in_main_squad(target, ctx.squad_size):
            raise _reject(TransferErrorKind.PLAYER_NOT_IN_MAIN_SQUAD, player_id=target)

        current = squad.vice_captain_id if vice else squad.x_factor_id
        other = squad.x_factor_id if vice else squad.vice_captain_id
        if target == current:
            raise _reject(TransferErrorKind.ROLE_ALREADY_HELD, player_id=target)
        if target in (squad.captain_id, other):
            raise _reject(TransferErrorKind.ROLE_HOLDER_CONFLICT, player_id=target)


BUILTIN_RULES: Sequence[Rule] = (
    BenchRoleReassignmentRule(),
    TransferTypeEnabledRule(),
    TransferWindowRule(),
    TransferLimitRule(),
    SubstitutionPlayersRule(),
    FormationRule(),
    RoleReassignmentRule(),
)


def validate_all(proposal: Proposal, ctx: TransferContext, rules: Optional[Iterable[Rule]] = None) -> None:
    enabled_rules = [rule for rule in (rules or BUILTIN_RULES) if rule.enabled]
    for rule in sorted(enabled_rules, key=lambda rule: (rule.priority, rule.rule_id)):
        rule.validate(proposal, ctx)
