"""Apply an approved transfer to a squad.

Transfers never change a squad's total at the moment they happen: whatever
the outgoing player (or the outgoing role) had already earned is moved into
``banked_points`` and recorded on the history entry as ``pointsBanked``, and
the incoming player starts contributing from the current pool points.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Tuple

from pyleague.config.league import LeagueSettings
from pyleague.ledger.points import player_contribution, role_of, with_points
from pyleague.models.history import RoleReassignmentEntry, SubstitutionEntry, SwapSnapshot
from pyleague.models.player import PlayerEntry, PlayerPool
from pyleague.models.squad import Squad, SquadRole, counter_field
from pyleague.transfers.proposals import RoleReassignmentProposal, SubstitutionProposal
from pyleague.transfers.rules import Proposal, TransferContext, validate_all
from pyleague.transfers.validator import build_context


def current_points(pool: Optional[PlayerPool], entry: PlayerEntry) -> float:
    if pool is not None:
        pool_player = pool.get(entry.player_id)
        if pool_player is not None:
            return pool_player.points
    return entry.points


def _substitute(
    proposal: SubstitutionProposal, ctx: TransferContext
) -> Tuple[Dict[str, object], float, Optional[SwapSnapshot]]:
    squad = ctx.squad
    players: List[PlayerEntry] = list(squad.players)
    out_idx = squad.index_of(proposal.player_out)
    outgoing = players[out_idx]
    leaving_main = out_idx < ctx.squad_size
    roles = squad.roles_held_by(outgoing.player_id) if leaving_main else []

    banked = 0.0
    if leaving_main:
        banked = max(0.0, player_contribution(outgoing, role_of(squad, outgoing.player_id)))

    snapshot = None
    if ctx.is_bench:
        in_idx = squad.index_of(proposal.player_in)
        bench_entry = players[in_idx]
        snapshot = SwapSnapshot(
            player_in_points_at_joining=bench_entry.points_at_joining,
            player_in_points_when_role_assigned=bench_entry.points_when_role_assigned,
            roles_moved=[role.value for role in roles],
        )
        stamp = current_points(ctx.pool, bench_entry)
        incoming = bench_entry.model_copy(
            update={
                "points": stamp,
                "points_at_joining": stamp,
                "points_when_role_assigned": None,
            }
        )
        players[in_idx] = outgoing
    else:
        incoming = ctx.pool.get(proposal.player_in).to_entry()
        stamp = incoming.points

    update: Dict[str, object] = {}
    if roles:
        incoming = incoming.model_copy(update={"points_when_role_assigned": stamp})
        for role in roles:
            update[role.field_name] = incoming.player_id
    players[out_idx] = incoming
    update["players"] = players
    return update, banked, snapshot


def _reassign_role(proposal: RoleReassignmentProposal, ctx: TransferContext) -> Tuple[Dict[str, object], float]:
    squad = ctx.squad
    role = SquadRole.VICE_CAPTAIN if proposal.new_vice_captain_id else SquadRole.X_FACTOR
    target_id = proposal.new_vice_captain_id or proposal.new_x_factor_id

    banked = 0.0
    previous_id = squad.role_holder(role)
    if previous_id and squad.in_main_squad(previous_id, ctx.squad_size):
        previous = squad.find(previous_id)
        banked = max(0.0, player_contribution(previous, role) - player_contribution(previous, None))

    players = list(squad.players)
    target_idx = squad.index_of(target_id)
    target = players[target_idx]
    players[target_idx] = target.model_copy(
        update={"points_when_role_assigned": current_points(ctx.pool, target)}
    )
    return {"players": players, role.field_name: target_id}, banked


def apply_transfer(
    transfer_type: str,
    proposal: Proposal,
    squad: Squad,
    settings: LeagueSettings,
    pool: Optional[PlayerPool] = None,
    now: Optional[datetime] = None,
) -> Squad:
    """Validate and apply ``proposal``, returning the new squad with points refreshed.

    Raises :class:`~pyleague.transfers.errors.TransferRejected` without
    touching ``squad`` when any rule fails.
    """

    ctx = build_context(transfer_type, squad, settings, pool, now)
    validate_all(proposal, ctx)

    if isinstance(proposal, SubstitutionProposal):
        update, banked, snapshot = _substitute(proposal, ctx)
        entry = SubstitutionEntry(
            timestamp=ctx.now,
            transfer_type=transfer_type,
            player_out=proposal.player_out,
            player_in=proposal.player_in,
            points_banked=banked,
            snapshot=snapshot,
        )
    else:
        update, banked = _reassign_role(proposal, ctx)
        entry = RoleReassignmentEntry(
            timestamp=ctx.now,
            transfer_type=transfer_type,
            new_vice_captain_id=proposal.new_vice_captain_id or None,
            new_x_factor_id=proposal.new_x_factor_id or None,
            points_banked=banked,
        )

    counter = counter_field(transfer_type)
    update.update(
        {
            "banked_points": squad.banked_points + banked,
            counter: getattr(squad, counter) + 1,
            "transfers_used": squad.transfers_used + 1,
            "transfer_history": [*squad.transfer_history, entry],
        }
    )
    return with_points(squad.model_copy(update=update), ctx.squad_size)
