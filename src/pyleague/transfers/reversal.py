"""Admin reversal of a recorded transfer.

Bench swaps carry a snapshot of the baselines they overwrote and are undone
exactly. Replacements keep no copy of the player they removed, so only what
can be rebuilt from the current squad is reversed. Everything else fails
with a :class:`ReversalFailed` and leaves the squad as it was.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional

from pyleague.ledger.points import player_contribution, role_of, with_points
from pyleague.models.history import (
    ReversalMarkerEntry,
    RoleReassignmentEntry,
    SubstitutionEntry,
)
from pyleague.models.player import PlayerEntry
from pyleague.models.squad import Squad, counter_field
from pyleague.transfers.errors import ReversalErrorKind, ReversalFailed


def _fail(kind: ReversalErrorKind, message: str = "", **details) -> ReversalFailed:
    return ReversalFailed(kind, message, details or None)


def _reverse_bench(squad: Squad, entry: SubstitutionEntry, squad_size: int) -> Dict[str, object]:
    """Swap ``playerIn`` back to the bench and ``playerOut`` back into its slot.

    Both players must still sit where the swap left them: ``playerIn`` in the
    main squad and ``playerOut`` on the bench. The banked points are only
    withdrawn when ``playerOut`` actually returns to the main squad.
    """

    in_idx = squad.index_of(entry.player_in)
    if in_idx is None:
        raise _fail(ReversalErrorKind.INCOMING_PLAYER_MISSING, player_id=entry.player_in)
    if in_idx >= squad_size:
        raise _fail(
            ReversalErrorKind.INCOMING_PLAYER_MISSING,
            f"{entry.player_in} is no longer in the main squad",
            player_id=entry.player_in,
        )
    out_idx = squad.index_of(entry.player_out)
    if out_idx is None:
        raise _fail(ReversalErrorKind.ORIGINAL_PLAYER_DATA_UNAVAILABLE, player_id=entry.player_out)
    if out_idx < squad_size:
        raise _fail(
            ReversalErrorKind.ORIGINAL_PLAYER_DATA_UNAVAILABLE,
            f"{entry.player_out} is already in the main squad",
            player_id=entry.player_out,
        )

    players: List[PlayerEntry] = list(squad.players)
    incoming, outgoing = players[in_idx], players[out_idx]
    snapshot = entry.snapshot
    handed_over = set(snapshot.roles_moved) if snapshot else set()

    update: Dict[str, object] = {}
    for role in squad.roles_held_by(incoming.player_id):
        # Roles gained after the swap start a fresh baseline on the returning player.
        if role.value not in handed_over and outgoing.points_when_role_assigned is None:
            outgoing = outgoing.model_copy(update={"points_when_role_assigned": outgoing.points})
        update[role.field_name] = outgoing.player_id

    if snapshot is not None:
        incoming = incoming.model_copy(
            update={
                "points_at_joining": snapshot.player_in_points_at_joining,
                "points_when_role_assigned": snapshot.player_in_points_when_role_assigned,
            }
        )
    else:
        incoming = incoming.model_copy(update={"points_when_role_assigned": None})

    players[in_idx], players[out_idx] = outgoing, incoming
    update["players"] = players
    update["banked_points"] = max(0.0, squad.banked_points - (entry.points_banked or 0.0))
    return update


def _reverse_replacement(squad: Squad, entry: SubstitutionEntry, squad_size: int) -> Dict[str, object]:
    """Put a benched ``playerOut`` back into ``playerIn``'s slot.

    ``playerOut`` must be on the bench. When a later transfer has already
    brought it back into the main squad, moving it into ``playerIn``'s slot
    would empty its current slot and promote a bench player with baselines
    nobody recorded, so the reversal fails instead.
    """

    out_idx = squad.index_of(entry.player_out)
    if out_idx is None:
        raise _fail(
            ReversalErrorKind.ORIGINAL_PLAYER_DATA_UNAVAILABLE,
            f"{entry.player_out} is no longer in the squad",
            player_id=entry.player_out,
        )
    if out_idx < squad_size:
        raise _fail(
            ReversalErrorKind.ORIGINAL_PLAYER_DATA_UNAVAILABLE,
            f"{entry.player_out} is already in the main squad",
            player_id=entry.player_out,
        )
    in_idx = squad.index_of(entry.player_in)
    if in_idx is None:
        raise _fail(ReversalErrorKind.INCOMING_PLAYER_MISSING, player_id=entry.player_in)

    incoming = squad.players[in_idx]
    restored = squad.players[out_idx]
    banked = 0.0
    roles = []
    if in_idx < squad_size:
        banked = max(0.0, player_contribution(incoming, role_of(squad, incoming.player_id)))
        roles = squad.roles_held_by(incoming.player_id)

    restored = restored.model_copy(
        update={
            "points_at_joining": restored.points,
            "points_when_role_assigned": restored.points if roles else None,
        }
    )
    update: Dict[str, object] = {role.field_name: restored.player_id for role in roles}

    players: List[PlayerEntry] = []
    for idx, player in enumerate(squad.players):
        if idx == in_idx:
            players.append(restored)
        elif idx != out_idx:
            players.append(player)
    update["players"] = players
    update["banked_points"] = squad.banked_points + banked
    return update


def _locate(squad: Squad, history_index: int):
    history = squad.transfer_history
    if history_index < 0 or history_index >= len(history):
        raise _fail(
            ReversalErrorKind.HISTORY_INDEX_OUT_OF_RANGE,
            f"History index {history_index} out of range for {len(history)} entries",
            history_index=history_index,
        )
    return history[history_index]


def reverse_transfer(
    squad: Squad,
    history_index: int,
    squad_size: int,
    now: Optional[datetime] = None,
) -> Squad:
    """Reverse ``transfer_history[history_index]`` and refresh the ledger.

    On success the entry is removed, its counters are refunded (never below
    zero) and an ``admin_reversal`` marker referencing the index is appended.
    """

    entry = _locate(squad, history_index)
    if isinstance(entry, ReversalMarkerEntry):
        raise _fail(ReversalErrorKind.REVERSAL_MARKER_NOT_REVERSIBLE, history_index=history_index)
    if isinstance(entry, RoleReassignmentEntry):
        raise _fail(ReversalErrorKind.MANUAL_REASSIGNMENT_REQUIRED, history_index=history_index)

    if entry.transfer_type == "bench":
        update = _reverse_bench(squad, entry, squad_size)
    else:
        update = _reverse_replacement(squad, entry, squad_size)

    marker = ReversalMarkerEntry(
        timestamp=now or datetime.now(timezone.utc),
        note=f"Transfer #{history_index + 1} reversed by admin",
        reversed_transfer_index=history_index,
    )
    history = [item for idx, item in enumerate(squad.transfer_history) if idx != history_index]
    history.append(marker)

    counter = counter_field(entry.transfer_type)
    update.update(
        {
            counter: max(0, getattr(squad, counter) - 1),
            "transfers_used": max(0, squad.transfers_used - 1),
            "transfer_history": history,
        }
    )
    return with_points(squad.model_copy(update=update), squad_size)
