from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union


class TransferErrorKind(str, Enum):
    CAPTAIN_REMOVAL_FORBIDDEN = "CaptainRemovalForbidden"
    VICE_CAPTAIN_REMOVAL_FORBIDDEN = "ViceCaptainRemovalForbidden"
    ROLE_REASSIGNMENT_NOT_ALLOWED_FOR_BENCH = "RoleReassignmentNotAllowedForBench"
    MUST_SELECT_EXACTLY_ONE_ROLE = "MustSelectExactlyOneRole"
    NO_ROLE_SELECTED = "NoRoleSelected"
    CAPTAIN_REASSIGNMENT_NOT_SUPPORTED = "CaptainReassignmentNotSupported"
    PLAYER_NOT_IN_SQUAD = "PlayerNotInSquad"
    PLAYER_NOT_IN_MAIN_SQUAD = "PlayerNotInMainSquad"
    PLAYER_NOT_ON_BENCH = "PlayerNotOnBench"
    PLAYER_ALREADY_IN_SQUAD = "PlayerAlreadyInSquad"
    PLAYER_NOT_IN_POOL = "PlayerNotInPool"
    FORMATION_VIOLATION = "FormationViolation"
    ROLE_ALREADY_HELD = "RoleAlreadyHeld"
    ROLE_HOLDER_CONFLICT = "RoleHolderConflict"
    TRANSFER_LIMIT_EXCEEDED = "TransferLimitExceeded"
    TRANSFER_WINDOW_CLOSED = "TransferWindowClosed"
    TRANSFER_TYPE_DISABLED = "TransferTypeDisabled"


class ReversalErrorKind(str, Enum):
    MANUAL_REASSIGNMENT_REQUIRED = "ManualReassignmentRequired"
    ORIGINAL_PLAYER_DATA_UNAVAILABLE = "OriginalPlayerDataUnavailable"
    INCOMING_PLAYER_MISSING = "IncomingPlayerMissing"
    HISTORY_INDEX_OUT_OF_RANGE = "HistoryIndexOutOfRange"
    REVERSAL_MARKER_NOT_REVERSIBLE = "ReversalMarkerNotReversible"


_DEFAULT_MESSAGES = {
    TransferErrorKind.CAPTAIN_REMOVAL_FORBIDDEN: "Captain cannot be removed with this transfer type",
    TransferErrorKind.VICE_CAPTAIN_REMOVAL_FORBIDDEN: "Vice-captain cannot be removed with this transfer type",
    TransferErrorKind.ROLE_REASSIGNMENT_NOT_ALLOWED_FOR_BENCH: "Bench transfers cannot reassign roles",
    TransferErrorKind.MUST_SELECT_EXACTLY_ONE_ROLE: "Select exactly one of vice-captain or X-Factor",
    TransferErrorKind.NO_ROLE_SELECTED: "No role selected for reassignment",
    TransferErrorKind.CAPTAIN_REASSIGNMENT_NOT_SUPPORTED: "Captain cannot be reassigned",
    TransferErrorKind.PLAYER_NOT_IN_SQUAD: "Outgoing player is not in the squad",
    TransferErrorKind.PLAYER_NOT_IN_MAIN_SQUAD: "Player is not in the main squad",
    TransferErrorKind.PLAYER_NOT_ON_BENCH: "Incoming player is not on the bench",
    TransferErrorKind.PLAYER_ALREADY_IN_SQUAD: "Incoming player is already in the squad",
    TransferErrorKind.PLAYER_NOT_IN_POOL: "Incoming player is not in the player pool",
    TransferErrorKind.FORMATION_VIOLATION: "Transfer would break the squad formation",
    TransferErrorKind.ROLE_ALREADY_HELD: "Player already holds this role",
    TransferErrorKind.ROLE_HOLDER_CONFLICT: "Player already holds another role",
    TransferErrorKind.TRANSFER_LIMIT_EXCEEDED: "No transfers of this type remaining",
    TransferErrorKind.TRANSFER_WINDOW_CLOSED: "Transfer window is closed",
    TransferErrorKind.TRANSFER_TYPE_DISABLED: "Transfer type is disabled for this league",
    ReversalErrorKind.MANUAL_REASSIGNMENT_REQUIRED: (
        "Role reassignments cannot be reversed automatically; reassign the role manually"
    ),
    ReversalErrorKind.ORIGINAL_PLAYER_DATA_UNAVAILABLE: "Original player data is no longer available",
    ReversalErrorKind.INCOMING_PLAYER_MISSING: "Incoming player is no longer where the transfer put them",
    ReversalErrorKind.HISTORY_INDEX_OUT_OF_RANGE: "No transfer at that history index",
    ReversalErrorKind.REVERSAL_MARKER_NOT_REVERSIBLE: "Admin reversal markers cannot be reversed",
}


@dataclass
class LedgerError(Exception):
    kind: Union[TransferErrorKind, ReversalErrorKind]
    message: str = ""
    details: Optional[Any] = None

    def __post_init__(self) -> None:
        if not self.message:
            self.message = _DEFAULT_MESSAGES.get(self.kind, str(self.kind.value))

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


@dataclass
class TransferRejected(LedgerError):
    kind: TransferErrorKind


@dataclass
class ReversalFailed(LedgerError):
    kind: ReversalErrorKind
