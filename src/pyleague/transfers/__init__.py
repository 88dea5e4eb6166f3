"""Transfer validation, application and admin reversal."""

from .apply import apply_transfer
from .errors import LedgerError, ReversalErrorKind, ReversalFailed, TransferErrorKind, TransferRejected
from .proposals import RoleReassignmentProposal, SubstitutionProposal, parse_proposal
from .reversal import reverse_transfer
from .rules import BUILTIN_RULES, TransferContext
from .validator import TRANSFER_TYPES, check_transfer, validate_transfer

__all__ = [
    "BUILTIN_RULES",
    "LedgerError",
    "ReversalErrorKind",
    "ReversalFailed",
    "RoleReassignmentProposal",
    "SubstitutionProposal",
    "TRANSFER_TYPES",
    "TransferContext",
    "TransferErrorKind",
    "TransferRejected",
    "apply_transfer",
    "check_transfer",
    "parse_proposal",
    "reverse_transfer",
    "validate_transfer",
]
