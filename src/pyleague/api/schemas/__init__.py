"""Pydantic models for API I/O."""

from .transfer import (
    PoolPointsRequest,
    RecalculationResponse,
    ReversalRequest,
    SquadPointsResponse,
    TransferRequest,
    TransferTogglesRequest,
)

__all__ = [
    "PoolPointsRequest",
    "RecalculationResponse",
    "ReversalRequest",
    "SquadPointsResponse",
    "TransferRequest",
    "TransferTogglesRequest",
]
