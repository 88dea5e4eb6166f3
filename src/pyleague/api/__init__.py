"""REST API for the squad points ledger."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from pyleague.api.schemas import (
    PoolPointsRequest,
    RecalculationResponse,
    ReversalRequest,
    SquadPointsResponse,
    TransferRequest,
    TransferTogglesRequest,
)
from pyleague.models.squad import Squad
from pyleague.persistence import SquadStore
from pyleague.service import TransferService
from pyleague.transfers.errors import LedgerError


logger = logging.getLogger("uvicorn.error")


def _points_response(squad: Squad) -> SquadPointsResponse:
    return SquadPointsResponse(
        squad_id=squad.id,
        total_points=squad.total_points,
        captain_points=squad.captain_points,
        vice_captain_points=squad.vice_captain_points,
        x_factor_points=squad.x_factor_points,
        banked_points=squad.banked_points,
    )


def create_app(store: SquadStore | None = None) -> FastAPI:
    app = FastAPI(title="pyleague ledger")
    store = store or SquadStore(Path(__file__).resolve().parent.parent / "pyleague.sqlite")
    service = TransferService(store)
    app.state.squad_store = store
    app.state.transfer_service = service

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        logger.warning("Rejected malformed payload for %s: %s error(s)", request.url.path, exc.error_count())
        return JSONResponse(
            status_code=422,
            content={"detail": exc.errors(include_url=False, include_context=False)},
        )

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={"detail": exc.message, "kind": exc.kind.value, "details": exc.details},
        )

    def _call(fn, *args: Any, **kwargs: Any):
        try:
            return fn(*args, **kwargs)
        except KeyError as exc:
            missing = exc.args[0] if exc.args else "resource"
            raise HTTPException(status_code=404, detail=f"Not found: {missing}") from exc

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/squads/{squad_id}")
    async def get_squad(squad_id: str) -> dict[str, Any]:
        return _call(service.get_squad, squad_id).to_record()

    @app.get("/squads/{squad_id}/points", response_model=SquadPointsResponse)
    async def get_points(squad_id: str):
        squad = _call(service.get_squad, squad_id)
        points = _call(service.squad_points, squad_id)
        return SquadPointsResponse(
            squad_id=squad_id,
            total_points=points.total_points,
            captain_points=points.captain_points,
            vice_captain_points=points.vice_captain_points,
            x_factor_points=points.x_factor_points,
            banked_points=squad.banked_points,
        )

    @app.post("/squads/{squad_id}/transfers")
    async def submit_transfer(squad_id: str, payload: TransferRequest) -> dict[str, Any]:
        squad = _call(
            service.submit_transfer,
            squad_id,
            payload.transfer_type,
            payload.to_proposal(),
            now=payload.timestamp,
        )
        return squad.to_record()

    @app.post("/squads/{squad_id}/transfers/{history_index}/reverse")
    async def reverse_transfer(
        squad_id: str,
        history_index: int,
        payload: ReversalRequest | None = None,
    ) -> dict[str, Any]:
        now = payload.timestamp if payload is not None else None
        squad = _call(service.reverse_transfer, squad_id, history_index, now=now)
        return squad.to_record()

    @app.post("/squads/{squad_id}/recalculate", response_model=SquadPointsResponse)
    async def recalculate_squad(squad_id: str):
        return _points_response(_call(service.recalculate_squad, squad_id))

    @app.post("/squads/{squad_id}/repair")
    async def repair_squad(squad_id: str) -> dict[str, Any]:
        return _call(service.repair_squad, squad_id).to_record()

    @app.post("/leagues/{league_id}/recalculate", response_model=RecalculationResponse)
    async def recalculate_league(league_id: str):
        squads = _call(service.recalculate_league, league_id)
        standings = sorted((_points_response(squad) for squad in squads), key=lambda row: -row.total_points)
        return RecalculationResponse(league_id=league_id, squads=len(squads), standings=standings)

    @app.get("/leagues/{league_id}/audit")
    async def audit_league(league_id: str) -> dict[str, Any]:
        return _call(service.audit_league, league_id).to_dict()

    @app.patch("/leagues/{league_id}/toggles")
    async def set_toggles(league_id: str, payload: TransferTogglesRequest) -> dict[str, Any]:
        settings = _call(
            service.set_transfer_toggles,
            league_id,
            bench_changes_enabled=payload.bench_changes_enabled,
            flexible_changes_enabled=payload.flexible_changes_enabled,
        )
        return settings.to_record()

    @app.post("/pools/{pool_id}/points")
    async def update_pool_points(pool_id: str, payload: PoolPointsRequest) -> dict[str, Any]:
        pool = _call(service.update_pool_points, pool_id, payload.points, message=payload.message)
        return pool.to_record()

    return app
