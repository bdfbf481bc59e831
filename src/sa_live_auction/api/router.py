"""sa_live_auction REST endpoints.

POST /live-auction/start            start a session (auctioneer)
POST /live-auction/select-player    put a pool player up (READY ledger)
POST /live-auction/start-bidding    READY -> LIVE
POST /live-auction/bid              paddle raise at the next slab step
POST /live-auction/jump-bid         bid a specific ladder amount
POST /live-auction/pause            LIVE -> PAUSED
POST /live-auction/resume           PAUSED -> LIVE
POST /live-auction/sold             finalise to the highest bidder
POST /live-auction/unsold           finalise without a sale
POST /live-auction/end              end the session
GET  /live-auction/state            full snapshot for polling clients
GET  /live-auction/history/{player_id}

Rejections come back as the error envelope with the matching HTTP status,
never as an unhandled exception.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.sa_common.caller import Caller
from src.sa_common.database import get_db_session
from src.sa_common.response import error_response, json_response, success_response
from src.sa_gateway.auth.dependencies import get_caller
from src.sa_live_auction.application.results import ActionResult
from src.sa_live_auction.application.schemas import (
    BidRequest,
    JumpBidRequest,
    SelectPlayerRequest,
    SessionCommandRequest,
    StartSessionRequest,
)
from src.sa_live_auction.application.service import LiveAuctionService
from src.sa_live_auction.engine.engine import LiveAuctionEngine
from src.sa_live_auction.infrastructure.session_store import RedisSessionStore
from src.sa_roster.infrastructure.persistence import RosterRepository

router = APIRouter(prefix="/live-auction", tags=["live-auction"])

_service = LiveAuctionService(
    LiveAuctionEngine(
        store=RedisSessionStore(),
        roster=RosterRepository(),
        default_timer_seconds=settings.LIVE_AUCTION_TIMER_SECONDS,
    ),
    poll_interval_ms=settings.LIVE_AUCTION_POLL_INTERVAL_MS,
)


def get_live_auction_service() -> LiveAuctionService:
    return _service


CallerDep = Annotated[Caller, Depends(get_caller)]
DbDep = Annotated[AsyncSession, Depends(get_db_session)]
ServiceDep = Annotated[LiveAuctionService, Depends(get_live_auction_service)]


def _respond(request: Request, result: ActionResult) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    if result.success:
        resp = success_response(result.data, request_id)
    else:
        resp = error_response(result.error_code, result.error or "Request failed", request_id)
    return json_response(resp, result.http_status)


def _session_id(body: SessionCommandRequest | None) -> str | None:
    return body.session_id if body else None


@router.post("/start")
async def start_session(
    body: StartSessionRequest,
    request: Request,
    caller: CallerDep,
    service: ServiceDep,
) -> JSONResponse:
    return _respond(request, await service.start_session(caller, body))


@router.post("/select-player")
async def select_player(
    body: SelectPlayerRequest,
    request: Request,
    caller: CallerDep,
    db: DbDep,
    service: ServiceDep,
) -> JSONResponse:
    result = await service.select_player(
        db, caller, body.session_id, body.player_id, body.player_name, body.base_price_cents
    )
    return _respond(request, result)


@router.post("/start-bidding")
async def start_bidding(
    request: Request,
    caller: CallerDep,
    db: DbDep,
    service: ServiceDep,
    body: SessionCommandRequest | None = None,
) -> JSONResponse:
    return _respond(request, await service.start_bidding(db, caller, _session_id(body)))


@router.post("/bid")
async def confirm_bid(
    body: BidRequest,
    request: Request,
    caller: CallerDep,
    db: DbDep,
    service: ServiceDep,
) -> JSONResponse:
    result = await service.confirm_bid(db, caller, body.session_id, body.team_id, body.team_name)
    return _respond(request, result)


@router.post("/jump-bid")
async def submit_jump_bid(
    body: JumpBidRequest,
    request: Request,
    caller: CallerDep,
    db: DbDep,
    service: ServiceDep,
) -> JSONResponse:
    result = await service.submit_jump_bid(
        db, caller, body.session_id, body.team_id, body.team_name, body.jump_amount_cents
    )
    return _respond(request, result)


@router.post("/pause")
async def pause_bidding(
    request: Request,
    caller: CallerDep,
    db: DbDep,
    service: ServiceDep,
    body: SessionCommandRequest | None = None,
) -> JSONResponse:
    return _respond(request, await service.pause_bidding(db, caller, _session_id(body)))


@router.post("/resume")
async def resume_bidding(
    request: Request,
    caller: CallerDep,
    db: DbDep,
    service: ServiceDep,
    body: SessionCommandRequest | None = None,
) -> JSONResponse:
    return _respond(request, await service.resume_bidding(db, caller, _session_id(body)))


@router.post("/sold")
async def mark_sold(
    request: Request,
    caller: CallerDep,
    db: DbDep,
    service: ServiceDep,
    body: SessionCommandRequest | None = None,
) -> JSONResponse:
    return _respond(request, await service.mark_sold(db, caller, _session_id(body)))


@router.post("/unsold")
async def mark_unsold(
    request: Request,
    caller: CallerDep,
    db: DbDep,
    service: ServiceDep,
    body: SessionCommandRequest | None = None,
) -> JSONResponse:
    return _respond(request, await service.mark_unsold(db, caller, _session_id(body)))


@router.post("/end")
async def end_session(
    request: Request,
    caller: CallerDep,
    db: DbDep,
    service: ServiceDep,
    body: SessionCommandRequest | None = None,
) -> JSONResponse:
    return _respond(request, await service.end_session(db, caller, _session_id(body)))


@router.get("/state")
async def get_state(
    request: Request,
    caller: CallerDep,
    db: DbDep,
    service: ServiceDep,
    session_id: str | None = Query(None, description="Defaults to your own or the latest session"),
) -> JSONResponse:
    return _respond(request, await service.get_state(db, caller, session_id))


@router.get("/history/{player_id}")
async def get_player_history(
    player_id: str,
    request: Request,
    caller: CallerDep,
    service: ServiceDep,
    session_id: str | None = Query(None),
) -> JSONResponse:
    return _respond(request, await service.get_player_history(caller, session_id, player_id))
