"""
Game API Endpoints

職責：
1. 建立、接受、結算遊戲
2. 查詢遊戲、initiator 的遊戲列表、帳戶餘額、事件紀錄

所有業務邏輯集中在 EscrowService / EscrowLedger，這裡只負責轉換 HTTP
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List
import logging

from api.deps import get_caller, get_service
from api.errors import to_http_exception
from core.escrow_service import EscrowService
from core.exceptions import EscrowException
from schemas import (
    AccountResponse,
    EventResponse,
    GameAccept,
    GameCreate,
    GameCreateResponse,
    GameFinalize,
    GameResponse,
    OwnerGamesResponse,
    StatusResponse,
)

router = APIRouter(prefix="/api", tags=["games"])
logger = logging.getLogger(__name__)


@router.post("/games", response_model=GameCreateResponse, status_code=201)
def create_game(
    data: GameCreate,
    caller: str = Depends(get_caller),
    service: EscrowService = Depends(get_service)
):
    """
    建立遊戲

    value 就是 stake，必須 > 0
    """
    try:
        game_id = service.create_game(caller, data.value, data.commitment)
        return GameCreateResponse(game_id=game_id)
    except EscrowException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to create game: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/games/{game_id}/accept", response_model=StatusResponse)
def accept_game(
    game_id: int,
    data: GameAccept,
    caller: str = Depends(get_caller),
    service: EscrowService = Depends(get_service)
):
    """
    接受遊戲

    value 必須剛好等於 stake
    """
    try:
        service.accept_game(caller, game_id, data.value)
        return StatusResponse(status="ok")
    except EscrowException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to accept game {game_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/games/{game_id}/finalize", response_model=StatusResponse)
def finalize_game(
    game_id: int,
    data: GameFinalize,
    caller: str = Depends(get_caller),
    service: EscrowService = Depends(get_service)
):
    """
    結算遊戲（admin endpoint）

    一次性、不可逆：winner 拿走 2 × stake
    """
    try:
        service.finalize_game(caller, game_id, data.winner, data.outcome_data)
        return StatusResponse(status="ok")
    except EscrowException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to finalize game {game_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/games/{game_id}", response_model=GameResponse)
def get_game(game_id: int, service: EscrowService = Depends(get_service)):
    try:
        return GameResponse(**service.get_game(game_id))
    except EscrowException as e:
        raise to_http_exception(e)


@router.get("/owners/{address}/games", response_model=OwnerGamesResponse)
def get_owner_games(address: str, service: EscrowService = Depends(get_service)):
    return OwnerGamesResponse(
        address=address,
        count=service.owner_games_count(address),
        game_ids=service.games_of(address)
    )


@router.get("/accounts/{address}", response_model=AccountResponse)
def get_account(address: str, service: EscrowService = Depends(get_service)):
    return AccountResponse(address=address, balance=service.balance_of(address))


@router.get("/events", response_model=List[EventResponse])
def get_events(
    after_id: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    service: EscrowService = Depends(get_service)
):
    return [EventResponse(**e) for e in service.list_events(after_id, limit)]
