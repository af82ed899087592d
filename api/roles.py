"""
Role API Endpoints

職責：
1. 查詢 owner / admin
2. owner 新增、移除 admin
3. owner 轉移所有權
"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from api.deps import get_caller, get_service
from api.errors import to_http_exception
from core.escrow_service import EscrowService
from core.exceptions import EscrowException
from schemas import (
    AdminAdd,
    AdminStatusResponse,
    OwnerResponse,
    OwnershipTransfer,
    StatusResponse,
)

router = APIRouter(prefix="/api/roles", tags=["roles"])
logger = logging.getLogger(__name__)


@router.get("/owner", response_model=OwnerResponse)
def get_owner(service: EscrowService = Depends(get_service)):
    return OwnerResponse(owner=service.owner())


@router.post("/owner", response_model=StatusResponse)
def transfer_ownership(
    data: OwnershipTransfer,
    caller: str = Depends(get_caller),
    service: EscrowService = Depends(get_service)
):
    """
    轉移所有權（owner endpoint）

    立即生效，原 owner 之後不能再管理 admin
    """
    try:
        service.transfer_ownership(caller, data.new_owner)
        return StatusResponse(status="ok")
    except EscrowException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to transfer ownership: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/admins", response_model=StatusResponse)
def add_admin(
    data: AdminAdd,
    caller: str = Depends(get_caller),
    service: EscrowService = Depends(get_service)
):
    """新增 admin（owner endpoint，冪等）"""
    try:
        service.add_admin(caller, data.address)
        return StatusResponse(status="ok")
    except EscrowException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to add admin: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.delete("/admins/{address}", response_model=StatusResponse)
def remove_admin(
    address: str,
    caller: str = Depends(get_caller),
    service: EscrowService = Depends(get_service)
):
    """移除 admin（owner endpoint）"""
    try:
        service.remove_admin(caller, address)
        return StatusResponse(status="ok")
    except EscrowException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to remove admin: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/admins/{address}", response_model=AdminStatusResponse)
def is_admin(address: str, service: EscrowService = Depends(get_service)):
    return AdminStatusResponse(address=address, is_admin=service.is_admin(address))
