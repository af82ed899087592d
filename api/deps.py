"""
API dependencies

- get_service: 取得 app 持有的 EscrowService
- get_caller: 取得已驗證的呼叫者地址（由前面的 gateway 驗證後放在 X-Caller header）
"""
from fastapi import Header, Request

from core.escrow_service import EscrowService


def get_service(request: Request) -> EscrowService:
    return request.app.state.escrow


def get_caller(x_caller: str = Header(..., alias="X-Caller")) -> str:
    return x_caller
