"""
把 domain 異常轉成 HTTPException
"""
from fastapi import HTTPException

from core.exceptions import (
    AlreadyAccepted,
    AlreadyFinalized,
    AlreadyInitialized,
    ArithmeticFault,
    EscrowException,
    GameNotAccepted,
    GameNotFound,
    Unauthorized,
)

_STATUS_CODES = {
    Unauthorized: 403,
    GameNotFound: 404,
    AlreadyAccepted: 409,
    AlreadyFinalized: 409,
    AlreadyInitialized: 409,
    GameNotAccepted: 409,
    ArithmeticFault: 500,
}


def to_http_exception(exc: EscrowException) -> HTTPException:
    """未列出的 EscrowException（參數驗證類）一律 400"""
    status_code = _STATUS_CODES.get(type(exc), 400)
    return HTTPException(
        status_code=status_code,
        detail={"error": type(exc).__name__, "message": str(exc)}
    )
