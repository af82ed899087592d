"""
地址與 commitment 的格式處理

純計算邏輯，不涉及資料庫
"""
import re

from core.exceptions import InvalidAddress, InvalidCommitment

NULL_ADDRESS = "0x" + "0" * 40

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_COMMITMENT_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


def normalize_address(address: str) -> str:
    """
    驗證並正規化地址（0x + 40 個 hex，轉小寫）

    異常：
        InvalidAddress: 格式不符
    """
    if not isinstance(address, str) or not _ADDRESS_RE.match(address):
        raise InvalidAddress(address)
    return address.lower()


def is_null_address(address: str) -> bool:
    return address.lower() == NULL_ADDRESS


def require_non_null(address: str) -> str:
    """正規化地址，並拒絕 null address"""
    normalized = normalize_address(address)
    if is_null_address(normalized):
        raise InvalidAddress(address)
    return normalized


def normalize_commitment(commitment) -> str:
    """
    commitment 是不透明的 32 bytes，接受 bytes 或 0x 開頭的 hex 字串

    只檢查長度，不檢查內容
    """
    if isinstance(commitment, (bytes, bytearray)):
        if len(commitment) != 32:
            raise InvalidCommitment(f"Commitment must be 32 bytes, got {len(commitment)}")
        return "0x" + bytes(commitment).hex()
    if isinstance(commitment, str) and _COMMITMENT_RE.match(commitment):
        return commitment.lower()
    raise InvalidCommitment(f"Commitment must be 32 bytes, got {commitment!r}")
