"""
ORM models

所有狀態都存在資料庫裡，重啟後 game id 與順序完全相同
"""
import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.types import TypeDecorator

from database import Base


class Uint256(TypeDecorator):
    """
    無號 256-bit 整數，以十進位字串儲存

    SQLite 的 NUMERIC 會轉成浮點數而失去精度，所以改存字串
    """
    impl = String(78)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(int(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)


def _utcnow():
    return datetime.now(timezone.utc)


class GameStatus(str, enum.Enum):
    OPEN = "OPEN"
    ACCEPTED = "ACCEPTED"
    SETTLED = "SETTLED"


class RoleRegistry(Base):
    """owner 只有一筆（id 固定為 1）"""
    __tablename__ = "role_registry"

    id = Column(Integer, primary_key=True)
    owner = Column(String(42), nullable=False)


class Admin(Base):
    """有一筆 row 就代表該地址是 admin"""
    __tablename__ = "admins"

    address = Column(String(42), primary_key=True)
    added_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class LedgerState(Base):
    """
    Ledger 的全域狀態（id 固定為 1）

    last_game_id: 最後一個發出的 game id，從 0 開始
    custody: 合約目前保管的總金額
    """
    __tablename__ = "ledger_state"

    id = Column(Integer, primary_key=True)
    last_game_id = Column(Integer, nullable=False, default=0)
    custody = Column(Uint256, nullable=False, default=0)


class Game(Base):
    __tablename__ = "games"

    # id 由 LedgerState.last_game_id 指定，不使用 autoincrement
    id = Column(Integer, primary_key=True, autoincrement=False)
    stake = Column(Uint256, nullable=False)
    initiator = Column(String(42), nullable=False, index=True)
    responder = Column(String(42), nullable=True)
    commitment = Column(String(66), nullable=False)
    winner = Column(String(42), nullable=True)
    outcome_data = Column(Text, nullable=False, default="")
    exists = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    settled_at = Column(DateTime(timezone=True), nullable=True)

    @property
    def status(self) -> GameStatus:
        if self.winner is not None:
            return GameStatus.SETTLED
        if self.responder is not None:
            return GameStatus.ACCEPTED
        return GameStatus.OPEN

    def to_dict(self):
        return {
            "id": self.id,
            "stake": self.stake,
            "initiator": self.initiator,
            "responder": self.responder,
            "commitment": self.commitment,
            "winner": self.winner,
            "outcome_data": self.outcome_data,
            "exists": self.exists,
            "status": self.status.value,
        }


class Account(Base):
    """結算後入帳的餘額"""
    __tablename__ = "accounts"

    address = Column(String(42), primary_key=True)
    balance = Column(Uint256, nullable=False, default=0)


class EventLog(Base):
    """append-only 事件紀錄，與狀態變更在同一個 transaction 內寫入"""
    __tablename__ = "event_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_type = Column(String(64), nullable=False, index=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "event_type": self.event_type,
            "data": self.data,
            "created_at": self.created_at,
        }
