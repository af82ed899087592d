"""
EscrowService：對外的唯一入口

持有所有狀態的來源：
- session_factory：持久化的資料庫
- event_bus：commit 後通知訂閱者
- treasury：保管與轉帳

所有會修改狀態的操作都經過同一把 write lock 序列化，
每個操作是一個 transaction；commit 成功後才送出事件
"""
from contextlib import contextmanager
from typing import Iterator, List, Optional, Dict, Any
import logging
import threading

from sqlalchemy.orm import Session, sessionmaker

from core import events
from core.access_control import AccessControl
from core.escrow_ledger import EscrowLedger
from core.events import EventBus
from services.treasury import LedgerTreasury, Treasury, balance_of

logger = logging.getLogger(__name__)


class EscrowService:

    def __init__(
        self,
        session_factory: sessionmaker,
        event_bus: Optional[EventBus] = None,
        treasury: Optional[Treasury] = None
    ):
        self.session_factory = session_factory
        self.event_bus = event_bus or EventBus()
        self.treasury = treasury or LedgerTreasury()
        self._write_lock = threading.RLock()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self.session_factory()
        try:
            yield db
        finally:
            db.close()

    @contextmanager
    def _write(self) -> Iterator[Session]:
        """序列化的寫入：成功離開區塊時送出 commit 後的事件"""
        with self._write_lock, self._session() as db:
            yield db
            for event in events.take_pending_events(db):
                self.event_bus.publish(event)

    # ============ 初始化 ============

    def initialize(self, owner: str) -> None:
        """第一次啟動：設定 owner 並建立 ledger 狀態"""
        with self._write() as db:
            AccessControl.initialize(db, owner)
            EscrowLedger.initialize(db)

    def ensure_initialized(self, owner: Optional[str]) -> None:
        """
        啟動時呼叫：資料庫還沒初始化就用 owner 初始化，已初始化則忽略 owner

        異常：
            ValueError: 尚未初始化且沒有提供 owner
        """
        with self._write() as db:
            if not AccessControl.is_initialized(db):
                if not owner:
                    raise ValueError("owner_address is required to initialize a new database")
                AccessControl.initialize(db, owner)
            if not EscrowLedger.is_initialized(db):
                EscrowLedger.initialize(db)

    # ============ AccessControl ============

    def add_admin(self, caller: str, target: str) -> None:
        with self._write() as db:
            AccessControl.add_admin(db, caller, target)

    def remove_admin(self, caller: str, target: str) -> None:
        with self._write() as db:
            AccessControl.remove_admin(db, caller, target)

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        with self._write() as db:
            AccessControl.transfer_ownership(db, caller, new_owner)

    def is_admin(self, address: str) -> bool:
        with self._session() as db:
            return AccessControl.is_admin(db, address)

    def owner(self) -> str:
        with self._session() as db:
            return AccessControl.get_owner(db)

    # ============ EscrowLedger ============

    def create_game(self, caller: str, value: int, commitment) -> int:
        with self._write() as db:
            game = EscrowLedger.create_game(db, caller, value, commitment, treasury=self.treasury)
            game_id = game.id
        return game_id

    def accept_game(self, caller: str, game_id: int, value: int) -> None:
        with self._write() as db:
            EscrowLedger.accept_game(db, caller, game_id, value, treasury=self.treasury)

    def finalize_game(self, caller: str, game_id: int, winner: str, outcome_data: str) -> None:
        with self._write() as db:
            EscrowLedger.finalize_game(
                db, caller, game_id, winner, outcome_data, treasury=self.treasury
            )

    def get_game(self, game_id: int) -> Dict[str, Any]:
        with self._session() as db:
            return EscrowLedger.get_game(db, game_id).to_dict()

    def games_of(self, address: str) -> List[int]:
        with self._session() as db:
            return EscrowLedger.games_of(db, address)

    def owner_games_count(self, address: str) -> int:
        with self._session() as db:
            return EscrowLedger.owner_games_count(db, address)

    def last_game_id(self) -> int:
        with self._session() as db:
            return EscrowLedger.last_game_id(db)

    def custody(self) -> int:
        with self._session() as db:
            return EscrowLedger.custody(db)

    def balance_of(self, address: str) -> int:
        with self._session() as db:
            return balance_of(db, address.lower())

    def list_events(self, after_id: int = 0, limit: int = 100) -> List[Dict[str, Any]]:
        with self._session() as db:
            return [e.to_dict() for e in events.list_events(db, after_id, limit)]
