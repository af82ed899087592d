"""
EscrowLedger：管理 Game 的完整生命週期

職責：
1. 建立 Game（initiator 押注）
2. 接受 Game（responder 押上相同金額）
3. 結算 Game（admin 指定 winner，合約把 2 × stake 付給 winner）
4. 查詢 Game 與 initiator 的遊戲列表

原則：
- 先檢查資料是否符合要求，再執行操作
- 所有狀態轉換經過 GameStateMachine
- 結算時轉帳是最後一個動作；轉帳失敗整個 transaction rollback，
  winner 不會被看到已設定
"""
from datetime import datetime, timezone
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session
import logging

from models import Game, GameStatus, LedgerState
from core import events
from core.access_control import AccessControl
from core.state_machine import GameStateMachine
from core.locks import with_game_lock, with_ledger_lock, LEDGER_ROW_ID
from core.exceptions import (
    AlreadyFinalized,
    GameNotFound,
    InvalidStake,
    InvalidWinner,
    StakeMismatch,
)
from services import safe_math
from services.addresses import normalize_commitment, require_non_null
from services.treasury import Treasury
from database import transactional

logger = logging.getLogger(__name__)


def _utcnow():
    return datetime.now(timezone.utc)


class EscrowLedger:
    """Game 生命週期管理器"""

    @staticmethod
    def is_initialized(db: Session) -> bool:
        return db.get(LedgerState, LEDGER_ROW_ID) is not None

    @staticmethod
    @transactional
    def initialize(db: Session) -> LedgerState:
        """建立 LedgerState（last_game_id = 0, custody = 0）；已存在則直接返回"""
        state = db.get(LedgerState, LEDGER_ROW_ID)
        if state is None:
            state = LedgerState(id=LEDGER_ROW_ID, last_game_id=0, custody=0)
            db.add(state)
            logger.info("Ledger state initialized")
        return state

    @staticmethod
    @transactional
    def create_game(
        db: Session,
        caller: str,
        value: int,
        commitment,
        treasury: Treasury
    ) -> Game:
        """
        建立新遊戲，附帶的 value 就是 stake

        流程：
        1. 驗證 caller / value / commitment
        2. 發出新的 game id（last_game_id + 1）
        3. 建立 Game，收下押注
        4. 記錄 NewGame 事件

        參數：
            db: SQLAlchemy Session
            caller: 呼叫者地址（成為 initiator）
            value: 附帶的金額
            commitment: 32 bytes 的不透明 hash
            treasury: 保管金額的 Treasury

        返回：
            新建立的 Game

        異常：
            InvalidStake: value <= 0
            InvalidAddress: caller 格式錯誤或是 null address
            InvalidCommitment: commitment 不是 32 bytes
            ArithmeticFault: value 超出 uint256
        """
        initiator = require_non_null(caller)
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise InvalidStake(f"Stake must be a positive integer, got {value!r}")
        stake = safe_math.to_uint256(value)
        commitment = normalize_commitment(commitment)

        # 1. 發出 game id（鎖住 ledger，確保 id 連續且不重複）
        state = with_ledger_lock(db).one()
        game_id = state.last_game_id + 1
        state.last_game_id = game_id

        # 2. 建立 Game
        game = Game(
            id=game_id,
            stake=stake,
            initiator=initiator,
            responder=None,
            commitment=commitment,
            winner=None,
            outcome_data="",
            exists=True,
            created_at=_utcnow(),
        )
        db.add(game)
        db.flush()

        # 3. 收下押注
        treasury.receive(db, stake)

        # 4. 記錄事件
        events.record_event(
            db,
            events.NEW_GAME,
            initiator=initiator,
            stake=stake,
            game_id=game_id
        )

        logger.info(f"Created game {game_id} by {initiator} with stake {stake}")
        return game

    @staticmethod
    @transactional
    def accept_game(
        db: Session,
        caller: str,
        game_id: int,
        value: int,
        treasury: Treasury
    ) -> Game:
        """
        接受遊戲（狀態轉換 OPEN -> ACCEPTED）

        前置條件：
        1. Game 必須存在
        2. 還沒有 responder
        3. 附帶的金額必須剛好等於 stake

        異常：
            GameNotFound: Game 不存在
            AlreadyAccepted: 已經有 responder
            StakeMismatch: 金額不等於 stake
        """
        responder = require_non_null(caller)

        game = EscrowLedger._locked_game(db, game_id)
        GameStateMachine.require_transition(game, GameStatus.ACCEPTED)

        if isinstance(value, bool) or not isinstance(value, int) or value != game.stake:
            raise StakeMismatch(game.id, game.stake, value)

        game.responder = responder
        game.accepted_at = _utcnow()
        treasury.receive(db, value)

        events.record_event(
            db,
            events.GAME_ACCEPTED,
            responder=responder,
            game_id=game.id
        )

        logger.info(f"Game {game.id} accepted by {responder}")
        return game

    @staticmethod
    @transactional
    def finalize_game(
        db: Session,
        caller: str,
        game_id: int,
        winner: str,
        outcome_data: str,
        treasury: Treasury
    ) -> Game:
        """
        結算遊戲（狀態轉換 ACCEPTED -> SETTLED）

        流程：
        1. 確認 caller 是 admin（owner 不算）
        2. 驗證 Game 狀態與 winner
        3. 設定 winner / outcome_data，記錄 GameFinalized
        4. 最後才轉帳 2 × stake 給 winner

        轉帳失敗時 @transactional 會 rollback 1-3 的所有修改

        異常：
            Unauthorized: caller 不是 admin
            GameNotFound: Game 不存在
            AlreadyFinalized: 已經結算過
            InvalidWinner: winner 不是 initiator 或 responder
            GameNotAccepted: 還沒有 responder
            ArithmeticFault: custody 不足或 winner 餘額 overflow
        """
        AccessControl.require_admin(db, caller)

        game = EscrowLedger._locked_game(db, game_id)
        if game.status == GameStatus.SETTLED:
            raise AlreadyFinalized(game.id)

        # 參與者都是正規化過的地址，格式錯誤的 winner 一定不是參與者
        if not isinstance(winner, str) or winner.lower() not in (game.initiator, game.responder):
            raise InvalidWinner(game.id, winner)
        winner = winner.lower()

        GameStateMachine.require_transition(game, GameStatus.SETTLED)

        payout = safe_math.mul(game.stake, 2)
        game.winner = winner
        game.outcome_data = outcome_data or ""
        game.settled_at = _utcnow()

        events.record_event(
            db,
            events.GAME_FINALIZED,
            winner=winner,
            game_id=game.id
        )

        treasury.pay(db, winner, payout)

        logger.info(f"Game {game.id} finalized by {caller.lower()}, winner {winner} paid {payout}")
        return game

    @staticmethod
    def _locked_game(db: Session, game_id: int) -> Game:
        # id 0 保留代表「沒有遊戲」
        if isinstance(game_id, bool) or not isinstance(game_id, int) or game_id <= 0:
            raise GameNotFound(game_id)
        game = with_game_lock(game_id, db).first()
        if not game or not game.exists:
            raise GameNotFound(game_id)
        return game

    @staticmethod
    def get_game(db: Session, game_id: int) -> Game:
        """
        透過 id 取得 Game

        異常：
            GameNotFound: Game 不存在
        """
        if isinstance(game_id, bool) or not isinstance(game_id, int) or game_id <= 0:
            raise GameNotFound(game_id)
        game = db.get(Game, game_id)
        if not game:
            raise GameNotFound(game_id)
        return game

    @staticmethod
    def games_of(db: Session, address: str) -> List[int]:
        """
        取得 address 建立的所有 game id（依建立順序）

        id 單調遞增，所以依 id 排序就是建立順序
        格式錯誤的地址沒有任何遊戲
        """
        if not isinstance(address, str):
            return []
        rows = (
            db.query(Game.id)
            .filter(Game.initiator == address.lower())
            .order_by(Game.id)
            .all()
        )
        return [row[0] for row in rows]

    @staticmethod
    def owner_games_count(db: Session, address: str) -> int:
        if not isinstance(address, str):
            return 0
        return (
            db.query(func.count(Game.id))
            .filter(Game.initiator == address.lower())
            .scalar()
        )

    @staticmethod
    def last_game_id(db: Session) -> int:
        state = db.get(LedgerState, LEDGER_ROW_ID)
        return state.last_game_id if state else 0

    @staticmethod
    def custody(db: Session) -> int:
        state = db.get(LedgerState, LEDGER_ROW_ID)
        return state.custody if state else 0
