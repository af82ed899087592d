"""
並發控制工具

提供 Database-level 的鎖定機制，防止競態條件（Race Condition）

主要使用 PostgreSQL 的 SELECT ... FOR UPDATE 來實現悲觀鎖（Pessimistic Locking）
SQLite 不支援 FOR UPDATE（SQLAlchemy 會直接省略），單一 process 內由
EscrowService 的 write lock 負責序列化
"""
from sqlalchemy.orm import Session, Query

from models import Game, LedgerState, RoleRegistry

REGISTRY_ROW_ID = 1
LEDGER_ROW_ID = 1


def with_game_lock(game_id: int, db: Session) -> Query:
    """
    鎖定一個 Game（行級鎖）

    使用場景：
    - accept：確保不會有兩個 responder 同時看到 responder 為空
    - finalize：確保不會重複結算

    範例：
        game = with_game_lock(game_id, db).first()
        if not game:
            raise GameNotFound(game_id)

    參數：
        game_id: Game id
        db: SQLAlchemy Session

    返回：
        Query object（需要呼叫 .first() 或 .one() 來取得結果）

    注意：
        - nowait=False 表示如果鎖被佔用，會等待
        - 必須在 transaction 內使用（確保有 commit 或 rollback）
    """
    return db.query(Game).filter(
        Game.id == game_id
    ).with_for_update(nowait=False)


def with_ledger_lock(db: Session) -> Query:
    """
    鎖定 LedgerState

    使用場景：
    - 發出新的 game id（last_game_id 必須連續、不重複）
    - 修改 custody
    """
    return db.query(LedgerState).filter(
        LedgerState.id == LEDGER_ROW_ID
    ).with_for_update(nowait=False)


def with_registry_lock(db: Session) -> Query:
    """
    鎖定 RoleRegistry

    使用場景：
    - 所有需要 owner 權限的操作（避免 owner 在檢查與修改之間被轉移）
    """
    return db.query(RoleRegistry).filter(
        RoleRegistry.id == REGISTRY_ROW_ID
    ).with_for_update(nowait=False)
