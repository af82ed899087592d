"""
事件：持久化的 event log + 同步通知

流程：
1. 業務邏輯在 transaction 內呼叫 record_event()
   - 寫入一筆 EventLog（跟狀態變更一起 commit / rollback）
   - 把事件暫存在 db.info["pending_events"]
2. commit 成功後，EscrowService 呼叫 EventBus.publish() 送出暫存事件
3. 訂閱者失敗只記錄 log，不會 rollback 已經 commit 的狀態
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Any
import logging

from sqlalchemy.orm import Session

from models import EventLog

logger = logging.getLogger(__name__)

NEW_GAME = "NewGame"
GAME_ACCEPTED = "GameAccepted"
GAME_FINALIZED = "GameFinalized"
ADMIN_ADDED = "AdminAdded"
ADMIN_DELETED = "AdminDeleted"
OWNERSHIP_TRANSFERRED = "OwnershipTransferred"


@dataclass(frozen=True)
class DomainEvent:
    event_type: str
    data: Dict[str, Any] = field(default_factory=dict)


Subscriber = Callable[[DomainEvent], None]


def record_event(db: Session, event_type: str, **data) -> DomainEvent:
    """
    在目前的 transaction 內記錄事件

    參數：
        db: SQLAlchemy Session
        event_type: 事件名稱（NewGame, GameAccepted, ...）
        **data: 事件內容

    返回：
        DomainEvent（尚未送出，commit 後才會 publish）
    """
    event = DomainEvent(event_type=event_type, data=data)
    db.add(EventLog(event_type=event_type, data=data))
    db.info.setdefault("pending_events", []).append(event)
    return event


def take_pending_events(db: Session) -> List[DomainEvent]:
    return db.info.pop("pending_events", [])


def list_events(db: Session, after_id: int = 0, limit: int = 100) -> List[EventLog]:
    return (
        db.query(EventLog)
        .filter(EventLog.id > after_id)
        .order_by(EventLog.id)
        .limit(limit)
        .all()
    )


class EventBus:
    """同步的事件通知"""

    def __init__(self):
        self._subscribers: List[Subscriber] = []

    def subscribe(self, subscriber: Subscriber) -> Subscriber:
        self._subscribers.append(subscriber)
        return subscriber

    def publish(self, event: DomainEvent) -> None:
        for subscriber in list(self._subscribers):
            try:
                subscriber(event)
            except Exception as e:
                # 狀態已經 commit，送達失敗不影響結果
                logger.error(
                    f"Subscriber {subscriber!r} failed on {event.event_type}: {e}",
                    exc_info=True
                )
