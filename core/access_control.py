"""
AccessControl：管理 owner 與 admin

職責：
1. 初始化 owner（只執行一次）
2. owner 新增 / 移除 admin
3. owner 轉移所有權（立即生效，沒有 pending owner）
4. 提供 require_owner / require_admin 給其他元件使用

注意：
- owner 不會自動成為 admin，結算遊戲一定要有 admin 身分
- 所有權限檢查都在其他邏輯之前執行
"""
from sqlalchemy.orm import Session
import logging

from models import Admin, RoleRegistry
from core import events
from core.locks import with_registry_lock, REGISTRY_ROW_ID
from core.exceptions import (
    AlreadyInitialized,
    NotAdmin,
    Unauthorized,
)
from services.addresses import normalize_address, require_non_null
from database import transactional

logger = logging.getLogger(__name__)


class AccessControl:
    """owner / admin 權限管理"""

    @staticmethod
    def is_initialized(db: Session) -> bool:
        return db.get(RoleRegistry, REGISTRY_ROW_ID) is not None

    @staticmethod
    @transactional
    def initialize(db: Session, caller: str) -> RoleRegistry:
        """
        設定 owner = caller

        異常：
            AlreadyInitialized: 已經初始化過
            InvalidAddress: caller 是 null address 或格式錯誤
        """
        owner = require_non_null(caller)
        if AccessControl.is_initialized(db):
            raise AlreadyInitialized("Role registry already initialized")

        registry = RoleRegistry(id=REGISTRY_ROW_ID, owner=owner)
        db.add(registry)

        logger.info(f"Role registry initialized, owner={owner}")
        return registry

    @staticmethod
    def get_owner(db: Session) -> str:
        registry = db.get(RoleRegistry, REGISTRY_ROW_ID)
        if registry is None:
            raise RuntimeError("Role registry is not initialized")
        return registry.owner

    @staticmethod
    def require_owner(db: Session, caller: str) -> RoleRegistry:
        """
        確認 caller 是 owner，並鎖定 registry 直到 transaction 結束

        異常：
            Unauthorized: caller 不是 owner
        """
        registry = with_registry_lock(db).first()
        if registry is None:
            raise RuntimeError("Role registry is not initialized")
        if not isinstance(caller, str) or caller.lower() != registry.owner:
            raise Unauthorized(caller, "owner")
        return registry

    @staticmethod
    def is_admin(db: Session, address: str) -> bool:
        """純查詢，任何人都可以呼叫；格式錯誤的地址一律不是 admin"""
        if not isinstance(address, str):
            return False
        return db.get(Admin, address.lower()) is not None

    @staticmethod
    def require_admin(db: Session, caller: str) -> None:
        if not AccessControl.is_admin(db, caller):
            raise Unauthorized(caller, "admin")

    @staticmethod
    @transactional
    def add_admin(db: Session, caller: str, target: str) -> None:
        """
        新增 admin（冪等：重複新增也會成功並再次發出事件）

        異常：
            Unauthorized: caller 不是 owner
            InvalidAddress: target 是 null address
        """
        AccessControl.require_owner(db, caller)
        target = require_non_null(target)

        if db.get(Admin, target) is None:
            db.add(Admin(address=target))

        events.record_event(db, events.ADMIN_ADDED, admin=target)
        logger.info(f"Admin added: {target}")

    @staticmethod
    @transactional
    def remove_admin(db: Session, caller: str, target: str) -> None:
        """
        移除 admin

        異常：
            Unauthorized: caller 不是 owner
            NotAdmin: target 目前不是 admin
        """
        AccessControl.require_owner(db, caller)
        target = normalize_address(target)

        admin = db.get(Admin, target)
        if admin is None:
            raise NotAdmin(target)
        db.delete(admin)

        events.record_event(db, events.ADMIN_DELETED, admin=target)
        logger.info(f"Admin removed: {target}")

    @staticmethod
    @transactional
    def transfer_ownership(db: Session, caller: str, new_owner: str) -> None:
        """
        轉移所有權（立即生效）

        事件在修改之前記錄：OwnershipTransferred(old, new)

        異常：
            Unauthorized: caller 不是 owner
            InvalidAddress: new_owner 是 null address
        """
        registry = AccessControl.require_owner(db, caller)
        new_owner = require_non_null(new_owner)

        old_owner = registry.owner
        events.record_event(
            db,
            events.OWNERSHIP_TRANSFERRED,
            previous_owner=old_owner,
            new_owner=new_owner
        )
        registry.owner = new_owner

        logger.info(f"Ownership transferred: {old_owner} -> {new_owner}")
