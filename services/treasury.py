"""
Value custody.

The treasury runs inside the caller's transaction: anything it writes is
committed or rolled back together with the game state that triggered it.
"""
from abc import ABC, abstractmethod
import logging

from sqlalchemy.orm import Session

from models import Account
from core.locks import with_ledger_lock
from services import safe_math

logger = logging.getLogger(__name__)


class Treasury(ABC):
    """Interface used by EscrowLedger to move value."""

    @abstractmethod
    def receive(self, db: Session, amount: int) -> None:
        """Take amount into contract custody."""

    @abstractmethod
    def pay(self, db: Session, to: str, amount: int) -> None:
        """Move amount out of custody to the account of `to`."""


class LedgerTreasury(Treasury):
    """
    Keeps custody in LedgerState.custody and credits payouts to Account rows.
    """

    def receive(self, db: Session, amount: int) -> None:
        state = with_ledger_lock(db).one()
        state.custody = safe_math.add(state.custody, amount)

    def pay(self, db: Session, to: str, amount: int) -> None:
        state = with_ledger_lock(db).one()
        state.custody = safe_math.sub(state.custody, amount)

        account = db.query(Account).filter(Account.address == to).with_for_update().first()
        if account is None:
            account = Account(address=to, balance=0)
            db.add(account)
        account.balance = safe_math.add(account.balance or 0, amount)

        logger.info(f"Paid {amount} to {to}, custody now {state.custody}")


def balance_of(db: Session, address: str) -> int:
    account = db.query(Account).filter(Account.address == address).first()
    return account.balance if account else 0
