"""
Game 狀態機

OPEN --accept--> ACCEPTED --finalize--> SETTLED

- 狀態由 responder / winner 推導，不另外存欄位
- 每個轉換只能往前，而且每場遊戲最多發生一次
"""
from models import Game, GameStatus
from core.exceptions import AlreadyAccepted, AlreadyFinalized, GameNotAccepted


class GameStateMachine:

    TRANSITIONS = {
        GameStatus.OPEN: GameStatus.ACCEPTED,
        GameStatus.ACCEPTED: GameStatus.SETTLED,
    }

    @staticmethod
    def can_transition(current: GameStatus, target: GameStatus) -> bool:
        return GameStateMachine.TRANSITIONS.get(current) == target

    @staticmethod
    def require_transition(game: Game, target: GameStatus) -> None:
        """
        檢查 game 能否轉換到 target

        異常：
            AlreadyAccepted: 要 accept，但已經有 responder
            AlreadyFinalized: 要 finalize，但已經有 winner
            GameNotAccepted: 要 finalize，但還沒有 responder
        """
        current = game.status
        if GameStateMachine.can_transition(current, target):
            return

        if target == GameStatus.ACCEPTED:
            raise AlreadyAccepted(game.id)
        if current == GameStatus.SETTLED:
            raise AlreadyFinalized(game.id)
        raise GameNotAccepted(game.id)
