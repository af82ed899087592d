"""
自定義異常類別

集中管理所有業務邏輯異常，方便 API 層統一處理

所有異常都是同步拋出且 all-or-nothing：
拋出時 transaction 已經 rollback，不會留下任何部分狀態或部分轉帳
"""


class EscrowException(Exception):
    """所有 escrow 異常的基類"""
    pass


# ============ 權限相關異常 ============

class Unauthorized(EscrowException):
    """呼叫者沒有所需角色（owner / admin）"""
    def __init__(self, caller, role):
        self.caller = caller
        self.role = role
        super().__init__(f"{caller} is not {role}")


class InvalidAddress(EscrowException):
    """地址格式錯誤，或是 null address"""
    def __init__(self, address):
        self.address = address
        super().__init__(f"Invalid address: {address!r}")


class AlreadyInitialized(EscrowException):
    """角色註冊表已經初始化過了（initialize 只能執行一次）"""
    pass


class NotAdmin(EscrowException):
    """要移除的地址目前不是 admin"""
    def __init__(self, address):
        self.address = address
        super().__init__(f"{address} is not an admin")


# ============ Game 相關異常 ============

class GameNotFound(EscrowException):
    """遊戲不存在（包含保留的 id 0）"""
    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__(f"Game {game_id} not found")


class InvalidStake(EscrowException):
    """建立遊戲時押注金額必須 > 0"""
    pass


class InvalidCommitment(EscrowException):
    """commitment 必須是 32 bytes"""
    pass


class AlreadyAccepted(EscrowException):
    """遊戲已經有 responder 了"""
    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__(f"Game {game_id} already accepted")


class StakeMismatch(EscrowException):
    """接受遊戲時附帶的金額必須剛好等於 stake"""
    def __init__(self, game_id, expected, got):
        self.game_id = game_id
        self.expected = expected
        self.got = got
        super().__init__(f"Game {game_id} requires stake {expected}, got {got}")


class AlreadyFinalized(EscrowException):
    """遊戲已經結算過了"""
    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__(f"Game {game_id} already finalized")


class InvalidWinner(EscrowException):
    """winner 不是這場遊戲的 initiator 或 responder"""
    def __init__(self, game_id, winner):
        self.game_id = game_id
        self.winner = winner
        super().__init__(f"{winner} is not a participant of game {game_id}")


class GameNotAccepted(EscrowException):
    """遊戲還沒有 responder，不能結算"""
    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__(f"Game {game_id} has not been accepted yet")


# ============ 算術異常 ============

class ArithmeticFault(EscrowException):
    """overflow / underflow / 除以零，一律視為致命錯誤，不做 clamp"""
    pass
