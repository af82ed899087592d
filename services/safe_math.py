"""
Checked unsigned 256-bit arithmetic.

Every operation either returns an exact result inside [0, 2**256 - 1] or
raises ArithmeticFault. Nothing is ever clamped or wrapped.
"""
from core.exceptions import ArithmeticFault

UINT256_MAX = (1 << 256) - 1


def to_uint256(value) -> int:
    """Validate that value is an int inside the uint256 range."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ArithmeticFault(f"Not an integer: {value!r}")
    if value < 0:
        raise ArithmeticFault(f"Underflow: {value} < 0")
    if value > UINT256_MAX:
        raise ArithmeticFault(f"Overflow: {value} > 2**256 - 1")
    return value


def add(a: int, b: int) -> int:
    result = to_uint256(a) + to_uint256(b)
    if result > UINT256_MAX:
        raise ArithmeticFault(f"Overflow: {a} + {b}")
    return result


def sub(a: int, b: int) -> int:
    if to_uint256(b) > to_uint256(a):
        raise ArithmeticFault(f"Underflow: {a} - {b}")
    return a - b


def mul(a: int, b: int) -> int:
    result = to_uint256(a) * to_uint256(b)
    if result > UINT256_MAX:
        raise ArithmeticFault(f"Overflow: {a} * {b}")
    return result


def div(a: int, b: int) -> int:
    if to_uint256(b) == 0:
        raise ArithmeticFault(f"Division by zero: {a} / 0")
    return to_uint256(a) // b


def mod(a: int, b: int) -> int:
    if to_uint256(b) == 0:
        raise ArithmeticFault(f"Modulo by zero: {a} % 0")
    return to_uint256(a) % b
