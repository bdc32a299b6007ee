"""
Deterministic seat map generation

The layout and the initial availability pattern are a pure function of the
screening id, so a lost seat map can be regenerated identically in any
process without a stored template.
"""

from collections.abc import Callable
from typing import List

from src.service.cinema.domain.entity.seat_entity import Seat


ROWS = ('A', 'B', 'C', 'D', 'E', 'F', 'G', 'H')
SEATS_PER_ROW = 12
UNAVAILABLE_RATIO = 0.3

_UINT32 = 2**32
_INT32_MAX = 2**31 - 1
_LCG_MULTIPLIER = 1664525
_LCG_INCREMENT = 1013904223


def seed_from_id(screening_id: str) -> int:
    """Fold UTF-16 code units through ``hash * 31 + code``, as a signed 32-bit int, then abs."""
    data = screening_id.encode('utf-16-le')
    value = 0
    for i in range(0, len(data), 2):
        code_unit = data[i] | (data[i + 1] << 8)
        value = (value * 31 + code_unit) % _UINT32
    if value > _INT32_MAX:
        value -= _UINT32
    return abs(value)


def lcg(seed: int) -> Callable[[], float]:
    """Linear congruential generator returning draws in [0, 1)."""
    state = seed

    def draw() -> float:
        nonlocal state
        state = (state * _LCG_MULTIPLIER + _LCG_INCREMENT) % _UINT32
        return state / _UINT32

    return draw


def generate_seats(screening_id: str) -> List[Seat]:
    draw = lcg(seed_from_id(screening_id))
    return [
        Seat.create(row=row, number=number, is_available=draw() > UNAVAILABLE_RATIO)
        for row in ROWS
        for number in range(1, SEATS_PER_ROW + 1)
    ]
