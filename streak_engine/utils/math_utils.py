# streak_engine/utils/math_utils.py
"""
퍼센트/반올림 유틸
파이썬 round()는 은행가 반올림(0.5 → 짝수)이라 화면 숫자와 어긋난다.
여기서는 항상 0.5를 올림한다.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, digits: int = 0) -> float:
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def percentage(part: int, whole: int) -> int:
    """part / whole * 100 (whole == 0 이면 0)"""
    if whole <= 0:
        return 0
    return int(round_half_up(part / whole * 100))
