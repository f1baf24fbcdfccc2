# streak_engine/utils/dates.py
"""
날짜 문자열(YYYY-MM-DD) 유틸
타임존 변환 없이 달력 계산만 한다 (UTC 기준).
"""
from __future__ import annotations

from datetime import date, datetime, timedelta

from streak_engine.core.errors import ValidationError

DATE_FMT = "%Y-%m-%d"
WEEKDAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, DATE_FMT).date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


def format_date(d: date) -> str:
    return d.strftime(DATE_FMT)


def add_days(value: str, days: int) -> str:
    return format_date(parse_date(value) + timedelta(days=days))


def days_between(start: str, end: str) -> int:
    return (parse_date(end) - parse_date(start)).days


def weekday_name(value: str) -> str:
    # weekday(): 0=월요일 → 일요일 시작 인덱스로 보정
    return WEEKDAY_NAMES[(parse_date(value).weekday() + 1) % 7]


def shift_month(value: str, months: int) -> str:
    """
    value가 속한 달에서 months만큼 이동한 달의 키(YYYY-MM) 반환
    (일자는 무시하므로 31일 → 2월 같은 넘침 없음)
    """
    d = parse_date(value)
    index = d.year * 12 + (d.month - 1) + months
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def month_name(month_key: str) -> str:
    return MONTH_NAMES[int(month_key[5:7]) - 1]
