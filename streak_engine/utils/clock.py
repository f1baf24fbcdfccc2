# streak_engine/utils/clock.py
"""
'오늘' 날짜 공급자
서버 시계 보정은 코드에 날짜를 박아두지 않고 설정값(offset_days)으로만 한다.
"""
from __future__ import annotations

import datetime as dt
from typing import Optional, Protocol
from zoneinfo import ZoneInfo

from streak_engine.utils.dates import format_date, parse_date


class Clock(Protocol):
    tz: dt.tzinfo

    def today(self) -> str: ...

    def now(self) -> dt.datetime: ...


class SystemClock:
    """환경 시계를 읽는 기본 구현"""

    def __init__(self, tz_name: str = "UTC", offset_days: int = 0):
        self.tz = ZoneInfo(tz_name)
        self.offset_days = offset_days

    def now(self) -> dt.datetime:
        return dt.datetime.now(self.tz) + dt.timedelta(days=self.offset_days)

    def today(self) -> str:
        return format_date(self.now().date())

    def describe(self) -> dict:
        raw = dt.datetime.now(self.tz)
        return {
            "timezone": str(self.tz),
            "offset_days": self.offset_days,
            "raw_now": raw.isoformat(),
            "raw_today": format_date(raw.date()),
            "now": self.now().isoformat(),
            "today": self.today(),
        }


class FixedClock:
    """테스트용 고정 시계"""

    def __init__(self, today: str, at: Optional[dt.time] = None, tz_name: str = "UTC"):
        self._today = format_date(parse_date(today))
        self._at = at or dt.time(12, 0)
        self.tz = ZoneInfo(tz_name)

    def today(self) -> str:
        return self._today

    def advance(self, days: int = 1) -> None:
        self._today = format_date(parse_date(self._today) + dt.timedelta(days=days))

    def now(self) -> dt.datetime:
        return dt.datetime.combine(parse_date(self._today), self._at, tzinfo=self.tz)

    def describe(self) -> dict:
        return {
            "timezone": str(self.tz),
            "offset_days": 0,
            "raw_now": self.now().isoformat(),
            "raw_today": self._today,
            "now": self.now().isoformat(),
            "today": self._today,
        }
