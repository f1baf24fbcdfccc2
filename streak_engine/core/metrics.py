# streak_engine/core/metrics.py
"""
연속 달성(streak) / 성공률 계산
- 챌린지별이 아니라 유저의 모든 챌린지 트랙을 날짜 기준으로 합쳐서 본다.
- 같은 날짜에 트랙이 여러 개면 가장 높은 progress가 그날의 값
- progress >= 80 이면 '달성한 날'
"""
from __future__ import annotations

from typing import Dict, Iterable, Iterator, Optional

from pydantic import BaseModel

from streak_engine.core.models import Challenge, DailyTrack
from streak_engine.utils.math_utils import percentage, round_half_up

QUALIFYING_PROGRESS = 80


class StreakSummary(BaseModel):
    current_streak: int = 0
    best_streak: int = 0


class SuccessMetrics(BaseModel):
    total_days: int = 0
    success_rate: int = 0
    average_tasks_per_day: float = 0.0


def iter_tracks(challenges: Iterable[Challenge]) -> Iterator[DailyTrack]:
    for challenge in challenges:
        yield from challenge.daily_tracks


def daily_progress(challenges: Iterable[Challenge]) -> Dict[str, int]:
    """
    날짜 → 그날 최고 progress
    progress가 0인 트랙만 있는 날짜(아직 안 온 날 포함)는 넣지 않는다.
    """
    best: Dict[str, int] = {}
    for track in iter_tracks(challenges):
        if track.progress > best.get(track.date, 0):
            best[track.date] = track.progress
    return best


def current_streak(progress_by_date: Dict[str, int]) -> int:
    # 최근 날짜부터 거꾸로, 기준 미달인 날에서 멈춤 (오늘 기준 고정 X)
    streak = 0
    for day in sorted(progress_by_date, reverse=True):
        if progress_by_date[day] >= QUALIFYING_PROGRESS:
            streak += 1
        else:
            break
    return streak


def best_streak(progress_by_date: Dict[str, int]) -> int:
    best = 0
    running = 0
    for day in sorted(progress_by_date):
        if progress_by_date[day] >= QUALIFYING_PROGRESS:
            running += 1
        else:
            best = max(best, running)
            running = 0
    # 마지막 날짜까지 이어진 연속 구간도 반영
    return max(best, running)


def streak_reached_on(progress_by_date: Dict[str, int], target: int) -> Optional[str]:
    """연속 target일을 처음 채운 날짜 (못 채웠으면 None)"""
    running = 0
    for day in sorted(progress_by_date):
        if progress_by_date[day] >= QUALIFYING_PROGRESS:
            running += 1
            if running == target:
                return day
        else:
            running = 0
    return None


def streak_summary(challenges: Iterable[Challenge]) -> StreakSummary:
    progress = daily_progress(challenges)
    return StreakSummary(
        current_streak=current_streak(progress),
        best_streak=best_streak(progress),
    )


def success_metrics(challenges: Iterable[Challenge]) -> SuccessMetrics:
    tracks = list(iter_tracks(challenges))
    all_dates = {t.date for t in tracks}
    total_days = len(all_dates)
    if total_days == 0:
        return SuccessMetrics()

    successful_dates = {t.date for t in tracks if t.progress >= QUALIFYING_PROGRESS}
    total_tasks = sum(t.total_tasks for t in tracks)

    return SuccessMetrics(
        total_days=total_days,
        success_rate=percentage(len(successful_dates), total_days),
        average_tasks_per_day=round_half_up(total_tasks / total_days, 1),
    )
