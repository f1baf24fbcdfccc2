"""Builders shared by the test modules."""

import datetime as dt
from typing import Optional, Sequence

from streak_engine.core.models import Challenge, ChallengeStatus, DailyTrack, TrackTask
from streak_engine.core.toggle import recompute_counters

TODAY = "2024-06-10"


class FirstPicker:
    """항상 첫 번째 문구를 고르는 결정적 선택기"""

    def pick(self, options: Sequence[str]) -> str:
        return options[0] if options else ""


def make_track(date: str, done: int, total: int, day_completed: bool = False) -> DailyTrack:
    tasks = tuple(
        TrackTask(id=f"{date}-{i}", task=f"task {i}", completed=i < done, motivation="m")
        for i in range(total)
    )
    return recompute_counters(DailyTrack(date=date, tasks=tasks, day_completed=day_completed))


def progress_track(date: str, progress: int) -> DailyTrack:
    """progress 값만 중요한 집계 테스트용 트랙 (10개 태스크 기준)"""
    return make_track(date, progress // 10, 10)


def make_challenge(
    *,
    id: Optional[int] = 1,
    user_id: str = "user-1",
    name: str = "Morning routine",
    status: ChallengeStatus = ChallengeStatus.active,
    tracks: Sequence[DailyTrack] = (),
    tasks: Sequence[str] = ("read", "run"),
    duration: int = 30,
    created_at: dt.datetime = dt.datetime(2024, 1, 1, tzinfo=dt.timezone.utc),
    start_date: Optional[str] = None,
) -> Challenge:
    return Challenge(
        id=id,
        user_id=user_id,
        name=name,
        penalty="no dessert",
        duration=duration,
        status=status,
        tasks=tuple(tasks),
        daily_tracks=tuple(tracks),
        created_at=created_at,
        start_date=start_date,
    )


def days_ago(n: int) -> dt.datetime:
    return dt.datetime(2024, 6, 10, tzinfo=dt.timezone.utc) - dt.timedelta(days=n)
