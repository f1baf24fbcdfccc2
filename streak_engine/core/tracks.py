# streak_engine/core/tracks.py
"""
일자별 트랙 생성기
- [start_date, start_date + duration) 각 날짜마다 DailyTrack 1개
- 이미 있는 날짜는 건너뜀 (멱등)
"""
from __future__ import annotations

import uuid
from typing import Sequence, Tuple

from streak_engine.core.errors import ValidationError
from streak_engine.core.models import Challenge, DailyTrack, TrackTask
from streak_engine.utils.dates import add_days, parse_date
from streak_engine.utils.text import MOTIVATIONS, TextPicker


def new_task_id() -> str:
    return uuid.uuid4().hex


def build_track(date: str, task_names: Sequence[str], picker: TextPicker) -> DailyTrack:
    tasks = tuple(
        TrackTask(
            id=new_task_id(),
            task=name,
            completed=False,
            motivation=picker.pick(MOTIVATIONS),
        )
        for name in task_names
    )
    return DailyTrack(
        date=date,
        tasks=tasks,
        completed_tasks=0,
        total_tasks=len(tasks),
        progress=0,
        day_completed=False,
    )


def generate_tracks(
    challenge: Challenge,
    start_date: str,
    duration: int,
    picker: TextPicker,
) -> Tuple[Challenge, int]:
    """
    반환: (트랙이 추가된 새 스냅샷, 새로 만든 트랙 수)
    """
    parse_date(start_date)
    if duration < 1:
        raise ValidationError("Duration must be a positive number of days")

    existing = {track.date for track in challenge.daily_tracks}
    new_tracks = []
    for offset in range(duration):
        day = add_days(start_date, offset)
        if day in existing:
            continue
        new_tracks.append(build_track(day, challenge.tasks, picker))
        existing.add(day)

    if not new_tracks:
        return challenge, 0

    updated = challenge.model_copy(
        update={"daily_tracks": challenge.daily_tracks + tuple(new_tracks)}
    )
    return updated, len(new_tracks)


def ensure_track(challenge: Challenge, date: str, picker: TextPicker) -> Tuple[Challenge, bool]:
    """해당 날짜 트랙이 없을 때만 하나 만든다"""
    updated, created = generate_tracks(challenge, date, 1, picker)
    return updated, created == 1
