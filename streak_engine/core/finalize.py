# streak_engine/core/finalize.py
"""
하루 마감 처리
- day_completed는 무조건 True
- 전부 완료: penalty 제거, success_message는 넘어온 경우에만 기록
- 미완료: success_message 제거, penalty는 넘어온 경우에만 기록
"""
from __future__ import annotations

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from streak_engine.core.models import DailyTrack


class DayFinalized(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str
    all_completed: bool
    penalty: Optional[str] = None
    success_message: Optional[str] = None


def finalize_day(
    track: DailyTrack,
    penalty: Optional[str] = None,
    success_message: Optional[str] = None,
) -> Tuple[DailyTrack, DayFinalized]:
    all_completed = all(t.completed for t in track.tasks)

    new_penalty = track.penalty
    new_message = track.success_message

    if all_completed:
        new_penalty = None
        if success_message:
            new_message = success_message
    else:
        new_message = None
        if penalty:
            new_penalty = penalty

    updated = track.model_copy(
        update={
            "day_completed": True,
            "penalty": new_penalty,
            "success_message": new_message,
        }
    )
    change = DayFinalized(
        date=track.date,
        all_completed=all_completed,
        penalty=new_penalty,
        success_message=new_message,
    )
    return updated, change
