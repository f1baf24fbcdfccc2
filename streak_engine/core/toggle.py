# streak_engine/core/toggle.py
"""
태스크 완료 토글
- 스냅샷을 받아 새 DailyTrack + 변경 내역(TaskToggled)을 돌려주는 순수 함수
- 마감된 하루(day_completed)는 수정 불가
"""
from __future__ import annotations

from typing import Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from streak_engine.core.errors import ForbiddenError, NotFoundError
from streak_engine.core.models import Challenge, DailyTrack
from streak_engine.utils.math_utils import percentage


class TaskToggled(BaseModel):
    model_config = ConfigDict(frozen=True)

    challenge_id: Optional[int] = None
    date: str
    task_id: str
    task: str
    completed: bool


def recompute_counters(track: DailyTrack) -> DailyTrack:
    completed = sum(1 for t in track.tasks if t.completed)
    total = len(track.tasks)
    return track.model_copy(
        update={
            "completed_tasks": completed,
            "total_tasks": total,
            "progress": percentage(completed, total),
        }
    )


def toggle_task(
    track: DailyTrack,
    index: int,
    challenge_id: Optional[int] = None,
) -> Tuple[DailyTrack, TaskToggled]:
    if track.day_completed:
        raise ForbiddenError("Cannot modify tasks for a completed day")

    if index < 0 or index >= len(track.tasks):
        raise NotFoundError("Task not found")

    tasks = list(track.tasks)
    target = tasks[index].model_copy(update={"completed": not tasks[index].completed})
    tasks[index] = target

    updated = recompute_counters(track.model_copy(update={"tasks": tuple(tasks)}))
    change = TaskToggled(
        challenge_id=challenge_id,
        date=track.date,
        task_id=target.id,
        task=target.task,
        completed=target.completed,
    )
    return updated, change


def find_task_index(track: DailyTrack, key: str) -> int:
    """id 일치 또는 태스크 이름 일치. 없으면 -1"""
    for i, task in enumerate(track.tasks):
        if task.id == key or task.task == key:
            return i
    return -1


def locate_task(
    challenges: Iterable[Challenge],
    date: str,
    key: str,
) -> Tuple[Challenge, DailyTrack, int]:
    """
    활성 챌린지들을 저장소 순서대로 훑어서 첫 번째로 일치하는 태스크를 찾는다.
    (같은 이름의 태스크가 여러 챌린지에 있으면 먼저 나온 챌린지가 이김)
    """
    for challenge in challenges:
        track = challenge.track_for(date)
        if track is None:
            continue
        index = find_task_index(track, key)
        if index != -1:
            return challenge, track, index
    raise NotFoundError("Task not found")
