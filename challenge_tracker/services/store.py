# challenge_tracker/services/store.py
"""
챌린지 저장소
- 엔진은 ChallengeStore 계약만 안다 (DB 종류 무관)
- update는 조건부 쓰기: 읽었을 때의 version과 저장된 version이 다르면 Conflict
"""
from __future__ import annotations

import datetime as dt
import threading
from typing import Dict, List, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from challenge_tracker.models.challenge import ChallengeRow, DailyTrackRow, TrackTaskRow
from streak_engine.core.errors import ConflictError, NotFoundError
from streak_engine.core.models import Challenge, ChallengeStatus, DailyTrack, TrackTask


class ChallengeStore(Protocol):
    def list_for_owner(self, owner_id: str, status: Optional[ChallengeStatus] = None) -> List[Challenge]: ...

    def get(self, challenge_id: int, owner_id: str) -> Optional[Challenge]: ...

    def insert(self, challenge: Challenge) -> Challenge: ...

    def update(self, challenge: Challenge) -> Challenge: ...

    def delete(self, challenge_id: int, owner_id: str) -> bool: ...


# --------------------- 메모리 구현 ---------------------
class InMemoryChallengeStore:
    """테스트/로컬 실험용 저장소 (id 오름차순 = 저장소 순서)"""

    def __init__(self):
        self._rows: Dict[int, Challenge] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def list_for_owner(self, owner_id, status=None):
        return [
            c
            for _, c in sorted(self._rows.items())
            if c.user_id == owner_id and (status is None or c.status == status)
        ]

    def get(self, challenge_id, owner_id):
        row = self._rows.get(challenge_id)
        if row is None or row.user_id != owner_id:
            return None
        return row

    def insert(self, challenge):
        with self._lock:
            saved = challenge.model_copy(update={"id": self._next_id, "version": 0})
            self._rows[self._next_id] = saved
            self._next_id += 1
            return saved

    def update(self, challenge):
        with self._lock:
            current = self.get(challenge.id, challenge.user_id)
            if current is None:
                raise NotFoundError("Challenge not found or not yours")
            if current.version != challenge.version:
                raise ConflictError("Challenge was modified concurrently, please retry")
            saved = challenge.model_copy(update={"version": challenge.version + 1})
            self._rows[challenge.id] = saved
            return saved

    def delete(self, challenge_id, owner_id):
        with self._lock:
            if self.get(challenge_id, owner_id) is None:
                return False
            del self._rows[challenge_id]
            return True


# --------------------- SQLAlchemy 구현 ---------------------
def _as_utc(value: dt.datetime) -> dt.datetime:
    # DB DateTime 컬럼은 tz 없이 저장됨 → UTC로 간주
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value


def _to_naive_utc(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(dt.timezone.utc).replace(tzinfo=None)


def to_domain(row: ChallengeRow) -> Challenge:
    return Challenge(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        penalty=row.penalty,
        duration=row.duration,
        status=row.status,
        progress=row.progress,
        tasks=tuple(row.tasks or ()),
        start_date=row.start_date,
        end_date=row.end_date,
        daily_tracks=tuple(
            DailyTrack(
                date=t.date,
                tasks=tuple(
                    TrackTask(id=k.id, task=k.task, completed=k.completed, motivation=k.motivation)
                    for k in t.tasks
                ),
                completed_tasks=t.completed_tasks,
                total_tasks=t.total_tasks,
                progress=t.progress,
                day_completed=t.day_completed,
                penalty=t.penalty,
                success_message=t.success_message,
            )
            for t in row.daily_tracks
        ),
        restarted_from=row.restarted_from,
        created_at=_as_utc(row.created_at),
        version=row.version,
    )


class SqlChallengeStore:
    def __init__(self, db: Session):
        self.db = db

    def _select(self, owner_id: str):
        return (
            select(ChallengeRow)
            .options(selectinload(ChallengeRow.daily_tracks).selectinload(DailyTrackRow.tasks))
            .where(ChallengeRow.user_id == owner_id)
        )

    def _get_row(self, challenge_id: int, owner_id: str, lock: bool = False) -> Optional[ChallengeRow]:
        stmt = self._select(owner_id).where(ChallengeRow.id == challenge_id)
        if lock:
            # 동시 요청 시 같은 챌린지 덮어쓰기 방지용 row lock
            stmt = stmt.with_for_update()
        stmt = stmt.execution_options(populate_existing=True)
        return self.db.execute(stmt).scalars().first()

    def list_for_owner(self, owner_id, status=None):
        stmt = self._select(owner_id)
        if status is not None:
            stmt = stmt.where(ChallengeRow.status == status)
        rows = self.db.execute(stmt.order_by(ChallengeRow.id.asc())).scalars().all()
        return [to_domain(r) for r in rows]

    def get(self, challenge_id, owner_id):
        row = self._get_row(challenge_id, owner_id)
        return to_domain(row) if row else None

    def insert(self, challenge):
        row = ChallengeRow(
            user_id=challenge.user_id,
            created_at=_to_naive_utc(challenge.created_at),
            version=0,
        )
        self._apply(row, challenge)
        self.db.add(row)
        self.db.commit()
        return self.get(row.id, challenge.user_id)

    def update(self, challenge):
        row = self._get_row(challenge.id, challenge.user_id, lock=True)
        if row is None:
            self.db.rollback()
            raise NotFoundError("Challenge not found or not yours")
        if row.version != challenge.version:
            self.db.rollback()
            raise ConflictError("Challenge was modified concurrently, please retry")

        self._apply(row, challenge)
        row.version = challenge.version + 1
        self.db.commit()
        return self.get(row.id, challenge.user_id)

    def delete(self, challenge_id, owner_id):
        row = self._get_row(challenge_id, owner_id)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    # --------------------- 내부 유틸 ---------------------
    def _apply(self, row: ChallengeRow, challenge: Challenge) -> None:
        row.name = challenge.name
        row.penalty = challenge.penalty
        row.duration = challenge.duration
        row.status = challenge.status
        row.progress = challenge.progress
        row.tasks = list(challenge.tasks)
        row.start_date = challenge.start_date
        row.end_date = challenge.end_date
        row.restarted_from = challenge.restarted_from

        # 트랙은 삭제하지 않음: 날짜 기준으로 갱신/추가만
        existing = {t.date: t for t in row.daily_tracks}
        for track in challenge.daily_tracks:
            track_row = existing.get(track.date)
            if track_row is None:
                track_row = DailyTrackRow(date=track.date)
                row.daily_tracks.append(track_row)
                existing[track.date] = track_row

            track_row.completed_tasks = track.completed_tasks
            track_row.total_tasks = track.total_tasks
            track_row.progress = track.progress
            track_row.day_completed = track.day_completed
            track_row.penalty = track.penalty
            track_row.success_message = track.success_message

            task_rows = {k.id: k for k in track_row.tasks}
            for position, task in enumerate(track.tasks):
                task_row = task_rows.get(task.id)
                if task_row is None:
                    task_row = TrackTaskRow(id=task.id)
                    track_row.tasks.append(task_row)
                task_row.position = position
                task_row.task = task.task
                task_row.completed = task.completed
                task_row.motivation = task.motivation
