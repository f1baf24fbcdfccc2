# streak_engine/core/models.py
"""
챌린지 도메인 스냅샷 (불변)
- 상태 변경은 항상 model_copy로 새 스냅샷을 만들어 반환한다.
- 저장소(store)는 이 스냅샷을 통째로 읽고/쓴다.
"""
from __future__ import annotations

import datetime as dt
import enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class ChallengeStatus(str, enum.Enum):
    draft = "draft"
    active = "active"
    completed = "completed"


class TrackTask(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    task: str
    completed: bool = False
    motivation: str = ""


class DailyTrack(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str  # YYYY-MM-DD
    tasks: Tuple[TrackTask, ...] = ()

    # 캐시 필드: toggle 때마다 recompute_counters로만 갱신
    completed_tasks: int = 0
    total_tasks: int = 0
    progress: int = 0

    day_completed: bool = False
    penalty: Optional[str] = None
    success_message: Optional[str] = None


class Challenge(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    user_id: str
    name: str
    penalty: str
    duration: int
    status: ChallengeStatus = ChallengeStatus.draft
    progress: int = 0
    tasks: Tuple[str, ...] = ()
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    # 생성 순서 유지 (날짜 정렬 보장 X → 필요한 곳에서 직접 정렬)
    daily_tracks: Tuple[DailyTrack, ...] = ()

    restarted_from: Optional[int] = None
    created_at: dt.datetime = Field(default_factory=lambda: dt.datetime.now(dt.timezone.utc))

    # 낙관적 동시성 제어용 버전
    version: int = 0

    def track_for(self, date: str) -> Optional[DailyTrack]:
        for track in self.daily_tracks:
            if track.date == date:
                return track
        return None

    def with_track(self, track: DailyTrack) -> "Challenge":
        """같은 날짜 트랙이 있으면 교체, 없으면 뒤에 추가"""
        tracks = list(self.daily_tracks)
        for i, existing in enumerate(tracks):
            if existing.date == track.date:
                tracks[i] = track
                break
        else:
            tracks.append(track)
        return self.model_copy(update={"daily_tracks": tuple(tracks)})

    def created_on(self, tz: Optional[dt.tzinfo] = None) -> str:
        """tz 기준 생성일 (YYYY-MM-DD, 기본 UTC)"""
        return self.created_at.astimezone(tz or dt.timezone.utc).date().isoformat()
