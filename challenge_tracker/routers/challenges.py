# challenge_tracker/routers/challenges.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from challenge_tracker.auth.dependencies import get_current_user_id
from challenge_tracker.config.settings import settings
from challenge_tracker.db.database import get_db
from challenge_tracker.schemas.schema_challenge import (
    ChallengeItem,
    ChallengeTracksRes,
    CreateAllTracksRes,
    CreateChallengeReq,
    DashboardRes,
    DaySummary,
    EndDayReq,
    ProgressOverviewRes,
    RepairRes,
    StreakStats,
    UpdateChallengeReq,
)
from challenge_tracker.services import challenges as service
from challenge_tracker.services.store import ChallengeStore, SqlChallengeStore
from streak_engine.core.rollups import RecentProgressStats
from streak_engine.utils.clock import Clock, SystemClock
from streak_engine.utils.text import RandomPicker, TextPicker

router = APIRouter(prefix="/challenges", tags=["challenges"])


# --------------------- 의존성 ---------------------
def get_store(db: Session = Depends(get_db)) -> ChallengeStore:
    return SqlChallengeStore(db)


def get_clock() -> Clock:
    return SystemClock(settings.clock_timezone, settings.clock_offset_days)


_picker = RandomPicker()


def get_picker() -> TextPicker:
    return _picker


# --------------------- 정적 경로 (/{challenge_id} 보다 먼저 등록) ---------------------
@router.get("/today/track", response_model=List[DaySummary])
def find_today_track(
    store: ChallengeStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    user_id: str = Depends(get_current_user_id),
):
    return service.get_today_summaries(store, clock, user_id)


@router.post("/today/track", response_model=List[DaySummary])
def create_today_track(
    store: ChallengeStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    user_id: str = Depends(get_current_user_id),
):
    # 트랙은 시작 시 일괄 생성되므로 조회와 동일
    return service.get_today_summaries(store, clock, user_id)


@router.post("/today/start-day", response_model=List[DaySummary])
def start_day(
    store: ChallengeStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    user_id: str = Depends(get_current_user_id),
):
    return service.get_today_summaries(store, clock, user_id)


@router.patch("/today/toggle-task/{task_index}", response_model=DaySummary)
def toggle_task(
    task_index: int,
    store: ChallengeStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    user_id: str = Depends(get_current_user_id),
):
    return service.toggle_task_by_index(store, clock, user_id, task_index)


@router.patch("/today/toggle-task-by-id/{task_id}", response_model=DaySummary)
def toggle_task_by_id(
    task_id: str,
    store: ChallengeStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    user_id: str = Depends(get_current_user_id),
):
    return service.toggle_task_by_id(store, clock, user_id, task_id)


@router.post("/today/end-day", response_model=List[DaySummary])
def end_day(
    body: Optional[EndDayReq] = Body(default=None),
    store: ChallengeStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    user_id: str = Depends(get_current_user_id),
):
    body = body or EndDayReq()
    return service.finalize_day(store, clock, user_id, body.penalty, body.success_message)


@router.get("/stats/progress", response_model=RecentProgressStats)
def get_progress_stats(
    days: int = Query(default=7, ge=1, le=365),
    store: ChallengeStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    user_id: str = Depends(get_current_user_id),
):
    return service.get_recent_progress_stats(store, clock, user_id, days)


@router.get("/stats/streaks", response_model=StreakStats)
def get_streaks(
    store: ChallengeStore = Depends(get_store),
    user_id: str = Depends(get_current_user_id),
):
    return service.get_streaks_and_success_rate(store, user_id)


@router.get("/progress/overview", response_model=ProgressOverviewRes)
def get_progress_overview(
    store: ChallengeStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    user_id: str = Depends(get_current_user_id),
):
    return service.get_progress_overview(store, clock, user_id)


@router.get("/dashboard/data", response_model=DashboardRes)
def get_dashboard_data(
    store: ChallengeStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    picker: TextPicker = Depends(get_picker),
    user_id: str = Depends(get_current_user_id),
):
    return service.get_dashboard(store, clock, picker, user_id)


@router.post("/debug/fix-time", response_model=RepairRes)
def fix_time_issues(
    store: ChallengeStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    picker: TextPicker = Depends(get_picker),
    user_id: str = Depends(get_current_user_id),
):
    return service.repair_missing_today_tracks(store, clock, picker, user_id)


@router.get("/debug/time-info")
def get_time_info(clock: Clock = Depends(get_clock)):
    return service.get_time_info(clock)


@router.post("/debug/create-all-tracks/{challenge_id}", response_model=CreateAllTracksRes)
def create_all_tracks(
    challenge_id: int,
    store: ChallengeStore = Depends(get_store),
    picker: TextPicker = Depends(get_picker),
    user_id: str = Depends(get_current_user_id),
):
    return service.create_all_tracks(store, picker, user_id, challenge_id)


# --------------------- CRUD ---------------------
@router.get("", response_model=List[ChallengeItem])
def find_all(
    store: ChallengeStore = Depends(get_store),
    user_id: str = Depends(get_current_user_id),
):
    return service.list_challenges(store, user_id)


@router.post("", response_model=ChallengeItem, status_code=201)
def create(
    req: CreateChallengeReq,
    store: ChallengeStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    user_id: str = Depends(get_current_user_id),
):
    return service.create_challenge(store, clock, user_id, req)


@router.get("/{challenge_id}", response_model=ChallengeItem)
def find_one(
    challenge_id: int,
    store: ChallengeStore = Depends(get_store),
    user_id: str = Depends(get_current_user_id),
):
    return service.get_challenge(store, user_id, challenge_id)


@router.patch("/{challenge_id}", response_model=ChallengeItem)
def update(
    challenge_id: int,
    req: UpdateChallengeReq,
    store: ChallengeStore = Depends(get_store),
    user_id: str = Depends(get_current_user_id),
):
    return service.update_challenge(store, user_id, challenge_id, req)


@router.delete("/{challenge_id}", status_code=204)
def remove(
    challenge_id: int,
    store: ChallengeStore = Depends(get_store),
    user_id: str = Depends(get_current_user_id),
):
    service.delete_challenge(store, user_id, challenge_id)


@router.patch("/{challenge_id}/start", response_model=ChallengeItem)
def start(
    challenge_id: int,
    store: ChallengeStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    picker: TextPicker = Depends(get_picker),
    user_id: str = Depends(get_current_user_id),
):
    return service.start_challenge(store, clock, picker, user_id, challenge_id)


@router.patch("/{challenge_id}/stop", response_model=ChallengeItem)
def stop(
    challenge_id: int,
    store: ChallengeStore = Depends(get_store),
    user_id: str = Depends(get_current_user_id),
):
    return service.stop_challenge(store, user_id, challenge_id)


@router.patch("/{challenge_id}/complete", response_model=ChallengeItem)
def complete(
    challenge_id: int,
    store: ChallengeStore = Depends(get_store),
    user_id: str = Depends(get_current_user_id),
):
    return service.complete_challenge(store, user_id, challenge_id)


@router.post("/{challenge_id}/restart", response_model=ChallengeItem, status_code=201)
def restart(
    challenge_id: int,
    store: ChallengeStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    user_id: str = Depends(get_current_user_id),
):
    return service.restart_challenge(store, clock, user_id, challenge_id)


@router.get("/{challenge_id}/tracks", response_model=ChallengeTracksRes)
def get_challenge_tracks(
    challenge_id: int,
    store: ChallengeStore = Depends(get_store),
    user_id: str = Depends(get_current_user_id),
):
    return service.get_challenge_tracks(store, user_id, challenge_id)
