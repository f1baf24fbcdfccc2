# challenge_tracker/services/challenges.py
"""
챌린지 유스케이스
- 저장소에서 스냅샷을 읽고 → 엔진 순수 함수로 상태 전이 → 저장소에 한 번 쓰기
- 오류는 streak_engine.core.errors 예외로 올리고, HTTP 변환은 main.py 핸들러가 담당
"""
from __future__ import annotations

import logging
from typing import List, Optional

from challenge_tracker.schemas.schema_challenge import (
    ChallengeItem,
    ChallengeTracksRes,
    CreateAllTracksRes,
    CreateChallengeReq,
    CurrentChallenge,
    DashboardRes,
    DashboardStats,
    DashboardTask,
    DaySummary,
    OverviewStats,
    ProgressOverviewRes,
    RepairRes,
    StreakStats,
    TaskItem,
    TrackOverview,
    UpdateChallengeReq,
)
from challenge_tracker.services.store import ChallengeStore
from streak_engine.core.errors import ForbiddenError, NotFoundError, ValidationError
from streak_engine.core.finalize import finalize_day as finalize_track
from streak_engine.core.metrics import streak_summary, success_metrics
from streak_engine.core.models import Challenge, ChallengeStatus, DailyTrack
from streak_engine.core.rollups import (
    RecentProgressStats,
    challenge_history,
    evaluate_achievements,
    monthly_trend,
    recent_progress_stats,
    weekly_performance,
)
from streak_engine.core.toggle import locate_task, toggle_task
from streak_engine.core.tracks import ensure_track, generate_tracks
from streak_engine.utils.clock import Clock
from streak_engine.utils.dates import add_days, days_between
from streak_engine.utils.math_utils import percentage
from streak_engine.utils.text import QUOTES, TextPicker

logger = logging.getLogger(__name__)


# --------------------- 내부 유틸 ---------------------
def _require(store: ChallengeStore, owner_id: str, challenge_id: int) -> Challenge:
    # 없음 / 남의 것 구분 없이 NotFound
    challenge = store.get(challenge_id, owner_id)
    if challenge is None:
        raise NotFoundError("Challenge not found or not yours")
    return challenge


def _active(store: ChallengeStore, owner_id: str, detail: str) -> List[Challenge]:
    active = store.list_for_owner(owner_id, ChallengeStatus.active)
    if not active:
        raise NotFoundError(detail)
    return active


def to_item(challenge: Challenge) -> ChallengeItem:
    return ChallengeItem(
        id=challenge.id,
        name=challenge.name,
        duration=challenge.duration,
        status=challenge.status,
        progress=challenge.progress,
        tasks=list(challenge.tasks),
        penalty=challenge.penalty,
        start_date=challenge.start_date,
        end_date=challenge.end_date,
        restarted_from=challenge.restarted_from,
        created_at=challenge.created_at,
        total_tracks=len(challenge.daily_tracks),
    )


def day_summary(challenge: Challenge, track: DailyTrack) -> DaySummary:
    return DaySummary(
        challenge_id=challenge.id,
        challenge_name=challenge.name,
        date=track.date,
        tasks=[
            TaskItem(id=t.id, task=t.task, completed=t.completed, motivation=t.motivation)
            for t in track.tasks
        ],
        completed_tasks=track.completed_tasks,
        total_tasks=track.total_tasks,
        progress=track.progress,
        day_completed=track.day_completed,
        penalty=track.penalty,
        success_message=track.success_message,
    )


# --------------------- CRUD ---------------------
def list_challenges(store: ChallengeStore, owner_id: str) -> List[ChallengeItem]:
    challenges = store.list_for_owner(owner_id)
    challenges.sort(key=lambda c: c.created_at, reverse=True)
    return [to_item(c) for c in challenges]


def get_challenge(store: ChallengeStore, owner_id: str, challenge_id: int) -> ChallengeItem:
    return to_item(_require(store, owner_id, challenge_id))


def create_challenge(
    store: ChallengeStore,
    clock: Clock,
    owner_id: str,
    req: CreateChallengeReq,
) -> ChallengeItem:
    challenge = Challenge(
        user_id=owner_id,
        name=req.name,
        duration=req.duration,
        tasks=tuple(req.tasks),
        penalty=req.penalty,
        status=ChallengeStatus.draft,
        progress=0,
        created_at=clock.now(),
    )
    saved = store.insert(challenge)
    logger.info(f"[challenge] created id={saved.id} owner={owner_id}")
    return to_item(saved)


def update_challenge(
    store: ChallengeStore,
    owner_id: str,
    challenge_id: int,
    req: UpdateChallengeReq,
) -> ChallengeItem:
    challenge = _require(store, owner_id, challenge_id)

    changes = {}
    if req.name is not None:
        changes["name"] = req.name
    if req.duration is not None:
        changes["duration"] = req.duration
    if req.tasks is not None:
        changes["tasks"] = tuple(req.tasks)
    if req.penalty is not None:
        changes["penalty"] = req.penalty

    saved = store.update(challenge.model_copy(update=changes))
    return to_item(saved)


def delete_challenge(store: ChallengeStore, owner_id: str, challenge_id: int) -> None:
    if not store.delete(challenge_id, owner_id):
        raise NotFoundError("Challenge not found or not yours")
    logger.info(f"[challenge] deleted id={challenge_id} owner={owner_id}")


# --------------------- 라이프사이클 ---------------------
def generate_tracks_on_start(
    store: ChallengeStore,
    picker: TextPicker,
    challenge_id: int,
    owner_id: str,
    start_date: str,
    duration: int,
) -> int:
    """[start_date, start_date + duration) 트랙 일괄 생성. 새로 만든 개수 반환"""
    challenge = _require(store, owner_id, challenge_id)
    updated, created = generate_tracks(challenge, start_date, duration, picker)
    if created:
        store.update(updated)
    logger.info(f"[tracks] challenge={challenge_id} start={start_date} created={created}")
    return created


def start_challenge(
    store: ChallengeStore,
    clock: Clock,
    picker: TextPicker,
    owner_id: str,
    challenge_id: int,
) -> ChallengeItem:
    challenge = _require(store, owner_id, challenge_id)
    if challenge.status == ChallengeStatus.completed:
        raise ForbiddenError("Completed challenges must be restarted instead")

    start = clock.today()
    activated = challenge.model_copy(
        update={
            "status": ChallengeStatus.active,
            "start_date": start,
            "end_date": add_days(start, challenge.duration),
        }
    )
    # 상태 변경 + 트랙 생성을 한 번의 update로 저장
    activated, created = generate_tracks(activated, start, challenge.duration, picker)
    saved = store.update(activated)
    logger.info(f"[challenge] started id={challenge_id} owner={owner_id} start={start} tracks={created}")
    return to_item(saved)


def stop_challenge(store: ChallengeStore, owner_id: str, challenge_id: int) -> ChallengeItem:
    # 트랙은 지우지 않는다
    challenge = _require(store, owner_id, challenge_id)
    saved = store.update(
        challenge.model_copy(
            update={"status": ChallengeStatus.draft, "start_date": None, "end_date": None}
        )
    )
    logger.info(f"[challenge] stopped id={challenge_id} owner={owner_id}")
    return to_item(saved)


def complete_challenge(store: ChallengeStore, owner_id: str, challenge_id: int) -> ChallengeItem:
    challenge = _require(store, owner_id, challenge_id)
    saved = store.update(
        challenge.model_copy(update={"status": ChallengeStatus.completed, "progress": 100})
    )
    logger.info(f"[challenge] completed id={challenge_id} owner={owner_id}")
    return to_item(saved)


def restart_challenge(
    store: ChallengeStore,
    clock: Clock,
    owner_id: str,
    challenge_id: int,
) -> ChallengeItem:
    original = _require(store, owner_id, challenge_id)
    if original.status != ChallengeStatus.completed:
        raise ForbiddenError("Only completed challenges can be restarted")

    fresh = Challenge(
        user_id=owner_id,
        name=original.name,
        duration=original.duration,
        tasks=original.tasks,
        penalty=original.penalty,
        status=ChallengeStatus.draft,
        progress=0,
        restarted_from=original.id,
        created_at=clock.now(),
    )
    saved = store.insert(fresh)
    logger.info(f"[challenge] restarted id={challenge_id} -> new id={saved.id}")
    return to_item(saved)


# --------------------- 오늘 트랙 ---------------------
def get_today_summaries(store: ChallengeStore, clock: Clock, owner_id: str) -> List[DaySummary]:
    today = clock.today()
    active = _active(store, owner_id, "No active challenges found")

    summaries = []
    for challenge in active:
        track = challenge.track_for(today)
        if track is None:
            continue
        summaries.append(day_summary(challenge, track))

    if not summaries:
        raise NotFoundError("No tracks found for today")
    return summaries


def toggle_task_by_index(
    store: ChallengeStore,
    clock: Clock,
    owner_id: str,
    task_index: int,
) -> DaySummary:
    today = clock.today()
    # 인덱스 토글은 저장소 순서상 첫 번째 활성 챌린지 기준
    challenge = _active(store, owner_id, "No active challenge found")[0]

    track = challenge.track_for(today)
    if track is None:
        raise NotFoundError("Today track not found. Please start challenge first.")

    updated, change = toggle_task(track, task_index, challenge.id)
    saved = store.update(challenge.with_track(updated))
    logger.info(
        f"[toggle] owner={owner_id} challenge={change.challenge_id} date={change.date} "
        f"task={change.task_id} completed={change.completed}"
    )
    return day_summary(saved, saved.track_for(today))


def toggle_task_by_id(
    store: ChallengeStore,
    clock: Clock,
    owner_id: str,
    task_key: str,
) -> DaySummary:
    """
    task id 또는 태스크 이름으로 토글
    여러 활성 챌린지에 같은 이름이 있으면 저장소 순서상 먼저 나온 챌린지가 대상
    """
    today = clock.today()
    active = _active(store, owner_id, "No active challenge found")

    challenge, track, index = locate_task(active, today, task_key)
    updated, change = toggle_task(track, index, challenge.id)
    saved = store.update(challenge.with_track(updated))
    logger.info(
        f"[toggle] owner={owner_id} challenge={change.challenge_id} date={change.date} "
        f"task={change.task_id} completed={change.completed}"
    )
    return day_summary(saved, saved.track_for(today))


def finalize_day(
    store: ChallengeStore,
    clock: Clock,
    owner_id: str,
    penalty: Optional[str] = None,
    success_message: Optional[str] = None,
) -> List[DaySummary]:
    today = clock.today()
    active = _active(store, owner_id, "No active challenges found")

    results = []
    for challenge in active:
        track = challenge.track_for(today)
        if track is None:
            continue
        updated, change = finalize_track(track, penalty, success_message)
        saved = store.update(challenge.with_track(updated))
        logger.info(
            f"[end-day] owner={owner_id} challenge={challenge.id} date={today} "
            f"all_completed={change.all_completed}"
        )
        results.append(day_summary(saved, saved.track_for(today)))

    if not results:
        raise NotFoundError("No today tracks found for any active challenges")
    return results


def repair_missing_today_tracks(
    store: ChallengeStore,
    clock: Clock,
    picker: TextPicker,
    owner_id: str,
) -> RepairRes:
    today = clock.today()
    result = RepairRes(date=today, challenges_fixed=0, tracks_created=0)

    for challenge in store.list_for_owner(owner_id, ChallengeStatus.active):
        updated, created = ensure_track(challenge, today, picker)
        if not created:
            continue
        store.update(updated)
        result.tracks_created += 1
        result.challenges_fixed += 1

    if result.tracks_created:
        logger.info(f"[repair] owner={owner_id} date={today} created={result.tracks_created}")
    return result


def create_all_tracks(
    store: ChallengeStore,
    picker: TextPicker,
    owner_id: str,
    challenge_id: int,
) -> CreateAllTracksRes:
    challenge = _require(store, owner_id, challenge_id)
    if not challenge.start_date:
        raise ForbiddenError("Challenge not started")

    created = generate_tracks_on_start(
        store, picker, challenge_id, owner_id, challenge.start_date, challenge.duration
    )
    refreshed = _require(store, owner_id, challenge_id)
    return CreateAllTracksRes(
        message=f"Created {created} new tracks",
        created=created,
        total_tracks=len(refreshed.daily_tracks),
        challenge=refreshed.name,
    )


def get_challenge_tracks(store: ChallengeStore, owner_id: str, challenge_id: int) -> ChallengeTracksRes:
    challenge = _require(store, owner_id, challenge_id)
    tracks = sorted(challenge.daily_tracks, key=lambda t: t.date, reverse=True)
    return ChallengeTracksRes(
        challenge_id=challenge.id,
        challenge_name=challenge.name,
        total_tracks=len(tracks),
        tracks=[
            TrackOverview(
                date=t.date,
                tasks=len(t.tasks),
                completed_tasks=t.completed_tasks,
                progress=t.progress,
                day_completed=t.day_completed,
            )
            for t in tracks
        ],
    )


# --------------------- 통계 ---------------------
def get_streaks_and_success_rate(store: ChallengeStore, owner_id: str) -> StreakStats:
    challenges = store.list_for_owner(owner_id)
    streaks = streak_summary(challenges)
    metrics = success_metrics(challenges)
    return StreakStats(
        current_streak=streaks.current_streak,
        best_streak=streaks.best_streak,
        success_rate=metrics.success_rate,
        avg_tasks_per_day=metrics.average_tasks_per_day,
        total_days=metrics.total_days,
    )


def get_recent_progress_stats(
    store: ChallengeStore,
    clock: Clock,
    owner_id: str,
    days: int = 7,
) -> RecentProgressStats:
    if days < 1:
        raise ValidationError("days must be at least 1")
    active = store.list_for_owner(owner_id, ChallengeStatus.active)
    return recent_progress_stats(active, clock.today(), days)


def get_dashboard(
    store: ChallengeStore,
    clock: Clock,
    picker: TextPicker,
    owner_id: str,
) -> DashboardRes:
    challenges = store.list_for_owner(owner_id)
    streaks = streak_summary(challenges)
    metrics = success_metrics(challenges)

    stats = DashboardStats(
        current_streak=streaks.current_streak,
        best_streak=streaks.best_streak,
        total_challenges=len(challenges),
        completed_challenges=sum(1 for c in challenges if c.status == ChallengeStatus.completed),
        success_rate=metrics.success_rate,
    )
    quote = picker.pick(QUOTES)

    active = [c for c in challenges if c.status == ChallengeStatus.active]
    if not active:
        return DashboardRes(
            current_challenge=None,
            todays_tasks=[],
            stats=stats,
            todays_quote=quote,
            has_active_challenge=False,
        )

    # 가장 최근에 만든 활성 챌린지
    current = max(active, key=lambda c: c.created_at)
    today = clock.today()
    today_track = current.track_for(today)

    done_days = sum(1 for t in current.daily_tracks if t.day_completed)

    day_number = 1
    if current.start_date:
        day_number = days_between(current.start_date, today) + 1
        day_number = min(max(day_number, 1), current.duration)

    todays_tasks = [
        DashboardTask(id=t.id, task=t.task, completed=t.completed)
        for t in (today_track.tasks if today_track else ())
    ]

    return DashboardRes(
        current_challenge=CurrentChallenge(
            id=current.id,
            name=current.name,
            day=day_number,
            total_days=current.duration,
            progress=percentage(done_days, len(current.daily_tracks)),
            tasks_today=len(todays_tasks),
            completed_today=sum(1 for t in todays_tasks if t.completed),
            start_date=current.start_date,
            today_track_exists=today_track is not None,
        ),
        todays_tasks=todays_tasks,
        stats=stats,
        todays_quote=quote,
        has_active_challenge=True,
    )


def get_progress_overview(store: ChallengeStore, clock: Clock, owner_id: str) -> ProgressOverviewRes:
    challenges = store.list_for_owner(owner_id)
    today = clock.today()

    streaks = streak_summary(challenges)
    metrics = success_metrics(challenges)

    return ProgressOverviewRes(
        stats=OverviewStats(
            total_challenges=len(challenges),
            completed_challenges=sum(1 for c in challenges if c.status == ChallengeStatus.completed),
            current_streak=streaks.current_streak,
            best_streak=streaks.best_streak,
            total_days=metrics.total_days,
            success_rate=metrics.success_rate,
            average_tasks_per_day=metrics.average_tasks_per_day,
        ),
        weekly_data=weekly_performance(challenges, today),
        monthly_progress=monthly_trend(challenges, today),
        achievements=evaluate_achievements(challenges, today, clock.tz),
        challenge_history=challenge_history(challenges),
    )


def get_time_info(clock: Clock) -> dict:
    describe = getattr(clock, "describe", None)
    if describe is not None:
        return describe()
    return {"now": clock.now().isoformat(), "today": clock.today()}
