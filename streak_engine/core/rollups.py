# streak_engine/core/rollups.py
"""
진행 현황 집계 (읽기 전용)
- 주간(최근 7일) / 월간(최근 4개월) 추이
- 업적 8종
- 최근 챌린지 이력 5개
- 최근 N일 통계
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from pydantic import BaseModel

from streak_engine.core.metrics import (
    StreakSummary,
    daily_progress,
    iter_tracks,
    streak_reached_on,
    streak_summary,
)
from streak_engine.core.models import Challenge, ChallengeStatus
from streak_engine.utils.dates import add_days, month_name, shift_month, weekday_name
from streak_engine.utils.math_utils import percentage, round_half_up


# --------------------- 응답 모델 ---------------------
class WeeklyEntry(BaseModel):
    day: str
    date: str
    completed: int
    total: int
    percentage: int


class MonthlyEntry(BaseModel):
    month: str
    key: str
    success: int


class Achievement(BaseModel):
    id: int
    name: str
    description: str
    icon: str
    earned: bool
    date: Optional[str] = None


class HistoryEntry(BaseModel):
    id: Optional[int]
    name: str
    status: str
    status_icon: str
    status_color: str
    progress: int
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class BestDay(BaseModel):
    date: str
    progress: int


class RecentProgressStats(BaseModel):
    total_tracks: int = 0
    completed_tracks: int = 0
    average_progress: int = 0
    best_day: Optional[BestDay] = None
    streak: int = 0


# --------------------- 주간 / 월간 ---------------------
def weekly_performance(challenges: Sequence[Challenge], today: str) -> List[WeeklyEntry]:
    by_date: Dict[str, List[int]] = {}
    for track in iter_tracks(challenges):
        bucket = by_date.setdefault(track.date, [0, 0])
        bucket[0] += track.completed_tasks
        bucket[1] += track.total_tasks

    result = []
    for back in range(6, -1, -1):
        day = add_days(today, -back)
        completed, total = by_date.get(day, (0, 0))
        result.append(
            WeeklyEntry(
                day=weekday_name(day),
                date=day,
                completed=completed,
                total=total,
                percentage=percentage(completed, total),
            )
        )
    return result


def monthly_trend(challenges: Sequence[Challenge], today: str) -> List[MonthlyEntry]:
    # 월별: 마감된 날(day_completed) 수 / 전체 트랙 수
    by_month: Dict[str, List[int]] = {}
    for track in iter_tracks(challenges):
        bucket = by_month.setdefault(track.date[:7], [0, 0])
        bucket[1] += 1
        if track.day_completed:
            bucket[0] += 1

    result = []
    for back in range(3, -1, -1):
        key = shift_month(today, -back)
        completed, total = by_month.get(key, (0, 0))
        result.append(MonthlyEntry(month=month_name(key), key=key, success=percentage(completed, total)))
    return result


# --------------------- 업적 ---------------------
@dataclass
class AchievementContext:
    challenges: Sequence[Challenge]
    today: str
    streaks: StreakSummary
    progress_by_date: Dict[str, int]
    tz: Optional[dt.tzinfo] = None

    def by_status(self, status: ChallengeStatus) -> List[Challenge]:
        return [c for c in self.challenges if c.status == status]

    def oldest_first(self, challenges: Sequence[Challenge]) -> List[Challenge]:
        return sorted(challenges, key=lambda c: c.created_at)


@dataclass(frozen=True)
class BadgeRule:
    id: int
    name: str
    description: str
    icon: str
    earned: Callable[[AchievementContext], bool]
    earned_on: Callable[[AchievementContext], Optional[str]]


def _streak_date(target: int) -> Callable[[AchievementContext], Optional[str]]:
    def rule(ctx: AchievementContext) -> Optional[str]:
        return streak_reached_on(ctx.progress_by_date, target)

    return rule


def _nth_completed_date(n: int) -> Callable[[AchievementContext], Optional[str]]:
    def rule(ctx: AchievementContext) -> Optional[str]:
        done = ctx.oldest_first(ctx.by_status(ChallengeStatus.completed))
        return done[n - 1].created_on(ctx.tz) if len(done) >= n else None

    return rule


def _focus_challenges(ctx: AchievementContext) -> List[Challenge]:
    return [c for c in ctx.by_status(ChallengeStatus.completed) if "focus" in c.name.lower()]


def _latest_focus_date(ctx: AchievementContext) -> Optional[str]:
    focus = _focus_challenges(ctx)
    if not focus:
        return None
    return max(focus, key=lambda c: c.created_at).created_on(ctx.tz)


def _first_challenge_date(ctx: AchievementContext) -> Optional[str]:
    if not ctx.challenges:
        return None
    return ctx.oldest_first(ctx.challenges)[0].created_on(ctx.tz)


BADGES: List[BadgeRule] = [
    BadgeRule(
        1, "First Steps", "Complete your first challenge", "ri-footprint-line",
        earned=lambda ctx: len(ctx.by_status(ChallengeStatus.completed)) >= 1,
        earned_on=_nth_completed_date(1),
    ),
    BadgeRule(
        2, "Consistency King", "7-day streak", "ri-fire-line",
        earned=lambda ctx: ctx.streaks.current_streak >= 7,
        earned_on=_streak_date(7),
    ),
    BadgeRule(
        3, "Focus Master", "Complete Focus Challenge", "ri-focus-3-line",
        earned=lambda ctx: bool(_focus_challenges(ctx)),
        earned_on=_latest_focus_date,
    ),
    BadgeRule(
        4, "Iron Will", "30-day streak", "ri-shield-line",
        earned=lambda ctx: ctx.streaks.best_streak >= 30,
        earned_on=_streak_date(30),
    ),
    BadgeRule(
        5, "Discipline Warrior", "Complete 5 challenges", "ri-sword-line",
        earned=lambda ctx: len(ctx.by_status(ChallengeStatus.completed)) >= 5,
        earned_on=_nth_completed_date(5),
    ),
    BadgeRule(
        6, "Legendary", "100-day streak", "ri-trophy-line",
        earned=lambda ctx: ctx.streaks.best_streak >= 100,
        earned_on=_streak_date(100),
    ),
    BadgeRule(
        7, "Challenge Starter", "Start your first challenge", "ri-flag-line",
        earned=lambda ctx: len(ctx.challenges) >= 1,
        earned_on=_first_challenge_date,
    ),
    BadgeRule(
        8, "Multi-Tasker", "3 active challenges simultaneously", "ri-list-check",
        earned=lambda ctx: len(ctx.by_status(ChallengeStatus.active)) >= 3,
        earned_on=lambda ctx: ctx.today,
    ),
]


def evaluate_achievements(
    challenges: Sequence[Challenge],
    today: str,
    tz: Optional[dt.tzinfo] = None,
) -> List[Achievement]:
    # 생성일 기반 업적은 "오늘"과 같은 타임존의 달력 날짜로 비교
    ctx = AchievementContext(
        challenges=list(challenges),
        today=today,
        streaks=streak_summary(challenges),
        progress_by_date=daily_progress(challenges),
        tz=tz,
    )

    result = []
    for badge in sorted(BADGES, key=lambda b: b.id):
        earned = badge.earned(ctx)
        achievement = Achievement(
            id=badge.id,
            name=badge.name,
            description=badge.description,
            icon=badge.icon,
            earned=earned,
        )
        if earned:
            achievement.date = badge.earned_on(ctx) or today
        result.append(achievement)
    return result


# --------------------- 이력 ---------------------
STATUS_DISPLAY = {
    ChallengeStatus.completed: ("Completed", "ri-checkbox-circle-fill", "emerald"),
    ChallengeStatus.active: ("In Progress", "ri-play-circle-line", "cyan"),
    ChallengeStatus.draft: ("Draft", "ri-draft-line", "yellow"),
}


def challenge_progress(challenge: Challenge) -> int:
    if challenge.status == ChallengeStatus.completed:
        return 100
    if challenge.status == ChallengeStatus.active:
        done = sum(1 for t in challenge.daily_tracks if t.day_completed)
        return percentage(done, len(challenge.daily_tracks))
    return 0


def challenge_history(challenges: Sequence[Challenge], limit: int = 5) -> List[HistoryEntry]:
    recent = sorted(challenges, key=lambda c: c.created_at, reverse=True)[:limit]

    history = []
    for challenge in recent:
        status, icon, color = STATUS_DISPLAY[challenge.status]

        start_date = challenge.start_date
        end_date = challenge.end_date
        if not start_date and challenge.daily_tracks:
            # 저장된 시작일이 없으면 가장 이른 트랙 날짜로 추정
            start_date = min(t.date for t in challenge.daily_tracks)
            end_date = add_days(start_date, challenge.duration) if challenge.duration else end_date

        history.append(
            HistoryEntry(
                id=challenge.id,
                name=challenge.name,
                status=status,
                status_icon=icon,
                status_color=color,
                progress=challenge_progress(challenge),
                start_date=start_date,
                end_date=end_date,
            )
        )
    return history


# --------------------- 최근 N일 통계 ---------------------
def recent_progress_stats(
    challenges: Sequence[Challenge],
    today: str,
    days: int = 7,
) -> RecentProgressStats:
    start = add_days(today, -days)
    tracks = [
        t
        for c in challenges
        if c.status == ChallengeStatus.active
        for t in c.daily_tracks
        if start <= t.date <= today
    ]
    if not tracks:
        return RecentProgressStats()

    best_day = None
    for t in tracks:
        if t.progress > (best_day.progress if best_day else 0):
            best_day = BestDay(date=t.date, progress=t.progress)

    streak = 0
    for t in sorted(tracks, key=lambda t: t.date, reverse=True):
        if not t.day_completed:
            break
        streak += 1

    return RecentProgressStats(
        total_tracks=len(tracks),
        completed_tracks=sum(1 for t in tracks if t.day_completed),
        average_progress=int(round_half_up(sum(t.progress for t in tracks) / len(tracks))),
        best_day=best_day,
        streak=streak,
    )
