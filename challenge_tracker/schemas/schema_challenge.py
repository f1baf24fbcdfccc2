from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from streak_engine.core.models import ChallengeStatus
from streak_engine.core.rollups import Achievement, HistoryEntry, MonthlyEntry, WeeklyEntry


# --------------------- 요청 ---------------------
class CreateChallengeReq(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    duration: int = Field(ge=1, le=365, description="챌린지 기간(일)")
    tasks: List[str] = Field(default_factory=list, description="매일 수행할 태스크 이름 목록")
    penalty: str = Field(min_length=1)


class UpdateChallengeReq(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    duration: Optional[int] = Field(default=None, ge=1, le=365)
    tasks: Optional[List[str]] = None
    penalty: Optional[str] = Field(default=None, min_length=1)

    @model_validator(mode="after")
    def validate_at_least_one_field(self):
        if all(v is None for v in (self.name, self.duration, self.tasks, self.penalty)):
            raise ValueError("At least one field is required.")
        return self


class EndDayReq(BaseModel):
    penalty: Optional[str] = None
    success_message: Optional[str] = None


# --------------------- 응답 ---------------------
class TaskItem(BaseModel):
    id: str
    task: str
    completed: bool
    motivation: str = ""


class DaySummary(BaseModel):
    challenge_id: int
    challenge_name: str
    date: str
    tasks: List[TaskItem]
    completed_tasks: int
    total_tasks: int
    progress: int
    day_completed: bool
    penalty: Optional[str] = None
    success_message: Optional[str] = None


class ChallengeItem(BaseModel):
    id: int
    name: str
    duration: int
    status: ChallengeStatus
    progress: int
    tasks: List[str]
    penalty: str
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    restarted_from: Optional[int] = None
    created_at: datetime
    total_tracks: int


class TrackOverview(BaseModel):
    date: str
    tasks: int
    completed_tasks: int
    progress: int
    day_completed: bool


class ChallengeTracksRes(BaseModel):
    challenge_id: int
    challenge_name: str
    total_tracks: int
    tracks: List[TrackOverview]


class CreateAllTracksRes(BaseModel):
    message: str
    created: int
    total_tracks: int
    challenge: str


class RepairRes(BaseModel):
    date: str
    challenges_fixed: int
    tracks_created: int


class StreakStats(BaseModel):
    current_streak: int
    best_streak: int
    success_rate: int
    avg_tasks_per_day: float
    total_days: int


# --------------------- 대시보드 ---------------------
class CurrentChallenge(BaseModel):
    id: int
    name: str
    day: int
    total_days: int
    progress: int
    tasks_today: int
    completed_today: int
    start_date: Optional[str] = None
    today_track_exists: bool


class DashboardTask(BaseModel):
    id: str
    task: str
    completed: bool


class DashboardStats(BaseModel):
    current_streak: int = 0
    best_streak: int = 0
    total_challenges: int = 0
    completed_challenges: int = 0
    success_rate: int = 0


class DashboardRes(BaseModel):
    current_challenge: Optional[CurrentChallenge] = None
    todays_tasks: List[DashboardTask] = []
    stats: DashboardStats
    todays_quote: str
    has_active_challenge: bool


# --------------------- 진행 현황 ---------------------
class OverviewStats(BaseModel):
    total_challenges: int = 0
    completed_challenges: int = 0
    current_streak: int = 0
    best_streak: int = 0
    total_days: int = 0
    success_rate: int = 0
    average_tasks_per_day: float = 0.0


class ProgressOverviewRes(BaseModel):
    stats: OverviewStats
    weekly_data: List[WeeklyEntry]
    monthly_progress: List[MonthlyEntry]
    achievements: List[Achievement]
    challenge_history: List[HistoryEntry]
