# challenge_tracker/models/challenge.py
from __future__ import annotations

import datetime as dt
from typing import List, Optional

from sqlalchemy import (Boolean, DateTime, Enum as SqlEnum, ForeignKey, Index, Integer, JSON, String, Text, UniqueConstraint,)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from challenge_tracker.db.database import Base
from streak_engine.core.models import ChallengeStatus


class ChallengeRow(Base):
    """
    유저 챌린지
    - tasks: 매일 생성되는 트랙의 템플릿 (태스크 이름 배열)
    - version: 조건부 업데이트(낙관적 동시성)용
    """
    __tablename__ = "challenges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    penalty: Mapped[str] = mapped_column(Text, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[ChallengeStatus] = mapped_column(
        SqlEnum(ChallengeStatus, name="challenge_status"),
        nullable=False,
        default=ChallengeStatus.draft,
    )
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tasks: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    # YYYY-MM-DD 문자열 그대로 저장
    start_date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    end_date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    # 재시작 계보 (소유 관계 아님)
    restarted_from: Mapped[Optional[int]] = mapped_column(
        ForeignKey("challenges.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    daily_tracks: Mapped[List["DailyTrackRow"]] = relationship(
        "DailyTrackRow",
        back_populates="challenge",
        cascade="all, delete-orphan",
        order_by="DailyTrackRow.id",
    )

    __table_args__ = (
        Index("idx_challenge_owner_status", "user_id", "status"),
    )


class DailyTrackRow(Base):
    __tablename__ = "daily_tracks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    challenge_id: Mapped[int] = mapped_column(
        ForeignKey("challenges.id", ondelete="CASCADE"),
        nullable=False,
    )
    date: Mapped[str] = mapped_column(String(10), nullable=False)

    completed_tasks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_tasks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    day_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    penalty: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    success_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    challenge: Mapped["ChallengeRow"] = relationship("ChallengeRow", back_populates="daily_tracks")

    tasks: Mapped[List["TrackTaskRow"]] = relationship(
        "TrackTaskRow",
        back_populates="track",
        cascade="all, delete-orphan",
        order_by="TrackTaskRow.position",
    )

    # 한 챌린지 안에서 날짜당 트랙 1개
    __table_args__ = (
        UniqueConstraint("challenge_id", "date", name="uq_track_challenge_date"),
    )


class TrackTaskRow(Base):
    __tablename__ = "daily_track_tasks"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    track_id: Mapped[int] = mapped_column(
        ForeignKey("daily_tracks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    task: Mapped[str] = mapped_column(Text, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    motivation: Mapped[str] = mapped_column(String(200), nullable=False, default="")

    track: Mapped["DailyTrackRow"] = relationship("DailyTrackRow", back_populates="tasks")
