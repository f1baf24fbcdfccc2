"""Weekly/monthly rollups, achievements, history, recent stats."""

import datetime as dt
from zoneinfo import ZoneInfo

from streak_engine.core.models import ChallengeStatus
from streak_engine.core.rollups import (
    challenge_history,
    evaluate_achievements,
    monthly_trend,
    recent_progress_stats,
    weekly_performance,
)

from helpers import TODAY, days_ago, make_challenge, make_track, progress_track


def test_weekly_performance_covers_trailing_seven_days():
    first = make_challenge(id=1, tracks=[make_track("2024-06-10", 1, 2), make_track("2024-06-04", 2, 2)])
    second = make_challenge(id=2, tracks=[make_track("2024-06-10", 2, 2), make_track("2024-06-03", 1, 1)])

    week = weekly_performance([first, second], TODAY)

    assert [e.date for e in week] == [
        "2024-06-04",
        "2024-06-05",
        "2024-06-06",
        "2024-06-07",
        "2024-06-08",
        "2024-06-09",
        "2024-06-10",
    ]
    assert week[0].day == "Tue"
    assert week[-1].day == "Mon"
    assert (week[-1].completed, week[-1].total, week[-1].percentage) == (3, 4, 75)
    assert week[0].percentage == 100
    # 트랙이 없는 날
    assert (week[1].completed, week[1].total, week[1].percentage) == (0, 0, 0)


def test_monthly_trend_uses_finalized_days():
    tracks = [
        make_track("2024-06-01", 0, 1, day_completed=True),
        make_track("2024-06-02", 0, 1),
        make_track("2024-04-15", 1, 1, day_completed=True),
        make_track("2024-01-15", 1, 1, day_completed=True),
    ]

    trend = monthly_trend([make_challenge(tracks=tracks)], TODAY)

    assert [(m.month, m.key) for m in trend] == [
        ("Mar", "2024-03"),
        ("Apr", "2024-04"),
        ("May", "2024-05"),
        ("Jun", "2024-06"),
    ]
    assert [m.success for m in trend] == [0, 100, 0, 50]


def test_monthly_trend_crosses_year_boundary():
    trend = monthly_trend([], "2024-01-31")

    assert [m.key for m in trend] == ["2023-10", "2023-11", "2023-12", "2024-01"]


# --------------------- 업적 ---------------------
def _by_id(achievements):
    return {a.id: a for a in achievements}


def test_no_challenges_earns_nothing():
    achievements = evaluate_achievements([], TODAY)

    assert [a.id for a in achievements] == list(range(1, 9))
    assert not any(a.earned for a in achievements)
    assert all(a.date is None for a in achievements)


def test_completed_and_focus_badges():
    older = make_challenge(
        id=1, name="Deep Focus sprint", status=ChallengeStatus.completed, created_at=days_ago(40)
    )
    newer = make_challenge(
        id=2, name="focus again", status=ChallengeStatus.completed, created_at=days_ago(5)
    )
    draft = make_challenge(id=3, status=ChallengeStatus.draft, created_at=days_ago(60))

    badges = _by_id(evaluate_achievements([newer, older, draft], TODAY))

    assert badges[1].earned and badges[1].date == "2024-05-01"
    assert badges[3].earned and badges[3].date == "2024-06-05"
    assert badges[7].earned and badges[7].date == "2024-04-11"
    assert not badges[5].earned


def test_five_completed_challenges_badge_uses_fifth_oldest():
    challenges = [
        make_challenge(id=i, status=ChallengeStatus.completed, created_at=days_ago(10 - i))
        for i in range(1, 6)
    ]

    badge = _by_id(evaluate_achievements(challenges, TODAY))[5]

    assert badge.earned
    assert badge.date == "2024-06-05"


def test_consistency_king_date_is_when_seventh_day_was_reached():
    tracks = [progress_track(f"2024-06-{d:02d}", 100) for d in range(1, 10)]

    badges = _by_id(evaluate_achievements([make_challenge(tracks=tracks)], TODAY))

    assert badges[2].earned
    assert badges[2].date == "2024-06-07"
    assert not badges[4].earned


def test_consistency_king_needs_current_streak():
    tracks = [progress_track(f"2024-06-{d:02d}", 100) for d in range(1, 8)]
    tracks.append(progress_track("2024-06-08", 20))

    badges = _by_id(evaluate_achievements([make_challenge(tracks=tracks)], TODAY))

    assert not badges[2].earned


def test_multi_tasker_dated_today():
    challenges = [make_challenge(id=i) for i in range(1, 4)]

    badge = _by_id(evaluate_achievements(challenges, TODAY))[8]

    assert badge.earned
    assert badge.date == TODAY


# --------------------- 이력 ---------------------
def test_history_is_newest_first_and_limited():
    challenges = [make_challenge(id=i, created_at=days_ago(i)) for i in range(1, 8)]

    history = challenge_history(challenges)

    assert [h.id for h in history] == [1, 2, 3, 4, 5]


def test_history_status_display_and_progress():
    completed = make_challenge(id=1, status=ChallengeStatus.completed, created_at=days_ago(3))
    active = make_challenge(
        id=2,
        created_at=days_ago(2),
        start_date="2024-06-08",
        tracks=[
            make_track("2024-06-08", 2, 2, day_completed=True),
            make_track("2024-06-09", 0, 2),
            make_track("2024-06-10", 0, 2),
            make_track("2024-06-11", 0, 2),
        ],
    )
    draft = make_challenge(id=3, status=ChallengeStatus.draft, created_at=days_ago(1))

    history = {h.id: h for h in challenge_history([completed, active, draft])}

    assert (history[1].status, history[1].status_color, history[1].progress) == ("Completed", "emerald", 100)
    assert (history[2].status, history[2].status_icon, history[2].progress) == (
        "In Progress",
        "ri-play-circle-line",
        25,
    )
    assert (history[3].status, history[3].progress) == ("Draft", 0)


def test_history_infers_dates_from_tracks():
    challenge = make_challenge(
        duration=5,
        tracks=[make_track("2024-06-03", 0, 1), make_track("2024-06-01", 0, 1)],
    )

    entry = challenge_history([challenge])[0]

    assert entry.start_date == "2024-06-01"
    assert entry.end_date == "2024-06-06"


def test_history_without_tracks_or_dates():
    entry = challenge_history([make_challenge(status=ChallengeStatus.draft)])[0]

    assert entry.start_date is None
    assert entry.end_date is None


# --------------------- 최근 N일 ---------------------
def test_recent_stats_only_active_challenges_in_window():
    active = make_challenge(
        id=1,
        tracks=[
            make_track("2024-06-08", 2, 2, day_completed=True),
            make_track("2024-06-09", 1, 2, day_completed=True),
            make_track("2024-06-10", 0, 2),
            make_track("2024-05-01", 2, 2, day_completed=True),
            make_track("2024-06-11", 2, 2),
        ],
    )
    finished = make_challenge(
        id=2, status=ChallengeStatus.completed, tracks=[make_track("2024-06-09", 2, 2)]
    )

    stats = recent_progress_stats([active, finished], TODAY, days=7)

    assert stats.total_tracks == 3
    assert stats.completed_tracks == 2
    assert stats.average_progress == 50
    assert stats.best_day.date == "2024-06-08"
    assert stats.best_day.progress == 100
    # 가장 최근 트랙(오늘)이 아직 마감 전
    assert stats.streak == 0


def test_recent_stats_streak_counts_finalized_days():
    active = make_challenge(
        tracks=[
            make_track("2024-06-07", 0, 2, day_completed=False),
            make_track("2024-06-08", 1, 2, day_completed=True),
            make_track("2024-06-09", 1, 2, day_completed=True),
        ],
    )

    stats = recent_progress_stats([active], TODAY)

    assert stats.streak == 2
    assert stats.average_progress == 33


def test_recent_stats_empty_window():
    stats = recent_progress_stats([make_challenge()], TODAY)

    assert stats.total_tracks == 0
    assert stats.best_day is None
    assert stats.streak == 0


def test_creation_dates_use_given_timezone():
    # UTC 6/9 16:00 = 서울 6/10 01:00
    late = make_challenge(created_at=dt.datetime(2024, 6, 9, 16, 0, tzinfo=dt.timezone.utc))

    utc_badge = _by_id(evaluate_achievements([late], TODAY))[7]
    seoul_badge = _by_id(evaluate_achievements([late], TODAY, tz=ZoneInfo("Asia/Seoul")))[7]

    assert utc_badge.date == "2024-06-09"
    assert seoul_badge.date == "2024-06-10"
