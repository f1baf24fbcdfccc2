"""Task toggling and end-of-day finalization (pure state transitions)."""

import pytest

from streak_engine.core.errors import ForbiddenError, NotFoundError
from streak_engine.core.finalize import finalize_day
from streak_engine.core.toggle import find_task_index, locate_task, recompute_counters, toggle_task
from streak_engine.core.tracks import generate_tracks

from helpers import FirstPicker, make_challenge, make_track


def test_toggle_flips_one_task_and_recomputes_counters():
    track = make_track("2024-06-10", 0, 3)

    updated, change = toggle_task(track, 1, challenge_id=7)

    assert [t.completed for t in updated.tasks] == [False, True, False]
    assert updated.completed_tasks == 1
    assert updated.total_tasks == 3
    assert updated.progress == 33
    assert change.challenge_id == 7
    assert change.task_id == track.tasks[1].id
    assert change.completed is True
    # 원본 스냅샷은 그대로
    assert track.completed_tasks == 0


def test_toggle_twice_restores_state():
    track = make_track("2024-06-10", 0, 2)

    once, _ = toggle_task(track, 0)
    twice, change = toggle_task(once, 0)

    assert twice.completed_tasks == 0
    assert twice.progress == 0
    assert change.completed is False


def test_progress_is_consistent_after_every_toggle():
    track = make_track("2024-06-10", 0, 7)
    for index in [0, 3, 6, 3, 2, 1, 0, 5]:
        track, _ = toggle_task(track, index)
        done = sum(1 for t in track.tasks if t.completed)
        assert track.completed_tasks == done
        assert track.total_tasks == len(track.tasks) == 7
        assert track.progress == recompute_counters(track).progress


def test_progress_rounds_half_up():
    # 1/8 = 12.5% → 13
    track = make_track("2024-06-10", 1, 8)
    assert track.progress == 13


def test_recompute_with_no_tasks_is_zero():
    track = make_track("2024-06-10", 0, 0)
    assert track.progress == 0
    assert track.total_tasks == 0


@pytest.mark.parametrize("index", [-1, 2, 10])
def test_toggle_out_of_range_index(index):
    with pytest.raises(NotFoundError):
        toggle_task(make_track("2024-06-10", 0, 2), index)


def test_frozen_day_rejects_toggle():
    track = make_track("2024-06-10", 1, 2, day_completed=True)

    with pytest.raises(ForbiddenError):
        toggle_task(track, 0)
    assert [t.completed for t in track.tasks] == [True, False]


def test_find_task_index_by_id_or_name():
    track = make_track("2024-06-10", 0, 3)

    assert find_task_index(track, track.tasks[2].id) == 2
    assert find_task_index(track, "task 1") == 1
    assert find_task_index(track, "missing") == -1


def test_locate_task_first_match_wins_in_store_order():
    first = make_challenge(id=1, tracks=[make_track("2024-06-10", 0, 2)])
    second = make_challenge(id=2, tracks=[make_track("2024-06-10", 0, 2)])

    challenge, track, index = locate_task([first, second], "2024-06-10", "task 1")
    assert challenge.id == 1
    assert index == 1

    challenge, _, _ = locate_task([second, first], "2024-06-10", "task 1")
    assert challenge.id == 2


def test_locate_task_skips_challenges_without_today_track():
    other_day = make_challenge(id=1, tracks=[make_track("2024-06-09", 0, 2)])
    today = make_challenge(id=2, tracks=[make_track("2024-06-10", 0, 2)])

    challenge, _, _ = locate_task([other_day, today], "2024-06-10", "task 0")
    assert challenge.id == 2

    with pytest.raises(NotFoundError):
        locate_task([other_day], "2024-06-10", "task 0")


# --------------------- finalize ---------------------
def test_finalize_incomplete_day_records_penalty():
    track = make_track("2024-06-10", 1, 2).model_copy(update={"success_message": "old"})

    updated, change = finalize_day(track, penalty="50 push-ups", success_message="great")

    assert updated.day_completed is True
    assert updated.penalty == "50 push-ups"
    assert updated.success_message is None
    assert change.all_completed is False


def test_finalize_incomplete_day_without_penalty_keeps_existing():
    track = make_track("2024-06-10", 0, 2).model_copy(update={"penalty": "earlier"})

    updated, _ = finalize_day(track)

    assert updated.day_completed is True
    assert updated.penalty == "earlier"


def test_finalize_complete_day_records_success():
    track = make_track("2024-06-10", 2, 2).model_copy(update={"penalty": "stale"})

    updated, change = finalize_day(track, penalty="ignored", success_message="Well done")

    assert updated.penalty is None
    assert updated.success_message == "Well done"
    assert change.all_completed is True


def test_two_task_scenario_toggle_both_then_finalize():
    challenge = make_challenge(tasks=("meditate", "journal"), duration=3)
    challenge, _ = generate_tracks(challenge, "2024-06-10", 3, FirstPicker())
    track = challenge.track_for("2024-06-10").model_copy(update={"penalty": "left over"})

    track, _ = toggle_task(track, 0)
    track, _ = toggle_task(track, 1)
    assert track.progress == 100

    final, _ = finalize_day(track)
    assert final.day_completed is True
    assert final.penalty is None
    assert final.success_message is None
