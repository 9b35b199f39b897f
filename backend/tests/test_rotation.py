from types import SimpleNamespace

from boardgame.services.games.rotation import (
    first_question_id,
    next_question_id,
    pick_first,
    pick_next,
)


def test_pick_first_is_smallest_id():
    assert pick_first({9, 3, 5}) == 3
    assert pick_first([]) is None


def test_pick_next_walks_ascending_and_wraps():
    ids = [7, 2, 4]
    assert pick_next(ids, 2) == 4
    assert pick_next(ids, 4) == 7
    assert pick_next(ids, 7) == 2


def test_pick_next_without_current_or_unknown_id_restarts():
    assert pick_next([5, 1], None) == 1
    assert pick_next([5, 1], 99) == 1
    assert pick_next([], 1) is None


def test_pick_next_is_a_full_cycle():
    ids = [11, 3, 8, 21, 5]
    start = pick_first(ids)
    seen = [start]
    current = start
    for _ in range(len(ids)):
        current = pick_next(ids, current)
        seen.append(current)
    assert current == start
    assert sorted(seen[:-1]) == sorted(ids)


def test_room_helpers_use_assigned_ids():
    game = SimpleNamespace(question_ids=[4, 10], current_question_id=10)
    assert first_question_id(game) == 4
    assert next_question_id(game) == 4
