"""Deterministic question rotation over a room's assigned question ids."""

from typing import Iterable, Optional


def pick_first(question_ids: Iterable[int]) -> Optional[int]:
    ids = sorted(question_ids)
    return ids[0] if ids else None


def pick_next(question_ids: Iterable[int], current_id: Optional[int]) -> Optional[int]:
    """Return the id after ``current_id`` in ascending order, wrapping around.

    An unknown ``current_id`` (e.g. the question was unassigned) restarts
    from the first id.
    """
    ids = sorted(question_ids)
    if not ids:
        return None
    if current_id is None:
        return ids[0]
    try:
        idx = ids.index(current_id)
    except ValueError:
        return ids[0]
    return ids[(idx + 1) % len(ids)]


def first_question_id(game) -> Optional[int]:
    return pick_first(game.question_ids)


def next_question_id(game) -> Optional[int]:
    return pick_next(game.question_ids, game.current_question_id)
