"""Turn timer without a scheduler.

A room stores the epoch-millisecond deadline of the current turn. Nothing
fires when it passes; the next read or action against the room notices the
overdue deadline and applies exactly one turn transition, however many
turn lengths have elapsed since.
"""

import time
from typing import List, Optional

from boardgame.models import STATUS_ACTIVE
from .blocking import advance_skipping_blocked, advance_turn_to_next
from .rotation import next_question_id

DEFAULT_FALLBACK_SEC = 10


def now_ms() -> int:
    return int(time.time() * 1000)


def compute_turn_ends_at(game, now: int, fallback_sec: Optional[int] = None) -> int:
    sec = game.time_limit_seconds
    if sec is None:
        sec = fallback_sec if fallback_sec is not None else DEFAULT_FALLBACK_SEC
    return now + int(sec) * 1000


def is_expired(game, now: int) -> bool:
    if game.status != STATUS_ACTIVE:
        return False
    return game.turn_ends_at is not None and now >= game.turn_ends_at


def start_next_turn(game, statuses, now: int, fallback_sec: Optional[int] = None) -> List[dict]:
    """Hand the turn to the next eligible player with a fresh question and deadline.

    Shared tail of answering, timing out and expiry. Returns the block and
    shield events consumed while settling the new active slot.
    """
    advance_turn_to_next(game, statuses)
    events = advance_skipping_blocked(game, statuses)
    game.current_question_id = next_question_id(game)
    game.turn_ends_at = compute_turn_ends_at(game, now, fallback_sec)
    return events


def ensure_not_expired(game, statuses, now: int, fallback_sec: Optional[int] = None) -> bool:
    """Apply one overdue turn transition. Returns True if one was applied."""
    if not is_expired(game, now):
        return False
    start_next_turn(game, statuses, now, fallback_sec)
    return True
