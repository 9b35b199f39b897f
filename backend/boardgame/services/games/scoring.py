from typing import Optional

from boardgame.models import STATUS_FINISHED
from .movement import is_at_finish


def normalize_answer(text: Optional[str]) -> str:
    return (text or '').strip().lower()


def is_correct_answer(given: Optional[str], expected: Optional[str]) -> bool:
    """Trimmed exact match, ignoring case. A question without an answer never matches."""
    if expected is None:
        return False
    return normalize_answer(given) == normalize_answer(expected)


def finish_if_winner(game, actor, now: int) -> bool:
    """Finish the game if ``actor`` stands on the finish tile.

    Sets the winner fields once and stops the timer. Returns True when this
    call (or an earlier one) finished the game through ``actor``.
    """
    if game is None or actor is None:
        return False
    if not is_at_finish(actor):
        return False
    if game.status == STATUS_FINISHED:
        return game.winner_user_id == actor.player_id
    game.status = STATUS_FINISHED
    game.winner_user_id = actor.player_id
    game.winner_username = actor.username
    game.finished_at = now
    game.turn_ends_at = None
    return True
