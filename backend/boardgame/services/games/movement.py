"""Token movement on the 17-tile board.

A move that would pass the finish tile is discarded entirely; the player
has to land on ``LAST_INDEX`` exactly.
"""

MAX_TILES = 17
LAST_INDEX = MAX_TILES - 1


def clamp_position(current: int, value: int) -> int:
    """Resolve a direct position assignment.

    Negative values snap to 0; values past the finish are ignored and the
    current position is kept.
    """
    value = int(value)
    if value < 0:
        return 0
    if value > LAST_INDEX:
        return current
    return value


def can_move_by(status, delta: int) -> bool:
    target = status.position + delta
    return 0 <= target <= LAST_INDEX


def move_by_exact(status, delta: int) -> bool:
    """Move ``status`` by ``delta`` unless it overshoots. Returns True if it moved."""
    before = status.position
    target = before + delta
    if target < 0:
        status.position = 0
    elif target <= LAST_INDEX:
        status.position = target
    # overshoot: no move
    return status.position != before


def is_at_finish(status) -> bool:
    return status.position == LAST_INDEX


def set_position(status, value: int) -> None:
    status.position = clamp_position(status.position, value)
