"""Turn rotation honoring block and shield status.

``statuses`` is always the room's PlayerStatus rows in join order, so
slot ``k`` is ``statuses[k - 1]``.
"""

from typing import List


def status_at_slot(statuses, slot: int):
    if slot < 1 or slot > len(statuses):
        return None
    return statuses[slot - 1]


def slot_of_user(statuses, user_id) -> int:
    """1-based slot of ``user_id``, or -1 when not a member."""
    for idx, st in enumerate(statuses):
        if st.player_id == user_id:
            return idx + 1
    return -1


def current_slot(game) -> int:
    slot = game.current_turn_slot
    return slot if slot and slot >= 1 else 1


def next_slot(slot: int, count: int) -> int:
    return (slot % count) + 1


def advance_turn_to_next(game, statuses) -> None:
    n = len(statuses)
    if n <= 0:
        return
    game.current_turn_slot = next_slot(current_slot(game), n)


def advance_skipping_blocked(game, statuses) -> List[dict]:
    """Settle the active slot on the first player allowed to act.

    Starting at the current slot: an unblocked player keeps the turn; a
    blocked player with a shield spends the shield, loses the block and
    keeps the turn; a blocked player without a shield loses the block and
    is skipped. Returns one event dict per consumed block.
    """
    events: List[dict] = []
    n = len(statuses)
    if n <= 0:
        return events

    slot = current_slot(game)
    for _ in range(n):
        st = status_at_slot(statuses, slot)
        if st is None:
            return events

        if not st.blocked:
            game.current_turn_slot = slot
            return events

        if st.has_shield:
            st.has_shield = False
            st.blocked = False
            events.append({'slot': slot, 'userId': st.player_id, 'outcome': 'shielded'})
            game.current_turn_slot = slot
            return events

        st.blocked = False
        events.append({'slot': slot, 'userId': st.player_id, 'outcome': 'skipped'})
        slot = next_slot(slot, n)

    game.current_turn_slot = 1
    return events
