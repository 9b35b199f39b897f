from types import SimpleNamespace

from boardgame.services.games.expiry import (
    compute_turn_ends_at,
    ensure_not_expired,
    is_expired,
)


def _game(**overrides):
    attrs = dict(
        status='ACTIVE',
        current_turn_slot=1,
        current_question_id=1,
        question_ids=[1, 2, 3],
        time_limit_seconds=10,
        turn_ends_at=10_000,
    )
    attrs.update(overrides)
    return SimpleNamespace(**attrs)


def _players(n):
    return [SimpleNamespace(player_id=i + 1, blocked=False, has_shield=False) for i in range(n)]


def test_deadline_uses_room_limit_or_fallback():
    assert compute_turn_ends_at(_game(), now=1_000) == 11_000
    assert compute_turn_ends_at(_game(time_limit_seconds=None), now=1_000, fallback_sec=7) == 8_000


def test_expired_at_or_after_deadline_only_while_active():
    game = _game()
    assert not is_expired(game, 9_999)
    assert is_expired(game, 10_000)
    assert not is_expired(_game(turn_ends_at=None), 50_000)
    assert not is_expired(_game(status='FINISHED'), 50_000)


def test_catch_up_applies_a_single_transition():
    game = _game()
    statuses = _players(3)
    # ten turn lengths overdue still moves one step
    now = 10_000 + 10 * 10_000
    assert ensure_not_expired(game, statuses, now) is True
    assert game.current_turn_slot == 2
    assert game.current_question_id == 2
    assert game.turn_ends_at == now + 10_000
    assert ensure_not_expired(game, statuses, now) is False
    assert game.current_turn_slot == 2


def test_catch_up_skips_blocked_next_player():
    game = _game()
    statuses = _players(3)
    statuses[1].blocked = True
    ensure_not_expired(game, statuses, 20_000)
    assert game.current_turn_slot == 3
    assert statuses[1].blocked is False
