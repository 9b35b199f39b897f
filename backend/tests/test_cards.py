from collections import Counter
from types import SimpleNamespace

from conftest import ScriptedRng
from boardgame.services.games.cards import (
    DRAW_POOL,
    CardKind,
    apply_card,
    draw_card,
)
from boardgame.services.games.movement import LAST_INDEX
from boardgame.services.games.scoring import finish_if_winner, is_correct_answer


def _game(slot=1, status='ACTIVE'):
    return SimpleNamespace(
        status=status,
        current_turn_slot=slot,
        turn_ends_at=123,
        winner_user_id=None,
        winner_username=None,
        finished_at=None,
    )


def _status(user_id, position=0, blocked=False, shield=False):
    return SimpleNamespace(
        player_id=user_id,
        username=f'user{user_id}',
        position=position,
        blocked=blocked,
        has_shield=shield,
    )


def test_pool_weights_move_two_double():
    counts = Counter(DRAW_POOL)
    assert len(DRAW_POOL) == 5
    assert counts[CardKind.MOVE_2] == 2
    assert counts[CardKind.MOVE_3] == counts[CardKind.BLOCK_NEXT] == counts[CardKind.SHIELD] == 1


def test_draw_uses_injected_randomness():
    rng = ScriptedRng(0, 1, 2, 3, 4)
    kinds = [draw_card(rng).kind for _ in range(5)]
    assert kinds == [CardKind.MOVE_2, CardKind.MOVE_2, CardKind.MOVE_3, CardKind.BLOCK_NEXT, CardKind.SHIELD]
    assert rng.calls == [5] * 5


def test_move_cards_use_exact_landing():
    game = _game()
    actor = _status(1, position=3)
    apply_card(game, actor, [actor], draw_card(ScriptedRng(2)), now=1)
    assert actor.position == 6

    actor.position = 15
    apply_card(game, actor, [actor], draw_card(ScriptedRng(0)), now=1)
    assert actor.position == 15
    assert game.status == 'ACTIVE'


def test_move_card_can_win():
    game = _game()
    actor = _status(1, position=14)
    card = apply_card(game, actor, [actor], draw_card(ScriptedRng(0)), now=555)
    assert card.kind is CardKind.MOVE_2
    assert actor.position == LAST_INDEX
    assert game.status == 'FINISHED'
    assert game.winner_user_id == 1
    assert game.winner_username == 'user1'
    assert game.finished_at == 555
    assert game.turn_ends_at is None


def test_shield_is_idempotent():
    game = _game()
    actor = _status(1, shield=True)
    apply_card(game, actor, [actor], draw_card(ScriptedRng(4)), now=1)
    assert actor.has_shield is True


def test_block_next_targets_slot_after_active():
    statuses = [_status(1), _status(2), _status(3)]
    game = _game(slot=3)
    card = apply_card(game, statuses[2], statuses, draw_card(ScriptedRng(3)), now=1)
    assert statuses[0].blocked is True
    assert card.target_user_id == 1
    assert card.to_dict()['targetUserId'] == 1
    assert card.to_dict()['code'] == 'BLOCK_NEXT'


def test_block_next_without_players_is_silent():
    game = _game()
    actor = _status(1)
    card = apply_card(game, actor, [], draw_card(ScriptedRng(3)), now=1)
    assert card.target_user_id is None
    assert actor.blocked is False


def test_cards_do_nothing_once_finished():
    game = _game(status='FINISHED')
    actor = _status(1, position=3)
    apply_card(game, actor, [actor], draw_card(ScriptedRng(2)), now=1)
    assert actor.position == 3


def test_answer_matching_is_trimmed_and_case_insensitive():
    assert is_correct_answer('  mars ', 'Mars')
    assert is_correct_answer('THE SUN', 'the sun')
    assert not is_correct_answer('Venus', 'Mars')
    assert not is_correct_answer(None, 'Mars')
    assert not is_correct_answer('', None)


def test_answer_matching_does_not_fold_special_letters():
    assert not is_correct_answer('STRASSE', 'straße')
    assert is_correct_answer('STRASSE', 'strasse')


def test_finish_if_winner_only_at_last_tile():
    game = _game()
    actor = _status(1, position=LAST_INDEX - 1)
    assert finish_if_winner(game, actor, now=1) is False
    assert game.status == 'ACTIVE'
    actor.position = LAST_INDEX
    assert finish_if_winner(game, actor, now=2) is True
    assert game.finished_at == 2
