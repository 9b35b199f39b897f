"""Turn state machine: the actions players and admins perform on a room.

Every action runs inside the room's critical section, re-reads the room,
catches up an overdue turn, validates, mutates and commits once. Errors
are raised before anything is changed (apart from an overdue catch-up,
which is persisted regardless).
"""

import random
import threading
import uuid
from contextlib import contextmanager
from typing import Iterable, List, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from boardgame import db
from boardgame.models import (
    Game,
    PlayerStatus,
    Question,
    User,
    STATUS_ACTIVE,
    STATUS_FINISHED,
)
from . import expiry
from .blocking import advance_skipping_blocked, current_slot, slot_of_user
from .cards import apply_card, draw_card
from .errors import AlreadyTerminal, Conflict, Forbidden, InvalidInput, NotFound, StorageError
from .movement import move_by_exact
from .rotation import first_question_id
from .scoring import finish_if_winner, is_correct_answer

BASE_MOVE = 1

_room_locks: dict = {}
_room_locks_guard = threading.Lock()


def _lock_for(game_id: int):
    with _room_locks_guard:
        lock = _room_locks.get(game_id)
        if lock is None:
            lock = _room_locks[game_id] = threading.RLock()
        return lock


@contextmanager
def room_action(game_id: int):
    """Serialize actions on one room. Different rooms never share a lock."""
    with _lock_for(game_id):
        yield


def _forget_lock(game_id: int) -> None:
    with _room_locks_guard:
        _room_locks.pop(game_id, None)


# ---- loading / persistence helpers ----

def _load_game(game_id: int, for_update: bool = False) -> Game:
    query = Game.query.filter_by(id=game_id)
    if for_update:
        query = query.with_for_update().populate_existing()
    game = query.first()
    if not game:
        raise NotFound(f'Game not found: {game_id}')
    return game


def _load_statuses(game_id: int) -> List[PlayerStatus]:
    return PlayerStatus.query.filter_by(game_id=game_id).order_by(PlayerStatus.id.asc()).all()


def _require_user(user_id: int) -> User:
    user = User.query.filter_by(id=user_id).first()
    if not user:
        raise NotFound(f'User not found: {user_id}')
    return user


def _load_questions(question_ids: Iterable[int]) -> List[Question]:
    ids = list(question_ids)
    if not ids:
        return []
    return Question.query.filter(Question.id.in_(ids)).all()


def _commit(action: str, game_id: Optional[int]) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f"[storage] action={action} room={game_id} commit failed: {exc}")
        raise StorageError('Storage failure; the action was not applied') from exc


def _fallback_sec() -> int:
    return int(current_app.config.get('FALLBACK_TIME_LIMIT_SEC', expiry.DEFAULT_FALLBACK_SEC))


def _max_players() -> int:
    return int(current_app.config.get('MAX_PLAYERS', 4))


def _prize_rng():
    rng = current_app.extensions.get('prize_rng')
    if rng is None:
        seed = current_app.config.get('PRIZE_CARD_SEED')
        rng = random.Random(seed) if seed not in (None, '') else random.Random()
        current_app.extensions['prize_rng'] = rng
    return rng


def _validate_time_limit(value) -> int:
    try:
        sec = int(value)
    except (TypeError, ValueError):
        raise InvalidInput('timeLimitSeconds must be an integer')
    if sec <= 0:
        raise InvalidInput('timeLimitSeconds must be positive')
    return sec


# ---- turn transitions ----

def _advance(game: Game, statuses, now: int, reason: str) -> None:
    prev = current_slot(game)
    events = expiry.start_next_turn(game, statuses, now, _fallback_sec())
    for ev in events:
        current_app.logger.info(
            f"[block] room={game.id} slot={ev['slot']} user={ev['userId']} outcome={ev['outcome']}"
        )
    current_app.logger.info(
        f"[turn-advance] room={game.id} reason={reason} slot {prev} -> {game.current_turn_slot} "
        f"question={game.current_question_id} ends_at={game.turn_ends_at}"
    )


def _catch_up(game: Game, statuses, now: int, apply_expiry: bool = True) -> bool:
    """Apply an overdue turn transition and settle a blocked active player.

    Returns True if the room was changed and needs persisting.
    """
    if game.status != STATUS_ACTIVE:
        return False
    changed = False
    if apply_expiry and expiry.is_expired(game, now):
        overdue = now - game.turn_ends_at
        current_app.logger.info(f"[expiry] room={game.id} overdue_ms={overdue}")
        _advance(game, statuses, now, reason='expired')
        changed = True
    prev = game.current_turn_slot
    events = advance_skipping_blocked(game, statuses)
    if events or game.current_turn_slot != prev:
        for ev in events:
            current_app.logger.info(
                f"[block] room={game.id} slot={ev['slot']} user={ev['userId']} outcome={ev['outcome']}"
            )
        changed = True
    return changed


def _persist_catch_up(changed: bool, action: str, game_id: int) -> None:
    if changed:
        _commit(action, game_id)


# ---- snapshots ----

def snapshot(game: Game, statuses, now: int) -> dict:
    """Client-visible room state. Never includes answers or image bytes."""
    question = None
    if game.current_question_id is not None:
        q = Question.query.filter_by(id=game.current_question_id).first()
        if q:
            question = {
                'id': q.id,
                'content': q.content,
                'hasImage': q.has_image,
            }
    players = [st.to_dict(slot=idx + 1) for idx, st in enumerate(statuses) if st.player is not None]
    return {
        'gameId': game.id,
        'roomName': game.name,
        'status': game.status,
        'serverNow': now,
        'turnEndsAt': game.turn_ends_at,
        'activeSlot': current_slot(game),
        'question': question,
        'players': players,
        'timeLimitSeconds': game.time_limit_seconds,
        'winnerUserId': game.winner_user_id,
        'winnerUsername': game.winner_username,
        'finishedAt': game.finished_at,
    }


# ---- admin: rooms ----

def create_room(name: Optional[str] = None, time_limit_seconds=None, question_ids=None) -> dict:
    name = (name or '').strip() or f"Room {uuid.uuid4().hex[:6]}"
    if time_limit_seconds is None:
        time_limit_seconds = current_app.config.get('DEFAULT_TIME_LIMIT_SEC', 300)
    game = Game(
        name=name,
        status=STATUS_ACTIVE,
        time_limit_seconds=_validate_time_limit(time_limit_seconds),
        current_turn_slot=1,
        turn_ends_at=None,
    )
    game.questions = _load_questions(question_ids or [])
    game.current_question_id = first_question_id(game)
    db.session.add(game)
    _commit('create', None)
    current_app.logger.info(
        f"[create] room={game.id} name={game.name!r} questions={len(game.questions)} limit={game.time_limit_seconds}s"
    )
    return snapshot(game, [], expiry.now_ms())


def update_room(game_id: int, name: Optional[str] = None, time_limit_seconds=None, question_ids=None) -> dict:
    with room_action(game_id):
        game = _load_game(game_id, for_update=True)

        if name is not None and name.strip():
            game.name = name.strip()

        if time_limit_seconds is not None:
            game.time_limit_seconds = _validate_time_limit(time_limit_seconds)

        if question_ids is not None:
            ids = list(dict.fromkeys(question_ids))
            questions = _load_questions(ids)
            if len(questions) != len(ids):
                raise InvalidInput('One or more questionIds not found')
            game.questions = questions
            if game.current_question_id not in {q.id for q in questions}:
                game.current_question_id = first_question_id(game)

        if game.turn_ends_at is not None and game.status == STATUS_ACTIVE:
            game.turn_ends_at = expiry.compute_turn_ends_at(game, expiry.now_ms(), _fallback_sec())

        _commit('update', game.id)
        current_app.logger.info(f"[update] room={game.id}")
        return game.to_dict()


def list_rooms() -> List[dict]:
    return [g.to_dict() for g in Game.query.order_by(Game.id.asc()).all()]


def list_open_rooms() -> List[dict]:
    limit = _max_players()
    rooms = []
    for g in Game.query.filter_by(status=STATUS_ACTIVE).order_by(Game.id.asc()).all():
        count = PlayerStatus.query.filter_by(game_id=g.id).count()
        if count < limit:
            rooms.append({
                'id': g.id,
                'name': g.name,
                'playerCount': count,
                'timeLimitSeconds': g.time_limit_seconds,
            })
    return rooms


def list_players(game_id: int) -> List[dict]:
    _load_game(game_id)
    players = []
    for idx, st in enumerate(_load_statuses(game_id)[:_max_players()]):
        players.append({'userId': st.player_id, 'username': st.username, 'slot': idx + 1})
    return players


def room_questions(game_id: int) -> List[dict]:
    game = _load_game(game_id)
    return [q.to_dict() for q in sorted(game.questions, key=lambda q: q.id)]


def admin_finish(game_id: int) -> dict:
    with room_action(game_id):
        game = _load_game(game_id, for_update=True)
        game.status = STATUS_FINISHED
        game.turn_ends_at = None
        _commit('admin-finish', game.id)
    # finished rooms never mutate turn state again
    _forget_lock(game_id)
    current_app.logger.info(f"[admin-finish] room={game_id}")
    return {'ok': True, 'gameId': game_id}


def delete_room(game_id: int) -> dict:
    with room_action(game_id):
        game = _load_game(game_id, for_update=True)
        db.session.delete(game)
        _commit('delete', game_id)
    _forget_lock(game_id)
    current_app.logger.info(f"[delete] room={game_id}")
    return {'message': f'Room deleted: {game_id}'}


def delete_all_rooms() -> dict:
    games = Game.query.all()
    ids = [g.id for g in games]
    for g in games:
        db.session.delete(g)
    _commit('delete-all', None)
    for gid in ids:
        _forget_lock(gid)
    current_app.logger.info(f"[delete-all] rooms={len(ids)}")
    return {'message': 'All rooms deleted successfully', 'deleted': len(ids)}


# ---- player actions ----

def join_room(game_id: int, user_id: int) -> dict:
    with room_action(game_id):
        game = _load_game(game_id, for_update=True)
        user = _require_user(user_id)
        if game.status != STATUS_ACTIVE:
            raise AlreadyTerminal('Game is not open for joining')

        statuses = _load_statuses(game.id)
        now = expiry.now_ms()
        changed = _catch_up(game, statuses, now)

        if len(statuses) >= _max_players():
            _persist_catch_up(changed, 'join', game.id)
            raise InvalidInput('Room is full')

        already_joined = slot_of_user(statuses, user.id) > 0
        if not already_joined:
            st = PlayerStatus(game_id=game.id, player_id=user.id)
            st.player = user
            db.session.add(st)
            statuses.append(st)

            # timer starts with the first player
            if len(statuses) == 1:
                if game.current_question_id is None:
                    game.current_question_id = first_question_id(game)
                game.current_turn_slot = 1
                game.turn_ends_at = expiry.compute_turn_ends_at(game, now, _fallback_sec())
            changed = True

        _persist_catch_up(changed, 'join', game.id)
        current_app.logger.info(
            f"[join] room={game.id} user={user.id} players={len(statuses)} rejoin={already_joined}"
        )
        return {
            'gameId': game.id,
            'roomName': game.name,
            'playerId': user.id,
            'players': len(statuses),
            'timeLimitSeconds': game.time_limit_seconds,
            'currentTurnSlot': current_slot(game),
            'turnEndsAt': game.turn_ends_at,
        }


def leave_room(game_id: int, user_id: int) -> dict:
    with room_action(game_id):
        game = _load_game(game_id, for_update=True)
        _require_user(user_id)
        statuses = _load_statuses(game.id)
        _catch_up(game, statuses, expiry.now_ms())

        leaving = [st for st in statuses if st.player_id == user_id]
        for st in leaving:
            db.session.delete(st)
        remaining = len(statuses) - len(leaving)
        _commit('leave', game.id)
        current_app.logger.info(f"[leave] room={game.id} user={user_id} remaining={remaining}")
        return {
            'gameId': game.id,
            'remainingPlayers': remaining,
            'message': 'Player left the room',
        }


def get_state(game_id: int) -> dict:
    with room_action(game_id):
        game = _load_game(game_id, for_update=True)
        statuses = _load_statuses(game.id)
        now = expiry.now_ms()
        _persist_catch_up(_catch_up(game, statuses, now), 'state', game.id)
        return snapshot(game, statuses, now)


def submit_answer(game_id: int, user_id: int, answer: Optional[str], rng=None) -> dict:
    """Score the active player's answer.

    Correct: move +1 (exact landing), check for a win, otherwise draw and
    apply a prize card and check again. Unless the game ended, the turn
    passes on with a new question and a fresh deadline.
    """
    if user_id is None:
        raise InvalidInput('userId is required')

    with room_action(game_id):
        game = _load_game(game_id, for_update=True)
        if game.status == STATUS_FINISHED:
            raise AlreadyTerminal('Game already finished')

        statuses = _load_statuses(game.id)
        now = expiry.now_ms()
        changed = _catch_up(game, statuses, now)

        user_slot = slot_of_user(statuses, user_id)
        if user_slot <= 0:
            _persist_catch_up(changed, 'answer', game.id)
            raise Forbidden('User is not in this game')
        if user_slot != current_slot(game):
            _persist_catch_up(changed, 'answer', game.id)
            raise Conflict('Not your turn')

        if game.current_question_id is None:
            game.current_question_id = first_question_id(game)
        question = None
        if game.current_question_id is not None:
            question = Question.query.filter_by(id=game.current_question_id).first()

        correct = question is not None and is_correct_answer(answer, question.correct_answer)
        actor = statuses[user_slot - 1]
        card = None

        if correct:
            move_by_exact(actor, BASE_MOVE)
            if not finish_if_winner(game, actor, now):
                card = apply_card(game, actor, statuses, draw_card(rng or _prize_rng()), now)
                current_app.logger.info(
                    f"[card] room={game.id} user={user_id} code={card.code} target={card.target_user_id}"
                )

        if game.status == STATUS_FINISHED:
            current_app.logger.info(
                f"[winner] room={game.id} user={game.winner_user_id} username={game.winner_username}"
            )
        else:
            _advance(game, statuses, now, reason='answer')

        _commit('answer', game.id)
        current_app.logger.info(
            f"[answer] room={game.id} user={user_id} correct={correct} position={actor.position}"
        )
        result = {
            'correct': correct,
            'appliedCard': card.to_dict() if card else None,
            'state': snapshot(game, statuses, now),
        }
    if result['state']['status'] == STATUS_FINISHED:
        _forget_lock(game_id)
    return result


def timeout_turn(game_id: int, user_id: Optional[int] = None) -> dict:
    """End the active turn without scoring.

    The timeout is itself the one transition for an overdue turn, so the
    expiry catch-up is not applied on top of it.
    """
    with room_action(game_id):
        game = _load_game(game_id, for_update=True)
        if game.status == STATUS_FINISHED:
            raise AlreadyTerminal('Game already finished')

        statuses = _load_statuses(game.id)
        now = expiry.now_ms()
        changed = _catch_up(game, statuses, now, apply_expiry=False)

        if user_id is not None:
            user_slot = slot_of_user(statuses, user_id)
            if user_slot <= 0:
                _persist_catch_up(changed, 'timeout', game.id)
                raise Forbidden('User is not in this game')
            if user_slot != current_slot(game):
                _persist_catch_up(changed, 'timeout', game.id)
                raise Conflict('Only active player can timeout')

        _advance(game, statuses, now, reason='timeout')
        _commit('timeout', game.id)
        return snapshot(game, statuses, now)
