from flask import Blueprint, jsonify
from boardgame.services.games import engine
from boardgame.services.games.errors import InvalidInput
from boardgame.api.params import int_field, payload


games = Blueprint('games', __name__)


def _question_ids(data: dict):
    ids = data.get('questionIds')
    if ids is None:
        return None
    if not isinstance(ids, list):
        raise InvalidInput('questionIds must be a list')
    try:
        return [int(i) for i in ids]
    except (TypeError, ValueError):
        raise InvalidInput('questionIds must be integers')


@games.route('', methods=['POST'])
def create_game():
    data = payload()
    state = engine.create_room(
        name=data.get('name'),
        time_limit_seconds=data.get('timeLimitSeconds'),
        question_ids=_question_ids(data),
    )
    return jsonify(state), 201


@games.route('', methods=['GET'])
def list_games():
    return jsonify(engine.list_rooms())


@games.route('/open', methods=['GET'])
def list_open_games():
    return jsonify(engine.list_open_rooms())


@games.route('/<int:game_id>', methods=['PUT'])
def update_game(game_id):
    data = payload()
    summary = engine.update_room(
        game_id,
        name=data.get('name'),
        time_limit_seconds=data.get('timeLimitSeconds'),
        question_ids=_question_ids(data),
    )
    return jsonify(summary)


@games.route('/<int:game_id>', methods=['DELETE'])
def delete_game(game_id):
    return jsonify(engine.delete_room(game_id))


@games.route('/admin/deleteAll', methods=['DELETE'])
def delete_all_games():
    return jsonify(engine.delete_all_rooms())


@games.route('/<int:game_id>/join', methods=['POST'])
def join_game(game_id):
    user_id = int_field(payload(), 'userId', required=True)
    return jsonify(engine.join_room(game_id, user_id))


@games.route('/<int:game_id>/leave', methods=['POST'])
def leave_game(game_id):
    user_id = int_field(payload(), 'userId', required=True)
    return jsonify(engine.leave_room(game_id, user_id))


@games.route('/<int:game_id>/players', methods=['GET'])
def get_players(game_id):
    return jsonify(engine.list_players(game_id))


@games.route('/<int:game_id>/questions', methods=['GET'])
def get_questions(game_id):
    return jsonify(engine.room_questions(game_id))


@games.route('/<int:game_id>/state', methods=['GET'])
def get_game_state(game_id):
    return jsonify(engine.get_state(game_id))


@games.route('/<int:game_id>/answer', methods=['POST'])
def submit_answer(game_id):
    data = payload()
    user_id = int_field(data, 'userId', required=True)
    answer = data.get('answer')
    if answer is not None and not isinstance(answer, str):
        answer = str(answer)
    return jsonify(engine.submit_answer(game_id, user_id, answer))


@games.route('/<int:game_id>/timeout', methods=['POST'])
def timeout(game_id):
    user_id = int_field(payload(), 'userId')
    return jsonify(engine.timeout_turn(game_id, user_id))


@games.route('/<int:game_id>/finish', methods=['POST'])
def finish_game(game_id):
    return jsonify(engine.admin_finish(game_id))
