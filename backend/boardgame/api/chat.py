from flask import Blueprint, jsonify, request, current_app
from boardgame import db
from boardgame.models import ChatMessage, Game, User
from boardgame.services.games.expiry import now_ms
from boardgame.api.params import int_field, payload


chat = Blueprint('chat', __name__)


@chat.route('/<int:game_id>/chat', methods=['GET'])
def get_chat(game_id):
    Game.query.filter_by(id=game_id).first_or_404()
    limit = int(current_app.config.get('CHAT_HISTORY_LIMIT', 50))
    after_id = request.args.get('afterId', type=int)

    query = ChatMessage.query.filter_by(game_id=game_id)
    if after_id is None:
        # Latest page, returned oldest first
        msgs = query.order_by(ChatMessage.id.desc()).limit(limit).all()
        msgs.reverse()
    else:
        msgs = query.filter(ChatMessage.id > after_id).order_by(ChatMessage.id.asc()).limit(limit).all()
    return jsonify([m.to_dict() for m in msgs])


@chat.route('/<int:game_id>/chat', methods=['POST'])
def send_chat(game_id):
    data = payload()
    user_id = int_field(data, 'userId', required=True)
    text = data.get('text')
    if text is None:
        return jsonify({'error': 'text is required'}), 400
    text = str(text).strip()
    if not text:
        return jsonify({'error': 'text is empty'}), 400
    max_len = int(current_app.config.get('CHAT_MAX_LENGTH', 280))
    text = text[:max_len]

    game = Game.query.filter_by(id=game_id).first_or_404()
    user = User.query.filter_by(id=user_id).first()
    if not user:
        return jsonify({'error': f'User not found: {user_id}'}), 404

    msg = ChatMessage(game_id=game.id, user_id=user.id, text=text, created_at=now_ms())
    db.session.add(msg)
    db.session.commit()
    return jsonify(msg.to_dict())
