from flask import Blueprint, jsonify
from boardgame import db
from boardgame.models import ChatMessage, PlayerStatus, User


users = Blueprint('users', __name__)


@users.route('', methods=['GET'])
def list_users():
    return jsonify([u.to_dict() for u in User.query.order_by(User.id.asc()).all()])


@users.route('/<int:user_id>', methods=['GET'])
def get_user(user_id):
    user = User.query.filter_by(id=user_id).first_or_404()
    return jsonify(user.to_dict())


@users.route('/<int:user_id>', methods=['DELETE'])
def delete_user(user_id):
    user = User.query.filter_by(id=user_id).first_or_404()
    # Room seats and chat lines go with the account
    PlayerStatus.query.filter_by(player_id=user.id).delete()
    ChatMessage.query.filter_by(user_id=user.id).delete()
    db.session.delete(user)
    db.session.commit()
    return '', 204
