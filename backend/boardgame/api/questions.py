from flask import Blueprint, Response, jsonify, request
from boardgame import db
from boardgame.models import Question, game_questions


questions = Blueprint('questions', __name__)


def _apply_fields(question, data):
    content = data.get('content')
    answer = data.get('correctAnswer')
    if not content or not str(content).strip():
        return 'content is required'
    if answer is None or not str(answer).strip():
        return 'correctAnswer is required'
    question.content = str(content).strip()
    question.correct_answer = str(answer).strip()
    try:
        question.level = int(data.get('level', question.level or 1))
    except (TypeError, ValueError):
        return 'level must be an integer'
    return None


@questions.route('', methods=['GET'])
def list_questions():
    return jsonify([q.to_dict() for q in Question.query.order_by(Question.id.asc()).all()])


@questions.route('/<int:question_id>', methods=['GET'])
def get_question(question_id):
    q = Question.query.filter_by(id=question_id).first_or_404()
    return jsonify(q.to_dict())


@questions.route('', methods=['POST'])
def create_question():
    data = request.get_json(silent=True) or {}
    q = Question(level=1)
    error = _apply_fields(q, data)
    if error:
        return jsonify({'error': error}), 400
    db.session.add(q)
    db.session.commit()
    return jsonify(q.to_dict()), 201


@questions.route('/<int:question_id>', methods=['PUT'])
def update_question(question_id):
    q = Question.query.filter_by(id=question_id).first_or_404()
    data = request.get_json(silent=True) or {}
    error = _apply_fields(q, data)
    if error:
        db.session.rollback()
        return jsonify({'error': error}), 400
    db.session.commit()
    return jsonify(q.to_dict())


@questions.route('/<int:question_id>', methods=['DELETE'])
def delete_question(question_id):
    q = Question.query.filter_by(id=question_id).first_or_404()
    # Unlink from rooms first; rotation restarts for rooms that were showing it
    db.session.execute(game_questions.delete().where(game_questions.c.question_id == q.id))
    db.session.delete(q)
    db.session.commit()
    return '', 204


@questions.route('/<int:question_id>/image', methods=['POST'])
def upload_image(question_id):
    q = Question.query.filter_by(id=question_id).first_or_404()
    file = request.files.get('file')
    if file is None:
        return jsonify({'error': 'file is required'}), 400
    data = file.read()
    if not data:
        return jsonify({'error': 'File is empty'}), 400
    content_type = file.mimetype or ''
    if not content_type.startswith('image/'):
        return jsonify({'error': 'Only image files are allowed'}), 415
    q.image_data = data
    q.image_content_type = content_type
    db.session.commit()
    return jsonify({'message': 'Image uploaded successfully'})


@questions.route('/<int:question_id>/image', methods=['GET'])
def get_image(question_id):
    q = Question.query.filter_by(id=question_id).first_or_404()
    if not q.image_data:
        return jsonify({'error': 'No image'}), 404
    return Response(q.image_data, mimetype=q.image_content_type or 'image/jpeg')


@questions.route('/<int:question_id>/image', methods=['DELETE'])
def delete_image(question_id):
    q = Question.query.filter_by(id=question_id).first_or_404()
    q.image_data = None
    q.image_content_type = None
    db.session.commit()
    return jsonify({'message': 'Image removed'})
