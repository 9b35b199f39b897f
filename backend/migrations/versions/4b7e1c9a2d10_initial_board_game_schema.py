"""initial board game schema: users, questions, rooms, player status, chat

Revision ID: 4b7e1c9a2d10
Revises:
Create Date: 2026-10-19 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4b7e1c9a2d10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('username', sa.String(length=50), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
            sa.Column('role', sa.String(length=20), nullable=False, server_default='PLAYER'),
        )
        op.create_index('ix_user_username', 'user', ['username'], unique=True)

    if 'question' not in existing_tables:
        op.create_table(
            'question',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('content', sa.Text(), nullable=False),
            sa.Column('correct_answer', sa.String(length=255), nullable=False),
            sa.Column('level', sa.Integer(), nullable=False, server_default='1'),
            sa.Column('image_data', sa.LargeBinary(), nullable=True),
            sa.Column('image_content_type', sa.String(length=100), nullable=True),
        )

    if 'game' not in existing_tables:
        op.create_table(
            'game',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('name', sa.String(length=100), nullable=True),
            sa.Column('status', sa.String(length=16), nullable=False, server_default='ACTIVE'),
            sa.Column('current_turn_slot', sa.Integer(), nullable=False, server_default='1'),
            sa.Column('current_question_id', sa.Integer(), nullable=True),
            sa.Column('turn_ends_at', sa.BigInteger(), nullable=True),
            sa.Column('time_limit_seconds', sa.Integer(), nullable=True),
            sa.Column('winner_user_id', sa.Integer(), nullable=True),
            sa.Column('winner_username', sa.String(length=50), nullable=True),
            sa.Column('finished_at', sa.BigInteger(), nullable=True),
        )

    if 'game_questions' not in existing_tables:
        op.create_table(
            'game_questions',
            sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id', ondelete='CASCADE'), primary_key=True),
            sa.Column('question_id', sa.Integer(), sa.ForeignKey('question.id', ondelete='CASCADE'), primary_key=True),
        )

    if 'player_game_status' not in existing_tables:
        op.create_table(
            'player_game_status',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id', ondelete='CASCADE'), nullable=False),
            sa.Column('player_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
            sa.Column('blocked', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('has_shield', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('question_multiplier', sa.Integer(), nullable=False, server_default='1'),
            sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
            sa.UniqueConstraint('game_id', 'player_id', name='uk_game_player'),
        )
        op.create_index('ix_player_game_status_game_id', 'player_game_status', ['game_id'])
        op.create_index('ix_player_game_status_player_id', 'player_game_status', ['player_id'])

    if 'chat_message' not in existing_tables:
        op.create_table(
            'chat_message',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id', ondelete='CASCADE'), nullable=False),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
            sa.Column('text', sa.String(length=280), nullable=False),
            sa.Column('created_at', sa.BigInteger(), nullable=False),
        )
        op.create_index('ix_chat_message_game_id', 'chat_message', ['game_id'])
        op.create_index('idx_chat_game_id_id', 'chat_message', ['game_id', 'id'])


def downgrade():
    op.drop_table('chat_message')
    op.drop_table('player_game_status')
    op.drop_table('game_questions')
    op.drop_table('game')
    op.drop_table('question')
    op.drop_table('user')
