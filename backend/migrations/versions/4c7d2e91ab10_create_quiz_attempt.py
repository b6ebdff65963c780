"""create quiz_attempt leaderboard table

Revision ID: 4c7d2e91ab10
Revises:
Create Date: 2025-12-01 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c7d2e91ab10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'quiz_attempt' in set(insp.get_table_names()):
        return
    op.create_table(
        'quiz_attempt',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('device_id', sa.String(length=128), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('coins', sa.Integer(), nullable=False),
        sa.Column('correct_answers', sa.Integer(), nullable=False),
        sa.Column('wrong_answers', sa.Integer(), nullable=False),
        sa.Column('total_time_seconds', sa.Integer(), nullable=False),
        sa.Column('difficulty_level', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('quiz_attempt') as batch_op:
        batch_op.create_index('ix_quiz_attempt_device_id', ['device_id'], unique=False)


def downgrade():
    with op.batch_alter_table('quiz_attempt') as batch_op:
        batch_op.drop_index('ix_quiz_attempt_device_id')
    op.drop_table('quiz_attempt')
