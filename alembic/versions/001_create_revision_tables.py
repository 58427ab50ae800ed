"""Create question bank and revision session tables

Revision ID: 001_create_revision_tables
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_create_revision_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'categories',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('icon', sa.String(50)),
        sa.Column('category_type', sa.String(50)),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'questions',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('title', sa.Text, nullable=False),
        sa.Column('illustration', sa.String(500)),
        sa.Column('answers', sa.JSON, nullable=False),
        sa.Column('correct_answers', sa.JSON, nullable=False),
        sa.Column('version', sa.Integer, default=1),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'question_categories',
        sa.Column('question_id', sa.Uuid(as_uuid=True),
                  sa.ForeignKey('questions.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('category_id', sa.Uuid(as_uuid=True),
                  sa.ForeignKey('categories.id', ondelete='CASCADE'), primary_key=True),
    )

    op.create_table(
        'revision_sessions',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('pseudonym', sa.String(50), nullable=False),
        sa.Column('mode', sa.String(20), nullable=False, server_default='revision'),
        sa.Column('selected_categories', sa.JSON, nullable=False),

        # Summary stats
        sa.Column('total_answers', sa.Integer, nullable=False, server_default='0'),
        sa.Column('correct_answers', sa.Integer, nullable=False, server_default='0'),
        sa.Column('incorrect_answers', sa.Integer, nullable=False, server_default='0'),
        sa.Column('questions_validated', sa.Integer, nullable=False, server_default='0'),
        sa.Column('duration_seconds', sa.Integer, nullable=False),

        # Timestamps
        sa.Column('completed_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_index('ix_revision_sessions_pseudonym', 'revision_sessions', ['pseudonym'])
    op.create_index('ix_revision_sessions_completed_at', 'revision_sessions', ['completed_at'])


def downgrade() -> None:
    op.drop_index('ix_revision_sessions_completed_at', table_name='revision_sessions')
    op.drop_index('ix_revision_sessions_pseudonym', table_name='revision_sessions')
    op.drop_table('revision_sessions')
    op.drop_table('question_categories')
    op.drop_table('questions')
    op.drop_table('categories')
