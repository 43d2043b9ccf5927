"""Initial schema - Featherlearn

Revision ID: 0001
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users table
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), unique=True, nullable=False, index=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(100), nullable=False, index=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('profile_uri', sa.String(500), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, default='user'),
        sa.Column('is_active', sa.Boolean(), nullable=False, default=True),
        sa.Column('settings', sa.JSON(), nullable=False),
        sa.Column('xp', sa.Integer(), nullable=False, default=0),
        sa.Column('level', sa.Integer(), nullable=False, default=1),
        sa.Column('feathers', sa.Integer(), nullable=False, default=0),
        sa.Column('streak', sa.Integer(), nullable=False, default=0),
        sa.Column('streak_level', sa.Integer(), nullable=False, default=1),
        sa.Column('streak_freeze', sa.Integer(), nullable=False, default=0),
        sa.Column('streak_goal', sa.Integer(), nullable=False, default=7),
        sa.Column('last_lesson_date', sa.Date(), nullable=True),
        sa.Column('league', sa.String(50), nullable=False, default='Bronze', index=True),
        sa.Column('league_points', sa.Integer(), nullable=False, default=0),
        sa.Column('league_week', sa.Integer(), nullable=False, default=1),
        sa.Column('last_active_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('xp >= 0', name='ck_users_xp_non_negative'),
        sa.CheckConstraint('feathers >= 0', name='ck_users_feathers_non_negative'),
        sa.CheckConstraint('streak >= 0', name='ck_users_streak_non_negative'),
        sa.CheckConstraint('league_points >= 0', name='ck_users_league_points_non_negative'),
        sa.CheckConstraint('level >= 1', name='ck_users_level_positive'),
    )

    # Follow graph
    op.create_table(
        'follows',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('follower_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('following_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('follower_id', 'following_id', name='uq_follows_pair'),
        sa.CheckConstraint('follower_id <> following_id', name='ck_follows_not_self'),
    )

    # Lessons table
    op.create_table(
        'lessons',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, default=''),
        sa.Column('content', sa.JSON(), nullable=False),
        sa.Column('lesson_type', sa.String(30), nullable=False, index=True),
        sa.Column('category', sa.String(30), nullable=False, index=True),
        sa.Column('difficulty', sa.Integer(), nullable=False, default=1),
        sa.Column('estimated_duration', sa.Integer(), nullable=False, default=5),
        sa.Column('language', sa.String(10), nullable=False, default='en'),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('xp_reward', sa.Integer(), nullable=False, default=50),
        sa.Column('feather_reward', sa.Integer(), nullable=False, default=5),
        sa.Column('prerequisites', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, default=True, index=True),
        sa.Column('is_premium', sa.Boolean(), nullable=False, default=False),
        sa.Column('created_by', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('difficulty BETWEEN 1 AND 5', name='ck_lessons_difficulty_range'),
        sa.CheckConstraint('xp_reward >= 0', name='ck_lessons_xp_reward_non_negative'),
        sa.CheckConstraint('feather_reward >= 0', name='ck_lessons_feather_reward_non_negative'),
    )

    # Exercises table
    op.create_table(
        'exercises',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('lesson_id', sa.Uuid(), sa.ForeignKey('lessons.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('exercise_type', sa.String(30), nullable=False),
        sa.Column('question', sa.Text(), nullable=False),
        sa.Column('options', sa.JSON(), nullable=False),
        sa.Column('correct_answer', sa.Text(), nullable=False),
        sa.Column('explanation', sa.Text(), nullable=True),
        sa.Column('points', sa.Integer(), nullable=False, default=10),
        sa.UniqueConstraint('lesson_id', 'position', name='uq_exercises_lesson_position'),
        sa.CheckConstraint('points >= 1', name='ck_exercises_points_positive'),
    )

    # Per-user lesson progress
    op.create_table(
        'lesson_progress',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('lesson_id', sa.Uuid(), sa.ForeignKey('lessons.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('status', sa.String(20), nullable=False, default='not-started'),
        sa.Column('score', sa.Integer(), nullable=False, default=0),
        sa.Column('mistakes', sa.Integer(), nullable=False, default=0),
        sa.Column('time_spent', sa.Integer(), nullable=False, default=0),
        sa.Column('exercise_results', sa.JSON(), nullable=False),
        sa.Column('xp_earned', sa.Integer(), nullable=False, default=0),
        sa.Column('feathers_earned', sa.Integer(), nullable=False, default=0),
        sa.Column('league_points_earned', sa.Integer(), nullable=False, default=0),
        sa.Column('streak_maintained', sa.Boolean(), nullable=False, default=False),
        sa.Column('attempts', sa.Integer(), nullable=False, default=0),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('user_id', 'lesson_id', name='uq_lesson_progress_user_lesson'),
        sa.CheckConstraint('score BETWEEN 0 AND 100', name='ck_lesson_progress_score_range'),
    )
    op.create_index('ix_lesson_progress_user_status', 'lesson_progress', ['user_id', 'status'])
    op.create_index('ix_lesson_progress_user_completed', 'lesson_progress', ['user_id', 'completed_at'])

    # League ladder
    op.create_table(
        'league_tiers',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(50), unique=True, nullable=False),
        sa.Column('description', sa.Text(), nullable=False, default=''),
        sa.Column('level', sa.Integer(), unique=True, nullable=False),
        sa.Column('min_points', sa.Integer(), nullable=False),
        sa.Column('max_points', sa.Integer(), nullable=True),
        sa.Column('weekly_xp_reward', sa.Integer(), nullable=False, default=0),
        sa.Column('weekly_feather_reward', sa.Integer(), nullable=False, default=0),
        sa.Column('promotion_xp_reward', sa.Integer(), nullable=False, default=0),
        sa.Column('promotion_feather_reward', sa.Integer(), nullable=False, default=0),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('min_points >= 0', name='ck_league_tiers_min_non_negative'),
        sa.CheckConstraint('max_points IS NULL OR max_points > min_points', name='ck_league_tiers_range_ordered'),
    )

    # Claim-once quest rewards
    op.create_table(
        'quest_claims',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('quest_id', sa.String(50), nullable=False),
        sa.Column('period_key', sa.String(20), nullable=False),
        sa.Column('xp_awarded', sa.Integer(), nullable=False, default=0),
        sa.Column('feathers_awarded', sa.Integer(), nullable=False, default=0),
        sa.Column('claimed_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('user_id', 'quest_id', 'period_key', name='uq_quest_claims_user_quest_period'),
    )

    # Event logs table (append-only)
    op.create_table(
        'event_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('event_type', sa.String(100), nullable=False, index=True),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.Uuid(), nullable=False, index=True),
        sa.Column('user_id', sa.Uuid(), nullable=True, index=True),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, index=True),
    )
    op.create_index('ix_event_logs_entity', 'event_logs', ['entity_type', 'entity_id'])
    op.create_index('ix_event_logs_user_time', 'event_logs', ['user_id', 'created_at'])
    op.create_index('ix_event_logs_user_type_time', 'event_logs', ['user_id', 'event_type', 'created_at'])


def downgrade() -> None:
    op.drop_table('event_logs')
    op.drop_table('quest_claims')
    op.drop_table('league_tiers')
    op.drop_table('lesson_progress')
    op.drop_table('exercises')
    op.drop_table('lessons')
    op.drop_table('follows')
    op.drop_table('users')
