"""initial schema

Revision ID: 001
Revises:
Create Date: 2026-03-02 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id():
    return sa.Column('id', sa.String(36), primary_key=True)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def _user_fk(name='user_id'):
    return sa.Column(name, sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)


def upgrade() -> None:
    op.create_table(
        'users',
        _id(),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('email_verified', sa.DateTime(), nullable=True),
        sa.Column('image', sa.String(1024), nullable=True),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('access_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('discipline', sa.String(20), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'accounts',
        _id(),
        _user_fk(),
        sa.Column('type', sa.String(50), nullable=False, server_default='oauth'),
        sa.Column('provider', sa.String(50), nullable=False),
        sa.Column('provider_account_id', sa.String(255), nullable=False),
        sa.Column('access_token', sa.Text(), nullable=True),
        sa.Column('refresh_token', sa.Text(), nullable=True),
        sa.Column('expires_at', sa.Integer(), nullable=True),
        sa.Column('token_type', sa.String(50), nullable=True),
        sa.Column('scope', sa.Text(), nullable=True),
        sa.Column('id_token', sa.Text(), nullable=True),
        sa.UniqueConstraint('provider', 'provider_account_id', name='uq_accounts_provider_identity'),
    )
    op.create_index('ix_accounts_user_id', 'accounts', ['user_id'])

    op.create_table(
        'sessions',
        _id(),
        _user_fk(),
        sa.Column('token', sa.String(255), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('last_activity', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_sessions_user_id', 'sessions', ['user_id'])
    op.create_index('ix_sessions_token', 'sessions', ['token'], unique=True)
    op.create_index('ix_sessions_expires_at', 'sessions', ['expires_at'])

    op.create_table(
        'sprints',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('stage', sa.String(50), nullable=False, server_default='RECEIVING_SUBMISSIONS'),
        sa.Column('submission_end_date', sa.DateTime(), nullable=True),
        sa.Column('sprint_start_date', sa.DateTime(), nullable=True),
        sa.Column('sprint_end_date', sa.DateTime(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'app_state',
        _id(),
        sa.Column('current_sprint_id', sa.String(36), sa.ForeignKey('sprints.id', ondelete='SET NULL'), nullable=True),
        sa.Column('test_mode', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        'visions',
        _id(),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('area', sa.String(100), nullable=False),
        sa.Column('doc_url', sa.String(1024), nullable=True),
        sa.Column('kpis', sa.Text(), nullable=True),
        _user_fk('created_by_id'),
        *_timestamps(),
    )
    op.create_index('ix_visions_created_by_id', 'visions', ['created_by_id'])

    op.create_table(
        'vision_likes',
        _id(),
        _user_fk(),
        sa.Column('vision_id', sa.String(36), sa.ForeignKey('visions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'vision_id', name='uq_vision_likes_user_vision'),
    )
    op.create_index('ix_vision_likes_user_id', 'vision_likes', ['user_id'])
    op.create_index('ix_vision_likes_vision_id', 'vision_likes', ['vision_id'])

    op.create_table(
        'projects',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('pitch_video_url', sa.String(1024), nullable=True),
        sa.Column('doc_link', sa.String(1024), nullable=True),
        sa.Column('project_type', sa.String(50), nullable=False),
        sa.Column('slack_channel', sa.String(255), nullable=False),
        sa.Column('business_rationale', sa.Text(), nullable=True),
        sa.Column('vision_id', sa.String(36), sa.ForeignKey('visions.id', ondelete='SET NULL'), nullable=True),
        sa.Column('department', sa.String(255), nullable=True),
        _user_fk('creator_id'),
        sa.Column('sprint_id', sa.String(36), sa.ForeignKey('sprints.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_projects_vision_id', 'projects', ['vision_id'])
    op.create_index('ix_projects_creator_id', 'projects', ['creator_id'])
    op.create_index('ix_projects_sprint_id', 'projects', ['sprint_id'])

    for table, constraint in (('votes', 'uq_votes_user_project'), ('project_joins', 'uq_project_joins_user_project')):
        op.create_table(
            table,
            _id(),
            _user_fk(),
            sa.Column('project_id', sa.String(36), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.UniqueConstraint('user_id', 'project_id', name=constraint),
        )
        op.create_index(f'ix_{table}_user_id', table, ['user_id'])
        op.create_index(f'ix_{table}_project_id', table, ['project_id'])

    op.create_table(
        'teams',
        _id(),
        sa.Column('project_id', sa.String(36), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('team_name', sa.String(255), nullable=False),
        sa.Column('team_number', sa.Integer(), nullable=False, server_default='1'),
        *_timestamps(),
    )
    op.create_index('ix_teams_project_id', 'teams', ['project_id'])

    op.create_table(
        'team_members',
        _id(),
        sa.Column('team_id', sa.String(36), sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False),
        _user_fk(),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('team_id', 'user_id', name='uq_team_members_team_user'),
    )
    op.create_index('ix_team_members_team_id', 'team_members', ['team_id'])
    op.create_index('ix_team_members_user_id', 'team_members', ['user_id'])

    op.create_table(
        'submissions',
        _id(),
        sa.Column('team_id', sa.String(36), sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('video_url', sa.String(1024), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'reactions',
        _id(),
        _user_fk(),
        sa.Column('project_id', sa.String(36), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('reaction_type', sa.String(20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'project_id', 'reaction_type', name='uq_reactions_user_project_type'),
    )
    op.create_index('ix_reactions_user_id', 'reactions', ['user_id'])
    op.create_index('ix_reactions_project_id', 'reactions', ['project_id'])

    op.create_table(
        'watched_videos',
        _id(),
        _user_fk(),
        sa.Column('team_id', sa.String(36), sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'team_id', name='uq_watched_videos_user_team'),
    )
    op.create_index('ix_watched_videos_user_id', 'watched_videos', ['user_id'])
    op.create_index('ix_watched_videos_team_id', 'watched_videos', ['team_id'])


def downgrade() -> None:
    for table in (
        'watched_videos', 'reactions', 'submissions', 'team_members', 'teams',
        'project_joins', 'votes', 'projects', 'vision_likes', 'visions',
        'app_state', 'sprints', 'sessions', 'accounts', 'users',
    ):
        op.drop_table(table)
