"""create_project_membership_tables

Revision ID: 5d1e0b7c2a94
Revises:
Create Date: 2026-10-19 09:12:41.508217

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5d1e0b7c2a94'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """
    Create the project membership schema.

    Creates:
    - users (profiles keyed by identity uid)
    - projects, events, posts, messages
    - project_memberships
    - notifications

    No foreign keys: documents reference each other by id and project
    teardown purges dependents explicitly.
    """
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=128), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('first_name', sa.String(length=255), nullable=True),
        sa.Column('last_name', sa.String(length=255), nullable=True),
        sa.Column('display_name', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=64), nullable=True),
        sa.Column('photo_url', sa.String(length=1024), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'projects',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('project_name', sa.String(length=255), nullable=False),
        sa.Column('owner_id', sa.String(length=128), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'events',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('project_id', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('starts_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('ends_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('members', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_events_project_id', 'events', ['project_id'])

    op.create_table(
        'posts',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('project_id', sa.String(length=64), nullable=False),
        sa.Column('role_id', sa.String(length=128), nullable=False),
        sa.Column('label', sa.String(length=255), nullable=False),
        sa.Column('icon', sa.String(length=255), nullable=True),
        sa.Column('category', sa.String(length=255), nullable=True),
        sa.Column('priority', sa.Integer(), nullable=True),
        sa.Column('members', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_posts_project_id', 'posts', ['project_id'])

    op.create_table(
        'messages',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('project_id', sa.String(length=64), nullable=False),
        sa.Column('author_id', sa.String(length=128), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_messages_project_id', 'messages', ['project_id'])

    op.create_table(
        'project_memberships',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('project_id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('role', sa.String(length=255), nullable=False),
        sa.Column('permission', sa.String(length=7), nullable=False),
        sa.Column('status', sa.String(length=8), nullable=False),
        sa.Column('invited_by', sa.String(length=128), nullable=True),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('left_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_global', sa.Boolean(), nullable=False),
        sa.Column('event_ids', sa.JSON(), nullable=True),
        sa.Column('firstname', sa.String(length=255), nullable=False),
        sa.Column('lastname', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=64), nullable=False),
        sa.Column('photo_url', sa.String(length=1024), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_project_memberships_project_id', 'project_memberships', ['project_id'])
    op.create_index('ix_project_memberships_user_id', 'project_memberships', ['user_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('type', sa.String(length=23), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('context', sa.JSON(), nullable=False),
        sa.Column('project_id', sa.String(length=64), nullable=True),
        sa.Column('read', sa.Boolean(), nullable=False),
        sa.Column('responded', sa.Boolean(), nullable=False),
        sa.Column('accepted', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('responded_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    op.create_index('ix_notifications_project_id', 'notifications', ['project_id'])
    op.create_index(
        'ix_notifications_user_project_type', 'notifications', ['user_id', 'project_id', 'type']
    )


def downgrade() -> None:
    """Drop the project membership schema."""
    op.drop_index('ix_notifications_user_project_type', table_name='notifications')
    op.drop_index('ix_notifications_project_id', table_name='notifications')
    op.drop_index('ix_notifications_user_id', table_name='notifications')
    op.drop_table('notifications')

    op.drop_index('ix_project_memberships_user_id', table_name='project_memberships')
    op.drop_index('ix_project_memberships_project_id', table_name='project_memberships')
    op.drop_table('project_memberships')

    op.drop_index('ix_messages_project_id', table_name='messages')
    op.drop_table('messages')
    op.drop_index('ix_posts_project_id', table_name='posts')
    op.drop_table('posts')
    op.drop_index('ix_events_project_id', table_name='events')
    op.drop_table('events')

    op.drop_table('projects')
    op.drop_table('users')
