"""create users, notifications and global notification tables

Revision ID: 3f2a9c1e7b40
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f2a9c1e7b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('is_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
        sa.UniqueConstraint('email', name='ux_users_email'),
    )
    op.create_index('ix_users_role', 'users', ['role'], unique=False)

    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('link', sa.String(length=500), nullable=True),
        sa.Column('target_roles', sa.JSON(), nullable=True),
        sa.Column('is_global', sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column('json', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='unread'),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'], name='fk_notifications_user_id_users', ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_notifications'),
    )
    op.create_index('ix_notifications_user_status', 'notifications', ['user_id', 'status'], unique=False)
    op.create_index('ix_notifications_created', 'notifications', ['created_at'], unique=False)

    op.create_table(
        'global_notifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False, server_default='system'),
        sa.Column('target_roles', sa.JSON(), nullable=False),
        sa.Column('link', sa.String(length=500), nullable=True),
        sa.Column('priority', sa.String(length=20), nullable=False, server_default='normal'),
        sa.Column('icon', sa.String(length=50), nullable=True),
        sa.Column('json', sa.JSON(), nullable=True),
        sa.Column('starts_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_global_notifications'),
    )
    op.create_index(
        'ix_global_notifications_active_starts',
        'global_notifications',
        ['is_active', 'starts_at'],
        unique=False,
    )
    op.create_index('ix_global_notifications_created', 'global_notifications', ['created_at'], unique=False)

    op.create_table(
        'global_notification_views',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('global_notification_id', sa.Uuid(), nullable=False),
        sa.Column('viewed_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('dismissed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'],
            name='fk_global_notification_views_user_id_users',
            ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['global_notification_id'], ['global_notifications.id'],
            name='fk_global_notification_views_global_notification_id_global_notifications',
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_global_notification_views'),
        sa.UniqueConstraint(
            'user_id',
            'global_notification_id',
            name='ux_global_notification_views_user_notification',
        ),
    )
    op.create_index(
        'ix_global_notification_views_notification',
        'global_notification_views',
        ['global_notification_id'],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index('ix_global_notification_views_notification', table_name='global_notification_views')
    op.drop_table('global_notification_views')
    op.drop_index('ix_global_notifications_created', table_name='global_notifications')
    op.drop_index('ix_global_notifications_active_starts', table_name='global_notifications')
    op.drop_table('global_notifications')
    op.drop_index('ix_notifications_created', table_name='notifications')
    op.drop_index('ix_notifications_user_status', table_name='notifications')
    op.drop_table('notifications')
    op.drop_index('ix_users_role', table_name='users')
    op.drop_table('users')
