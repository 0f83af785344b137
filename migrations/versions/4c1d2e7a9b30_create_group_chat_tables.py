"""create_group_chat_tables

Revision ID: 4c1d2e7a9b30
Revises:
Create Date: 2026-10-19 09:12:44.102311

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c1d2e7a9b30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create profiles, groups, membership, join request and message tables."""
    op.create_table('profiles',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table('groups',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('visibility', sa.String(length=10), nullable=False, server_default='public'),
        sa.Column('owner_id', sa.UUID(), nullable=False),
        sa.Column('max_members', sa.Integer(), nullable=True),
        sa.Column('encryption_key', sa.String(length=64), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint("visibility IN ('public', 'private')", name='ck_groups_visibility'),
        sa.CheckConstraint('max_members IS NULL OR max_members > 0', name='ck_groups_max_members'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_groups_name', 'groups', ['name'], unique=False)

    op.create_table('group_members',
        sa.Column('group_id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('joined_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['group_id'], ['groups.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('group_id', 'user_id'),
    )
    op.create_index('ix_group_members_user_id', 'group_members', ['user_id'], unique=False)

    op.create_table('join_requests',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('group_id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name='ck_join_requests_status'),
        sa.ForeignKeyConstraint(['group_id'], ['groups.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_join_requests_group_id', 'join_requests', ['group_id'], unique=False)
    # One pending request per user and group; decided requests stay as history
    op.create_index(
        'uq_join_requests_pending', 'join_requests', ['group_id', 'user_id'],
        unique=True, postgresql_where=sa.text("status = 'pending'"),
    )

    op.create_table('messages',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('group_id', sa.UUID(), nullable=False),
        sa.Column('sender_id', sa.UUID(), nullable=False),
        sa.Column('encrypted_content', sa.Text(), nullable=False),
        sa.Column('iv', sa.String(length=32), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['group_id'], ['groups.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_messages_group_id', 'messages', ['group_id'], unique=False)
    op.create_index('ix_messages_created_at', 'messages', ['created_at'], unique=False)

    op.create_table('user_joined_groups',
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('group_id', sa.UUID(), nullable=False),
        sa.Column('joined_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['group_id'], ['groups.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('user_id', 'group_id'),
    )
    op.create_index('ix_user_joined_groups_group_id', 'user_joined_groups', ['group_id'], unique=False)


def downgrade() -> None:
    """Drop all group chat tables."""
    op.drop_index('ix_user_joined_groups_group_id', table_name='user_joined_groups')
    op.drop_table('user_joined_groups')
    op.drop_index('ix_messages_created_at', table_name='messages')
    op.drop_index('ix_messages_group_id', table_name='messages')
    op.drop_table('messages')
    op.drop_index('uq_join_requests_pending', table_name='join_requests')
    op.drop_index('ix_join_requests_group_id', table_name='join_requests')
    op.drop_table('join_requests')
    op.drop_index('ix_group_members_user_id', table_name='group_members')
    op.drop_table('group_members')
    op.drop_index('ix_groups_name', table_name='groups')
    op.drop_table('groups')
    op.drop_table('profiles')
