"""Create users, requests and messages tables

Revision ID: create_core_tables
Revises:
Create Date: 2026-10-19

One row per (investor_id, entrepreneur_id) in requests is enforced by
uq_requests_investor_entrepreneur; the request workflow relies on it to
resolve concurrent creates.
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'create_core_tables'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('avatar', sa.String(length=512), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('location', sa.String(length=100), nullable=True),
        sa.Column('startup', sa.String(length=100), nullable=True),
        sa.Column('industry', sa.String(length=50), nullable=True),
        sa.Column('company', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_industry', 'users', ['industry'])
    op.create_index('ix_users_is_active', 'users', ['is_active'])
    op.create_index('ix_users_created_at', 'users', ['created_at'])

    op.create_table(
        'requests',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('investor_id', sa.Uuid(), nullable=False),
        sa.Column('entrepreneur_id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('response_message', sa.Text(), nullable=True),
        sa.Column('responded_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['investor_id'], ['users.id'], name='fk_requests_investor_id_users', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['entrepreneur_id'], ['users.id'], name='fk_requests_entrepreneur_id_users', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_requests'),
        sa.UniqueConstraint('investor_id', 'entrepreneur_id', name='uq_requests_investor_entrepreneur'),
    )
    op.create_index('ix_requests_investor_id', 'requests', ['investor_id'])
    op.create_index('ix_requests_entrepreneur_id', 'requests', ['entrepreneur_id'])
    op.create_index('ix_requests_status', 'requests', ['status'])
    op.create_index('ix_requests_created_at', 'requests', ['created_at'])

    op.create_table(
        'messages',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('sender_id', sa.Uuid(), nullable=False),
        sa.Column('receiver_id', sa.Uuid(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('message_type', sa.String(length=20), nullable=False, server_default='text'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id'], name='fk_messages_sender_id_users', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['receiver_id'], ['users.id'], name='fk_messages_receiver_id_users', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_messages'),
    )
    op.create_index('ix_messages_sender_receiver', 'messages', ['sender_id', 'receiver_id'])
    op.create_index('ix_messages_receiver_id', 'messages', ['receiver_id'])
    op.create_index('ix_messages_read', 'messages', ['read'])
    op.create_index('ix_messages_created_at', 'messages', ['created_at'])


def downgrade():
    op.drop_table('messages')
    op.drop_table('requests')
    op.drop_table('users')
