"""create events, attendees and users tables

Revision ID: 4f1c2a9e7b3d
Revises: 
Create Date: 2025-06-01 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4f1c2a9e7b3d'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
    sa.Column('id', sa.String(length=32), nullable=False),
    sa.Column('email', sa.String(length=255), nullable=False),
    sa.Column('password', sa.String(length=255), nullable=True),
    sa.Column('name', sa.String(length=20), nullable=True),
    sa.Column('image', sa.String(length=500), nullable=True),
    sa.Column('email_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
    sa.Column('is_anonymous', sa.Boolean(), nullable=False, server_default=sa.false()),
    sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('email')
    )
    op.create_table('events',
    sa.Column('id', sa.String(length=32), nullable=False),
    sa.Column('title', sa.String(length=100), nullable=False),
    sa.Column('date', sa.String(length=50), nullable=False),
    sa.Column('location', sa.String(length=100), nullable=False),
    sa.Column('description', sa.Text(), nullable=False),
    sa.Column('image_url', sa.String(length=500), nullable=True),
    sa.Column('capacity', sa.Integer(), nullable=True),
    sa.Column('creator_id', sa.String(length=32), nullable=True),
    sa.Column('created_at', sa.Integer(), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_events_creator_id', 'events', ['creator_id'], unique=False)
    op.create_table('attendees',
    sa.Column('id', sa.String(length=32), nullable=False),
    sa.Column('event_id', sa.String(length=32), nullable=False),
    sa.Column('user_id', sa.String(length=32), nullable=True),
    sa.Column('email', sa.String(length=255), nullable=False),
    sa.Column('created_at', sa.BigInteger(), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_attendees_event_id', 'attendees', ['event_id'], unique=False)
    op.create_index('ix_attendees_user_id', 'attendees', ['user_id'], unique=False)


def downgrade():
    op.drop_index('ix_attendees_user_id', table_name='attendees')
    op.drop_index('ix_attendees_event_id', table_name='attendees')
    op.drop_table('attendees')
    op.drop_index('ix_events_creator_id', table_name='events')
    op.drop_table('events')
    op.drop_table('users')
