"""create waitlist entries and position counter

Revision ID: waitlist_init
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'waitlist_init'
down_revision = None
branch_labels = None
depends_on = None

STATUS_VALUES = ('pending', 'approved', 'rejected', 'contacted')


def upgrade():
    op.create_table(
        'waitlist_entries',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('twitter_handle', sa.String(length=15), nullable=False),
        sa.Column('handle_key', sa.String(length=15), nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.Enum(*STATUS_VALUES, name='waitliststatusenum'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('source', sa.String(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('email', name='uq_waitlist_email'),
        sa.UniqueConstraint('handle_key', name='uq_waitlist_handle_key'),
    )
    op.create_index('ix_waitlist_entries_email', 'waitlist_entries', ['email'])
    op.create_index('ix_waitlist_entries_handle_key', 'waitlist_entries', ['handle_key'])
    op.create_index('ix_waitlist_entries_joined_at', 'waitlist_entries', ['joined_at'])
    op.create_index('ix_waitlist_entries_status', 'waitlist_entries', ['status'])
    op.create_index('ix_waitlist_entries_position', 'waitlist_entries', ['position'])

    op.create_table(
        'waitlist_counters',
        sa.Column('name', sa.String(length=64), primary_key=True),
        sa.Column('value', sa.Integer(), nullable=False),
    )


def downgrade():
    op.drop_table('waitlist_counters')

    op.drop_index('ix_waitlist_entries_position', table_name='waitlist_entries')
    op.drop_index('ix_waitlist_entries_status', table_name='waitlist_entries')
    op.drop_index('ix_waitlist_entries_joined_at', table_name='waitlist_entries')
    op.drop_index('ix_waitlist_entries_handle_key', table_name='waitlist_entries')
    op.drop_index('ix_waitlist_entries_email', table_name='waitlist_entries')
    op.drop_table('waitlist_entries')
    sa.Enum(name='waitliststatusenum').drop(op.get_bind(), checkfirst=True)
