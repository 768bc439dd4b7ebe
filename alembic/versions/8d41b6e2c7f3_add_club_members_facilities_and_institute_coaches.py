"""Add club members, club facilities and institute coaches

Revision ID: 8d41b6e2c7f3
Revises: 3a7c5e1f9b20
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '8d41b6e2c7f3'
down_revision = '3a7c5e1f9b20'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'institute_coaches',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('institute_id', sa.Uuid(), nullable=False),
        sa.Column('coach_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['institute_id'], ['institutes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['coach_id'], ['coaches.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('institute_id', 'coach_id', name='uq_institute_coach'),
    )
    op.create_index(op.f('ix_institute_coaches_institute_id'), 'institute_coaches', ['institute_id'])
    op.create_index(op.f('ix_institute_coaches_coach_id'), 'institute_coaches', ['coach_id'])

    op.create_table(
        'club_members',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('club_id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=True),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(20), nullable=False),
        sa.Column('sport', sa.String(100), nullable=True),
        sa.Column('membership_type', sa.String(20), server_default='REGULAR'),
        sa.Column('fees', sa.Float(), server_default='0'),
        sa.Column('status', sa.String(20), server_default='ACTIVE'),
        sa.Column('joined_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['club_id'], ['clubs.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('club_id', 'email', name='uq_club_member_email'),
    )
    op.create_index(op.f('ix_club_members_club_id'), 'club_members', ['club_id'])
    op.create_index(op.f('ix_club_members_status'), 'club_members', ['status'])

    op.create_table(
        'club_facilities',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('club_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('type', sa.String(60), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=True),
        sa.Column('hourly_rate', sa.Float(), server_default='0'),
        sa.Column('available', sa.Boolean(), server_default=sa.true()),
        sa.Column('amenities', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['club_id'], ['clubs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_club_facilities_club_id'), 'club_facilities', ['club_id'])


def downgrade():
    for table in ('club_facilities', 'club_members', 'institute_coaches'):
        op.drop_table(table)
