"""Create initial tables"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3a7c5e1f9b20'
down_revision = None
branch_labels = None
depends_on = None


def _id():
    return sa.Column('id', sa.Uuid(), nullable=False)


def _timestamps(updated=True):
    columns = [sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now())]
    if updated:
        columns.append(sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()))
    return columns


def _subscription():
    return [
        sa.Column('payment_status', sa.String(20), server_default='PENDING'),
        sa.Column('subscription_type', sa.String(20), nullable=True),
        sa.Column('subscription_expires_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade():
    # Create users table
    op.create_table(
        'users',
        _id(),
        sa.Column('unique_id', sa.String(40), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('name', sa.String(150), nullable=True),
        sa.Column('state', sa.String(100), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true()),
        sa.Column('is_verified', sa.Boolean(), server_default=sa.false()),
        sa.Column('must_change_password', sa.Boolean(), server_default=sa.false()),
        sa.Column('otp_code', sa.String(6), nullable=True),
        sa.Column('otp_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reset_token', sa.String(128), nullable=True),
        sa.Column('reset_token_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('password_changed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_unique_id'), 'users', ['unique_id'], unique=True)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_phone'), 'users', ['phone'], unique=True)
    op.create_index(op.f('ix_users_role'), 'users', ['role'])
    op.create_index(op.f('ix_users_reset_token'), 'users', ['reset_token'])

    # Create profile tables
    op.create_table(
        'students',
        _id(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('father_name', sa.String(150), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('gender', sa.String(20), nullable=True),
        sa.Column('sport', sa.String(100), nullable=True),
        sa.Column('level', sa.String(30), server_default='BEGINNER'),
        sa.Column('school', sa.String(200), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('state', sa.String(100), nullable=True),
        sa.Column('achievements', sa.Text(), nullable=True),
        *_subscription(),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true()),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )

    op.create_table(
        'coaches',
        _id(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('specialization', sa.String(100), nullable=True),
        sa.Column('experience', sa.Integer(), nullable=True),
        sa.Column('certifications', sa.Text(), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('state', sa.String(100), nullable=True),
        sa.Column('approval_status', sa.String(20), server_default='PENDING'),
        sa.Column('approval_remarks', sa.Text(), nullable=True),
        *_subscription(),
        sa.Column('is_active', sa.Boolean(), server_default=sa.false()),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )

    op.create_table(
        'institutes',
        _id(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('institute_type', sa.String(50), nullable=True),
        sa.Column('contact_person', sa.String(150), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('state', sa.String(100), nullable=True),
        sa.Column('website', sa.String(255), nullable=True),
        sa.Column('approval_status', sa.String(20), server_default='PENDING'),
        sa.Column('approval_remarks', sa.Text(), nullable=True),
        *_subscription(),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true()),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )

    op.create_table(
        'clubs',
        _id(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('club_type', sa.String(50), nullable=True),
        sa.Column('sport', sa.String(100), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('state', sa.String(100), nullable=True),
        sa.Column('established_year', sa.Integer(), nullable=True),
        *_subscription(),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true()),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )

    op.create_table(
        'coach_students',
        _id(),
        sa.Column('coach_id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.String(20), server_default='PENDING'),
        sa.Column('initiated_by', sa.String(20), server_default='STUDENT'),
        sa.Column('message', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['coach_id'], ['coaches.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('coach_id', 'student_id', name='uq_coach_student'),
    )
    op.create_index(op.f('ix_coach_students_coach_id'), 'coach_students', ['coach_id'])
    op.create_index(op.f('ix_coach_students_student_id'), 'coach_students', ['student_id'])

    op.create_table(
        'institute_students',
        _id(),
        sa.Column('institute_id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['institute_id'], ['institutes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('institute_id', 'student_id', name='uq_institute_student'),
    )
    op.create_index(op.f('ix_institute_students_institute_id'), 'institute_students', ['institute_id'])
    op.create_index(op.f('ix_institute_students_student_id'), 'institute_students', ['student_id'])

    # Create events table
    op.create_table(
        'events',
        _id(),
        sa.Column('unique_id', sa.String(40), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('sport', sa.String(100), nullable=False),
        sa.Column('level', sa.String(30), nullable=True),
        sa.Column('venue', sa.String(200), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('city', sa.String(100), nullable=False),
        sa.Column('state', sa.String(100), nullable=True),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('registration_deadline', sa.DateTime(timezone=True), nullable=True),
        sa.Column('max_participants', sa.Integer(), server_default='100'),
        sa.Column('current_participants', sa.Integer(), server_default='0'),
        sa.Column('event_fee', sa.Float(), server_default='0'),
        sa.Column('status', sa.String(20), server_default='PENDING'),
        sa.Column('creator_type', sa.String(20), nullable=False),
        sa.Column('created_by', sa.Uuid(), nullable=False),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('cancellation_reason', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_events_unique_id'), 'events', ['unique_id'], unique=True)
    op.create_index(op.f('ix_events_start_date'), 'events', ['start_date'])
    op.create_index(op.f('ix_events_status'), 'events', ['status'])
    op.create_index(op.f('ix_events_created_by'), 'events', ['created_by'])

    # Create order tables
    op.create_table(
        'event_orders',
        _id(),
        sa.Column('order_number', sa.String(40), nullable=False),
        sa.Column('event_id', sa.Uuid(), nullable=False),
        sa.Column('coach_id', sa.Uuid(), nullable=False),
        sa.Column('certificates', sa.Integer(), server_default='0'),
        sa.Column('medals', sa.Integer(), server_default='0'),
        sa.Column('trophies', sa.Integer(), server_default='0'),
        sa.Column('special_instructions', sa.Text(), nullable=True),
        sa.Column('urgent_delivery', sa.Boolean(), server_default=sa.false()),
        sa.Column('certificate_price', sa.Float(), nullable=True),
        sa.Column('medal_price', sa.Float(), nullable=True),
        sa.Column('trophy_price', sa.Float(), nullable=True),
        sa.Column('total_amount', sa.Float(), server_default='0'),
        sa.Column('status', sa.String(20), server_default='PENDING'),
        sa.Column('payment_status', sa.String(20), nullable=True),
        sa.Column('razorpay_order_id', sa.String(64), nullable=True),
        sa.Column('razorpay_payment_id', sa.String(64), nullable=True),
        sa.Column('payment_method', sa.String(20), nullable=True),
        sa.Column('payment_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('admin_remarks', sa.Text(), nullable=True),
        sa.Column('processed_by', sa.Uuid(), nullable=True),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['coach_id'], ['coaches.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['processed_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_number'),
    )
    op.create_index(op.f('ix_event_orders_event_id'), 'event_orders', ['event_id'])
    op.create_index(op.f('ix_event_orders_coach_id'), 'event_orders', ['coach_id'])
    op.create_index(op.f('ix_event_orders_status'), 'event_orders', ['status'])
    op.create_index(op.f('ix_event_orders_razorpay_order_id'), 'event_orders', ['razorpay_order_id'])

    op.create_table(
        'registration_orders',
        _id(),
        sa.Column('order_number', sa.String(40), nullable=False),
        sa.Column('event_id', sa.Uuid(), nullable=False),
        sa.Column('coach_id', sa.Uuid(), nullable=False),
        sa.Column('event_fee_per_student', sa.Float(), server_default='0'),
        sa.Column('total_students', sa.Integer(), server_default='0'),
        sa.Column('total_fee_amount', sa.Float(), server_default='0'),
        sa.Column('status', sa.String(20), server_default='PENDING'),
        sa.Column('payment_status', sa.String(20), server_default='PENDING'),
        sa.Column('razorpay_order_id', sa.String(64), nullable=True),
        sa.Column('razorpay_payment_id', sa.String(64), nullable=True),
        sa.Column('payment_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('certificate_generated', sa.Boolean(), server_default=sa.false()),
        *_timestamps(),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['coach_id'], ['coaches.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_number'),
    )
    op.create_index(op.f('ix_registration_orders_event_id'), 'registration_orders', ['event_id'])
    op.create_index(op.f('ix_registration_orders_coach_id'), 'registration_orders', ['coach_id'])
    op.create_index(op.f('ix_registration_orders_razorpay_order_id'), 'registration_orders', ['razorpay_order_id'])

    op.create_table(
        'registration_order_items',
        _id(),
        sa.Column('registration_order_id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('fee', sa.Float(), server_default='0'),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['registration_order_id'], ['registration_orders.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('registration_order_id', 'student_id', name='uq_order_student'),
    )
    op.create_index(
        op.f('ix_registration_order_items_registration_order_id'),
        'registration_order_items', ['registration_order_id']
    )

    # Create event child tables
    op.create_table(
        'event_registrations',
        _id(),
        sa.Column('event_id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('registration_order_id', sa.Uuid(), nullable=True),
        sa.Column('status', sa.String(20), server_default='REGISTERED'),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['registration_order_id'], ['registration_orders.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id', 'student_id', name='uq_event_student'),
    )
    op.create_index(op.f('ix_event_registrations_event_id'), 'event_registrations', ['event_id'])
    op.create_index(op.f('ix_event_registrations_student_id'), 'event_registrations', ['student_id'])

    op.create_table(
        'event_assignments',
        _id(),
        sa.Column('event_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('role', sa.String(20), server_default='INCHARGE'),
        sa.Column('result_upload', sa.Boolean(), server_default=sa.false()),
        sa.Column('student_management', sa.Boolean(), server_default=sa.false()),
        sa.Column('certificate_management', sa.Boolean(), server_default=sa.false()),
        sa.Column('fee_management', sa.Boolean(), server_default=sa.false()),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id', 'user_id', name='uq_event_assignment'),
    )
    op.create_index(op.f('ix_event_assignments_event_id'), 'event_assignments', ['event_id'])
    op.create_index(op.f('ix_event_assignments_user_id'), 'event_assignments', ['user_id'])

    op.create_table(
        'event_result_files',
        _id(),
        sa.Column('event_id', sa.Uuid(), nullable=False),
        sa.Column('uploaded_by', sa.Uuid(), nullable=True),
        sa.Column('original_name', sa.String(255), nullable=False),
        sa.Column('location', sa.Text(), nullable=False),
        sa.Column('mime_type', sa.String(120), nullable=True),
        sa.Column('size_bytes', sa.BigInteger(), server_default='0'),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['uploaded_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_event_result_files_event_id'), 'event_result_files', ['event_id'])

    # Create payments table
    op.create_table(
        'payments',
        _id(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('user_type', sa.String(20), nullable=False),
        sa.Column('payment_type', sa.String(30), nullable=False),
        sa.Column('plan_id', sa.String(40), nullable=True),
        sa.Column('reference_id', sa.String(64), nullable=True),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('currency', sa.String(3), server_default='INR'),
        sa.Column('razorpay_order_id', sa.String(64), nullable=True),
        sa.Column('razorpay_payment_id', sa.String(64), nullable=True),
        sa.Column('razorpay_signature', sa.String(128), nullable=True),
        sa.Column('status', sa.String(20), server_default='PENDING'),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('details', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_payments_user_id'), 'payments', ['user_id'])
    op.create_index(op.f('ix_payments_reference_id'), 'payments', ['reference_id'])
    op.create_index(op.f('ix_payments_razorpay_order_id'), 'payments', ['razorpay_order_id'])
    op.create_index(op.f('ix_payments_status'), 'payments', ['status'])

    # Create notifications table
    op.create_table(
        'notifications',
        _id(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('type', sa.String(40), nullable=False, server_default='GENERAL'),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('data', sa.Text(), nullable=True),
        sa.Column('is_read', sa.Boolean(), server_default=sa.false()),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_notifications_user_id'), 'notifications', ['user_id'])
    op.create_index(op.f('ix_notifications_is_read'), 'notifications', ['is_read'])

    # Create certificates table
    op.create_table(
        'certificates',
        _id(),
        sa.Column('unique_id', sa.String(120), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('event_id', sa.Uuid(), nullable=False),
        sa.Column('registration_order_id', sa.Uuid(), nullable=True),
        sa.Column('issued_by', sa.Uuid(), nullable=True),
        sa.Column('certificate_type', sa.String(20), server_default='participation'),
        sa.Column('position', sa.String(50), nullable=True),
        sa.Column('participant_name', sa.String(150), nullable=False),
        sa.Column('sport_name', sa.String(100), nullable=True),
        sa.Column('event_name', sa.String(200), nullable=False),
        sa.Column('certificate_url', sa.Text(), nullable=True),
        sa.Column('issue_date', sa.DateTime(timezone=True), server_default=sa.func.now()),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['registration_order_id'], ['registration_orders.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['issued_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_certificates_unique_id'), 'certificates', ['unique_id'], unique=True)
    op.create_index(op.f('ix_certificates_student_id'), 'certificates', ['student_id'])
    op.create_index(op.f('ix_certificates_event_id'), 'certificates', ['event_id'])

    # Create activity_logs table
    op.create_table(
        'activity_logs',
        _id(),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('action', sa.String(60), nullable=False),
        sa.Column('resource_type', sa.String(40), nullable=True),
        sa.Column('resource_id', sa.String(64), nullable=True),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.String(45), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_activity_logs_user_id'), 'activity_logs', ['user_id'])
    op.create_index(op.f('ix_activity_logs_action'), 'activity_logs', ['action'])
    op.create_index(op.f('ix_activity_logs_created_at'), 'activity_logs', ['created_at'])


def downgrade():
    for table in (
        'activity_logs', 'certificates', 'notifications', 'payments', 'event_result_files',
        'event_assignments', 'event_registrations', 'registration_order_items', 'registration_orders',
        'event_orders', 'events', 'institute_students', 'coach_students', 'clubs', 'institutes',
        'coaches', 'students', 'users',
    ):
        op.drop_table(table)
