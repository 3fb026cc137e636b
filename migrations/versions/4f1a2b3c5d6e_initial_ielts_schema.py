"""initial ielts schema

Revision ID: 4f1a2b3c5d6e
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4f1a2b3c5d6e'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'roles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('username', sa.String(length=80), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=120), nullable=True),
        sa.Column('phone_number', sa.String(length=30), nullable=True),
        sa.Column('created_by', sa.String(length=80), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_users_username'), ['username'], unique=True)

    op.create_table(
        'user_roles',
        sa.Column('user_id', sa.String(length=32), nullable=False),
        sa.Column('role_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['role_id'], ['roles.id'], ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('user_id', 'role_id')
    )
    op.create_table(
        'students',
        sa.Column('user_id', sa.String(length=32), nullable=False),
        sa.Column('gender', sa.String(length=10), nullable=True),
        sa.Column('batch_number', sa.String(length=40), nullable=True),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        sa.Column('remaining_listening', sa.Integer(), nullable=False),
        sa.Column('remaining_reading', sa.Integer(), nullable=False),
        sa.Column('remaining_writing', sa.Integer(), nullable=False),
        sa.Column('remaining_speaking', sa.Integer(), nullable=False),
        sa.Column('remaining_mock', sa.Integer(), nullable=False),
        sa.Column('created_by', sa.String(length=80), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('remaining_listening >= 0', name='ck_students_listening_nonneg'),
        sa.CheckConstraint('remaining_reading >= 0', name='ck_students_reading_nonneg'),
        sa.CheckConstraint('remaining_writing >= 0', name='ck_students_writing_nonneg'),
        sa.CheckConstraint('remaining_speaking >= 0', name='ck_students_speaking_nonneg'),
        sa.CheckConstraint('remaining_mock >= 0', name='ck_students_mock_nonneg'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('user_id')
    )
    op.create_table(
        'test_sessions',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('module_type', sa.String(length=20), nullable=False),
        sa.Column('test_date', sa.Date(), nullable=False),
        sa.Column('test_day', sa.String(length=12), nullable=True),
        sa.Column('test_time', sa.String(length=20), nullable=False),
        sa.Column('room_number', sa.String(length=40), nullable=False),
        sa.Column('max_capacity', sa.Integer(), nullable=False),
        sa.Column('current_registrations', sa.Integer(), nullable=False),
        sa.Column('is_closed', sa.Boolean(), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), nullable=False),
        sa.Column('created_by', sa.String(length=80), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('max_capacity > 0', name='ck_test_sessions_capacity_positive'),
        sa.CheckConstraint(
            'current_registrations >= 0 AND current_registrations <= max_capacity',
            name='ck_test_sessions_registrations_in_range'
        ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('test_sessions', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_test_sessions_module_type'), ['module_type'], unique=False)
        batch_op.create_index(batch_op.f('ix_test_sessions_test_date'), ['test_date'], unique=False)

    op.create_table(
        'bookings',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('subject_id', sa.String(length=32), nullable=False),
        sa.Column('session_id', sa.String(length=32), nullable=False),
        sa.Column('module_type', sa.String(length=20), nullable=False),
        sa.Column('booking_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('is_guest', sa.Boolean(), nullable=False),
        sa.Column('guest_name', sa.String(length=120), nullable=True),
        sa.Column('guest_phone', sa.String(length=30), nullable=True),
        sa.Column('speaking_date', sa.Date(), nullable=True),
        sa.Column('speaking_time', sa.String(length=20), nullable=True),
        sa.Column('speaking_room', sa.String(length=40), nullable=True),
        sa.Column('created_by', sa.String(length=80), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['session_id'], ['test_sessions.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('session_id', 'subject_id', name='uq_booking_subject_once'),
        sa.UniqueConstraint(
            'session_id', 'speaking_date', 'speaking_room', 'speaking_time',
            name='uq_booking_speaking_slot'
        )
    )
    with op.batch_alter_table('bookings', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_bookings_subject_id'), ['subject_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_bookings_session_id'), ['session_id'], unique=False)

    op.create_table(
        'results',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('user_id', sa.String(length=32), nullable=False),
        sa.Column('session_id', sa.String(length=32), nullable=False),
        sa.Column('listening_score', sa.Float(), nullable=True),
        sa.Column('reading_score', sa.Float(), nullable=True),
        sa.Column('writing_score', sa.Float(), nullable=True),
        sa.Column('speaking_score', sa.Float(), nullable=True),
        sa.Column('overall_score', sa.Float(), nullable=True),
        sa.Column('published_by', sa.String(length=80), nullable=True),
        sa.Column('published_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['session_id'], ['test_sessions.id'], ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('results', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_results_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_results_session_id'), ['session_id'], unique=False)

    op.create_table(
        'login_sessions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=32), nullable=False),
        sa.Column('token_hash', sa.String(length=128), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('last_seen_at', sa.DateTime(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('revoked', sa.Boolean(), nullable=False),
        sa.Column('ip', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('login_sessions', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_login_sessions_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_login_sessions_token_hash'), ['token_hash'], unique=True)

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=32), nullable=True),
        sa.Column('action', sa.String(length=80), nullable=False),
        sa.Column('entity', sa.String(length=80), nullable=True),
        sa.Column('entity_id', sa.String(length=80), nullable=True),
        sa.Column('ip', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.String(length=255), nullable=True),
        sa.Column('metadata_json', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )


def downgrade():
    op.drop_table('audit_logs')
    with op.batch_alter_table('login_sessions', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_login_sessions_token_hash'))
        batch_op.drop_index(batch_op.f('ix_login_sessions_user_id'))
    op.drop_table('login_sessions')
    with op.batch_alter_table('results', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_results_session_id'))
        batch_op.drop_index(batch_op.f('ix_results_user_id'))
    op.drop_table('results')
    with op.batch_alter_table('bookings', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_bookings_session_id'))
        batch_op.drop_index(batch_op.f('ix_bookings_subject_id'))
    op.drop_table('bookings')
    with op.batch_alter_table('test_sessions', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_test_sessions_test_date'))
        batch_op.drop_index(batch_op.f('ix_test_sessions_module_type'))
    op.drop_table('test_sessions')
    op.drop_table('students')
    op.drop_table('user_roles')
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_users_username'))
    op.drop_table('users')
    op.drop_table('roles')
