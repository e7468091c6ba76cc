"""initial care team schema

Revision ID: 7c1e2a9d4b10
Revises:
Create Date: 2026-10-18 09:12:05.418273

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '7c1e2a9d4b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ENUMS = {
    'userrole': ('PATIENT', 'MEDICAL', 'CARETAKER'),
    'patientstatus': ('STABLE', 'WARNING', 'CRITICAL'),
    'careteamrole': ('DOCTOR', 'CARETAKER'),
    'availability': ('AVAILABLE', 'BUSY', 'OFFLINE'),
    'alertseverity': ('LOW', 'MEDIUM', 'HIGH'),
    'alertsource': ('ANOMALY', 'DEVICE'),
    'notificationtype': ('ALERT', 'SYSTEM'),
    'invitationstatus': ('PENDING', 'ACCEPTED', 'DECLINED'),
    'verificationstatus': ('PENDING', 'VERIFIED', 'REJECTED'),
}


def enum(name: str) -> postgresql.ENUM:
    # Types are created up front; tables only reference them
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def upgrade() -> None:
    # Create the enum types first
    for name, values in ENUMS.items():
        sa.Enum(*values, name=name).create(op.get_bind(), checkfirst=True)

    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', enum('userrole'), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'patients',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('status', enum('patientstatus'), nullable=False),
        sa.Column('chronic_conditions', sa.JSON(), nullable=False),
        sa.Column('assigned_doctor_id', sa.Uuid(), nullable=True),
        sa.Column('assigned_caretaker_id', sa.Uuid(), nullable=True),
        sa.Column('assignment_reason', sa.JSON(), nullable=True),
        sa.Column('assigned_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('auto_escalate_to_doctor', sa.Boolean(), nullable=False),
        sa.Column('escalated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('escalated_from', sa.Uuid(), nullable=True),
        sa.Column('escalation_reason', sa.Text(), nullable=True),
        sa.Column('vitals_count', sa.Integer(), nullable=False),
        sa.Column('alerts_count', sa.Integer(), nullable=False),
        sa.Column('last_vitals_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['assigned_doctor_id'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['assigned_caretaker_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )
    op.create_index('idx_patients_assigned_doctor', 'patients', ['assigned_doctor_id'])
    op.create_index('idx_patients_assigned_caretaker', 'patients', ['assigned_caretaker_id'])

    op.create_table(
        'care_providers',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('provider_type', enum('careteamrole'), nullable=False),
        sa.Column('availability', enum('availability'), nullable=False),
        sa.Column('availability_updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('max_patients', sa.Integer(), nullable=True),
        sa.Column('specialization', sa.String(length=100), nullable=True),
        sa.Column('years_in_practice', sa.Integer(), nullable=False),
        sa.Column('license_id', sa.String(length=100), nullable=True),
        sa.Column('certified', sa.Boolean(), nullable=False),
        sa.Column('experience_years', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )

    op.create_table(
        'vitals_readings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('patient_id', sa.Uuid(), nullable=False),
        sa.Column('device_id', sa.String(length=255), nullable=False),
        sa.Column('heart_rate', sa.Float(), nullable=True),
        sa.Column('blood_pressure_systolic', sa.Float(), nullable=True),
        sa.Column('blood_pressure_diastolic', sa.Float(), nullable=True),
        sa.Column('oxygen_level', sa.Float(), nullable=True),
        sa.Column('temperature', sa.Float(), nullable=True),
        sa.Column('glucose', sa.Float(), nullable=True),
        sa.Column('respiration', sa.Float(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['patient_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_vitals_patient_timestamp', 'vitals_readings', ['patient_id', 'timestamp'])

    op.create_table(
        'alerts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('patient_id', sa.Uuid(), nullable=False),
        sa.Column('vitals_reading_id', sa.Uuid(), nullable=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('severity', enum('alertseverity'), nullable=False),
        sa.Column('source', enum('alertsource'), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['patient_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['vitals_reading_id'], ['vitals_readings.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_alerts_patient_severity_timestamp', 'alerts', ['patient_id', 'severity', 'timestamp'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('type', enum('notificationtype'), nullable=False),
        sa.Column('severity', enum('alertseverity'), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('patient_id', sa.Uuid(), nullable=True),
        sa.Column('patient_name', sa.String(length=255), nullable=True),
        sa.Column('reference_id', sa.Uuid(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('is_sent', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_notifications_user', 'notifications', ['user_id'])
    op.create_index('idx_notifications_unread', 'notifications', ['user_id', 'is_read'])

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('action', sa.String(length=100), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('details', sa.JSON(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_audit_logs_user_timestamp', 'audit_logs', ['user_id', 'timestamp'])

    op.create_table(
        'invitations',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('sender_id', sa.Uuid(), nullable=False),
        sa.Column('sender_name', sa.String(length=255), nullable=True),
        sa.Column('sender_email', sa.String(length=255), nullable=True),
        sa.Column('recipient_email', sa.String(length=255), nullable=False),
        sa.Column('type', enum('careteamrole'), nullable=False),
        sa.Column('status', enum('invitationstatus'), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('responded_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('responded_by', sa.Uuid(), nullable=True),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_invitations_recipient_email', 'invitations', ['recipient_email'])
    op.create_index('idx_invitations_status_expires', 'invitations', ['status', 'expires_at'])

    op.create_table(
        'daily_reports',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('patient_id', sa.Uuid(), nullable=False),
        sa.Column('patient_name', sa.String(length=255), nullable=True),
        sa.Column('report_date', sa.Date(), nullable=False),
        sa.Column('vitals_count', sa.Integer(), nullable=False),
        sa.Column('alerts_count', sa.Integer(), nullable=False),
        sa.Column('high_severity_alerts', sa.Integer(), nullable=False),
        sa.Column('status', enum('patientstatus'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['patient_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_daily_reports_patient_date', 'daily_reports', ['patient_id', 'report_date'], unique=True)

    op.create_table(
        'credential_verifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('license_id', sa.String(length=100), nullable=False),
        sa.Column('specialization', sa.String(length=100), nullable=True),
        sa.Column('status', enum('verificationstatus'), nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    for table in (
        'credential_verifications', 'daily_reports', 'invitations', 'audit_logs',
        'notifications', 'alerts', 'vitals_readings', 'care_providers', 'patients', 'users',
    ):
        op.drop_table(table)

    # Drop the enum types
    for name in ENUMS:
        sa.Enum(name=name).drop(op.get_bind(), checkfirst=True)
