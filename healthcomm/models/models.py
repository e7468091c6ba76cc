# healthcomm/models/models.py

import uuid
import enum

from sqlalchemy import (
    JSON, Boolean, Column, Date, Float, ForeignKey,
    Index, Integer, String, Text, DateTime, Uuid,
    Enum as SAEnum,
    func,
)
from sqlalchemy.orm import declarative_base, relationship, backref

from healthcomm.common.utils.global_functions import utcnow

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class UserRole(enum.Enum):
    PATIENT = "patient"
    MEDICAL = "medical"
    CARETAKER = "caretaker"


class PatientStatus(enum.Enum):
    STABLE = "stable"
    WARNING = "warning"
    CRITICAL = "critical"


class CareTeamRole(enum.Enum):
    DOCTOR = "doctor"
    CARETAKER = "caretaker"


class Availability(enum.Enum):
    AVAILABLE = "available"
    BUSY = "busy"
    OFFLINE = "offline"


class AlertSeverity(enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AlertSource(enum.Enum):
    ANOMALY = "anomaly"
    DEVICE = "device"


class NotificationType(enum.Enum):
    ALERT = "alert"
    SYSTEM = "system"


class InvitationStatus(enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class VerificationStatus(enum.Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


# ============================================================================
# USER MODELS
# ============================================================================

class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    role = Column(SAEnum(UserRole), nullable=False, default=UserRole.PATIENT)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role.value})>"


class Patient(Base):
    __tablename__ = "patients"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    status = Column(SAEnum(PatientStatus), nullable=False, default=PatientStatus.STABLE)
    chronic_conditions = Column(JSON, nullable=False, default=list)  # ordered list of condition names

    # Care team (single current assignee per role)
    assigned_doctor_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    assigned_caretaker_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    assignment_reason = Column(JSON, nullable=True)
    assigned_at = Column(DateTime(timezone=True), nullable=True)
    auto_escalate_to_doctor = Column(Boolean, default=False, nullable=False)

    # Escalation
    escalated_at = Column(DateTime(timezone=True), nullable=True)
    escalated_from = Column(Uuid, nullable=True)  # caretaker user id at escalation time
    escalation_reason = Column(Text, nullable=True)

    # Counters
    vitals_count = Column(Integer, default=0, nullable=False)
    alerts_count = Column(Integer, default=0, nullable=False)
    last_vitals_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    # Relationship
    user = relationship(
        "User",
        foreign_keys=[user_id],
        backref=backref("patient", uselist=False, cascade="all, delete-orphan"),
    )

    __table_args__ = (
        Index("idx_patients_assigned_doctor", "assigned_doctor_id"),
        Index("idx_patients_assigned_caretaker", "assigned_caretaker_id"),
    )

    def __repr__(self):
        return f"<Patient(id={self.id}, user_id={self.user_id}, status={self.status.value})>"


class CareProvider(Base):
    """Doctor or caretaker profile. Workload is derived from patient assignments."""
    __tablename__ = "care_providers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    provider_type = Column(SAEnum(CareTeamRole), nullable=False)
    availability = Column(SAEnum(Availability), default=Availability.AVAILABLE, nullable=False)
    availability_updated_at = Column(DateTime(timezone=True), nullable=True)
    max_patients = Column(Integer, nullable=True)  # NULL means the deployment default

    # Doctor attributes
    specialization = Column(String(100), nullable=True)
    years_in_practice = Column(Integer, default=0, nullable=False)
    license_id = Column(String(100), nullable=True)

    # Caretaker attributes
    certified = Column(Boolean, default=False, nullable=False)
    experience_years = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    # Relationship
    user = relationship("User", backref=backref("care_provider", uselist=False, cascade="all, delete-orphan"))

    def __repr__(self):
        return f"<CareProvider(id={self.id}, type={self.provider_type.value}, availability={self.availability.value})>"


# ============================================================================
# VITALS & ALERTS MODELS
# ============================================================================

class VitalsReading(Base):
    """Immutable, append-only vitals time series for a patient."""
    __tablename__ = "vitals_readings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, nullable=False)
    patient_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    device_id = Column(String(255), nullable=False)
    heart_rate = Column(Float, nullable=True)  # bpm
    blood_pressure_systolic = Column(Float, nullable=True)  # mmHg
    blood_pressure_diastolic = Column(Float, nullable=True)  # mmHg
    oxygen_level = Column(Float, nullable=True)  # SpO2 %
    temperature = Column(Float, nullable=True)  # Celsius
    glucose = Column(Float, nullable=True)  # mg/dL
    respiration = Column(Float, nullable=True)  # breaths/min
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    __table_args__ = (
        Index("idx_vitals_patient_timestamp", "patient_id", "timestamp"),
    )

    def __repr__(self):
        return f"<VitalsReading(id={self.id}, patient_id={self.patient_id})>"


class Alert(Base):
    __tablename__ = "alerts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, nullable=False)
    patient_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    vitals_reading_id = Column(Uuid, ForeignKey("vitals_readings.id", ondelete="SET NULL"), nullable=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    severity = Column(SAEnum(AlertSeverity), nullable=False)
    source = Column(SAEnum(AlertSource), nullable=False, default=AlertSource.ANOMALY)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_alerts_patient_severity_timestamp", "patient_id", "severity", "timestamp"),
    )

    def __repr__(self):
        return f"<Alert(id={self.id}, severity={self.severity.value}, title={self.title})>"


# ============================================================================
# NOTIFICATION & AUDIT MODELS
# ============================================================================

class Notification(Base):
    """Fan-out sink consumed by the push-delivery worker."""
    __tablename__ = "notifications"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(SAEnum(NotificationType), nullable=False, default=NotificationType.SYSTEM)
    severity = Column(SAEnum(AlertSeverity), nullable=False, default=AlertSeverity.LOW)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    patient_id = Column(Uuid, nullable=True)
    patient_name = Column(String(255), nullable=True)
    reference_id = Column(Uuid, nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    is_sent = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationship
    user = relationship("User", backref=backref("notifications", lazy="dynamic", cascade="all, delete-orphan"))

    __table_args__ = (
        Index("idx_notifications_user", "user_id"),
        Index("idx_notifications_unread", "user_id", "is_read"),
    )

    def __repr__(self):
        return f"<Notification(id={self.id}, title={self.title})>"


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, nullable=False)
    action = Column(String(100), nullable=False)
    user_id = Column(Uuid, nullable=True)  # actor; NULL for system-initiated actions
    details = Column(JSON, nullable=False, default=dict)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_audit_logs_user_timestamp", "user_id", "timestamp"),
    )

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action={self.action})>"


# ============================================================================
# INVITATION MODELS
# ============================================================================

class Invitation(Base):
    __tablename__ = "invitations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, nullable=False)
    sender_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    sender_name = Column(String(255), nullable=True)
    sender_email = Column(String(255), nullable=True)
    recipient_email = Column(String(255), nullable=False, index=True)
    type = Column(SAEnum(CareTeamRole), nullable=False)
    status = Column(SAEnum(InvitationStatus), default=InvitationStatus.PENDING, nullable=False)
    message = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    responded_at = Column(DateTime(timezone=True), nullable=True)
    responded_by = Column(Uuid, nullable=True)

    __table_args__ = (
        Index("idx_invitations_status_expires", "status", "expires_at"),
    )

    def __repr__(self):
        return f"<Invitation(id={self.id}, type={self.type.value}, status={self.status.value})>"


# ============================================================================
# REPORTS & VERIFICATION MODELS
# ============================================================================

class DailyReport(Base):
    __tablename__ = "daily_reports"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, nullable=False)
    patient_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    patient_name = Column(String(255), nullable=True)
    report_date = Column(Date, nullable=False)
    vitals_count = Column(Integer, default=0, nullable=False)
    alerts_count = Column(Integer, default=0, nullable=False)
    high_severity_alerts = Column(Integer, default=0, nullable=False)
    status = Column(SAEnum(PatientStatus), nullable=False, default=PatientStatus.STABLE)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_daily_reports_patient_date", "patient_id", "report_date", unique=True),
    )

    def __repr__(self):
        return f"<DailyReport(id={self.id}, patient_id={self.patient_id}, date={self.report_date})>"


class CredentialVerification(Base):
    __tablename__ = "credential_verifications"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    license_id = Column(String(100), nullable=False)
    specialization = Column(String(100), nullable=True)
    status = Column(SAEnum(VerificationStatus), default=VerificationStatus.PENDING, nullable=False)
    submitted_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<CredentialVerification(id={self.id}, status={self.status.value})>"
