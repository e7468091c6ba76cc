# healthcomm/modules/alerts/status_resolver.py

from typing import Iterable

from healthcomm.models.models import AlertSeverity, PatientStatus


def resolve_status(current: PatientStatus, severities: Iterable[AlertSeverity]) -> PatientStatus:
    """
    Derive a patient's status from the alerts of one processing pass.

    Any high alert makes the patient critical. A medium alert moves the patient
    to warning unless they are already critical. Otherwise the status is kept.
    """
    seen = set(severities)
    if AlertSeverity.HIGH in seen:
        return PatientStatus.CRITICAL
    if AlertSeverity.MEDIUM in seen and current != PatientStatus.CRITICAL:
        return PatientStatus.WARNING
    return current
