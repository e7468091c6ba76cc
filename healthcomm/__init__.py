"""HealthComm care-team matching, escalation and vitals alerting service."""

__version__ = "1.0.0"
