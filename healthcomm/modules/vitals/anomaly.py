# healthcomm/modules/vitals/anomaly.py
"""
Threshold-based anomaly classifier for vitals readings.

Each vital is evaluated on its own, so one reading can raise several alerts.
A value past the elevated/low boundary is ``medium``; past the stricter
boundary it becomes ``high``. All comparisons are strict.
"""

from dataclasses import dataclass
from typing import List, Optional, Protocol

from healthcomm.models.models import AlertSeverity


@dataclass(frozen=True)
class VitalThresholds:
    heart_rate_high: float = 100
    heart_rate_critical_high: float = 120
    heart_rate_low: float = 60
    heart_rate_critical_low: float = 50

    systolic_high: float = 140
    systolic_critical_high: float = 160
    diastolic_high: float = 90
    systolic_low: float = 90
    diastolic_low: float = 60

    oxygen_low: float = 95
    oxygen_critical_low: float = 90

    temperature_high: float = 37.5
    temperature_critical_high: float = 38.5
    temperature_low: float = 36

    glucose_high: float = 180
    glucose_critical_high: float = 250
    glucose_low: float = 70
    glucose_critical_low: float = 54


DEFAULT_THRESHOLDS = VitalThresholds()


@dataclass(frozen=True)
class AlertCandidate:
    title: str
    message: str
    severity: AlertSeverity


class VitalsLike(Protocol):
    heart_rate: Optional[float]
    blood_pressure_systolic: Optional[float]
    blood_pressure_diastolic: Optional[float]
    oxygen_level: Optional[float]
    temperature: Optional[float]
    glucose: Optional[float]


def _fmt(value: float) -> str:
    return f"{value:g}"


def _escalate(critical: bool) -> AlertSeverity:
    return AlertSeverity.HIGH if critical else AlertSeverity.MEDIUM


def _check_heart_rate(hr: float, t: VitalThresholds) -> Optional[AlertCandidate]:
    if hr > t.heart_rate_high:
        return AlertCandidate(
            "High Heart Rate",
            f"Heart rate is {_fmt(hr)} bpm (elevated)",
            _escalate(hr > t.heart_rate_critical_high),
        )
    if hr < t.heart_rate_low:
        return AlertCandidate(
            "Low Heart Rate",
            f"Heart rate is {_fmt(hr)} bpm (below normal)",
            _escalate(hr < t.heart_rate_critical_low),
        )
    return None


def _check_blood_pressure(systolic: float, diastolic: float, t: VitalThresholds) -> Optional[AlertCandidate]:
    bp = f"{_fmt(systolic)}/{_fmt(diastolic)} mmHg"
    if systolic > t.systolic_high or diastolic > t.diastolic_high:
        return AlertCandidate(
            "High Blood Pressure",
            f"BP is {bp} (elevated)",
            _escalate(systolic > t.systolic_critical_high),
        )
    if systolic < t.systolic_low or diastolic < t.diastolic_low:
        return AlertCandidate("Low Blood Pressure", f"BP is {bp} (low)", AlertSeverity.MEDIUM)
    return None


def _check_oxygen(level: float, t: VitalThresholds) -> Optional[AlertCandidate]:
    if level < t.oxygen_low:
        return AlertCandidate(
            "Low Oxygen Saturation",
            f"Oxygen level is {_fmt(level)}% (below normal)",
            _escalate(level < t.oxygen_critical_low),
        )
    return None


def _check_temperature(temp: float, t: VitalThresholds) -> Optional[AlertCandidate]:
    if temp > t.temperature_high:
        return AlertCandidate(
            "Elevated Temperature",
            f"Temperature is {_fmt(temp)}°C (elevated)",
            _escalate(temp > t.temperature_critical_high),
        )
    if temp < t.temperature_low:
        return AlertCandidate(
            "Low Temperature",
            f"Temperature is {_fmt(temp)}°C (below normal)",
            AlertSeverity.MEDIUM,
        )
    return None


def _check_glucose(glucose: float, t: VitalThresholds) -> Optional[AlertCandidate]:
    if glucose > t.glucose_high:
        return AlertCandidate(
            "High Blood Glucose",
            f"Glucose is {_fmt(glucose)} mg/dL (elevated)",
            _escalate(glucose > t.glucose_critical_high),
        )
    if glucose < t.glucose_low:
        return AlertCandidate(
            "Low Blood Glucose",
            f"Glucose is {_fmt(glucose)} mg/dL (low)",
            _escalate(glucose < t.glucose_critical_low),
        )
    return None


def classify_reading(reading: VitalsLike, thresholds: VitalThresholds = DEFAULT_THRESHOLDS) -> List[AlertCandidate]:
    """
    Classify one vitals reading into alert candidates.

    Output order is fixed: heart rate, blood pressure, oxygen, temperature,
    glucose. Missing vitals are skipped; blood pressure needs both values.
    """
    candidates: List[Optional[AlertCandidate]] = []

    if reading.heart_rate is not None:
        candidates.append(_check_heart_rate(reading.heart_rate, thresholds))

    if reading.blood_pressure_systolic is not None and reading.blood_pressure_diastolic is not None:
        candidates.append(
            _check_blood_pressure(reading.blood_pressure_systolic, reading.blood_pressure_diastolic, thresholds)
        )

    if reading.oxygen_level is not None:
        candidates.append(_check_oxygen(reading.oxygen_level, thresholds))

    if reading.temperature is not None:
        candidates.append(_check_temperature(reading.temperature, thresholds))

    if reading.glucose is not None:
        candidates.append(_check_glucose(reading.glucose, thresholds))

    return [c for c in candidates if c is not None]
