# healthcomm/modules/care_team/scoring.py
"""
Care-team candidate scoring.

Pure functions only: callers load the candidate pool (with derived workload)
and the patient profile, and get back a ranked list with a per-factor
breakdown. Three strategies share one entry point:

- ``full``: the complete additive model used for explicit assignment requests.
- ``fast``: the lighter heuristic used by manual escalation.
- ``first_available``: any available doctor, used by automatic escalation.

Every strategy orders by total score descending, then by provider id.
"""

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from healthcomm.common.errors import NoSuitableCandidate
from healthcomm.models.models import Availability, CareTeamRole


class ScoringMode(str, enum.Enum):
    FULL = "full"
    FAST = "fast"
    FIRST_AVAILABLE = "first_available"


class Urgency(str, enum.Enum):
    ROUTINE = "routine"
    URGENT = "urgent"


# Specialization -> condition keywords. An empty list marks a generalist that
# matches every condition. Iteration order matters: first matching key wins.
SPECIALIZATION_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "cardiology": ("heart disease", "hypertension", "high blood pressure", "cardiovascular"),
    "endocrinology": ("diabetes", "thyroid", "metabolic"),
    "pulmonology": ("asthma", "copd", "respiratory", "lung"),
    "nephrology": ("kidney", "renal"),
    "neurology": ("epilepsy", "seizure", "migraine", "neurological"),
    "gastroenterology": ("crohn", "ibd", "digestive", "gastric"),
    "rheumatology": ("arthritis", "lupus", "autoimmune"),
    "oncology": ("cancer", "tumor"),
    "psychiatry": ("depression", "anxiety", "mental health"),
    "family medicine": (),
    "internal medicine": (),
}


@dataclass(frozen=True)
class ScoringWeights:
    specialization_match: float = 100
    preferred_specialization: float = 100
    certification: float = 50
    experience_tier_senior: float = 30
    experience_tier_mid: float = 15
    senior_years: int = 5
    mid_years: int = 2
    availability_available: float = 50
    availability_busy_urgent: float = 25
    workload_max: float = 50
    experience_per_year: float = 1.25
    experience_cap: float = 25
    default_max_patients: int = 50

    # fast mode
    fast_available: float = 100
    fast_busy: float = 50
    fast_specialization_match: float = 100


DEFAULT_WEIGHTS = ScoringWeights()


@dataclass(frozen=True)
class Candidate:
    """A doctor or caretaker as seen by the scorer."""
    provider_id: UUID
    first_name: str
    last_name: str
    availability: Availability = Availability.AVAILABLE
    specialization: Optional[str] = None
    years_in_practice: int = 0
    certified: bool = False
    experience_years: int = 0
    max_patients: Optional[int] = None
    current_patient_count: int = 0

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class PatientProfile:
    chronic_conditions: Sequence[str] = ()
    preferred_specialization: Optional[str] = None
    urgency: Urgency = Urgency.ROUTINE


@dataclass
class ScoreBreakdown:
    specialization_score: float = 0
    matched_conditions: List[str] = field(default_factory=list)
    preferred_specialization_bonus: float = 0
    certification_bonus: float = 0
    experience_tier_bonus: float = 0
    availability_bonus: float = 0
    workload_score: float = 0
    experience_score: float = 0

    @property
    def total(self) -> float:
        return (
            self.specialization_score
            + self.preferred_specialization_bonus
            + self.certification_bonus
            + self.experience_tier_bonus
            + self.availability_bonus
            + self.workload_score
            + self.experience_score
        )


@dataclass
class ScoredCandidate:
    candidate: Candidate
    breakdown: ScoreBreakdown

    @property
    def score(self) -> float:
        return self.breakdown.total

    def factors(self, role: CareTeamRole) -> dict:
        """Role-conditional factor breakdown stored on the patient as the assignment reason."""
        b = self.breakdown
        factors: dict = {}
        if role == CareTeamRole.DOCTOR:
            factors.update(
                specialization_match=bool(b.matched_conditions),
                matched_conditions=list(b.matched_conditions),
                specialization_score=b.specialization_score,
                preferred_specialization_bonus=b.preferred_specialization_bonus,
            )
        else:
            factors.update(
                certification_bonus=b.certification_bonus,
                experience_tier_bonus=b.experience_tier_bonus,
            )
        factors.update(
            availability_bonus=b.availability_bonus,
            workload_score=round(b.workload_score, 2),
            experience_score=round(b.experience_score, 2),
        )
        return factors


def _match_conditions(specialization: str, conditions: Sequence[str]) -> List[str]:
    doctor_spec = specialization.lower()
    matched = []
    for condition in conditions:
        condition_lower = condition.lower()
        for spec, keywords in SPECIALIZATION_KEYWORDS.items():
            if spec in doctor_spec and (not keywords or any(kw in condition_lower for kw in keywords)):
                matched.append(condition)
                break
    return matched


def workload_score(current_patient_count: int, max_patients: Optional[int], weights: ScoringWeights = DEFAULT_WEIGHTS) -> float:
    """Linear decay from ``workload_max`` at zero patients to 0 at capacity, clamped at 0."""
    capacity = max_patients if max_patients and max_patients > 0 else weights.default_max_patients
    return max(0.0, weights.workload_max - (current_patient_count / capacity) * weights.workload_max)


def _availability_bonus(availability: Availability, urgency: Urgency, weights: ScoringWeights) -> float:
    if availability == Availability.AVAILABLE:
        return weights.availability_available
    if availability == Availability.BUSY and urgency == Urgency.URGENT:
        return weights.availability_busy_urgent
    return 0


def _score_full(role: CareTeamRole, c: Candidate, profile: PatientProfile, weights: ScoringWeights) -> ScoreBreakdown:
    b = ScoreBreakdown()

    if role == CareTeamRole.DOCTOR:
        spec = c.specialization or ""
        b.matched_conditions = _match_conditions(spec, profile.chronic_conditions)
        b.specialization_score = weights.specialization_match * len(b.matched_conditions)
        preferred = profile.preferred_specialization
        if preferred and preferred.lower() in spec.lower():
            b.preferred_specialization_bonus = weights.preferred_specialization
        experience = c.years_in_practice
    else:
        if c.certified:
            b.certification_bonus = weights.certification
        if c.experience_years >= weights.senior_years:
            b.experience_tier_bonus = weights.experience_tier_senior
        elif c.experience_years >= weights.mid_years:
            b.experience_tier_bonus = weights.experience_tier_mid
        experience = c.experience_years

    b.availability_bonus = _availability_bonus(c.availability, profile.urgency, weights)
    b.workload_score = workload_score(c.current_patient_count, c.max_patients, weights)
    b.experience_score = min(weights.experience_cap, max(experience, 0) * weights.experience_per_year)
    return b


def _score_fast(c: Candidate, profile: PatientProfile, weights: ScoringWeights) -> Optional[ScoreBreakdown]:
    if c.availability == Availability.OFFLINE:
        return None
    b = ScoreBreakdown()
    b.availability_bonus = weights.fast_available if c.availability == Availability.AVAILABLE else weights.fast_busy

    doctor_spec = (c.specialization or "").strip().lower()
    for condition in profile.chronic_conditions:
        condition_lower = condition.strip().lower()
        if not doctor_spec or not condition_lower:
            continue
        if doctor_spec in condition_lower or condition_lower in doctor_spec:
            b.specialization_score = weights.fast_specialization_match
            b.matched_conditions = [condition]
            break
    return b


def _score_first_available(c: Candidate, weights: ScoringWeights) -> Optional[ScoreBreakdown]:
    if c.availability != Availability.AVAILABLE:
        return None
    return ScoreBreakdown(availability_bonus=weights.availability_available)


def rank_candidates(
    role: CareTeamRole,
    candidates: Sequence[Candidate],
    profile: PatientProfile,
    mode: ScoringMode = ScoringMode.FULL,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> List[ScoredCandidate]:
    """Score and rank a candidate pool. Candidates excluded by the strategy are dropped."""
    scored = []
    for candidate in candidates:
        if mode == ScoringMode.FULL:
            breakdown = _score_full(role, candidate, profile, weights)
        elif mode == ScoringMode.FAST:
            breakdown = _score_fast(candidate, profile, weights)
        else:
            breakdown = _score_first_available(candidate, weights)
        if breakdown is not None:
            scored.append(ScoredCandidate(candidate, breakdown))

    scored.sort(key=lambda s: (-s.score, str(s.candidate.provider_id)))
    return scored


def select_best(
    role: CareTeamRole,
    candidates: Sequence[Candidate],
    profile: PatientProfile,
    mode: ScoringMode = ScoringMode.FULL,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> ScoredCandidate:
    """Return the top-ranked candidate, or raise ``NoSuitableCandidate``."""
    ranked = rank_candidates(role, candidates, profile, mode, weights)
    if not ranked or ranked[0].score <= 0:
        raise NoSuitableCandidate(f"No suitable {role.value}s available at this time.")
    return ranked[0]
