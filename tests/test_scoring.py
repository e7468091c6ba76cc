"""Tests for care-team candidate scoring."""

import uuid

import pytest

from healthcomm.common.errors import NoSuitableCandidate
from healthcomm.models.models import Availability, CareTeamRole
from healthcomm.modules.care_team.scoring import (
    Candidate, PatientProfile, ScoringMode, ScoringWeights, Urgency,
    rank_candidates, select_best, workload_score,
)

pytestmark = pytest.mark.unit

DOCTOR = CareTeamRole.DOCTOR
CARETAKER = CareTeamRole.CARETAKER


def fixed_id(n: int) -> uuid.UUID:
    return uuid.UUID(int=n)


def doctor(n: int, specialization="Family Medicine", **kwargs) -> Candidate:
    return Candidate(provider_id=fixed_id(n), first_name="Doc", last_name=str(n),
                     specialization=specialization, **kwargs)


def caretaker(n: int, **kwargs) -> Candidate:
    return Candidate(provider_id=fixed_id(n), first_name="Care", last_name=str(n), **kwargs)


class TestWorkload:
    def test_empty_provider_gets_full_score(self):
        assert workload_score(0, 50) == 50

    def test_linear_decay(self):
        assert workload_score(25, 50) == 25
        assert workload_score(10, 20) == 25

    def test_clamped_at_zero_when_over_capacity(self):
        assert workload_score(60, 50) == 0

    def test_missing_capacity_uses_default(self):
        assert workload_score(25, None) == 25
        assert workload_score(25, None, ScoringWeights(default_max_patients=100)) == 37.5


class TestFullDoctorScoring:
    def test_specialist_score_breakdown(self):
        profile = PatientProfile(chronic_conditions=["Hypertension"])
        [scored] = rank_candidates(DOCTOR, [doctor(1, "Cardiology", years_in_practice=10)], profile)
        b = scored.breakdown
        assert b.matched_conditions == ["Hypertension"]
        assert b.specialization_score == 100
        assert b.availability_bonus == 50
        assert b.workload_score == 50
        assert b.experience_score == 12.5
        assert scored.score == 212.5

    def test_generalist_matches_every_condition(self):
        profile = PatientProfile(chronic_conditions=["Hypertension", "Diabetes"])
        ranked = rank_candidates(DOCTOR, [doctor(1, "Cardiology"), doctor(2, "Family Medicine")], profile)
        assert ranked[0].candidate.provider_id == fixed_id(2)
        assert ranked[0].breakdown.specialization_score == 200
        assert ranked[1].breakdown.specialization_score == 100

    def test_keyword_match_is_case_insensitive_substring(self):
        profile = PatientProfile(chronic_conditions=["Type 2 DIABETES"])
        [scored] = rank_candidates(DOCTOR, [doctor(1, "Pediatric Endocrinology")], profile)
        assert scored.breakdown.matched_conditions == ["Type 2 DIABETES"]

    def test_unrelated_specialist_gets_no_match(self):
        profile = PatientProfile(chronic_conditions=["Asthma"])
        [scored] = rank_candidates(DOCTOR, [doctor(1, "Cardiology")], profile)
        assert scored.breakdown.specialization_score == 0
        assert scored.factors(DOCTOR)["specialization_match"] is False

    def test_preferred_specialization_bonus(self):
        profile = PatientProfile(preferred_specialization="cardio")
        ranked = rank_candidates(DOCTOR, [doctor(1, "Neurology"), doctor(2, "Cardiology")], profile)
        assert ranked[0].candidate.provider_id == fixed_id(2)
        assert ranked[0].breakdown.preferred_specialization_bonus == 100

    def test_experience_capped(self):
        [scored] = rank_candidates(DOCTOR, [doctor(1, years_in_practice=40)], PatientProfile())
        assert scored.breakdown.experience_score == 25

    def test_busy_doctor_gets_bonus_only_when_urgent(self):
        busy = doctor(1, availability=Availability.BUSY)
        [routine] = rank_candidates(DOCTOR, [busy], PatientProfile(urgency=Urgency.ROUTINE))
        [urgent] = rank_candidates(DOCTOR, [busy], PatientProfile(urgency=Urgency.URGENT))
        assert routine.breakdown.availability_bonus == 0
        assert urgent.breakdown.availability_bonus == 25

    def test_offline_doctor_is_still_ranked(self):
        ranked = rank_candidates(DOCTOR, [doctor(1, availability=Availability.OFFLINE)], PatientProfile())
        assert len(ranked) == 1
        assert ranked[0].breakdown.availability_bonus == 0

    def test_factors_for_doctor(self):
        profile = PatientProfile(chronic_conditions=["Hypertension"])
        [scored] = rank_candidates(DOCTOR, [doctor(1, "Cardiology", years_in_practice=3)], profile)
        assert scored.factors(DOCTOR) == {
            "specialization_match": True,
            "matched_conditions": ["Hypertension"],
            "specialization_score": 100,
            "preferred_specialization_bonus": 0,
            "availability_bonus": 50,
            "workload_score": 50,
            "experience_score": 3.75,
        }


class TestFullCaretakerScoring:
    def test_certified_senior_caretaker(self):
        [scored] = rank_candidates(CARETAKER, [caretaker(1, certified=True, experience_years=6)], PatientProfile())
        b = scored.breakdown
        assert b.certification_bonus == 50
        assert b.experience_tier_bonus == 30
        assert b.experience_score == 7.5
        assert scored.score == 187.5

    @pytest.mark.parametrize("years, tier", [(0, 0), (1, 0), (2, 15), (4, 15), (5, 30)])
    def test_experience_tiers(self, years, tier):
        [scored] = rank_candidates(CARETAKER, [caretaker(1, experience_years=years)], PatientProfile())
        assert scored.breakdown.experience_tier_bonus == tier

    def test_caretaker_ignores_specialization(self):
        profile = PatientProfile(chronic_conditions=["Diabetes"], preferred_specialization="endocrinology")
        [scored] = rank_candidates(CARETAKER, [caretaker(1, specialization="Endocrinology")], profile)
        assert scored.breakdown.specialization_score == 0
        assert scored.breakdown.preferred_specialization_bonus == 0

    def test_factors_for_caretaker(self):
        [scored] = rank_candidates(CARETAKER, [caretaker(1, certified=True)], PatientProfile())
        factors = scored.factors(CARETAKER)
        assert set(factors) == {
            "certification_bonus", "experience_tier_bonus",
            "availability_bonus", "workload_score", "experience_score",
        }

    def test_less_loaded_caretaker_wins(self):
        busy = caretaker(1, current_patient_count=40)
        free = caretaker(2, current_patient_count=5)
        assert select_best(CARETAKER, [busy, free], PatientProfile()).candidate.provider_id == fixed_id(2)


class TestOrdering:
    def test_ties_break_on_provider_id(self):
        pool = [doctor(2), doctor(1), doctor(3)]
        ranked = rank_candidates(DOCTOR, pool, PatientProfile())
        assert [s.candidate.provider_id for s in ranked] == [fixed_id(1), fixed_id(2), fixed_id(3)]

    def test_ranking_is_independent_of_input_order(self):
        pool = [doctor(1, years_in_practice=3), doctor(2, "Cardiology"), doctor(3, current_patient_count=10)]
        profile = PatientProfile(chronic_conditions=["Hypertension"])
        forward = [s.candidate.provider_id for s in rank_candidates(DOCTOR, pool, profile)]
        backward = [s.candidate.provider_id for s in rank_candidates(DOCTOR, list(reversed(pool)), profile)]
        assert forward == backward


class TestSelectBest:
    def test_empty_pool_raises(self):
        with pytest.raises(NoSuitableCandidate):
            select_best(DOCTOR, [], PatientProfile())

    def test_zero_score_raises(self):
        hopeless = doctor(1, specialization=None, availability=Availability.OFFLINE,
                          current_patient_count=50, max_patients=50)
        with pytest.raises(NoSuitableCandidate) as exc:
            select_best(DOCTOR, [hopeless], PatientProfile())
        assert exc.value.status_code == 503
        assert exc.value.code == "unavailable"


class TestFastMode:
    def test_offline_excluded(self):
        ranked = rank_candidates(DOCTOR, [doctor(1, availability=Availability.OFFLINE)],
                                 PatientProfile(), ScoringMode.FAST)
        assert ranked == []

    def test_available_beats_busy(self):
        pool = [doctor(1, availability=Availability.BUSY), doctor(2)]
        ranked = rank_candidates(DOCTOR, pool, PatientProfile(), ScoringMode.FAST)
        assert [s.score for s in ranked] == [100, 50]
        assert ranked[0].candidate.provider_id == fixed_id(2)

    def test_specialization_substring_match(self):
        profile = PatientProfile(chronic_conditions=["Cardiology follow-up"])
        pool = [doctor(1, "Neurology"), doctor(2, "cardiology")]
        ranked = rank_candidates(DOCTOR, pool, profile, ScoringMode.FAST)
        assert ranked[0].candidate.provider_id == fixed_id(2)
        assert ranked[0].score == 200

    def test_blank_specialization_never_matches(self):
        profile = PatientProfile(chronic_conditions=["Hypertension"])
        [scored] = rank_candidates(DOCTOR, [doctor(1, specialization="")], profile, ScoringMode.FAST)
        assert scored.score == 100


class TestFirstAvailableMode:
    def test_only_available_doctors(self):
        pool = [doctor(1, availability=Availability.BUSY), doctor(2, availability=Availability.OFFLINE), doctor(3)]
        ranked = rank_candidates(DOCTOR, pool, PatientProfile(), ScoringMode.FIRST_AVAILABLE)
        assert [s.candidate.provider_id for s in ranked] == [fixed_id(3)]

    def test_none_available(self):
        pool = [doctor(1, availability=Availability.BUSY)]
        assert rank_candidates(DOCTOR, pool, PatientProfile(), ScoringMode.FIRST_AVAILABLE) == []
