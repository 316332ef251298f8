"""
hypothesis를 활용한 종합 평가 테스트

이 모듈은 위험 요소별 평가 종합의 결정성, 순서 무관성, 멱등성을 테스트합니다.
"""

import pytest
from hypothesis import given, strategies as st

from healthpulse.core.aggregate import aggregate, analyze
from healthpulse.core.models import HazardAssessment

LEVELS = ["Low", "Medium", "High", "VeryHigh"]
KINDS = ["dengue", "air_quality", "epidemic"]


def _assessment(kind, level, recs=None):
    return HazardAssessment(
        hazard_kind=kind,
        level=level,
        primary_metric=1.0,
        rationale=[f"{kind} {level}"],
        recommendations=recs if recs is not None else [f"{kind} advice", "shared advice"],
    )


level_triples = st.tuples(*[st.sampled_from(LEVELS)] * 3)


class TestAggregate:
    """종합 평가 테스트"""

    def test_boundary_medium(self):
        """{High, High, Medium} → Medium"""
        result = aggregate([
            _assessment("dengue", "High"),
            _assessment("air_quality", "High"),
            _assessment("epidemic", "Medium"),
        ])
        assert result.overall_risk == "Medium"

    def test_low(self):
        """{Medium, Medium, Low} → Low"""
        result = aggregate([
            _assessment("dengue", "Medium"),
            _assessment("air_quality", "Medium"),
            _assessment("epidemic", "Low"),
        ])
        assert result.overall_risk == "Low"

    def test_order_and_dedupe(self):
        """위험 요소 순서 정렬, 권고 중복 제거, 종합 권고는 마지막"""
        result = aggregate([
            _assessment("epidemic", "Low"),
            _assessment("dengue", "Low"),
            _assessment("air_quality", "Low"),
        ])
        assert [a.hazard_kind for a in result.assessments] == KINDS
        assert result.travel_advice == [
            "dengue advice", "shared advice", "air_quality advice", "epidemic advice",
            "Normal precautions recommended",
        ]

    def test_missing_kind_filled(self):
        result = aggregate([_assessment("dengue", "High")])
        assert [a.hazard_kind for a in result.assessments] == KINDS
        assert result.assessments[1].data_available is False
        assert result.assessments[2].data_available is False

    def test_high_overall_advice(self):
        result = aggregate([_assessment(k, "VeryHigh") for k in KINDS])
        assert result.overall_risk == "High"
        assert result.travel_advice[-2:] == [
            "Consider postponing non-essential travel",
            "Consult healthcare provider if you have health conditions",
        ]

    @given(levels=level_triples, perm=st.permutations([0, 1, 2]))
    def test_permutation_invariance(self, levels, perm):
        """입력 순서와 무관한 결과"""
        items = [_assessment(k, lv) for k, lv in zip(KINDS, levels)]
        shuffled = [items[i] for i in perm]
        assert aggregate(items) == aggregate(shuffled)

    @given(levels=level_triples)
    def test_idempotent(self, levels):
        """같은 입력 → 같은 출력, 결과 재종합도 동일"""
        items = [_assessment(k, lv) for k, lv in zip(KINDS, levels)]
        first = aggregate(items)
        assert aggregate(items).model_dump_json() == first.model_dump_json()
        assert aggregate(first.assessments) == first

    @given(levels=level_triples)
    def test_overall_in_range(self, levels):
        result = aggregate([_assessment(k, lv) for k, lv in zip(KINDS, levels)])
        assert result.overall_risk in ("Low", "Medium", "High")


class TestAnalyze:
    """세 평가 실행 및 종합 테스트"""

    def test_woodlands(self, woodlands, dengue_clusters, psi_snapshot, hospital_clusters, sample_settings):
        result = analyze(woodlands, dengue_clusters, psi_snapshot, hospital_clusters, sample_settings)
        assert result.location == woodlands
        assert result.assessments[0].level == "VeryHigh"
        assert result.assessments[1].band == "Good"

    def test_unresolved_location(self, dengue_clusters, psi_snapshot, hospital_clusters):
        """위치 미확인 → location None, 섬 전체 기준 분석"""
        result = analyze(None, dengue_clusters, psi_snapshot, hospital_clusters, text="Mars Colony")
        assert result.location is None
        assert result.assessments[0].primary_metric == 77
        assert "Location not resolved" in result.assessments[0].rationale[0]

    def test_all_unavailable(self, woodlands):
        result = analyze(woodlands, None, None, None)
        assert result.overall_risk == "Low"
        assert all(not a.data_available for a in result.assessments)
