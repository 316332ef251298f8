"""
hypothesis를 활용한 클러스터 점수 테스트

이 모듈은 거리 링 점수 계산과 위험 수준 분류를 테스트합니다.
"""

import pytest
from hypothesis import given, settings, strategies as st

from healthpulse.core.clusters import (
    classify_cluster_score,
    outermost_count,
    outermost_magnitude,
    score_clusters,
    validate_rings,
)
from healthpulse.core.models import Coordinate, DistanceRing, HazardCluster


def _cluster(i, lat, lng, magnitude):
    return HazardCluster(id=f"c{i}", label=f"c{i}", coordinate=Coordinate(lat=lat, lng=lng), magnitude=magnitude)


class TestScoreClusters:
    """점수 계산 테스트"""

    def test_woodlands_scenario(self, woodlands, close_cluster):
        """0.3km 거리 25명 클러스터 → 250점, VeryHigh"""
        score = score_clusters(woodlands.coordinate, [close_cluster])

        assert score.bucket_counts[0] == 1
        assert score.weighted_score == pytest.approx(250.0)
        assert score.nearest == close_cluster
        assert score.nearest_distance_km == pytest.approx(0.3, abs=0.01)
        assert classify_cluster_score(score) == "VeryHigh"

    def test_buckets_are_cumulative(self, woodlands, close_cluster):
        """안쪽 링의 클러스터는 바깥 링에도 포함"""
        score = score_clusters(woodlands.coordinate, [close_cluster])
        assert score.bucket_counts == {0: 1, 1: 1, 2: 1}
        assert score.bucket_magnitude_sums == {0: 25, 1: 25, 2: 25}
        assert outermost_count(score) == 1
        assert outermost_magnitude(score) == 25

    def test_each_cluster_charged_once(self, woodlands, north_of, cluster_factory):
        """가중 점수는 가장 안쪽 링 가중치로 한 번만 계산"""
        clusters = [
            cluster_factory("a", north_of(woodlands.coordinate, 0.8), 4),   # 1km 링 → ×5
            cluster_factory("b", north_of(woodlands.coordinate, 1.5), 3),   # 2km 링 → ×2
            cluster_factory("c", north_of(woodlands.coordinate, 3.0), 50),  # 링 밖
        ]
        score = score_clusters(woodlands.coordinate, clusters)
        assert score.weighted_score == pytest.approx(4 * 5 + 3 * 2)
        assert score.bucket_counts == {0: 0, 1: 1, 2: 2}
        assert [c.cluster.id for c in score.context] == ["a", "b", "c"]

    def test_empty_clusters(self, woodlands):
        score = score_clusters(woodlands.coordinate, [])
        assert score.weighted_score == 0
        assert score.nearest is None
        assert score.nearest_distance_km is None
        assert classify_cluster_score(score) == "Low"

    def test_context_radius(self, woodlands, dengue_clusters):
        """설명용 근처 목록은 반경 안만 포함"""
        score = score_clusters(woodlands.coordinate, dengue_clusters, context_radius_km=5.0)
        assert [c.cluster.id for c in score.context] == ["c1"]

    def test_custom_rings(self, woodlands, close_cluster):
        score = score_clusters(woodlands.coordinate, [close_cluster], [(1.0, 1.0)])
        assert score.weighted_score == pytest.approx(25.0)
        assert score.bucket_counts == {0: 1}


class TestClassify:
    """위험 수준 분류 테스트"""

    def test_second_ring_crowded_is_high(self, woodlands, north_of, cluster_factory):
        """두 번째 링 클러스터 3개 초과 기준"""
        clusters = [cluster_factory(f"k{i}", north_of(woodlands.coordinate, 0.7 + i * 0.05), 1) for i in range(3)]
        score = score_clusters(woodlands.coordinate, clusters)
        assert score.weighted_score == pytest.approx(15.0)
        assert classify_cluster_score(score) == "High"

    def test_two_in_second_ring_is_medium(self, woodlands, north_of, cluster_factory):
        clusters = [cluster_factory(f"k{i}", north_of(woodlands.coordinate, 0.7 + i * 0.05), 1) for i in range(2)]
        score = score_clusters(woodlands.coordinate, clusters)
        assert classify_cluster_score(score) == "Medium"

    def test_score_threshold_high(self, woodlands, north_of, cluster_factory):
        """점수 50 초과 → High"""
        score = score_clusters(woodlands.coordinate, [cluster_factory("x", north_of(woodlands.coordinate, 0.8), 11)])
        assert score.weighted_score == pytest.approx(55.0)
        assert classify_cluster_score(score) == "High"

    def test_third_ring_only_is_medium(self, woodlands, north_of, cluster_factory):
        score = score_clusters(woodlands.coordinate, [cluster_factory("x", north_of(woodlands.coordinate, 1.8), 1)])
        assert classify_cluster_score(score) == "Medium"


class TestValidateRings:
    """링 정책 검증 테스트"""

    def test_default_valid(self):
        rings = validate_rings([(0.5, 10), (1.0, 5), (2.0, 2)])
        assert rings[0] == DistanceRing(radius_km=0.5, weight=10)

    @pytest.mark.parametrize("rings", [
        [],
        [(1.0, 5), (0.5, 10)],
        [(0.5, 2), (1.0, 5)],
        [(0.5, 5), (0.5, 5)],
    ])
    def test_invalid(self, rings):
        with pytest.raises(ValueError):
            validate_rings(rings)


class TestScoreProperties:
    """점수 속성 기반 테스트"""

    @given(
        offsets=st.lists(
            st.tuples(
                st.floats(min_value=-0.03, max_value=0.03),
                st.floats(min_value=-0.03, max_value=0.03),
                st.integers(min_value=0, max_value=200),
            ),
            min_size=1, max_size=8,
        ),
        step=st.floats(min_value=0.001, max_value=0.05),
    )
    @settings(max_examples=60)
    def test_monotone_when_moving_away(self, offsets, step):
        """모든 클러스터에서 멀어지면 점수는 증가하지 않음"""
        base = Coordinate(lat=1.35, lng=103.82)
        clusters = [_cluster(i, base.lat + dlat, base.lng + dlng, m) for i, (dlat, dlng, m) in enumerate(offsets)]

        # 모든 클러스터보다 남쪽에서 더 남쪽으로 이동
        near = Coordinate(lat=base.lat - 0.031, lng=base.lng)
        far = Coordinate(lat=near.lat - step, lng=base.lng)

        s_near = score_clusters(near, clusters).weighted_score
        s_far = score_clusters(far, clusters).weighted_score
        assert s_far <= s_near

    @given(magnitudes=st.lists(st.integers(min_value=0, max_value=500), max_size=10))
    def test_score_non_negative(self, magnitudes):
        clusters = [_cluster(i, 1.35, 103.82 + i * 0.001, m) for i, m in enumerate(magnitudes)]
        score = score_clusters(Coordinate(lat=1.35, lng=103.82), clusters)
        assert score.weighted_score >= 0
        assert classify_cluster_score(score) in ("Low", "Medium", "High", "VeryHigh")
