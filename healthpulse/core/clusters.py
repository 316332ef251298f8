"""
Distance-ring cluster scoring for Health Pulse.

This module buckets hazard clusters into concentric distance rings
around an origin and computes a distance-decayed, magnitude-weighted
risk score. Pure functions only.
"""

from typing import Dict, List, Optional, Sequence, Tuple, Union

from healthpulse.common.geo import distance_km
from .models import ClusterContext, ClusterScore, Coordinate, DistanceRing, HazardCluster, RiskLevel
from .thresholds import (
    CLUSTER_COUNT_HIGH,
    CLUSTER_SCORE_HIGH,
    CLUSTER_SCORE_MEDIUM,
    CLUSTER_SCORE_VERY_HIGH,
    DEFAULT_DENGUE_RINGS,
    DENGUE_CONTEXT_RADIUS_KM,
)

RingLike = Union[DistanceRing, Tuple[float, float]]

def as_rings(rings: Sequence[RingLike]) -> List[DistanceRing]:
    """(반경, 가중치) 튜플을 DistanceRing 목록으로 변환합니다."""
    out: List[DistanceRing] = []
    for ring in rings:
        if isinstance(ring, DistanceRing):
            out.append(ring)
        else:
            radius, weight = ring
            out.append(DistanceRing(radius_km=radius, weight=weight))
    return out

def validate_rings(rings: Sequence[RingLike]) -> List[DistanceRing]:
    """
    링 정책을 검증합니다.

    반경은 엄격히 증가하고 가중치는 증가하지 않아야 합니다.

    Raises:
        ValueError: 정책이 잘못된 경우
    """
    parsed = as_rings(rings)
    if not parsed:
        raise ValueError("링 정책이 비어 있습니다")
    for inner, outer in zip(parsed, parsed[1:]):
        if outer.radius_km <= inner.radius_km:
            raise ValueError(f"링 반경은 증가해야 합니다: {inner.radius_km} -> {outer.radius_km}")
        if outer.weight > inner.weight:
            raise ValueError(f"링 가중치는 증가할 수 없습니다: {inner.weight} -> {outer.weight}")
    return parsed

DEFAULT_RINGS: List[DistanceRing] = validate_rings(DEFAULT_DENGUE_RINGS)

def score_clusters(
    origin: Coordinate,
    clusters: Sequence[HazardCluster],
    rings: Optional[Sequence[RingLike]] = None,
    *,
    context_radius_km: float = DENGUE_CONTEXT_RADIUS_KM,
) -> ClusterScore:
    """
    원점 주변 클러스터의 거리 가중 점수를 계산합니다.

    링 점유 수와 환자 합계는 누적(2km 안은 5km 안에도 포함)이고,
    가중 점수는 각 클러스터를 자신을 포함하는 가장 안쪽 링의 가중치로 한 번만 계산합니다.

    Args:
        origin: 기준 좌표
        clusters: 클러스터 스냅샷
        rings: 링 정책 (안쪽부터)
        context_radius_km: 설명용 근처 클러스터 반경

    Returns:
        점수, 링별 점유 수/환자 합계, 가장 가까운 클러스터
    """
    ring_list = validate_rings(rings) if rings is not None else DEFAULT_RINGS

    bucket_counts: Dict[int, int] = {i: 0 for i in range(len(ring_list))}
    bucket_sums: Dict[int, int] = {i: 0 for i in range(len(ring_list))}
    weighted = 0.0
    nearest: Optional[HazardCluster] = None
    nearest_distance: Optional[float] = None
    context: List[Tuple[float, int, HazardCluster]] = []

    for order, cluster in enumerate(clusters):
        d = distance_km(origin, cluster.coordinate)

        if nearest_distance is None or d < nearest_distance:
            nearest, nearest_distance = cluster, d

        innermost: Optional[int] = None
        for i, ring in enumerate(ring_list):
            if d <= ring.radius_km:
                bucket_counts[i] += 1
                bucket_sums[i] += cluster.magnitude
                if innermost is None:
                    innermost = i

        if innermost is not None:
            weighted += ring_list[innermost].weight * cluster.magnitude

        if d <= context_radius_km:
            context.append((d, order, cluster))

    context.sort(key=lambda item: (item[0], item[1]))

    return ClusterScore(
        weighted_score=weighted,
        bucket_counts=bucket_counts,
        bucket_magnitude_sums=bucket_sums,
        nearest=nearest,
        nearest_distance_km=nearest_distance,
        context=[ClusterContext(cluster=c, distance_km=d) for d, _, c in context],
    )

def classify_cluster_score(score: ClusterScore) -> RiskLevel:
    """
    클러스터 점수와 링 점유로 위험 수준을 분류합니다 (더 심각한 쪽 적용).

    Args:
        score: score_clusters 결과

    Returns:
        위험 수준
    """
    counts = score.bucket_counts
    s = score.weighted_score

    if counts.get(0, 0) > 0 or s > CLUSTER_SCORE_VERY_HIGH:
        return "VeryHigh"
    if counts.get(1, 0) > CLUSTER_COUNT_HIGH or s > CLUSTER_SCORE_HIGH:
        return "High"
    if counts.get(2, 0) >= 1 or s > CLUSTER_SCORE_MEDIUM:
        return "Medium"
    return "Low"

def outermost_magnitude(score: ClusterScore) -> int:
    """가장 바깥 링 안의 환자 합계"""
    if not score.bucket_magnitude_sums:
        return 0
    return score.bucket_magnitude_sums[max(score.bucket_magnitude_sums)]

def outermost_count(score: ClusterScore) -> int:
    """가장 바깥 링 안의 클러스터 수"""
    if not score.bucket_counts:
        return 0
    return score.bucket_counts[max(score.bucket_counts)]
