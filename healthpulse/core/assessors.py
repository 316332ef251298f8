"""
Per-hazard current-condition assessors for Health Pulse.

Each assessor is a pure function over an already-fetched snapshot.
A None snapshot means the provider was unavailable and yields a
Low-risk "data unavailable" assessment instead of an error.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from healthpulse.common.geo import distance_km
from healthpulse.observability.logging_setup import get_logger
from .clusters import RingLike, classify_cluster_score, score_clusters, validate_rings
from .models import Coordinate, HazardAssessment, HazardCluster, NamedLocation, PsiSnapshot
from .thresholds import (
    DEFAULT_DENGUE_RINGS,
    DEFAULT_EPIDEMIC_RINGS,
    DENGUE_CONTEXT_RADIUS_KM,
    EPIDEMIC_NEARBY_RADIUS_KM,
    PSI_BAND_LEVEL,
    classify_epidemic,
    classify_island_dengue,
    classify_psi,
    dengue_recommendations,
    epidemic_recommendations,
    psi_advice,
    unavailable_assessment,
)

log = get_logger("healthpulse.assessors")

# PSI 측정 지역 대표 좌표
MONITORING_STATIONS: Dict[str, Coordinate] = {
    "north": Coordinate(lat=1.4382, lng=103.7890),    # Woodlands
    "south": Coordinate(lat=1.2810, lng=103.8598),    # Marina Bay
    "east": Coordinate(lat=1.3496, lng=103.9568),     # Tampines
    "west": Coordinate(lat=1.3329, lng=103.7436),     # Jurong East
    "central": Coordinate(lat=1.3048, lng=103.8318),  # Orchard
}

# 좌표가 없는 입력의 지역 키워드
REGION_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("woodlands", "north"),
    ("yishun", "north"),
    ("sembawang", "north"),
    ("jurong", "west"),
    ("clementi", "west"),
    ("bukit batok", "west"),
    ("pasir ris", "east"),
    ("tampines", "east"),
    ("bedok", "east"),
    ("toa payoh", "central"),
    ("bishan", "central"),
    ("ang mo kio", "central"),
)

def _fmt_radius(radius_km: float) -> str:
    if radius_km < 1:
        return f"{int(round(radius_km * 1000))}m"
    return f"{radius_km:g}km"

# ---- 뎅기 ----

def environmental_factors(location: NamedLocation) -> List[str]:
    """위치 특성에 따른 뎅기 환경 요인을 반환합니다."""
    factors = []
    name = location.name.lower()
    lat, lng = location.coordinate.lat, location.coordinate.lng

    if lat < 1.28 or lng > 103.9:
        factors.append("Coastal location - higher humidity increases mosquito activity")
    if lat > 1.43:
        factors.append("Near Malaysia border - monitor for imported cases")
    if any(k in name for k in ("tampines", "bedok", "woodlands")):
        factors.append("High-density residential area - community spread risk elevated")
    if "jurong" in name or "tuas" in name or lng < 103.75:
        factors.append("Industrial zone - construction sites create breeding opportunities")
    if any(k in name for k in ("orchard", "marina", "sentosa")):
        factors.append("High tourist/commercial activity - increased human movement")
    if "changi" in name or lng > 103.98:
        factors.append("Airport vicinity - monitor for imported dengue strains")

    return factors

def assess_dengue(
    location: Optional[NamedLocation],
    clusters: Optional[Sequence[HazardCluster]],
    *,
    rings: Sequence[RingLike] = DEFAULT_DENGUE_RINGS,
    context_radius_km: float = DENGUE_CONTEXT_RADIUS_KM,
) -> HazardAssessment:
    """
    뎅기 위험을 평가합니다.

    Args:
        location: 변환된 위치 (None이면 섬 전체 평가)
        clusters: 뎅기 클러스터 스냅샷 (None이면 데이터 없음)
        rings: 거리 링 정책
        context_radius_km: 설명용 근처 클러스터 반경

    Returns:
        뎅기 평가 결과
    """
    if clusters is None:
        log.warning("뎅기 데이터 없음 - 기본 평가 사용")
        return unavailable_assessment("dengue")

    if location is None:
        return _assess_dengue_island_wide(clusters)

    ring_list = validate_rings(rings)
    score = score_clusters(location.coordinate, clusters, ring_list, context_radius_km=context_radius_km)
    level = classify_cluster_score(score)

    rationale: List[str] = []
    for i, ring in enumerate(ring_list):
        count = score.bucket_counts[i]
        if count > 0:
            rationale.append(
                f"{count} cluster(s) within {_fmt_radius(ring.radius_km)} "
                f"({score.bucket_magnitude_sums[i]} cases)"
            )

    if score.nearest is not None:
        rationale.append(
            f"Closest cluster: {score.nearest_distance_km:.2f}km away ({score.nearest.magnitude} cases)"
        )
    else:
        rationale.append("No active dengue clusters reported")

    for ctx in score.context[:3]:
        rationale.append(f"Nearby hotspot: {ctx.cluster.label} ({ctx.distance_km:.2f}km)")

    rationale.extend(environmental_factors(location))

    recommendations = dengue_recommendations(level)
    if score.bucket_counts.get(0, 0) > 0:
        recommendations.append("URGENT: Eliminate ALL standing water within 100m of your location")
        recommendations.append("Avoid outdoor activities during dawn/dusk hours")
    if len(ring_list) > 1 and score.bucket_counts.get(1, 0) > 0:
        recommendations.append("Check immediate surroundings for mosquito breeding sites daily")
    if score.nearest_distance_km is not None:
        if score.nearest_distance_km < 0.5:
            recommendations.append("Use mosquito nets and repellent 24/7")
        elif score.nearest_distance_km < 1.0:
            recommendations.append("Report any standing water to NEA immediately")

    log.debug("뎅기 평가 완료", location=location.name, level=level, score=score.weighted_score)

    return HazardAssessment(
        hazard_kind="dengue",
        level=level,
        primary_metric=score.weighted_score,
        rationale=rationale,
        recommendations=_dedupe(recommendations),
    )

def _assess_dengue_island_wide(clusters: Sequence[HazardCluster]) -> HazardAssessment:
    total = sum(c.magnitude for c in clusters)
    level = classify_island_dengue(total)
    rationale = [
        "Location not resolved - using island-wide data",
        f"Island-wide: {total} cases across {len(clusters)} active clusters",
    ]
    return HazardAssessment(
        hazard_kind="dengue",
        level=level,
        primary_metric=float(total),
        rationale=rationale,
        recommendations=dengue_recommendations(level),
    )

# ---- 대기질 ----

def region_for_location(location: NamedLocation) -> str:
    """가장 가까운 측정 지역을 반환합니다."""
    return min(
        MONITORING_STATIONS,
        key=lambda region: distance_km(location.coordinate, MONITORING_STATIONS[region]),
    )

def region_for_text(text: Optional[str]) -> Optional[str]:
    """좌표 없는 입력을 키워드로 지역에 매핑합니다."""
    lowered = (text or "").lower()
    for keyword, region in REGION_KEYWORDS:
        if keyword in lowered:
            return region
    return None

def interpolate_psi(location: NamedLocation, psi: PsiSnapshot) -> Optional[float]:
    """측정 지역 PSI의 역거리 가중 보간값 (지역 데이터가 없으면 None)"""
    total_weight = 0.0
    weighted = 0.0
    for region, coord in MONITORING_STATIONS.items():
        if region not in psi.regions:
            continue
        weight = 1.0 / (distance_km(location.coordinate, coord) + 0.1)
        total_weight += weight
        weighted += psi.regions[region] * weight
    if total_weight == 0:
        return None
    return round(weighted / total_weight)

def regional_psi(
    location: Optional[NamedLocation],
    psi: PsiSnapshot,
    *,
    text: Optional[str] = None,
    interpolate: bool = False,
) -> Tuple[float, str]:
    """
    위치에 해당하는 PSI 값과 출처 설명을 반환합니다.

    Args:
        location: 변환된 위치
        psi: PSI 스냅샷
        text: 원본 입력 (위치 미확인 시 지역 키워드 매핑용)
        interpolate: 역거리 보간 사용 여부

    Returns:
        (PSI 값, 출처 설명)
    """
    if location is not None:
        if interpolate:
            value = interpolate_psi(location, psi)
            if value is not None:
                return value, f"interpolated from monitoring stations for {location.name}"
        region = region_for_location(location)
        if region in psi.regions:
            return psi.regions[region], f"{region} region reading"
        return psi.national, "national reading (regional data unavailable)"

    region = region_for_text(text)
    if region is not None and region in psi.regions:
        return psi.regions[region], f"{region} region reading"
    return psi.national, "national reading"

def location_air_advice(location: Optional[NamedLocation], psi_value: float) -> List[str]:
    """위치별 대기질 권고"""
    if location is None:
        return []
    name = location.name.lower()
    advice = []
    if "orchard" in name or "marina" in name:
        advice.append("Urban core area - consider indoor activities during peak traffic hours")
    if "jurong" in name or "tuas" in name:
        advice.append("Industrial area - monitor for additional pollutants beyond PSI")
    if "changi" in name:
        advice.append("Airport vicinity - aircraft emissions may affect local air quality")
    if psi_value > 100 and ("sentosa" in name or "east coast" in name):
        advice.append("Coastal location - sea breeze may help disperse pollutants")
    return advice

def assess_air_quality(
    location: Optional[NamedLocation],
    psi: Optional[PsiSnapshot],
    *,
    text: Optional[str] = None,
    interpolate: bool = False,
) -> HazardAssessment:
    """
    대기질 위험을 평가합니다.

    Args:
        location: 변환된 위치
        psi: PSI 스냅샷 (None이면 데이터 없음)
        text: 원본 입력
        interpolate: 역거리 보간 사용 여부

    Returns:
        대기질 평가 결과
    """
    if psi is None:
        log.warning("PSI 데이터 없음 - 기본 평가 사용")
        return unavailable_assessment("air_quality")

    value, source = regional_psi(location, psi, text=text, interpolate=interpolate)
    band = classify_psi(value)
    recommendations = [psi_advice(band)] + location_air_advice(location, value)

    return HazardAssessment(
        hazard_kind="air_quality",
        level=PSI_BAND_LEVEL[band],
        primary_metric=float(value),
        rationale=[f"PSI {value:g} ({band}) - {source}"],
        recommendations=recommendations,
        band=band,
    )

# ---- 병원 부하 ----

def nearby_admissions(
    location: NamedLocation,
    hospitals: Sequence[HazardCluster],
    nearby_radius_km: float = EPIDEMIC_NEARBY_RADIUS_KM,
) -> int:
    """반경 안 병원의 입원 환자 합계"""
    return sum(
        h.magnitude for h in hospitals
        if distance_km(location.coordinate, h.coordinate) <= nearby_radius_km
    )

def assess_epidemic(
    location: Optional[NamedLocation],
    hospitals: Optional[Sequence[HazardCluster]],
    *,
    rings: Sequence[RingLike] = DEFAULT_EPIDEMIC_RINGS,
    nearby_radius_km: float = EPIDEMIC_NEARBY_RADIUS_KM,
) -> HazardAssessment:
    """
    병원 입원 부하 위험을 평가합니다.

    Args:
        location: 변환된 위치 (None이면 병원당 평균 사용)
        hospitals: 병원 입원 집계 스냅샷 (None이면 데이터 없음)
        rings: 거리 링 정책
        nearby_radius_km: 근처 입원 합계 반경

    Returns:
        병원 부하 평가 결과
    """
    if hospitals is None:
        log.warning("병원 데이터 없음 - 기본 평가 사용")
        return unavailable_assessment("epidemic")

    if location is None:
        total = sum(h.magnitude for h in hospitals)
        average = round(total / max(len(hospitals), 1), 1)
        level = classify_epidemic(average)
        return HazardAssessment(
            hazard_kind="epidemic",
            level=level,
            primary_metric=average,
            rationale=[
                "Location not resolved - using island-wide hospital data",
                f"Island-wide: {total} admissions across {len(hospitals)} hospitals",
            ],
            recommendations=epidemic_recommendations(level),
        )

    ring_list = validate_rings(rings)
    score = score_clusters(location.coordinate, hospitals, ring_list, context_radius_km=nearby_radius_km)
    nearby = sum(ctx.cluster.magnitude for ctx in score.context)
    level = classify_epidemic(nearby)

    rationale = [f"Hospital proximity score: {score.weighted_score:.0f}"]
    for i, ring in enumerate(ring_list):
        if score.bucket_counts[i] > 0:
            rationale.append(
                f"{score.bucket_counts[i]} hospital(s) within {_fmt_radius(ring.radius_km)} "
                f"({score.bucket_magnitude_sums[i]} admissions)"
            )
    if score.nearest is not None:
        rationale.append(
            f"Closest hospital: {score.nearest.label} "
            f"({score.nearest_distance_km:.2f}km, {score.nearest.magnitude} admissions)"
        )
    else:
        rationale.append("No hospital admission data reported")

    return HazardAssessment(
        hazard_kind="epidemic",
        level=level,
        primary_metric=float(nearby),
        rationale=rationale,
        recommendations=epidemic_recommendations(level),
    )

def _dedupe(items: Sequence[str]) -> List[str]:
    seen = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out
