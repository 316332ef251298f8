"""
Combine per-hazard assessments into a location analysis.
"""

from typing import Dict, Iterable, List, Optional, Sequence

from healthpulse.observability.logging_setup import get_logger
from .assessors import assess_air_quality, assess_dengue, assess_epidemic
from .models import (
    HAZARD_ORDER,
    HazardAssessment,
    HazardCluster,
    LocationAnalysis,
    NamedLocation,
    PsiSnapshot,
)
from .thresholds import classify_overall, overall_advice, unavailable_assessment

log = get_logger("healthpulse.aggregate")

def order_assessments(assessments: Iterable[HazardAssessment]) -> List[HazardAssessment]:
    """
    평가 목록을 뎅기 → 대기질 → 병원 부하 순으로 정렬하고 빠진 항목을 채웁니다.

    같은 종류가 여러 번 있으면 처음 것을 사용합니다.
    """
    by_kind: Dict[str, HazardAssessment] = {}
    for assessment in assessments:
        by_kind.setdefault(assessment.hazard_kind, assessment)

    ordered = []
    for kind in HAZARD_ORDER:
        if kind not in by_kind:
            log.warning("평가 누락 - 기본 평가로 대체", hazard=kind)
            ordered.append(unavailable_assessment(kind))
        else:
            ordered.append(by_kind[kind])
    return ordered

def aggregate(
    assessments: Iterable[HazardAssessment],
    location: Optional[NamedLocation] = None,
) -> LocationAnalysis:
    """
    위험 요소별 평가를 종합합니다.

    Args:
        assessments: 위험 요소별 평가 (순서 무관)
        location: 변환된 위치

    Returns:
        종합 위험과 중복 제거된 권고를 포함한 위치 분석
    """
    ordered = order_assessments(assessments)
    overall = classify_overall(a.level for a in ordered)

    advice: List[str] = []
    for assessment in ordered:
        for rec in assessment.recommendations:
            if rec not in advice:
                advice.append(rec)
    for rec in overall_advice(overall):
        if rec in advice:
            advice.remove(rec)
        advice.append(rec)

    return LocationAnalysis(
        location=location,
        assessments=ordered,
        overall_risk=overall,
        travel_advice=advice,
    )

def analyze(
    location: Optional[NamedLocation],
    dengue: Optional[Sequence[HazardCluster]],
    psi: Optional[PsiSnapshot],
    hospitals: Optional[Sequence[HazardCluster]],
    settings=None,
    text: Optional[str] = None,
) -> LocationAnalysis:
    """
    세 가지 평가를 실행하고 종합합니다.

    Args:
        location: 변환된 위치 (None이면 지역/섬 전체 기준)
        dengue: 뎅기 클러스터 스냅샷
        psi: PSI 스냅샷
        hospitals: 병원 입원 집계 스냅샷
        settings: Settings (None이면 기본값)
        text: 원본 입력 (대기질 지역 키워드 매핑용)

    Returns:
        위치 분석 결과
    """
    if settings is None:
        from healthpulse.settings import Settings
        settings = Settings()

    assessments = [
        assess_dengue(
            location, dengue,
            rings=settings.dengue.rings,
            context_radius_km=settings.dengue.context_radius_km,
        ),
        assess_air_quality(
            location, psi,
            text=text if text is not None else (location.name if location else None),
            interpolate=settings.air.interpolate,
        ),
        assess_epidemic(
            location, hospitals,
            rings=settings.epidemic.rings,
            nearby_radius_km=settings.epidemic.nearby_radius_km,
        ),
    ]
    return aggregate(assessments, location)
