"""
Risk classification tables and recommendation text for Health Pulse.

Both the current-conditions path and the forecast path read their
thresholds, severity encodings and advisory text from this module.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from .models import HazardAssessment, HazardKind, OverallRisk, PsiBand, RiskLevel

# 위험 수준 → 수치 심각도
SEVERITY: Dict[str, int] = {
    "Low": 1,
    "Medium": 2,
    "High": 3,
    "VeryHigh": 4,
}

# 종합 위험 임계값 (평균 심각도)
OVERALL_HIGH_AT = 3.5
OVERALL_MEDIUM_AT = 2.5

# 기본 거리 링 정책 (반경 km, 가중치) - 안쪽부터
DEFAULT_DENGUE_RINGS: Tuple[Tuple[float, float], ...] = ((0.5, 10.0), (1.0, 5.0), (2.0, 2.0))
DEFAULT_EPIDEMIC_RINGS: Tuple[Tuple[float, float], ...] = ((5.0, 3.0), (10.0, 2.0), (15.0, 1.0))
DENGUE_CONTEXT_RADIUS_KM = 5.0
EPIDEMIC_NEARBY_RADIUS_KM = 10.0

# 클러스터 점수 임계값
CLUSTER_SCORE_VERY_HIGH = 100
CLUSTER_SCORE_HIGH = 50
CLUSTER_SCORE_MEDIUM = 20
CLUSTER_COUNT_HIGH = 2  # 두 번째 링 내 클러스터 수 초과

# 섬 전체 뎅기 환자 수 임계값 (위치 미확인 시)
ISLAND_DENGUE_HIGH = 300
ISLAND_DENGUE_MEDIUM = 150

# 병원 입원 환자 수 임계값
EPIDEMIC_THRESHOLDS: Tuple[Tuple[int, RiskLevel], ...] = ((50, "VeryHigh"), (30, "High"), (15, "Medium"))

# 예측 뎅기 환자 수 임계값
DENGUE_FORECAST_THRESHOLDS: Tuple[Tuple[int, RiskLevel], ...] = ((200, "VeryHigh"), (100, "High"), (50, "Medium"))

# PSI 대역 (상한, 대역, 권고)
PSI_BANDS: Tuple[Tuple[float, PsiBand, str], ...] = (
    (50, "Good", "Normal outdoor activities"),
    (100, "Moderate", "Unusually sensitive people should limit outdoor exertion"),
    (200, "Unhealthy", "Limit prolonged outdoor exertion"),
    (300, "VeryUnhealthy", "Avoid outdoor exertion"),
    (float("inf"), "Hazardous", "Everyone should avoid all outdoor exertion"),
)

PSI_BAND_LEVEL: Dict[str, RiskLevel] = {
    "Good": "Low",
    "Moderate": "Medium",
    "Unhealthy": "High",
    "VeryUnhealthy": "VeryHigh",
    "Hazardous": "VeryHigh",
}

# PSI 예측 시 N95 권고 기준
PSI_MASK_THRESHOLD = 100

DATA_UNAVAILABLE = "data unavailable"

DENGUE_RECOMMENDATIONS: Dict[str, List[str]] = {
    "Low": ["Use mosquito repellent", "Check for standing water"],
    "Medium": ["Increase vigilance", "Use strong repellent", "Wear long sleeves"],
    "High": [
        "Avoid dawn/dusk outdoor activities",
        "Use DEET repellent",
        "Seek immediate medical attention for fever",
    ],
    "VeryHigh": [
        "Avoid dawn/dusk outdoor activities",
        "Use DEET repellent",
        "Seek immediate medical attention for fever",
        "Eliminate all standing water around your home",
    ],
}

EPIDEMIC_RECOMMENDATIONS: Dict[str, List[str]] = {
    "Low": ["Basic hygiene measures", "Hand sanitizing"],
    "Medium": ["Wear masks in crowded areas", "Maintain social distance"],
    "High": ["Avoid crowded places", "Wear masks consistently", "Consider postponing visit"],
    "VeryHigh": [
        "Avoid crowded places",
        "Wear masks consistently",
        "Consider postponing visit",
        "Check hospital visiting restrictions before going",
    ],
}

OVERALL_ADVICE: Dict[str, List[str]] = {
    "High": [
        "Consider postponing non-essential travel",
        "Consult healthcare provider if you have health conditions",
    ],
    "Medium": ["Take extra precautions during your visit"],
    "Low": ["Normal precautions recommended"],
}

# 예측 권고
FORECAST_DENGUE_BULLETS = [
    "Dengue Alert: Enhanced prevention needed",
    "Remove standing water daily",
    "Use DEET repellent when outdoors",
    "Wear long sleeves during dawn/dusk",
]
FORECAST_AIR_SEVERE_BULLETS = [
    "Air Quality Warning: Prepare for poor conditions",
    "N95 masks essential for outdoor activities",
    "Keep windows closed, use air purifiers",
    "Avoid outdoor exercise",
]
FORECAST_AIR_MILD_BULLETS = [
    "Air Quality Warning: Prepare for poor conditions",
    "Consider masks for sensitive individuals",
    "Limit prolonged outdoor activities",
]
FORECAST_EPIDEMIC_BULLETS = [
    "Hospital Load Trend: Increased vigilance recommended",
    "Enhanced hand hygiene protocols",
    "Masks in crowded indoor spaces",
    "Monitor symptoms closely",
]
FORECAST_OVERALL_ADVICE: Dict[str, str] = {
    "High": "High Risk Period: Consider postponing non-essential outdoor activities",
    "Medium": "Moderate Risk: Take standard precautions",
    "Low": "Low Risk: Normal activities with basic precautions",
}

def classify_psi(psi: float) -> PsiBand:
    """PSI 값을 건강 대역으로 분류합니다."""
    for upper, band, _ in PSI_BANDS:
        if psi <= upper:
            return band
    return "Hazardous"

def psi_advice(band: str) -> str:
    """PSI 대역별 권고 문구를 반환합니다."""
    for _, name, advice in PSI_BANDS:
        if name == band:
            return advice
    return PSI_BANDS[-1][2]

def psi_level(psi: float) -> RiskLevel:
    return PSI_BAND_LEVEL[classify_psi(psi)]

def _classify_by_table(value: float, table: Iterable[Tuple[int, RiskLevel]]) -> RiskLevel:
    for threshold, level in table:
        if value > threshold:
            return level
    return "Low"

def classify_epidemic(nearby_count: float) -> RiskLevel:
    """근처 입원 환자 수로 위험 수준을 분류합니다."""
    return _classify_by_table(nearby_count, EPIDEMIC_THRESHOLDS)

def classify_dengue_forecast(predicted: float) -> RiskLevel:
    """예측 뎅기 환자 수로 위험 수준을 분류합니다."""
    return _classify_by_table(predicted, DENGUE_FORECAST_THRESHOLDS)

def classify_island_dengue(total_cases: float) -> RiskLevel:
    """섬 전체 뎅기 환자 수로 위험 수준을 분류합니다."""
    if total_cases > ISLAND_DENGUE_HIGH:
        return "High"
    if total_cases > ISLAND_DENGUE_MEDIUM:
        return "Medium"
    return "Low"

def average_severity(levels: Iterable[str]) -> float:
    values = [SEVERITY.get(level, 1) for level in levels]
    if not values:
        return float(SEVERITY["Low"])
    return sum(values) / len(values)

def classify_overall(levels: Iterable[str]) -> OverallRisk:
    """
    위험 수준 목록을 종합 위험으로 분류합니다.

    Args:
        levels: 위험 요소별 위험 수준

    Returns:
        평균 심각도 3.5 이상 High, 2.5 이상 Medium, 그 외 Low
    """
    avg = average_severity(levels)
    if avg >= OVERALL_HIGH_AT:
        return "High"
    if avg >= OVERALL_MEDIUM_AT:
        return "Medium"
    return "Low"

def dengue_recommendations(level: str) -> List[str]:
    return list(DENGUE_RECOMMENDATIONS.get(level, DENGUE_RECOMMENDATIONS["Low"]))

def epidemic_recommendations(level: str) -> List[str]:
    return list(EPIDEMIC_RECOMMENDATIONS.get(level, EPIDEMIC_RECOMMENDATIONS["Low"]))

def overall_advice(overall: str) -> List[str]:
    return list(OVERALL_ADVICE.get(overall, OVERALL_ADVICE["Low"]))

def horizon_header(horizon_days: int) -> str:
    """예측 기간별 머리말을 반환합니다."""
    if horizon_days == 1:
        return "Tomorrow's Health Forecast:"
    if horizon_days <= 7:
        return f"{horizon_days}-Day Health Outlook:"
    return f"Extended Forecast ({horizon_days} days):"

def unavailable_assessment(kind: HazardKind, reason: Optional[str] = None) -> HazardAssessment:
    """
    데이터가 없을 때 사용할 기본 평가를 생성합니다.

    Args:
        kind: 위험 요소 종류
        reason: 추가 사유

    Returns:
        Low 수준의 "data unavailable" 평가
    """
    rationale = [f"{kind.replace('_', ' ')} {DATA_UNAVAILABLE} - using default assessment"]
    if reason:
        rationale.append(reason)

    if kind == "dengue":
        recommendations = dengue_recommendations("Low")
        return HazardAssessment(hazard_kind=kind, level="Low", primary_metric=0,
                                rationale=rationale, recommendations=recommendations,
                                data_available=False)
    if kind == "air_quality":
        return HazardAssessment(hazard_kind=kind, level="Low", primary_metric=50,
                                rationale=rationale,
                                recommendations=["Unable to fetch current air quality data - using default values"],
                                band="Good", data_available=False)
    return HazardAssessment(hazard_kind=kind, level="Low", primary_metric=0,
                            rationale=rationale,
                            recommendations=["Follow standard infection-control precautions"],
                            data_available=False)
