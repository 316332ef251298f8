"""
Core domain models for Health Pulse.

This module defines the immutable request-scoped domain models
using Pydantic v2 for type safety and validation.
"""

from datetime import date
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

# 위험 수준 타입 정의
RiskLevel = Literal["Low", "Medium", "High", "VeryHigh"]
OverallRisk = Literal["Low", "Medium", "High"]
HazardKind = Literal["dengue", "air_quality", "epidemic"]
PsiBand = Literal["Good", "Moderate", "Unhealthy", "VeryUnhealthy", "Hazardous"]
Trend = Literal["Increasing", "Decreasing", "Stable", "Improving", "Worsening"]
Season = Literal["Hot", "Wet", "Cool"]

HAZARD_ORDER: Tuple[HazardKind, ...] = ("dengue", "air_quality", "epidemic")

class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)

class Coordinate(_Frozen):
    """WGS-84 좌표 모델"""
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)

class NamedLocation(_Frozen):
    """지명 사전 항목 모델"""
    name: str
    coordinate: Coordinate

class HazardCluster(_Frozen):
    """위험 클러스터 모델 (뎅기 클러스터, 병원 입원 집계)"""
    id: str
    label: str
    coordinate: Coordinate
    magnitude: int = Field(ge=0)

class DistanceRing(_Frozen):
    """거리 링 정책 값"""
    radius_km: float = Field(gt=0)
    weight: float = Field(ge=0)

class ClusterContext(_Frozen):
    """근처 클러스터와 거리"""
    cluster: HazardCluster
    distance_km: float

class ClusterScore(_Frozen):
    """거리 가중 클러스터 점수 결과"""
    weighted_score: float
    bucket_counts: Dict[int, int]
    bucket_magnitude_sums: Dict[int, int]
    nearest: Optional[HazardCluster] = None
    nearest_distance_km: Optional[float] = None
    context: List[ClusterContext] = Field(default_factory=list)

class PsiSnapshot(_Frozen):
    """PSI 스냅샷 (전국 + 지역별)"""
    national: float = Field(ge=0)
    regions: Dict[str, float] = Field(default_factory=dict)

    @field_validator("regions")
    @classmethod
    def lower_region_keys(cls, v: Dict[str, float]) -> Dict[str, float]:
        return {str(k).lower(): float(val) for k, val in v.items()}

class HazardAssessment(_Frozen):
    """위험 요소별 현재 평가 결과"""
    hazard_kind: HazardKind
    level: RiskLevel
    primary_metric: float
    rationale: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    band: Optional[PsiBand] = None
    data_available: bool = True

class LocationAnalysis(_Frozen):
    """위치 분석 결과"""
    location: Optional[NamedLocation] = None
    assessments: List[HazardAssessment]
    overall_risk: OverallRisk
    travel_advice: List[str] = Field(default_factory=list)

class HazardForecast(_Frozen):
    """위험 요소별 예측 결과"""
    hazard_kind: HazardKind
    predicted_value: float
    confidence: int = Field(ge=0, le=100)
    trend: Trend
    level: RiskLevel
    factors: List[str] = Field(default_factory=list)
    data_available: bool = True

class Prediction(_Frozen):
    """N일 후 예측 결과"""
    horizon_days: int
    target_date: date
    location: Optional[NamedLocation] = None
    per_hazard: List[HazardForecast]
    overall_risk: OverallRisk
    overall_confidence: int = Field(ge=0, le=100)
    key_factors: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)

class ForecastBaseline(_Frozen):
    """예측 입력 스냅샷 (None은 데이터 없음)"""
    dengue_count: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    psi: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    hospitalizations: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    dengue_clusters: List[HazardCluster] = Field(default_factory=list)
    hyperlocal: bool = False
    location: Optional[NamedLocation] = None
