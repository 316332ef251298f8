# healthpulse/settings.py
from __future__ import annotations
import os
from typing import List, Tuple
from pydantic import BaseModel, Field, field_validator

from healthpulse.core.clusters import validate_rings
from healthpulse.core.thresholds import (
    DEFAULT_DENGUE_RINGS,
    DEFAULT_EPIDEMIC_RINGS,
    DENGUE_CONTEXT_RADIUS_KM,
    EPIDEMIC_NEARBY_RADIUS_KM,
)

def _b(name, default=False): return os.getenv(name, str(default)).lower() in ("1","true","yes","on")

def _check_rings(v: List[Tuple[float, float]]) -> List[Tuple[float, float]]:
    validate_rings(v)
    return [(float(r), float(w)) for r, w in v]

class GazetteerConfig(BaseModel):
    file_path: str = ""                       # 비어 있으면 내장 사전 사용

class DenguePolicy(BaseModel):
    rings: List[Tuple[float, float]] = Field(default_factory=lambda: list(DEFAULT_DENGUE_RINGS))
    context_radius_km: float = DENGUE_CONTEXT_RADIUS_KM
    influence_weight: float = 0.3

    @field_validator("rings")
    @classmethod
    def check_rings(cls, v):
        return _check_rings(v)

class EpidemicPolicy(BaseModel):
    rings: List[Tuple[float, float]] = Field(default_factory=lambda: list(DEFAULT_EPIDEMIC_RINGS))
    nearby_radius_km: float = EPIDEMIC_NEARBY_RADIUS_KM

    @field_validator("rings")
    @classmethod
    def check_rings(cls, v):
        return _check_rings(v)

class AirPolicy(BaseModel):
    interpolate: bool = False                 # 측정소 역거리 보간 사용 여부

class ForecastConfig(BaseModel):
    max_horizon_days: int = Field(default=30, ge=1)
    trend_band: float = Field(default=0.15, ge=0.0, le=1.0)
    weather_seed: int | None = None           # None이면 결정적 계절 모델

class Reliability(BaseModel):
    provider_timeout_sec: float = 5.0
    provider_max_retries: int = 2
    backoff_initial_sec: float = 0.2
    backoff_max_sec: float = 2.0
    dengue_ttl_sec: float = 3600
    psi_ttl_sec: float = 3600
    hospital_ttl_sec: float = 86400

class Observability(BaseModel):
    service_name: str = "health-pulse"
    build_version: str = "0.1.0"
    log_level: str = "INFO"
    metrics_enabled: bool = True

class Settings(BaseModel):
    gazetteer: GazetteerConfig = Field(default_factory=GazetteerConfig)
    dengue: DenguePolicy = Field(default_factory=DenguePolicy)
    epidemic: EpidemicPolicy = Field(default_factory=EpidemicPolicy)
    air: AirPolicy = Field(default_factory=AirPolicy)
    forecast: ForecastConfig = Field(default_factory=ForecastConfig)
    reliability: Reliability = Field(default_factory=Reliability)
    observability: Observability = Field(default_factory=Observability)

def build_settings() -> Settings:
    """환경변수로 기본 설정을 덮어씁니다."""
    s = Settings()

    # 지명 사전
    s.gazetteer.file_path = os.getenv("HP_GAZETTEER_FILE", s.gazetteer.file_path)

    # 대기질
    s.air.interpolate = _b("HP_AIR_INTERPOLATE", s.air.interpolate)

    # 예측
    s.forecast.max_horizon_days = int(os.getenv("HP_MAX_HORIZON_DAYS", s.forecast.max_horizon_days))
    s.forecast.trend_band = float(os.getenv("HP_TREND_BAND", s.forecast.trend_band))
    seed = os.getenv("HP_WEATHER_SEED")
    if seed not in (None, ""):
        s.forecast.weather_seed = int(seed)

    # 신뢰성
    s.reliability.provider_timeout_sec = float(os.getenv("HP_PROVIDER_TIMEOUT_SEC", s.reliability.provider_timeout_sec))
    s.reliability.provider_max_retries = int(os.getenv("HP_PROVIDER_MAX_RETRIES", s.reliability.provider_max_retries))

    # 관측성
    s.observability.log_level = os.getenv("HP_LOG_LEVEL", s.observability.log_level)
    s.observability.metrics_enabled = _b("HP_METRICS_ENABLED", s.observability.metrics_enabled)

    # 재검증 (pydantic 기본 모델은 할당 시 검증하지 않음)
    return Settings.model_validate(s.model_dump())
