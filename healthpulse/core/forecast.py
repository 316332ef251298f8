"""
Short-horizon health forecast engine for Health Pulse.

One code path covers both hyperlocal and island-wide forecasts: the
baseline step scores clusters around a resolved location when there
is one and otherwise falls back to island-wide aggregates. Every
multiplier that used to be random noise comes from an injected
WeatherModel, so a forecast is reproducible for a given model.
"""

import math
from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence

from healthpulse.observability.logging_setup import get_logger
from .assessors import nearby_admissions, regional_psi
from .clusters import outermost_magnitude, score_clusters
from .errors import InvalidHorizon
from .models import (
    ForecastBaseline,
    HazardCluster,
    HazardForecast,
    NamedLocation,
    Prediction,
    PsiSnapshot,
    Trend,
)
from .seasons import (
    SeasonalWeather,
    WeatherModel,
    crowding_factor,
    day_of_week_factor,
    haze_factor,
    season_for,
    seasonal_offset,
)
from .thresholds import (
    FORECAST_AIR_MILD_BULLETS,
    FORECAST_AIR_SEVERE_BULLETS,
    FORECAST_DENGUE_BULLETS,
    FORECAST_EPIDEMIC_BULLETS,
    FORECAST_OVERALL_ADVICE,
    PSI_MASK_THRESHOLD,
    classify_dengue_forecast,
    classify_epidemic,
    classify_overall,
    horizon_header,
    psi_level,
)

log = get_logger("healthpulse.forecast")

DEFAULT_MAX_HORIZON_DAYS = 30
DEFAULT_TREND_BAND = 0.15

# 기본 신뢰도
CONFIDENCE_DENGUE_HYPERLOCAL = 0.80
CONFIDENCE_DENGUE_ISLAND = 0.65
CONFIDENCE_AIR = 0.70
CONFIDENCE_EPIDEMIC = 0.65

# 데이터 없음 기본 예측값
DEFAULT_DENGUE_FORECAST = 0.0
DEFAULT_PSI_FORECAST = 55.0
DEFAULT_HOSPITALIZATION_FORECAST = 30.0
DEFAULT_CONFIDENCE = 50

PSI_FLOOR = 20

def validate_horizon(horizon_days, max_days: int = DEFAULT_MAX_HORIZON_DAYS) -> int:
    """
    예측 기간을 검증합니다.

    Args:
        horizon_days: 예측 기간 (일)
        max_days: 허용 최대 기간

    Returns:
        검증된 예측 기간

    Raises:
        InvalidHorizon: 정수가 아니거나 1 미만 또는 max_days 초과
    """
    if isinstance(horizon_days, bool) or not isinstance(horizon_days, int):
        raise InvalidHorizon(horizon_days, max_days)
    if horizon_days < 1 or horizon_days > max_days:
        raise InvalidHorizon(horizon_days, max_days)
    return horizon_days

# ---- 기준값 ----

def build_baseline(
    location: Optional[NamedLocation],
    clusters: Optional[Sequence[HazardCluster]],
    psi: Optional[PsiSnapshot],
    hospitals: Optional[Sequence[HazardCluster]],
    settings=None,
    text: Optional[str] = None,
) -> ForecastBaseline:
    """
    현재 스냅샷에서 예측 기준값을 만듭니다.

    Args:
        location: 변환된 위치 (None이면 섬 전체 기준)
        clusters: 뎅기 클러스터 스냅샷
        psi: PSI 스냅샷
        hospitals: 병원 입원 집계 스냅샷
        settings: Settings (None이면 기본값)
        text: 원본 입력 (대기질 지역 키워드 매핑용)

    Returns:
        예측 기준값 (없는 데이터는 None)
    """
    if settings is None:
        from healthpulse.settings import Settings
        settings = Settings()

    dengue_count: Optional[float] = None
    local_clusters: List[HazardCluster] = []
    hyperlocal = False

    if clusters is not None:
        if location is not None:
            score = score_clusters(
                location.coordinate, clusters, settings.dengue.rings,
                context_radius_km=settings.dengue.context_radius_km,
            )
            influence = sum(
                ctx.cluster.magnitude / (ctx.distance_km + 1) for ctx in score.context
            )
            dengue_count = outermost_magnitude(score) + settings.dengue.influence_weight * influence
            outer_radius = settings.dengue.rings[-1][0]
            local_clusters = [
                ctx.cluster for ctx in score.context if ctx.distance_km <= outer_radius
            ]
            hyperlocal = True
        else:
            dengue_count = float(sum(c.magnitude for c in clusters))
            local_clusters = list(clusters)

    psi_value: Optional[float] = None
    if psi is not None:
        psi_value, _ = regional_psi(
            location, psi,
            text=text if text is not None else (location.name if location else None),
            interpolate=settings.air.interpolate,
        )

    hospitalizations: Optional[float] = None
    if hospitals is not None:
        if location is not None:
            hospitalizations = float(
                nearby_admissions(location, hospitals, settings.epidemic.nearby_radius_km)
            )
        else:
            total = sum(h.magnitude for h in hospitals)
            hospitalizations = round(total / max(len(hospitals), 1), 1)

    return ForecastBaseline(
        dengue_count=dengue_count,
        psi=psi_value,
        hospitalizations=hospitalizations,
        dengue_clusters=local_clusters,
        hyperlocal=hyperlocal,
        location=location,
    )

# ---- 보정 요소 ----

def dengue_growth_rate(clusters: Sequence[HazardCluster], hyperlocal: bool) -> float:
    """
    클러스터 밀도와 평균 규모로 뎅기 성장률을 추정합니다.

    Args:
        clusters: 기준 클러스터 (근처 또는 섬 전체)
        hyperlocal: 근처 클러스터 기준 여부

    Returns:
        성장률 (0.15 급속 확산 ~ 0.02 완만)
    """
    if not clusters:
        return 0.0
    n = len(clusters)
    avg = sum(c.magnitude for c in clusters) / n

    if hyperlocal:
        if avg > 15 and n > 2:
            return 0.15
        if avg > 10:
            return 0.10
        if avg > 5:
            return 0.05
        return 0.02

    if n > 5 and avg > 30:
        return 0.15
    if n > 3 or avg > 20:
        return 0.08
    return 0.02

def stability(factor: float) -> float:
    """배수가 1.0에서 멀수록 낮아지는 안정도 (0.5 하한)"""
    return max(0.5, 1 - abs(factor - 1) * 0.5)

def confidence_from(base: float, factors: Iterable[float]) -> int:
    """
    보정 배수의 안정도로 신뢰도를 계산합니다.

    Args:
        base: 기본 신뢰도 (0~1)
        factors: 적용된 보정 배수

    Returns:
        0~100 으로 제한된 신뢰도
    """
    values = [stability(f) for f in factors]
    avg = sum(values) / len(values) if values else 1.0
    raw = base * avg * 100
    if math.isnan(raw):
        return 0
    return int(round(min(100.0, max(0.0, raw))))

def trend_label(baseline: float, predicted: float, band: float, *, air: bool = False) -> Trend:
    """
    예측값과 기준값을 비교해 추세를 분류합니다.

    기준값이 0이면 예측값이 양수일 때만 상승으로 봅니다.
    """
    up, down = ("Worsening", "Improving") if air else ("Increasing", "Decreasing")
    if baseline <= 0:
        return up if predicted > 0 else "Stable"
    if predicted > baseline * (1 + band):
        return up
    if predicted < baseline * (1 - band):
        return down
    return "Stable"

# ---- 위험 요소별 예측 ----

def _finite_or_baseline(raw: float, current: float, kind: str) -> float:
    """보정 결과가 유한하지 않으면 (inf, NaN) 현재값을 그대로 사용합니다."""
    if math.isfinite(raw):
        return raw
    log.warning(f"보정 배수 사용 불가 - 현재값 유지 hazard:{kind} raw:{raw}")
    return current

def _default_forecast(kind, value: float, level) -> HazardForecast:
    return HazardForecast(
        hazard_kind=kind,
        predicted_value=value,
        confidence=DEFAULT_CONFIDENCE,
        trend="Stable",
        level=level,
        factors=[f"Current {kind.replace('_', ' ')} data unavailable - using default forecast"],
        data_available=False,
    )

def forecast_dengue(
    baseline: ForecastBaseline,
    target: date,
    weather: WeatherModel,
    trend_band: float = DEFAULT_TREND_BAND,
) -> HazardForecast:
    if baseline.dengue_count is None:
        return _default_forecast("dengue", DEFAULT_DENGUE_FORECAST, "Low")

    season = season_for(target)
    seasonal = seasonal_offset("dengue", season)
    multiplier = weather.weather_multiplier("dengue", season)
    weekly = weather.weekly_trend("dengue")
    growth = dengue_growth_rate(baseline.dengue_clusters, baseline.hyperlocal)

    current = baseline.dengue_count
    raw = current * (1 + weekly) * multiplier * (1 + seasonal) * (1 + growth)
    predicted = float(max(0, round(_finite_or_baseline(raw, current, "dengue"))))

    if baseline.hyperlocal:
        base_conf = CONFIDENCE_DENGUE_HYPERLOCAL
        name = baseline.location.name if baseline.location else "location"
        factors = [f"{name}: {current:.0f} weighted cases nearby, {len(baseline.dengue_clusters)} active clusters"]
    else:
        base_conf = CONFIDENCE_DENGUE_ISLAND
        factors = [f"Island-wide: {current:.0f} total cases", "General Singapore forecast"]
    factors += [
        f"Seasonal factor: {'High risk period (wet season)' if seasonal > 0 else 'Lower risk period'}",
        f"Weather impact: {'Favorable for mosquito breeding' if multiplier > 1 else 'Less favorable conditions'}",
        f"Growth pattern: {'Rapid expansion expected' if growth > 0.1 else 'Steady progression'}",
    ]

    return HazardForecast(
        hazard_kind="dengue",
        predicted_value=predicted,
        confidence=confidence_from(base_conf, (1 + seasonal, multiplier)),
        trend=trend_label(current, predicted, trend_band),
        level=classify_dengue_forecast(predicted),
        factors=factors,
    )

def forecast_air(
    baseline: ForecastBaseline,
    target: date,
    horizon_days: int,
    weather: WeatherModel,
    trend_band: float = DEFAULT_TREND_BAND,
) -> HazardForecast:
    if baseline.psi is None:
        return _default_forecast("air_quality", DEFAULT_PSI_FORECAST, psi_level(DEFAULT_PSI_FORECAST))

    season = season_for(target)
    seasonal = seasonal_offset("air_quality", season)
    multiplier = weather.weather_multiplier("air_quality", season)
    weekly = weather.weekly_trend("air_quality")
    haze = haze_factor(season, horizon_days)
    dow = day_of_week_factor(target)

    current = baseline.psi
    raw = current * (1 + weekly) * multiplier * (1 + seasonal) * (1 + haze) * dow
    predicted = float(max(PSI_FLOOR, round(_finite_or_baseline(raw, current, "air_quality"))))

    factors = [
        f"Current PSI: {current:g}",
        f"Weather pattern: {'Stagnant conditions expected' if multiplier > 1 else 'Good air circulation'}",
        f"Haze risk: {'Elevated due to regional factors' if season == 'Hot' else 'Low transboundary haze risk'}",
        f"Day of week: {'Lighter weekend traffic' if dow < 1 else 'Weekday traffic'}",
    ]

    return HazardForecast(
        hazard_kind="air_quality",
        predicted_value=predicted,
        confidence=confidence_from(CONFIDENCE_AIR, (1 + seasonal, multiplier)),
        trend=trend_label(current, predicted, trend_band, air=True),
        level=psi_level(predicted),
        factors=factors,
    )

def forecast_epidemic(
    baseline: ForecastBaseline,
    target: date,
    weather: WeatherModel,
    trend_band: float = DEFAULT_TREND_BAND,
) -> HazardForecast:
    if baseline.hospitalizations is None:
        return _default_forecast(
            "epidemic", DEFAULT_HOSPITALIZATION_FORECAST, classify_epidemic(DEFAULT_HOSPITALIZATION_FORECAST)
        )

    season = season_for(target)
    seasonal = seasonal_offset("epidemic", season)
    multiplier = weather.weather_multiplier("epidemic", season)
    weekly = weather.weekly_trend("epidemic")
    crowd = crowding_factor(target)

    current = baseline.hospitalizations
    raw = current * (1 + weekly) * multiplier * (1 + seasonal) * (1 + crowd)
    predicted = float(max(0, round(_finite_or_baseline(raw, current, "epidemic"))))

    factors = [
        f"Current hospitalizations: {current:g}",
        f"Seasonal pattern: {'Higher risk period' if seasonal > 0 else 'Lower risk period'}",
        f"Social factors: {'Increased gatherings expected' if crowd > 0 else 'Normal social activity'}",
    ]

    return HazardForecast(
        hazard_kind="epidemic",
        predicted_value=predicted,
        confidence=confidence_from(CONFIDENCE_EPIDEMIC, (1 + seasonal, multiplier)),
        trend=trend_label(current, predicted, trend_band),
        level=classify_epidemic(predicted),
        factors=factors,
    )

# ---- 종합 ----

def key_factors(per_hazard: Sequence[HazardForecast]) -> List[str]:
    """상승 추세 위험 요소 목록"""
    labels = {
        "dengue": "Rising dengue trend detected",
        "air_quality": "Air quality deterioration expected",
        "epidemic": "Hospital load trending upward",
    }
    return [
        labels[f.hazard_kind] for f in per_hazard
        if f.trend in ("Increasing", "Worsening")
    ]

def forecast_recommendations(
    per_hazard: Sequence[HazardForecast],
    overall: str,
    horizon_days: int,
) -> List[str]:
    """
    예측 권고를 생성합니다.

    기간 머리말, 상승 추세 위험 요소별 대응, 종합 권고 순서입니다.
    """
    recs = [horizon_header(horizon_days)]
    for f in per_hazard:
        if f.hazard_kind == "dengue" and f.trend == "Increasing":
            recs.extend(FORECAST_DENGUE_BULLETS)
        elif f.hazard_kind == "air_quality" and f.trend == "Worsening":
            if f.predicted_value > PSI_MASK_THRESHOLD:
                recs.extend(FORECAST_AIR_SEVERE_BULLETS)
            else:
                recs.extend(FORECAST_AIR_MILD_BULLETS)
        elif f.hazard_kind == "epidemic" and f.trend == "Increasing":
            recs.extend(FORECAST_EPIDEMIC_BULLETS)
    recs.append(FORECAST_OVERALL_ADVICE[overall])
    return recs

def forecast(
    baseline: ForecastBaseline,
    horizon_days: int,
    *,
    today: Optional[date] = None,
    weather: Optional[WeatherModel] = None,
    trend_band: float = DEFAULT_TREND_BAND,
    max_horizon_days: int = DEFAULT_MAX_HORIZON_DAYS,
) -> Prediction:
    """
    N일 후 건강 위험을 예측합니다.

    Args:
        baseline: build_baseline 결과
        horizon_days: 예측 기간 (일)
        today: 기준 날짜 (None이면 오늘)
        weather: 날씨 모델 (None이면 결정적 계절 모델)
        trend_band: 추세 판단 불감대 비율
        max_horizon_days: 허용 최대 기간

    Returns:
        예측 결과

    Raises:
        InvalidHorizon: 예측 기간이 잘못된 경우
    """
    validate_horizon(horizon_days, max_horizon_days)
    weather = weather or SeasonalWeather()
    today = today or date.today()
    target = today + timedelta(days=horizon_days)

    per_hazard = [
        forecast_dengue(baseline, target, weather, trend_band),
        forecast_air(baseline, target, horizon_days, weather, trend_band),
        forecast_epidemic(baseline, target, weather, trend_band),
    ]
    overall = classify_overall(f.level for f in per_hazard)
    confidence = min(f.confidence for f in per_hazard)

    log.debug(
        "예측 완료",
        horizon=horizon_days,
        overall=overall,
        confidence=confidence,
        hyperlocal=baseline.hyperlocal,
    )

    return Prediction(
        horizon_days=horizon_days,
        target_date=target,
        location=baseline.location,
        per_hazard=per_hazard,
        overall_risk=overall,
        overall_confidence=confidence,
        key_factors=key_factors(per_hazard),
        recommendations=forecast_recommendations(per_hazard, overall, horizon_days),
    )
