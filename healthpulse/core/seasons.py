"""
Seasonal calendar and weather uncertainty model for Health Pulse.

The weather multiplier and weekly trend used by the forecast are
supplied through a WeatherModel so that callers choose between a
deterministic seasonal lookup and a seeded, bounded random draw.
"""

import random
from datetime import date
from typing import Dict, Optional, Protocol, Tuple

from .models import HazardKind, Season

# 계절별 위험 요소 보정 (1 + offset 으로 적용)
SEASONAL_OFFSETS: Dict[str, Dict[str, float]] = {
    "dengue": {"Wet": 0.3, "Hot": 0.1, "Cool": -0.1},
    "air_quality": {"Hot": 0.1, "Cool": 0.0, "Wet": -0.05},
    "epidemic": {"Cool": 0.2, "Wet": 0.05, "Hot": -0.1},
}

# 계절별 날씨 배수 범위 (하한, 상한)
WEATHER_RANGES: Dict[str, Dict[str, Tuple[float, float]]] = {
    "dengue": {"Wet": (1.2, 1.4), "Hot": (1.1, 1.25), "Cool": (0.9, 1.0)},
    "air_quality": {"Hot": (1.3, 1.6), "Cool": (1.1, 1.3), "Wet": (0.8, 0.9)},
    "epidemic": {"Hot": (1.0, 1.0), "Wet": (1.0, 1.0), "Cool": (1.0, 1.0)},
}

# 주간 추세 변동 폭 (비율, 중심 0)
WEEKLY_TREND_SPAN: Dict[str, float] = {
    "dengue": 0.05,
    "air_quality": 0.08,
    "epidemic": 0.03,
}

# 연무 기본 위험 (뜨거운 계절 / 그 외)
HAZE_BASE_HOT = 0.2
HAZE_BASE_OTHER = 0.05

def season_for(day: date) -> Season:
    """
    날짜의 계절을 반환합니다.

    3-5월 Hot, 6-10월 Wet, 11-2월 Cool
    """
    if 3 <= day.month <= 5:
        return "Hot"
    if 6 <= day.month <= 10:
        return "Wet"
    return "Cool"

def seasonal_offset(hazard: HazardKind, season: Season) -> float:
    return SEASONAL_OFFSETS[hazard][season]

def is_weekend(day: date) -> bool:
    return day.weekday() >= 5

def day_of_week_factor(day: date) -> float:
    """요일별 대기질 배수 (주말 교통량 감소)"""
    weekday = day.weekday()
    if weekday >= 5:
        return 0.9
    if weekday in (0, 4):  # 월, 금
        return 1.05
    return 1.0

def crowding_factor(day: date) -> float:
    """
    명절/행사 및 주말 인파 보정값을 반환합니다 (1 + factor 로 적용).

    설 연휴(2월 1-15일), 디파발리(11월), 크리스마스(12월 20일 이후) 0.3,
    주말 0.1, 그 외 0.
    """
    if (day.month == 2 and day.day <= 15) or day.month == 11 or (day.month == 12 and day.day >= 20):
        return 0.3
    if is_weekend(day):
        return 0.1
    return 0.0

def haze_factor(season: Season, horizon_days: int) -> float:
    """연무 위험 보정값 (예측 기간이 길수록 불확실성 증가)"""
    base = HAZE_BASE_HOT if season == "Hot" else HAZE_BASE_OTHER
    if horizon_days <= 3:
        return base * 0.5
    if horizon_days <= 7:
        return base
    return base * 1.5

class WeatherModel(Protocol):
    """날씨 불확실성 모델 인터페이스"""

    def weather_multiplier(self, hazard: HazardKind, season: Season) -> float:
        """
        계절 조건부 날씨 배수를 반환합니다.

        Args:
            hazard: 위험 요소 종류
            season: 대상 날짜의 계절

        Returns:
            WEATHER_RANGES 범위 안의 배수
        """
        ...

    def weekly_trend(self, hazard: HazardKind) -> float:
        """주간 추세 비율 (WEEKLY_TREND_SPAN 범위 안)"""
        ...

class SeasonalWeather:
    """결정적 계절 모델 - 범위 중앙값, 추세 0"""

    def weather_multiplier(self, hazard: HazardKind, season: Season) -> float:
        low, high = WEATHER_RANGES[hazard][season]
        return (low + high) / 2

    def weekly_trend(self, hazard: HazardKind) -> float:
        return 0.0

class SeededWeather:
    """시드 고정 난수 모델 - 범위 안에서 균등 추출"""

    def __init__(self, seed: Optional[int] = None, *, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random(seed)

    def weather_multiplier(self, hazard: HazardKind, season: Season) -> float:
        low, high = WEATHER_RANGES[hazard][season]
        return self.rng.uniform(low, high)

    def weekly_trend(self, hazard: HazardKind) -> float:
        span = WEEKLY_TREND_SPAN[hazard]
        return (self.rng.random() - 0.5) * span

def weather_from_seed(seed: Optional[int]) -> WeatherModel:
    """시드가 없으면 결정적 모델, 있으면 시드 고정 모델을 반환합니다."""
    if seed is None:
        return SeasonalWeather()
    return SeededWeather(seed)
