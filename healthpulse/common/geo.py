"""
Geographic utilities for Health Pulse.

This module provides great-circle distance calculation,
coordinate validation and polygon centroid reduction.
"""

import math
from typing import List, Sequence, Tuple

# 지구 반지름 (킬로미터)
EARTH_RADIUS_KM = 6371.0

def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    두 지점 간의 Haversine 거리를 계산합니다 (킬로미터).

    Args:
        lat1: 첫 번째 지점의 위도
        lon1: 첫 번째 지점의 경도
        lat2: 두 번째 지점의 위도
        lon2: 두 번째 지점의 경도

    Returns:
        두 지점 간의 거리 (킬로미터)
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = lat2_rad - lat1_rad
    dlon = math.radians(lon2 - lon1)

    a = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2)
    # 부동소수점 오차로 1을 넘는 경우 방지
    a = min(1.0, max(0.0, a))

    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))

def distance_km(a, b) -> float:
    """
    두 좌표 간 거리를 계산합니다.

    Args:
        a: lat/lng 속성을 가진 좌표 또는 (위도, 경도) 튜플
        b: lat/lng 속성을 가진 좌표 또는 (위도, 경도) 튜플

    Returns:
        거리 (킬로미터)
    """
    lat1, lon1 = _as_pair(a)
    lat2, lon2 = _as_pair(b)
    return haversine_distance(lat1, lon1, lat2, lon2)

def _as_pair(point) -> Tuple[float, float]:
    if hasattr(point, "lat") and hasattr(point, "lng"):
        return float(point.lat), float(point.lng)
    lat, lon = point
    return float(lat), float(lon)

def validate_coordinates(lat: float, lon: float) -> bool:
    """
    좌표가 유효한지 확인합니다.

    Args:
        lat: 위도
        lon: 경도

    Returns:
        좌표가 유효하면 True
    """
    if lat is None or lon is None:
        return False
    if math.isnan(lat) or math.isnan(lon):
        return False
    return -90 <= lat <= 90 and -180 <= lon <= 180

def polygon_centroid(ring: Sequence[Sequence[float]]) -> Tuple[float, float]:
    """
    폴리곤 꼭짓점의 평균 좌표를 계산합니다.

    Args:
        ring: 폴리곤의 꼭짓점들 [(경도, 위도), ...]

    Returns:
        (위도, 경도)
    """
    points: List[Tuple[float, float]] = [(float(p[0]), float(p[1])) for p in ring]
    if not points:
        raise ValueError("빈 폴리곤의 중심을 계산할 수 없습니다")

    # 닫힌 링의 마지막 꼭짓점은 첫 꼭짓점과 같으므로 제외
    if len(points) > 1 and points[0] == points[-1]:
        points = points[:-1]

    lon = sum(p[0] for p in points) / len(points)
    lat = sum(p[1] for p in points) / len(points)
    return lat, lon
