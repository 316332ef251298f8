"""
Hazard data source adapters for Health Pulse.

This module converts raw provider payloads (dengue cluster GeoJSON,
NEA PSI readings, hospital admission records) into engine snapshots,
and provides an in-memory source for fixed snapshots.
"""

from typing import Any, Dict, Generic, Iterable, List, Mapping, Optional, Tuple, TypeVar

from healthpulse.common.geo import polygon_centroid, validate_coordinates
from healthpulse.core.errors import ProviderUnavailable
from healthpulse.core.models import Coordinate, HazardCluster, PsiSnapshot
from healthpulse.observability.logging_setup import get_logger

T = TypeVar("T")

log = get_logger("healthpulse.sources")

PSI_REGIONS = ("north", "south", "east", "west", "central")

# 지역 PSI = 오염물질 하위 지수 중 최댓값
PSI_SUB_INDICES = (
    "co_sub_index",
    "so2_sub_index",
    "no2_one_hour_max",
    "pm10_sub_index",
    "pm25_sub_index",
    "o3_sub_index",
)

class StaticSource(Generic[T]):
    """고정 스냅샷 제공자 (테스트/오프라인용)"""

    def __init__(self, value: Optional[T] = None, error: Optional[BaseException] = None):
        self.value = value
        self.error = error
        self.calls = 0

    async def fetch(self) -> T:
        self.calls += 1
        if self.error is not None:
            raise self.error
        if self.value is None:
            raise ProviderUnavailable("static", "no snapshot configured")
        return self.value

def _outer_ring(geometry: Mapping[str, Any]):
    gtype = geometry.get("type")
    coords = geometry.get("coordinates") or []
    if gtype == "Polygon":
        return coords[0] if coords else []
    if gtype == "MultiPolygon":
        return coords[0][0] if coords and coords[0] else []
    raise ValueError(f"지원하지 않는 geometry 타입: {gtype}")

def dengue_clusters_from_geojson(collection: Mapping[str, Any]) -> List[HazardCluster]:
    """
    뎅기 클러스터 GeoJSON을 클러스터 목록으로 변환합니다.

    폴리곤은 꼭짓점 평균(중심점)으로 축약합니다. 잘못된 feature는 경고 후 건너뜁니다.

    Args:
        collection: FeatureCollection (properties: OBJECTID, LOCALITY, CASE_SIZE)

    Returns:
        뎅기 클러스터 목록
    """
    features = collection.get("features")
    if features is None:
        raise ValueError("GeoJSON에 features가 없습니다")

    clusters: List[HazardCluster] = []
    for index, feature in enumerate(features):
        props = feature.get("properties") or {}
        try:
            ring = _outer_ring(feature.get("geometry") or {})
            lat, lng = polygon_centroid(ring)
            magnitude = int(props.get("CASE_SIZE") or 0)
        except (ValueError, TypeError, IndexError) as e:
            log.warning(f"뎅기 feature {index} 건너뜀: {e}")
            continue
        if not validate_coordinates(lat, lng) or magnitude < 0:
            log.warning(f"뎅기 feature {index} 값 범위 초과: lat={lat}, lng={lng}, cases={magnitude}")
            continue

        clusters.append(HazardCluster(
            id=f"cluster_{props.get('OBJECTID') or index + 1}",
            label=str(props.get("LOCALITY") or "Unknown Location"),
            coordinate=Coordinate(lat=lat, lng=lng),
            magnitude=magnitude,
        ))

    log.debug(f"뎅기 클러스터 변환 완료 count:{len(clusters)}")
    return clusters

def _highest_sub_index(readings: Mapping[str, Mapping[str, Any]], region: str) -> Optional[float]:
    values = []
    for key in PSI_SUB_INDICES:
        value = (readings.get(key) or {}).get(region)
        if value is not None:
            values.append(float(value))
    return max(values) if values else None

def psi_snapshot_from_readings(payload: Mapping[str, Any]) -> PsiSnapshot:
    """
    NEA PSI 응답을 PSI 스냅샷으로 변환합니다.

    Args:
        payload: API 응답 전체 ({"code": 0, "data": {...}}) 또는 data 부분

    Returns:
        전국/지역별 PSI 스냅샷

    Raises:
        ValueError: 오류 응답이거나 측정값이 없는 경우
    """
    if "code" in payload:
        if payload.get("code") != 0:
            raise ValueError(payload.get("errorMsg") or "PSI 응답 오류")
        payload = payload.get("data") or {}

    items = payload.get("items") or []
    if not items:
        raise ValueError("PSI 측정값이 없습니다")

    readings = items[0].get("readings") or {}
    # 측정값이 없는 지역은 제외
    regions: Dict[str, float] = {}
    for region in PSI_REGIONS:
        value = _highest_sub_index(readings, region)
        if value is not None:
            regions[region] = value
        else:
            log.warning(f"PSI 지역 측정값 없음 region:{region}")

    national = _highest_sub_index(readings, "national")
    if national is None:
        if not regions:
            raise ValueError("PSI 측정값이 없습니다")
        national = max(regions.values())
    return PsiSnapshot(national=national, regions=regions)

def hospital_clusters_from_admissions(records: Iterable[Mapping[str, Any]]) -> List[HazardCluster]:
    """
    환자 입원 기록을 병원별 클러스터로 집계합니다.

    병원 이름과 좌표가 같은 기록을 묶고, 상태가 Hospitalised 인 기록 수를 규모로 사용합니다.

    Args:
        records: {"hospital", "status", "coordinates": [lng, lat]} 기록

    Returns:
        병원 클러스터 목록 (처음 나타난 순서)
    """
    groups: Dict[Tuple[str, float, float], int] = {}
    for record in records:
        try:
            lng, lat = (float(v) for v in record["coordinates"][:2])
            hospital = str(record["hospital"])
        except (KeyError, TypeError, ValueError) as e:
            log.warning(f"입원 기록 건너뜀: {e!r}")
            continue
        key = (hospital, lat, lng)
        groups.setdefault(key, 0)
        if str(record.get("status", "")).lower() == "hospitalised":
            groups[key] += 1

    return [
        HazardCluster(
            id=f"hospital_{i + 1}",
            label=hospital,
            coordinate=Coordinate(lat=lat, lng=lng),
            magnitude=count,
        )
        for i, ((hospital, lat, lng), count) in enumerate(groups.items())
    ]
