"""
테스트 설정 및 픽스처

이 모듈은 pytest 설정과 공통 픽스처를 제공합니다.
"""

import asyncio
from datetime import date

import pytest

from healthpulse.core.gazetteer import default_gazetteer
from healthpulse.core.models import Coordinate, HazardCluster, NamedLocation, PsiSnapshot
from healthpulse.settings import Settings

# 위도 1도 ≈ 111.195km
KM_PER_DEG_LAT = 111.195

def offset_north(coord: Coordinate, km: float) -> Coordinate:
    """좌표를 북쪽으로 km 만큼 이동합니다."""
    return Coordinate(lat=coord.lat + km / KM_PER_DEG_LAT, lng=coord.lng)

def make_cluster(cid: str, coord: Coordinate, magnitude: int, label: str = "") -> HazardCluster:
    return HazardCluster(id=cid, label=label or cid, coordinate=coord, magnitude=magnitude)

@pytest.fixture
def gazetteer():
    """내장 지명 사전"""
    return default_gazetteer()

@pytest.fixture
def woodlands():
    """Woodlands 위치"""
    return NamedLocation(name="woodlands", coordinate=Coordinate(lat=1.4382, lng=103.7890))

@pytest.fixture
def close_cluster(woodlands):
    """Woodlands에서 0.3km 떨어진 25명 클러스터"""
    return make_cluster("c1", offset_north(woodlands.coordinate, 0.3), 25, "Woodlands Dr 14")

@pytest.fixture
def dengue_clusters(close_cluster):
    """테스트용 뎅기 클러스터 (근처 1개 + 원거리 2개)"""
    return [
        close_cluster,
        make_cluster("c2", Coordinate(lat=1.3496, lng=103.9568), 40, "Tampines St 81"),
        make_cluster("c3", Coordinate(lat=1.2810, lng=103.8598), 12, "Marina Bay"),
    ]

@pytest.fixture
def psi_snapshot():
    """테스트용 PSI 스냅샷"""
    return PsiSnapshot(
        national=55,
        regions={"north": 48, "south": 60, "east": 72, "west": 130, "central": 55},
    )

@pytest.fixture
def hospital_clusters():
    """테스트용 병원 입원 집계"""
    return [
        make_cluster("h1", Coordinate(lat=1.2785, lng=103.8349), 12, "Singapore General Hospital"),
        make_cluster("h2", Coordinate(lat=1.3221, lng=103.8472), 20, "National Centre for Infectious Diseases"),
        make_cluster("h3", Coordinate(lat=1.3402, lng=103.9474), 6, "Changi General Hospital"),
        make_cluster("h4", Coordinate(lat=1.4244, lng=103.8383), 9, "Khoo Teck Puat Hospital"),
    ]

@pytest.fixture
def sample_settings():
    """테스트용 설정 (빠른 재시도)"""
    settings = Settings()
    settings.observability.service_name = "test-service"
    settings.reliability.provider_timeout_sec = 0.5
    settings.reliability.provider_max_retries = 1
    settings.reliability.backoff_initial_sec = 0.001
    settings.reliability.backoff_max_sec = 0.002
    return settings

@pytest.fixture
def wet_season_day():
    """우기 평일 (2024-07-09, 화요일)"""
    return date(2024, 7, 9)

# pytest 설정
def pytest_configure(config):
    """pytest 설정"""
    config.addinivalue_line(
        "markers", "slow: 느린 테스트 마커"
    )
    config.addinivalue_line(
        "markers", "integration: 통합 테스트 마커"
    )

def pytest_collection_modifyitems(config, items):
    """테스트 아이템 수정"""
    for item in items:
        # 비동기 테스트에 asyncio 마커 추가
        if asyncio.iscoroutinefunction(getattr(item, "function", None)):
            item.add_marker(pytest.mark.asyncio)

        # 통합 테스트 마커 추가
        if "integration" in item.name:
            item.add_marker(pytest.mark.integration)

@pytest.fixture
def cluster_factory():
    """HazardCluster 생성 함수"""
    return make_cluster

@pytest.fixture
def north_of():
    """좌표 북쪽 이동 함수"""
    return offset_north
