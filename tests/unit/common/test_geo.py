"""
geo 모듈 단위 테스트

이 모듈은 거리 계산, 좌표 검증, 폴리곤 중심 계산을 테스트합니다.
"""

import math

import pytest
from hypothesis import given, strategies as st

from healthpulse.common.geo import distance_km, haversine_distance, polygon_centroid, validate_coordinates
from healthpulse.core.models import Coordinate

lat_st = st.floats(min_value=-90, max_value=90, allow_nan=False)
lng_st = st.floats(min_value=-180, max_value=180, allow_nan=False)


class TestHaversineDistance:
    """Haversine 거리 계산 테스트"""

    def test_same_point(self):
        """같은 지점 간 거리 테스트"""
        assert haversine_distance(1.3521, 103.8198, 1.3521, 103.8198) == 0.0

    def test_woodlands_to_marina_bay(self):
        """Woodlands에서 Marina Bay까지 약 18km"""
        d = haversine_distance(1.4382, 103.7890, 1.2810, 103.8598)
        assert 18 <= d <= 20

    def test_equator_one_degree(self):
        """적도 경도 1도는 약 111km"""
        assert 110 <= haversine_distance(0, 0, 0, 1) <= 112

    def test_antipodal(self):
        """지구 반대편 거리는 둘레의 절반"""
        assert haversine_distance(0, 0, 0, 180) == pytest.approx(math.pi * 6371.0)

    @given(lat=lat_st, lng=lng_st)
    def test_identity(self, lat, lng):
        """distance(a, a) = 0"""
        assert distance_km((lat, lng), (lat, lng)) == 0.0

    @given(lat1=lat_st, lng1=lng_st, lat2=lat_st, lng2=lng_st)
    def test_symmetry(self, lat1, lng1, lat2, lng2):
        """distance(a, b) = distance(b, a)"""
        a = Coordinate(lat=lat1, lng=lng1)
        b = Coordinate(lat=lat2, lng=lng2)
        assert distance_km(a, b) == pytest.approx(distance_km(b, a), abs=1e-9)

    @given(lat1=lat_st, lng1=lng_st, lat2=lat_st, lng2=lng_st)
    def test_non_negative_and_bounded(self, lat1, lng1, lat2, lng2):
        """거리는 0 이상이고 반 둘레 이하"""
        d = haversine_distance(lat1, lng1, lat2, lng2)
        assert 0.0 <= d <= math.pi * 6371.0 + 1e-6

    def test_accepts_models_and_tuples(self):
        """좌표 모델과 튜플을 모두 허용"""
        a = Coordinate(lat=1.3, lng=103.8)
        assert distance_km(a, (1.3, 103.9)) == pytest.approx(distance_km((1.3, 103.8), a.model_copy(update={"lng": 103.9})))


class TestValidateCoordinates:
    """좌표 검증 테스트"""

    @pytest.mark.parametrize("lat,lng", [(0, 0), (90, 180), (-90, -180), (1.35, 103.82)])
    def test_valid(self, lat, lng):
        assert validate_coordinates(lat, lng) is True

    @pytest.mark.parametrize("lat,lng", [(91, 0), (0, 181), (-90.1, 0), (float("nan"), 0), (None, 1)])
    def test_invalid(self, lat, lng):
        assert validate_coordinates(lat, lng) is False


class TestPolygonCentroid:
    """폴리곤 중심 테스트"""

    def test_closed_square(self):
        """닫힌 링의 마지막 꼭짓점은 한 번만 계산"""
        ring = [[103.0, 1.0], [104.0, 1.0], [104.0, 2.0], [103.0, 2.0], [103.0, 1.0]]
        lat, lng = polygon_centroid(ring)
        assert lat == pytest.approx(1.5)
        assert lng == pytest.approx(103.5)

    def test_single_point(self):
        assert polygon_centroid([[103.8, 1.35]]) == (1.35, 103.8)

    def test_empty_ring(self):
        with pytest.raises(ValueError):
            polygon_centroid([])
