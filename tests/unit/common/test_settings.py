"""
설정 모듈 단위 테스트

이 모듈은 기본 설정, 환경변수 덮어쓰기와 링 정책 검증을 테스트합니다.
"""

import pytest
from pydantic import ValidationError

from healthpulse.settings import DenguePolicy, EpidemicPolicy, Settings, build_settings

ENV_KEYS = (
    "HP_GAZETTEER_FILE", "HP_AIR_INTERPOLATE", "HP_MAX_HORIZON_DAYS", "HP_TREND_BAND",
    "HP_WEATHER_SEED", "HP_PROVIDER_TIMEOUT_SEC", "HP_PROVIDER_MAX_RETRIES",
    "HP_LOG_LEVEL", "HP_METRICS_ENABLED",
)

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)

class TestDefaults:
    """기본 설정 테스트"""

    def test_defaults(self):
        s = build_settings()
        assert s.dengue.rings == [(0.5, 10.0), (1.0, 5.0), (2.0, 2.0)]
        assert s.epidemic.rings == [(5.0, 3.0), (10.0, 2.0), (15.0, 1.0)]
        assert s.epidemic.nearby_radius_km == 10.0
        assert s.forecast.max_horizon_days == 30
        assert s.forecast.trend_band == 0.15
        assert s.forecast.weather_seed is None
        assert s.air.interpolate is False
        assert s.gazetteer.file_path == ""

class TestEnvOverrides:
    """환경변수 덮어쓰기 테스트"""

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("HP_AIR_INTERPOLATE", "yes")
        monkeypatch.setenv("HP_MAX_HORIZON_DAYS", "14")
        monkeypatch.setenv("HP_TREND_BAND", "0.2")
        monkeypatch.setenv("HP_WEATHER_SEED", "7")
        monkeypatch.setenv("HP_PROVIDER_MAX_RETRIES", "0")
        monkeypatch.setenv("HP_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("HP_METRICS_ENABLED", "off")

        s = build_settings()
        assert s.air.interpolate is True
        assert s.forecast.max_horizon_days == 14
        assert s.forecast.trend_band == 0.2
        assert s.forecast.weather_seed == 7
        assert s.reliability.provider_max_retries == 0
        assert s.observability.log_level == "DEBUG"
        assert s.observability.metrics_enabled is False

    def test_empty_seed_ignored(self, monkeypatch):
        monkeypatch.setenv("HP_WEATHER_SEED", "")
        assert build_settings().forecast.weather_seed is None

    def test_invalid_values_rejected(self, monkeypatch):
        monkeypatch.setenv("HP_MAX_HORIZON_DAYS", "0")
        with pytest.raises(ValidationError):
            build_settings()

class TestRingValidation:
    """링 정책 검증 테스트"""

    def test_custom_rings(self):
        policy = DenguePolicy(rings=[(0.25, 20), (1, 4)])
        assert policy.rings == [(0.25, 20.0), (1.0, 4.0)]

    @pytest.mark.parametrize("rings", [
        [],
        [(1.0, 5.0), (0.5, 10.0)],
        [(0.5, 10.0), (0.5, 5.0)],
        [(0.0, 1.0)],
        [(1.0, -1.0)],
    ])
    def test_invalid_rings(self, rings):
        with pytest.raises(ValidationError):
            EpidemicPolicy(rings=rings)

    def test_nested(self):
        with pytest.raises(ValidationError):
            Settings.model_validate({"dengue": {"rings": [(2.0, 1.0), (1.0, 1.0)]}})
