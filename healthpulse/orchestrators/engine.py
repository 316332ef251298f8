"""
Health risk engine orchestrator for Health Pulse.

This module wires the hazard source ports, the gazetteer and the pure
core together. It is the only place that awaits providers: the three
snapshots are fetched concurrently, each behind a timeout and retry,
and any failure degrades to a "data unavailable" result instead of
propagating.
"""

import asyncio
import time
from datetime import date
from typing import Any, Awaitable, Callable, Optional, Tuple

from healthpulse.adapters.cache import CachedProvider
from healthpulse.common.retry import retry_with_backoff
from healthpulse.core.aggregate import analyze
from healthpulse.core.forecast import build_baseline, forecast, validate_horizon
from healthpulse.core.gazetteer import Gazetteer, default_gazetteer, load_gazetteer
from healthpulse.core.models import LocationAnalysis, NamedLocation, Prediction
from healthpulse.core.seasons import WeatherModel, weather_from_seed
from healthpulse.observability import metrics
from healthpulse.observability.logging_setup import get_logger, setup_logging, with_context
from healthpulse.ports.providers import AirQualityPort, DengueClusterPort, HospitalAdmissionPort
from healthpulse.settings import Settings, build_settings

log = get_logger("healthpulse.engine")

class HealthRiskEngine:
    """위치 기반 건강 위험 평가/예측 엔진"""

    def __init__(
        self,
        dengue: DengueClusterPort,
        air: AirQualityPort,
        hospitals: HospitalAdmissionPort,
        *,
        gazetteer: Optional[Gazetteer] = None,
        settings: Optional[Settings] = None,
        weather_factory: Optional[Callable[[], WeatherModel]] = None,
        clock: Optional[Callable[[], date]] = None,
    ):
        """
        초기화합니다.

        Args:
            dengue: 뎅기 클러스터 제공자
            air: PSI 제공자
            hospitals: 병원 입원 집계 제공자
            gazetteer: 지명 사전 (None이면 설정 파일 또는 내장 사전)
            settings: 설정 (None이면 환경변수 기반 설정)
            weather_factory: 요청마다 새 날씨 모델을 만드는 함수 (None이면 설정의 weather_seed 사용)
            clock: 오늘 날짜를 반환하는 함수 (테스트용)
        """
        self.dengue = dengue
        self.air = air
        self.hospitals = hospitals
        self.settings = settings or build_settings()

        if gazetteer is not None:
            self.gazetteer = gazetteer
        elif self.settings.gazetteer.file_path:
            self.gazetteer = load_gazetteer(self.settings.gazetteer.file_path)
        else:
            self.gazetteer = default_gazetteer()

        seed = self.settings.forecast.weather_seed
        self.weather_factory = weather_factory or (lambda: weather_from_seed(seed))
        self.clock = clock or date.today

        obs = self.settings.observability
        log.info(f"엔진 초기화됨 service:{obs.service_name} version:{obs.build_version} places:{len(self.gazetteer)}")

    @classmethod
    def from_refreshers(
        cls,
        *,
        dengue: Callable[[], Awaitable[Any]],
        air: Callable[[], Awaitable[Any]],
        hospitals: Callable[[], Awaitable[Any]],
        settings: Optional[Settings] = None,
        **kwargs,
    ) -> "HealthRiskEngine":
        """
        갱신 함수로 엔진을 만듭니다.

        각 갱신 함수는 설정의 TTL로 CachedProvider에 감싸고, 로깅은 설정의 레벨로 초기화합니다.

        Args:
            dengue: 뎅기 클러스터 갱신 함수
            air: PSI 갱신 함수
            hospitals: 병원 입원 집계 갱신 함수
            settings: 설정 (None이면 환경변수 기반 설정)
            **kwargs: 엔진 생성자 추가 인자 (gazetteer, weather_factory, clock)
        """
        settings = settings or build_settings()
        setup_logging(settings.observability.log_level)

        rel = settings.reliability
        return cls(
            CachedProvider(dengue, rel.dengue_ttl_sec, name="dengue"),
            CachedProvider(air, rel.psi_ttl_sec, name="air_quality"),
            CachedProvider(hospitals, rel.hospital_ttl_sec, name="epidemic"),
            settings=settings,
            **kwargs,
        )

    def resolve(self, text: Optional[str]) -> Optional[NamedLocation]:
        """지명을 변환합니다. 실패하면 None (지역/섬 전체 기준으로 진행)"""
        location = self.gazetteer.resolve(text)
        if location is None:
            if self.settings.observability.metrics_enabled:
                metrics.location_unresolved_total.inc()
            log.info(f"위치 미확인 - 섬 전체 기준으로 평가 text:{text!r}")
        return location

    async def _fetch(self, name: str, source) -> Optional[Any]:
        """
        제공자에서 스냅샷을 조회합니다.

        타임아웃과 재시도를 적용하고, 최종 실패 시 None을 반환합니다.
        """
        rel = self.settings.reliability

        async def once():
            return await asyncio.wait_for(source.fetch(), timeout=rel.provider_timeout_sec)

        try:
            return await retry_with_backoff(
                once,
                max_retries=rel.provider_max_retries,
                base_delay=rel.backoff_initial_sec,
                max_delay=rel.backoff_max_sec,
            )
        except Exception as e:
            if self.settings.observability.metrics_enabled:
                metrics.provider_failures_total.labels(provider=name).inc()
            log.warning(f"제공자 조회 실패 - 기본값 사용 provider:{name} error:{e!r}")
            return None

    async def _fetch_all(self) -> Tuple[Any, Any, Any]:
        dengue, psi, hospitals = await asyncio.gather(
            self._fetch("dengue", self.dengue),
            self._fetch("air_quality", self.air),
            self._fetch("epidemic", self.hospitals),
        )
        return dengue, psi, hospitals

    async def assess_location(self, text: Optional[str]) -> LocationAnalysis:
        """
        위치의 현재 건강 위험을 평가합니다.

        Args:
            text: 사용자 입력 지명 또는 문장

        Returns:
            위치 분석 결과 (데이터가 없어도 항상 반환)
        """
        with with_context(request=text):
            return await self._assess(text)

    async def _assess(self, text: Optional[str]) -> LocationAnalysis:
        t0 = time.perf_counter()
        location = self.resolve(text)
        dengue, psi, hospitals = await self._fetch_all()

        analysis = analyze(location, dengue, psi, hospitals, self.settings, text=text)

        if self.settings.observability.metrics_enabled:
            metrics.assessments_total.labels(overall=analysis.overall_risk).inc()
            metrics.assessment_seconds.observe(time.perf_counter() - t0)

        log.info(
            "위치 평가 완료",
            location=location.name if location else None,
            overall=analysis.overall_risk,
        )
        return analysis

    async def forecast(self, text: Optional[str], horizon_days: int) -> Prediction:
        """
        위치의 N일 후 건강 위험을 예측합니다.

        Args:
            text: 사용자 입력 지명 또는 문장
            horizon_days: 예측 기간 (일)

        Returns:
            예측 결과

        Raises:
            InvalidHorizon: 예측 기간이 잘못된 경우 (제공자 조회 전에 검증)
        """
        cfg = self.settings.forecast
        validate_horizon(horizon_days, cfg.max_horizon_days)

        with with_context(request=text):
            return await self._forecast(text, horizon_days)

    async def _forecast(self, text: Optional[str], horizon_days: int) -> Prediction:
        cfg = self.settings.forecast
        t0 = time.perf_counter()
        location = self.resolve(text)
        dengue, psi, hospitals = await self._fetch_all()

        baseline = build_baseline(location, dengue, psi, hospitals, self.settings, text=text)
        prediction = forecast(
            baseline,
            horizon_days,
            today=self.clock(),
            weather=self.weather_factory(),
            trend_band=cfg.trend_band,
            max_horizon_days=cfg.max_horizon_days,
        )

        if self.settings.observability.metrics_enabled:
            metrics.forecasts_total.labels(overall=prediction.overall_risk).inc()
            metrics.forecast_seconds.observe(time.perf_counter() - t0)

        log.info(
            "예측 완료",
            location=location.name if location else None,
            horizon=horizon_days,
            overall=prediction.overall_risk,
            confidence=prediction.overall_confidence,
        )
        return prediction
