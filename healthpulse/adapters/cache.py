"""
TTL cache wrapper for hazard data providers.

CachedProvider owns one cached snapshot per provider. It is created
by the orchestrating layer and passed to the engine as an ordinary
HazardSourcePort; the core never sees the cache.
"""

import asyncio
import time
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from healthpulse.core.errors import ProviderUnavailable
from healthpulse.observability.logging_setup import get_logger
from healthpulse.observability.metrics import provider_cache_hits_total

T = TypeVar("T")

log = get_logger("healthpulse.cache")

class CachedProvider(Generic[T]):
    """TTL 캐시 제공자"""

    def __init__(
        self,
        refresh: Callable[[], Awaitable[T]],
        ttl_sec: float,
        name: str = "provider",
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        초기화합니다.

        Args:
            refresh: 최신 스냅샷을 조회하는 비동기 함수
            ttl_sec: 캐시 유효 시간 (초)
            name: 제공자 이름 (로그/메트릭 라벨)
            clock: 단조 시계 (테스트용)
        """
        if ttl_sec < 0:
            raise ValueError(f"ttl_sec는 0 이상이어야 합니다: {ttl_sec}")
        self.refresh = refresh
        self.ttl_sec = ttl_sec
        self.name = name
        self.clock = clock or time.monotonic
        self._value: Optional[T] = None
        self._fetched_at: Optional[float] = None
        self._lock = asyncio.Lock()

    def _fresh(self) -> bool:
        if self._fetched_at is None:
            return False
        return self.clock() - self._fetched_at < self.ttl_sec

    @property
    def cached(self) -> Optional[T]:
        return self._value

    async def fetch(self) -> T:
        """
        캐시가 유효하면 캐시 값을, 아니면 새로 조회한 값을 반환합니다.

        Raises:
            ProviderUnavailable: 새로 조회하는 중 실패한 경우
        """
        if self._fresh():
            provider_cache_hits_total.labels(provider=self.name).inc()
            return self._value  # type: ignore[return-value]

        async with self._lock:
            # 대기 중 다른 요청이 갱신했을 수 있음
            if self._fresh():
                provider_cache_hits_total.labels(provider=self.name).inc()
                return self._value  # type: ignore[return-value]

            try:
                value = await self.refresh()
            except ProviderUnavailable:
                raise
            except Exception as e:
                log.warning(f"제공자 갱신 실패 provider:{self.name} error:{e!r}")
                raise ProviderUnavailable(self.name, str(e)) from e

            self._value = value
            self._fetched_at = self.clock()
            log.debug(f"제공자 캐시 갱신 provider:{self.name}")
            return value

    def invalidate(self) -> None:
        """캐시를 비웁니다."""
        self._value = None
        self._fetched_at = None
