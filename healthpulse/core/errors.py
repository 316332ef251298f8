"""
Error taxonomy for Health Pulse.

Only InvalidHorizon is meant to reach the caller; the other errors
are converted into degraded results inside the engine.
"""

from typing import Optional

class HealthPulseError(Exception):
    """Health Pulse 기본 예외"""

class LocationUnresolved(HealthPulseError):
    """지명을 좌표로 변환할 수 없음"""

    def __init__(self, text: Optional[str]):
        self.text = text
        super().__init__(f"location could not be resolved: {text!r}")

class ProviderUnavailable(HealthPulseError):
    """위험 데이터 제공자 조회 실패"""

    def __init__(self, provider: str, reason: str = ""):
        self.provider = provider
        self.reason = reason
        message = f"provider unavailable: {provider}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)

class InvalidHorizon(HealthPulseError, ValueError):
    """잘못된 예측 기간"""

    def __init__(self, horizon_days, max_days: int):
        self.horizon_days = horizon_days
        self.max_days = max_days
        super().__init__(
            f"forecast horizon must be an integer between 1 and {max_days} days, got {horizon_days!r}"
        )
