"""
Hazard data source port interfaces.

This module defines the protocol for fetching hazard snapshots.
"""

from typing import List, Protocol, TypeVar

from healthpulse.core.models import HazardCluster, PsiSnapshot

T = TypeVar("T", covariant=True)

class HazardSourcePort(Protocol[T]):
    """위험 데이터 제공자 포트 인터페이스"""

    async def fetch(self) -> T:
        """
        최신 스냅샷을 조회합니다.

        Returns:
            위험 데이터 스냅샷

        Raises:
            ProviderUnavailable: 조회 실패
        """
        ...

# 뎅기 클러스터 (폴리곤 중심점 + 환자 수)
DengueClusterPort = HazardSourcePort[List[HazardCluster]]

# 지역별 PSI
AirQualityPort = HazardSourcePort[PsiSnapshot]

# 병원별 입원 환자 수
HospitalAdmissionPort = HazardSourcePort[List[HazardCluster]]
