"""
reference_store.py - 로컬 관세율 참조 테이블 (Duty Tier 2)

키 형식: {도착국}_{HS 앞 4자리} 또는 {도착국}_general
실제 DB로 교체할 때는 ReferenceDataStore 를 구현하면 된다.
"""

from types import MappingProxyType
from typing import Mapping, Optional

from .base import ReferenceDataStore


DEFAULT_DUTY_RATES: Mapping[str, float] = MappingProxyType({
    "US_8471": 0,       # 컴퓨터
    "US_8517": 0,       # 전화기
    "US_6109": 16.5,    # 티셔츠
    "US_general": 3.5,

    "CA_8471": 0,
    "CA_general": 3,

    "UK_general": 4,
    "JP_general": 4.5,

    "EU_8471": 0,
    "EU_general": 5,

    "CN_general": 7.5,
    "IN_general": 10,
})


class InMemoryReferenceStore(ReferenceDataStore):
    """메모리 딕셔너리 기반 참조 테이블"""

    def __init__(self, rates: Optional[Mapping[str, float]] = None):
        """
        Args:
            rates: 키 → 관세율(%) 매핑. None이면 DEFAULT_DUTY_RATES
        """
        self._rates = dict(DEFAULT_DUTY_RATES if rates is None else rates)

    def lookup(self, key: str) -> Optional[float]:
        return self._rates.get(key)

    def __len__(self) -> int:
        return len(self._rates)
