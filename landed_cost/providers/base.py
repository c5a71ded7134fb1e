"""
base.py - 외부 공급자 인터페이스

엔진이 소비하는 외부 협력자. 모두 교체 가능 (테스트에서는 Mock).
실패 시 예외를 던지면 리졸버가 다음 티어로 넘어간다.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

from ..domain.models import ShippingDetails, ShippingQuote


class DutyRateProvider(ABC):
    """실시간 관세율 공급자 (Duty Tier 1)"""

    name = "duty-provider"

    @abstractmethod
    def get_duty_rate(self, hs_code: str, origin_country: str, destination_country: str) -> float:
        """종가세율(%) 반환. 조회 실패 시 예외"""


class TaxRateProvider(ABC):
    """부가세율 공급자 (Tax Tier 1)"""

    name = "tax-provider"

    @abstractmethod
    def get_tax_rate(self, hs_code: str, destination_country: str) -> Tuple[float, str]:
        """(세율 %, 설명) 반환. 조회 실패 시 예외"""


class CarrierRateProvider(ABC):
    """운송 견적 공급자 (Shipping Tier 1/2)"""

    name = "carrier-provider"

    @abstractmethod
    def get_quote(
        self,
        origin_country: str,
        destination_country: str,
        shipping: ShippingDetails,
    ) -> ShippingQuote:
        """운송 견적 반환. 조회 실패 시 예외"""


class ReferenceDataStore(ABC):
    """로컬 참조 데이터 (Duty Tier 2)"""

    @abstractmethod
    def lookup(self, key: str) -> Optional[float]:
        """키에 해당하는 관세율(%) 반환, 없으면 None"""
