"""
tax_resolver.py - 부가세(소비세) 리졸버

Tier 1: 세율 공급자 (음수/비숫자 세율은 무시)
Tier 2: 국가별 고정 세율표 (미등록 국가 10%, "Value Added Tax")

과세표준(dutiable_value)은 호출자가 정한다: 상품가 + 관세.
"""

import logging
from typing import Dict, Optional

from ..core.config import DEFAULT_CONFIG, EngineConfig
from ..domain.models import TaxRate
from ..providers.base import TaxRateProvider
from ..utils.helpers import round_half_up
from .tiers import checked_rate, run_tier

logger = logging.getLogger(__name__)


# 국가별 수입 부가세/소비세율 (%)
COUNTRY_TAX_RATES: Dict[str, float] = {
    "US": 0,        # 연방 VAT/GST 없음
    "CA": 5,
    "UK": 20,
    "AU": 10,
    "NZ": 15,
    "JP": 10,
    "DE": 19,
    "FR": 20,
    "IT": 22,
    "CN": 13,
    "IN": 18,
    "SG": 7,
}

TAX_NAMES: Dict[str, str] = {
    "US": "Sales Tax",
    "CA": "GST/HST",
    "UK": "VAT",
    "AU": "GST",
    "NZ": "GST",
    "JP": "Consumption Tax",
    "DE": "VAT",
    "FR": "VAT",
    "IT": "VAT",
    "CN": "VAT",
    "IN": "GST",
    "SG": "GST",
}

DEFAULT_TAX_RATE = 10.0
DEFAULT_TAX_NAME = "Value Added Tax"


def _format_rate(rate: float) -> str:
    return f"{rate:g}%"


def tax_name_for(country: str) -> str:
    """국가별 세목명"""
    return TAX_NAMES.get(country, DEFAULT_TAX_NAME)


class TaxResolver:
    """부가세 리졸버"""

    def __init__(
        self,
        provider: Optional[TaxRateProvider] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.provider = provider
        self.config = config or DEFAULT_CONFIG

    def resolve_tax_rate(
        self,
        hs_code: str,
        destination_country: str,
        dutiable_value: float,
    ) -> TaxRate:
        """세율과 세액 결정 (항상 값 반환)

        Args:
            hs_code: HS 코드
            destination_country: 도착국 코드
            dutiable_value: 과세표준 (상품가 + 관세)
        """
        provided = self._from_provider(hs_code, destination_country)
        if provided is not None:
            rate, description = provided
            name = tax_name_for(destination_country)
        else:
            rate, description, name = self._from_table(destination_country)

        return TaxRate(
            rate=rate,
            amount=round_half_up(dutiable_value * rate / 100, 2),
            description=description,
            name=name,
        )

    def _from_provider(self, hs_code: str, destination_country: str):
        if self.provider is None:
            return None

        def query():
            rate, description = self.provider.get_tax_rate(hs_code, destination_country)
            rate = checked_rate(rate, "tax provider")
            if rate is None:
                return None
            return rate, str(description)

        return run_tier("Tax rate lookup", query, timeout=self.config.tier_timeout_seconds)

    def _from_table(self, destination_country: str):
        if destination_country in COUNTRY_TAX_RATES:
            rate = float(COUNTRY_TAX_RATES[destination_country])
            name = tax_name_for(destination_country)
        else:
            rate = DEFAULT_TAX_RATE
            name = DEFAULT_TAX_NAME

        return rate, f"{name} ({_format_rate(rate)})", name
