"""
duty_resolver.py - 관세율 리졸버

(HS 코드, 원산지, 도착지) 에 대한 종가세율을 단계적으로 결정한다.

    캐시 → Tier 1 관세율 API → Tier 2 참조 테이블 → Tier 3 추정 모델

각 티어는 DutyRate 또는 None 을 반환하고, 캐스케이드는 순서대로 확인만 한다.
Tier 3 는 항상 값을 만든다.
"""

import logging
import re
from typing import Dict, FrozenSet, Optional, Tuple

from ..core.config import DEFAULT_CONFIG, EngineConfig
from ..domain.models import DataSource, DutyRate
from ..providers.base import DutyRateProvider, ReferenceDataStore
from ..utils.cache import CacheStore
from ..utils.helpers import round_half_up
from .tiers import checked_rate, run_tier

logger = logging.getLogger(__name__)


# 카테고리별 기본 관세율 (%)
CATEGORY_BASE_RATES: Dict[str, float] = {
    "Electronics": 5,
    "Textiles & Apparel": 12,
    "Chemicals": 6.5,
    "Machinery": 4.5,
    "Food & Beverages": 15,
    "Pharmaceuticals": 2,
    "Automotive": 8,
    "Furniture": 3.5,
    "Toys & Games": 6,
}
DEFAULT_CATEGORY_RATE = 7.5

# 도착국별 보정 계수 (표에 없으면 1.0)
COUNTRY_ADJUSTMENT_FACTORS: Dict[str, float] = {
    "US": 1.0,
    "CA": 0.85,
    "UK": 0.9,
    "JP": 0.8,
    "AU": 0.95,
    "BR": 1.5,
    "IN": 1.3,
    "RU": 1.2,
    "CN": 1.1,
}

# 무역 블록 (원산지/도착지 모두 소속 시 특혜세율)
TRADE_BLOCS: Dict[str, FrozenSet[str]] = {
    "USMCA": frozenset({"US", "CA", "MX"}),
    "EU": frozenset({
        "DE", "FR", "IT", "ES", "NL", "BE", "AT", "GR", "PT", "IE", "FI", "DK", "SE", "PL",
    }),
    "CPTPP": frozenset({"CA", "JP", "AU", "NZ", "SG", "MX", "VN", "MY"}),
}

# 양자 FTA (방향 무관)
BILATERAL_AGREEMENTS: Tuple[Tuple[str, str, str], ...] = (
    ("US", "KR", "KORUS"),
    ("US", "AU", "AUSFTA"),
    ("JP", "UK", "UK-Japan CEPA"),
    ("UK", "CA", "UK-Canada TCA"),
)

PREFERENTIAL_FACTOR = 0.2       # FTA 적용 시 원 세율의 20%


def find_trade_agreement(origin_country: str, destination_country: str) -> Optional[str]:
    """두 국가 간 무역협정 이름, 없으면 None"""
    for bloc, members in TRADE_BLOCS.items():
        if origin_country in members and destination_country in members:
            return bloc

    for a, b, name in BILATERAL_AGREEMENTS:
        if {origin_country, destination_country} == {a, b}:
            return name

    return None


def hs_prefix(hs_code: str, digits: int = 4) -> str:
    """HS 코드 앞자리 (구분자 제거)"""
    return re.sub(r"\D", "", hs_code or "")[:digits]


def duty_cache_key(hs_code: str, origin_country: str, destination_country: str) -> str:
    return f"duty_{hs_code}_{origin_country}_{destination_country}"


class DutyResolver:
    """관세율 리졸버"""

    def __init__(
        self,
        cache: CacheStore,
        provider: Optional[DutyRateProvider] = None,
        reference_store: Optional[ReferenceDataStore] = None,
        config: Optional[EngineConfig] = None,
    ):
        """
        Args:
            cache: 관세율 캐시
            provider: Tier 1 관세율 API. None이면 Tier 1 건너뜀
            reference_store: Tier 2 참조 테이블. None이면 Tier 2 건너뜀
            config: 타임아웃/TTL 설정
        """
        self.cache = cache
        self.provider = provider
        self.reference_store = reference_store
        self.config = config or DEFAULT_CONFIG

    def resolve_duty_rate(
        self,
        hs_code: str,
        origin_country: str,
        destination_country: str,
        category: str = "",
    ) -> DutyRate:
        """관세율 결정 (항상 값 반환)"""
        cached = self._from_cache(hs_code, origin_country, destination_country)
        if cached is not None:
            return cached

        logger.info("TIER 1: Attempting to use trade API for duty calculation")
        result = self._from_api(hs_code, origin_country, destination_country)
        if result is not None:
            return result

        logger.info("TIER 2: Attempting to use database for duty calculation")
        result = self._from_reference_data(hs_code, destination_country)
        if result is not None:
            return result

        logger.info("TIER 3: Using model-based estimation for duty calculation")
        return self.estimate_duty_rate(category, origin_country, destination_country)

    def _from_cache(
        self, hs_code: str, origin_country: str, destination_country: str
    ) -> Optional[DutyRate]:
        key = duty_cache_key(hs_code, origin_country, destination_country)
        cached = self.cache.get(key)
        if cached is None:
            return None

        logger.info(
            f"Using cached tariff data for {hs_code} from {origin_country} to {destination_country}"
        )
        return DutyRate(rate=cached["rate"], source=DataSource.CACHED)

    def _from_api(
        self, hs_code: str, origin_country: str, destination_country: str
    ) -> Optional[DutyRate]:
        if self.provider is None:
            return None

        rate = run_tier(
            "Duty API lookup",
            lambda: checked_rate(
                self.provider.get_duty_rate(hs_code, origin_country, destination_country),
                "duty API",
            ),
            timeout=self.config.tier_timeout_seconds,
        )
        if rate is None:
            return None

        self.cache.set(
            duty_cache_key(hs_code, origin_country, destination_country),
            {"rate": rate},
            self.config.duty_cache_ttl_seconds,
        )
        return DutyRate(rate=rate, source=DataSource.API)

    def _from_reference_data(self, hs_code: str, destination_country: str) -> Optional[DutyRate]:
        if self.reference_store is None:
            return None

        # 프로세스 내 조회: 스레드 풀/타임아웃 없이 실행
        return run_tier(
            "Duty database lookup",
            lambda: self._lookup_reference(hs_code, destination_country),
        )

    def _lookup_reference(self, hs_code: str, destination_country: str) -> Optional[DutyRate]:
        # EU 회원국은 공동관세(EU_) 키도 확인
        regions = [destination_country]
        if destination_country in TRADE_BLOCS["EU"]:
            regions.append("EU")

        prefix = hs_prefix(hs_code)
        for region in regions:
            if prefix:
                rate = self.reference_store.lookup(f"{region}_{prefix}")
                if rate is not None:
                    return DutyRate(rate=float(rate), source=DataSource.DATABASE)

            rate = self.reference_store.lookup(f"{region}_general")
            if rate is not None:
                return DutyRate(rate=float(rate), source=DataSource.DATABASE_GENERAL)

        return None

    def estimate_duty_rate(
        self,
        category: str,
        origin_country: str,
        destination_country: str,
    ) -> DutyRate:
        """Tier 3: 카테고리 기본세율 x 국가 보정, FTA 시 20%로 감면"""
        base_rate = CATEGORY_BASE_RATES.get(category, DEFAULT_CATEGORY_RATE)
        rate = base_rate * COUNTRY_ADJUSTMENT_FACTORS.get(destination_country, 1.0)

        description = "Estimated based on product category and country relationship"
        agreement = find_trade_agreement(origin_country, destination_country)
        if agreement:
            rate = max(0.0, rate * PREFERENTIAL_FACTOR)
            description += f" (preferential rate under {agreement})"

        return DutyRate(
            rate=round_half_up(rate, 1),
            source=DataSource.MODEL,
            description=description,
        )
