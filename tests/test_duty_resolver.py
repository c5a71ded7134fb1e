"""
test_duty_resolver.py - 관세율 리졸버 테스트

캐시 → API → 참조 테이블 → 추정 모델 순서 검증.
상위 티어가 성공하면 하위 티어는 호출되지 않아야 한다.
"""

import sys
import threading
import time
from pathlib import Path
from unittest.mock import Mock

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from landed_cost.core.config import EngineConfig
from landed_cost.core.exceptions import ProviderError
from landed_cost.domain.models import DataSource
from landed_cost.providers.base import DutyRateProvider, ReferenceDataStore
from landed_cost.providers.reference_store import InMemoryReferenceStore
from landed_cost.resolvers.duty_resolver import (
    DEFAULT_CATEGORY_RATE,
    DutyResolver,
    find_trade_agreement,
    hs_prefix,
)
from landed_cost.utils.cache import MemoryCache


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def make_provider(rate=None, error=None):
    provider = Mock(spec=DutyRateProvider)
    if error is not None:
        provider.get_duty_rate.side_effect = error
    else:
        provider.get_duty_rate.return_value = rate
    return provider


class TestTradeAgreements:
    """무역협정 판정 테스트"""

    def test_bloc_membership(self):
        assert find_trade_agreement("US", "CA") == "USMCA"
        assert find_trade_agreement("DE", "FR") == "EU"
        assert find_trade_agreement("JP", "AU") == "CPTPP"

    def test_bilateral_is_symmetric(self):
        """양자 협정은 방향 무관"""
        assert find_trade_agreement("US", "KR") == "KORUS"
        assert find_trade_agreement("KR", "US") == "KORUS"
        assert find_trade_agreement("CA", "UK") == "UK-Canada TCA"

    def test_no_agreement(self):
        assert find_trade_agreement("US", "CN") is None

    def test_hs_prefix(self):
        assert hs_prefix("8517.62") == "8517"
        assert hs_prefix("85") == "85"
        assert hs_prefix("") == ""


class TestTierCascade:
    """티어 순서 테스트"""

    def setup_method(self):
        self.cache = MemoryCache()
        self.store = Mock(spec=ReferenceDataStore)
        self.store.lookup.return_value = None

    def test_api_result_used_and_lower_tiers_skipped(self):
        """Tier 1 성공 시 참조 테이블 미호출"""
        provider = make_provider(rate=2.5)
        resolver = DutyResolver(self.cache, provider=provider, reference_store=self.store)

        result = resolver.resolve_duty_rate("8517.62", "US", "CN", "Electronics")

        assert result.rate == 2.5
        assert result.source == DataSource.API
        provider.get_duty_rate.assert_called_once_with("8517.62", "US", "CN")
        self.store.lookup.assert_not_called()

    def test_second_call_served_from_cache(self):
        """캐시 히트 시 공급자 미호출"""
        provider = make_provider(rate=2.5)
        resolver = DutyResolver(self.cache, provider=provider, reference_store=self.store)

        resolver.resolve_duty_rate("8517.62", "US", "CN")
        result = resolver.resolve_duty_rate("8517.62", "US", "CN")

        assert result.source == DataSource.CACHED
        assert result.rate == 2.5
        assert provider.get_duty_rate.call_count == 1

    def test_api_failure_falls_back_to_reference_data(self):
        provider = make_provider(error=ProviderError("tariff-api returned HTTP 503"))
        resolver = DutyResolver(
            self.cache, provider=provider, reference_store=InMemoryReferenceStore()
        )

        result = resolver.resolve_duty_rate("8517.62", "US", "CN")

        assert result.source == DataSource.DATABASE
        assert result.rate == 0.0

    def test_reference_data_not_cached(self):
        """캐시는 API 결과만 저장"""
        resolver = DutyResolver(self.cache, reference_store=InMemoryReferenceStore())
        resolver.resolve_duty_rate("8517.62", "US", "CN")
        assert len(self.cache) == 0

    def test_provider_timeout_falls_through(self):
        """타임아웃은 티어 실패"""
        provider = Mock(spec=DutyRateProvider)
        provider.get_duty_rate.side_effect = lambda *args: time.sleep(0.5) or 1.0
        resolver = DutyResolver(
            self.cache,
            provider=provider,
            reference_store=InMemoryReferenceStore(),
            config=EngineConfig(tier_timeout_seconds=0.05),
        )

        result = resolver.resolve_duty_rate("9999.00", "CN", "US")

        assert result.source == DataSource.DATABASE_GENERAL
        assert result.rate == 3.5

    def test_all_tiers_unavailable_uses_model(self):
        provider = make_provider(error=ConnectionError("offline"))
        resolver = DutyResolver(self.cache, provider=provider, reference_store=self.store)

        result = resolver.resolve_duty_rate("8517.62", "US", "CN", "Electronics")

        assert result.source == DataSource.MODEL
        assert result.rate == 5.5
        assert provider.get_duty_rate.call_count == 1
        assert self.store.lookup.call_count > 0

    def test_cache_expires_after_ttl(self):
        """TTL 경과 후 다시 API 조회"""
        clock = FakeClock()
        cache = MemoryCache(clock=clock)
        provider = make_provider(rate=4.0)
        resolver = DutyResolver(
            cache, provider=provider, config=EngineConfig(duty_cache_ttl_seconds=60)
        )

        resolver.resolve_duty_rate("6109.10", "CN", "US")
        clock.now = 61
        result = resolver.resolve_duty_rate("6109.10", "CN", "US")

        assert result.source == DataSource.API
        assert provider.get_duty_rate.call_count == 2


class TestReferenceData:
    """참조 테이블 조회 테스트"""

    def setup_method(self):
        self.resolver = DutyResolver(MemoryCache(), reference_store=InMemoryReferenceStore())

    def test_specific_hs_prefix(self):
        result = self.resolver.resolve_duty_rate("6109.10", "CN", "US")
        assert result.rate == 16.5
        assert result.source == DataSource.DATABASE

    def test_general_rate(self):
        result = self.resolver.resolve_duty_rate("9503.00", "CN", "JP")
        assert result.rate == 4.5
        assert result.source == DataSource.DATABASE_GENERAL

    def test_eu_member_uses_common_tariff(self):
        """EU 회원국은 EU_ 키 사용"""
        result = self.resolver.resolve_duty_rate("8471.30", "CN", "DE")
        assert result.rate == 0.0
        assert result.source == DataSource.DATABASE

        result = self.resolver.resolve_duty_rate("9503.00", "CN", "FR")
        assert result.rate == 5.0
        assert result.source == DataSource.DATABASE_GENERAL

    def test_unknown_destination_falls_to_model(self):
        result = self.resolver.resolve_duty_rate("9503.00", "CN", "ZA", "Toys & Games")
        assert result.source == DataSource.MODEL
        assert result.rate == 6.0


class TestModelEstimate:
    """Tier 3 추정 모델 테스트"""

    def setup_method(self):
        self.resolver = DutyResolver(MemoryCache())

    def test_country_adjustment(self):
        """카테고리 기본세율 x 도착국 계수"""
        result = self.resolver.estimate_duty_rate("Electronics", "US", "CN")
        assert result.rate == 5.5
        assert result.source == DataSource.MODEL
        assert result.description == "Estimated based on product category and country relationship"

    def test_usmca_preferential_rate(self):
        """USMCA 역내는 약 20% 수준"""
        unadjusted = self.resolver.estimate_duty_rate("Machinery", "CN", "MX").rate
        preferential = self.resolver.estimate_duty_rate("Machinery", "US", "MX")

        assert unadjusted == 4.5
        assert preferential.rate == pytest.approx(unadjusted * 0.2)
        assert "USMCA" in preferential.description

    def test_usmca_with_country_factor(self):
        result = self.resolver.estimate_duty_rate("Textiles & Apparel", "US", "CA")
        assert result.rate == pytest.approx(12 * 0.85 * 0.2, abs=0.05)

    def test_unknown_category_and_countries(self):
        """미등록 카테고리/국가도 항상 값 반환"""
        result = self.resolver.estimate_duty_rate("Widgets", "ZZ", "YY")
        assert result.rate == DEFAULT_CATEGORY_RATE
        assert result.rate >= 0

    def test_no_tiers_configured(self):
        result = self.resolver.resolve_duty_rate("", "ZZ", "YY", "")
        assert result.source == DataSource.MODEL
        assert result.rate == DEFAULT_CATEGORY_RATE


class TestProviderResponses:
    """공급자 응답 검사 테스트"""

    def setup_method(self):
        self.cache = MemoryCache()

    def test_negative_rate_falls_through(self):
        """음수 관세율은 티어 실패"""
        provider = make_provider(rate=-5.0)
        resolver = DutyResolver(
            self.cache, provider=provider, reference_store=InMemoryReferenceStore()
        )

        result = resolver.resolve_duty_rate("6109.10", "CN", "US")

        assert result.source == DataSource.DATABASE
        assert result.rate == 16.5
        assert len(self.cache) == 0

    def test_non_numeric_rate_not_cached(self):
        """숫자가 아닌 응답은 캐시하지 않고 다음 티어로"""
        provider = make_provider(rate="five")
        resolver = DutyResolver(
            self.cache, provider=provider, reference_store=InMemoryReferenceStore()
        )

        first = resolver.resolve_duty_rate("6109.10", "CN", "US")
        second = resolver.resolve_duty_rate("6109.10", "CN", "US")

        assert first.source == second.source == DataSource.DATABASE
        assert len(self.cache) == 0
        assert provider.get_duty_rate.call_count == 2

    def test_nan_rate_falls_through(self):
        provider = make_provider(rate=float("nan"))
        resolver = DutyResolver(self.cache, provider=provider)

        result = resolver.resolve_duty_rate("8517.62", "US", "CN", "Electronics")

        assert result.source == DataSource.MODEL
        assert result.rate == 5.5

    def test_numeric_string_converted_before_caching(self):
        provider = make_provider(rate="5")
        resolver = DutyResolver(self.cache, provider=provider)

        result = resolver.resolve_duty_rate("8517.62", "US", "CN")
        cached = resolver.resolve_duty_rate("8517.62", "US", "CN")

        assert result.rate == 5.0
        assert isinstance(result.rate, float)
        assert cached.source == DataSource.CACHED
        assert cached.rate == 5.0


class TestHungProvider:
    """응답 없는 API 가 참조 테이블을 막지 않는지"""

    def test_reference_data_survives_hung_api(self):
        release = threading.Event()
        provider = Mock(spec=DutyRateProvider)
        provider.get_duty_rate.side_effect = lambda *args: release.wait(5) and 1.0
        resolver = DutyResolver(
            MemoryCache(),
            provider=provider,
            reference_store=InMemoryReferenceStore(),
            config=EngineConfig(tier_timeout_seconds=0.05),
        )

        try:
            sources = [
                resolver.resolve_duty_rate("9999.00", "CN", "US").source
                for _ in range(10)
            ]
        finally:
            release.set()

        assert sources == [DataSource.DATABASE_GENERAL] * 10


class TestCascadeToModel:
    """API/참조 테이블 모두 불가 시 추정 모델"""

    def test_usmca_preferential_rate_through_cascade(self):
        """USMCA 역내는 약 20% 수준"""
        provider = make_provider(error=ProviderError("tariff-api returned HTTP 503"))
        resolver = DutyResolver(
            MemoryCache(),
            provider=provider,
            reference_store=InMemoryReferenceStore({}),
        )

        preferential = resolver.resolve_duty_rate("8479.89", "US", "MX", "Machinery")
        unadjusted = resolver.resolve_duty_rate("8479.89", "CN", "MX", "Machinery")

        assert preferential.source == unadjusted.source == DataSource.MODEL
        assert unadjusted.rate == 4.5
        assert preferential.rate == pytest.approx(unadjusted.rate * 0.2)
        assert "USMCA" in preferential.description
        assert provider.get_duty_rate.call_count == 2
