"""
factory.py - 계산기 조립

설정(EngineConfig)에 따라 공급자/캐시/참조 테이블을 만들어 LandedCostCalculator 로 묶는다.
API 주소가 없으면 해당 Tier 1 은 건너뛰고 로컬 데이터로만 계산한다.
"""

import logging
from typing import Optional

from .core.config import EngineConfig, get_settings
from .core.exceptions import ConfigurationError
from .domain.logic import LandedCostCalculator
from .providers.base import CarrierRateProvider, DutyRateProvider, ReferenceDataStore, TaxRateProvider
from .providers.http import HttpCarrierRateProvider, HttpTariffProvider
from .providers.reference_store import InMemoryReferenceStore
from .resolvers.duty_resolver import DutyResolver
from .resolvers.shipping_resolver import ShippingResolver
from .resolvers.tax_resolver import TaxResolver
from .utils.cache import CacheStore, MemoryCache

logger = logging.getLogger(__name__)


def create_calculator(
    config: Optional[EngineConfig] = None,
    cache: Optional[CacheStore] = None,
    duty_provider: Optional[DutyRateProvider] = None,
    tax_provider: Optional[TaxRateProvider] = None,
    carrier_provider: Optional[CarrierRateProvider] = None,
    reference_store: Optional[ReferenceDataStore] = None,
) -> LandedCostCalculator:
    """LandedCostCalculator 팩토리

    Args:
        config: 엔진 설정. None이면 환경변수에서 로드
        cache: 관세율 캐시. None이면 MemoryCache
        duty_provider: 관세율 공급자. None이면 tariff_api_url 설정 시 HTTP 공급자
        tax_provider: 세율 공급자 (선택)
        carrier_provider: 운송사 공급자. None이면 carrier_api_url 설정 시 HTTP 공급자
        reference_store: 참조 테이블. None이면 기본 관세율 테이블

    Returns:
        LandedCostCalculator: 조립된 계산기

    Raises:
        ConfigurationError: 설정값이 유효하지 않을 때
    """
    config = config or get_settings()

    problems = config.validate()
    if problems:
        raise ConfigurationError(
            "; ".join(problems),
            details={"problems": problems},
        )

    if duty_provider is None and config.tariff_api_url:
        duty_provider = HttpTariffProvider(
            config.tariff_api_url,
            api_key=config.api_key,
            timeout=config.http_timeout_seconds,
        )
    if carrier_provider is None and config.carrier_api_url:
        carrier_provider = HttpCarrierRateProvider(
            config.carrier_api_url,
            api_key=config.api_key,
            timeout=config.http_timeout_seconds,
        )

    logger.debug(
        f"Calculator providers: duty={getattr(duty_provider, 'name', None)}, "
        f"carrier={getattr(carrier_provider, 'name', None)}, "
        f"tax={getattr(tax_provider, 'name', None)}"
    )

    return LandedCostCalculator(
        duty_resolver=DutyResolver(
            cache=cache if cache is not None else MemoryCache(),
            provider=duty_provider,
            reference_store=reference_store if reference_store is not None else InMemoryReferenceStore(),
            config=config,
        ),
        shipping_resolver=ShippingResolver(carrier_provider=carrier_provider, config=config),
        tax_resolver=TaxResolver(provider=tax_provider, config=config),
        config=config,
    )
