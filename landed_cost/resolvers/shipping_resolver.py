"""
shipping_resolver.py - 국제 운송비 리졸버

    Tier 1 운송사 실시간 견적 → Tier 2 요율표 견적 → Tier 3 거리 기반 추정

운임은 변동이 커서 캐시하지 않는다.
Tier 3 는 계산 중 예외가 나도 고정 요율로 대체하므로 항상 숫자를 반환한다.
"""

import logging
import math
import re
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Tuple

from ..core.config import DEFAULT_CONFIG, EngineConfig
from ..core.exceptions import ErrorCodes, ProviderError
from ..domain.models import (
    ProductDetails,
    ShippingDetails,
    ShippingEstimate,
    ShippingQuote,
    ShippingSource,
)
from ..providers.base import CarrierRateProvider
from ..utils.helpers import round_half_up
from .tiers import run_tier

logger = logging.getLogger(__name__)


# ============================================================
# 지역 / 거리 참조 데이터
# ============================================================

REGION_MAP: Dict[str, str] = {
    # 북미
    "US": "NA", "CA": "NA", "MX": "NA",
    # 유럽
    "UK": "EU", "DE": "EU", "FR": "EU", "IT": "EU", "ES": "EU",
    "NL": "EU", "BE": "EU", "CH": "EU", "AT": "EU", "SE": "EU",
    # 아시아태평양
    "CN": "APAC", "JP": "APAC", "KR": "APAC", "AU": "APAC", "NZ": "APAC",
    "SG": "APAC", "MY": "APAC", "TH": "APAC", "VN": "APAC", "ID": "APAC",
    # 남미
    "BR": "SA", "AR": "SA", "CO": "SA", "CL": "SA", "PE": "SA",
    # 아프리카
    "ZA": "AF", "NG": "AF", "EG": "AF", "KE": "AF", "MA": "AF",
    # 중동 (SA = 사우디아라비아)
    "AE": "ME", "SA": "ME", "TR": "ME", "IL": "ME", "QA": "ME",
}
UNKNOWN_REGION = "OTHER"

# 지역 간 운임 계수 (대칭)
REGION_DISTANCE_FACTORS: Dict[str, Dict[str, float]] = {
    "NA": {"NA": 1.0, "EU": 2.5, "APAC": 3.2, "SA": 1.8, "AF": 3.0, "ME": 2.8},
    "EU": {"NA": 2.5, "EU": 1.0, "APAC": 3.0, "SA": 2.6, "AF": 1.8, "ME": 1.6},
    "APAC": {"NA": 3.2, "EU": 3.0, "APAC": 1.0, "SA": 3.5, "AF": 3.0, "ME": 2.5},
    "SA": {"NA": 1.8, "EU": 2.6, "APAC": 3.5, "SA": 1.0, "AF": 3.0, "ME": 3.2},
    "AF": {"NA": 3.0, "EU": 1.8, "APAC": 3.0, "SA": 3.0, "AF": 1.0, "ME": 1.8},
    "ME": {"NA": 2.8, "EU": 1.6, "APAC": 2.5, "SA": 3.2, "AF": 1.8, "ME": 1.0},
}
DEFAULT_DISTANCE_FACTOR = 2.0

# 국가 간 근사 거리 (km, 방향 무관)
COUNTRY_DISTANCES_KM: Dict[Tuple[str, str], int] = {
    ("US", "CA"): 2000, ("US", "MX"): 3000, ("US", "UK"): 6800, ("US", "DE"): 7600,
    ("US", "JP"): 10000, ("US", "CN"): 11000, ("US", "AU"): 15000,
    ("CA", "MX"): 4000, ("CA", "UK"): 5500, ("CA", "JP"): 8500,
    ("UK", "DE"): 1000, ("UK", "FR"): 800, ("UK", "IT"): 1500, ("UK", "ES"): 1700,
    ("DE", "FR"): 900, ("DE", "IT"): 1000, ("DE", "ES"): 1800,
    ("CN", "JP"): 2100, ("CN", "KR"): 950, ("CN", "SG"): 4500, ("CN", "AU"): 9000,
    ("JP", "KR"): 1200, ("JP", "AU"): 8000,
    ("AU", "NZ"): 2200, ("AU", "SG"): 6000,
}

# 지역 간 기본 거리 (km, 방향 무관)
INTER_REGION_DISTANCES_KM: Dict[Tuple[str, str], int] = {
    ("NA", "EU"): 7000, ("NA", "APAC"): 10000, ("NA", "SA"): 5000,
    ("NA", "AF"): 11000, ("NA", "ME"): 10000,
    ("EU", "APAC"): 9000, ("EU", "SA"): 9500, ("EU", "AF"): 6000, ("EU", "ME"): 4000,
    ("APAC", "SA"): 15000, ("APAC", "AF"): 11000, ("APAC", "ME"): 8000,
    ("SA", "AF"): 10000, ("SA", "ME"): 12000,
    ("AF", "ME"): 4000,
}

SAME_COUNTRY_DISTANCE_KM = 500
INTRA_REGION_DISTANCE_KM = 1500
DEFAULT_DISTANCE_KM = 8000


# ============================================================
# Tier 2 요율표
# ============================================================

RATE_TYPES: Dict[str, Dict[str, str]] = {
    "Air Freight": {
        "Express": "air-express", "LCL": "air-consolidated", "FCL": "air-charter",
        "default": "air-standard",
    },
    "Sea Freight": {
        "LCL": "sea-lcl", "FCL": "sea-fcl", "Bulk": "sea-bulk",
        "default": "sea-standard",
    },
    "Rail Freight": {
        "FCL": "rail-container", "Bulk": "rail-bulk",
        "default": "rail-standard",
    },
    "Road Transport": {
        "Express": "road-express", "LCL": "road-ltl", "FCL": "road-ftl",
        "default": "road-standard",
    },
}

BASE_RATES_BY_TYPE: Dict[str, float] = {
    "air-express": 15.5, "air-consolidated": 9.8, "air-charter": 22.5, "air-standard": 12.0,
    "sea-lcl": 5.2, "sea-fcl": 3.8, "sea-bulk": 3.0, "sea-standard": 4.5,
    "rail-container": 4.2, "rail-bulk": 3.5, "rail-standard": 3.8,
    "road-express": 6.5, "road-ltl": 4.8, "road-ftl": 3.2, "road-standard": 4.0,
}
DEFAULT_BASE_RATE = 5.0

# 중량 구간 할인 (상한 kg, 계수). 마지막 구간 초과 시 *_MAX 계수
WEIGHT_BREAKS: Dict[str, Tuple[List[Tuple[float, float]], float]] = {
    "air": ([(10, 1.0), (50, 0.85), (100, 0.75), (300, 0.65), (500, 0.55)], 0.5),
    "sea": ([(100, 1.0), (500, 0.9), (1000, 0.8), (5000, 0.7)], 0.6),
    "rail": ([(100, 1.0), (500, 0.9), (1000, 0.82), (5000, 0.75)], 0.65),
    "road": ([(50, 1.0), (200, 0.9), (500, 0.8), (1000, 0.75)], 0.7),
}

SERVICE_LEVELS: Dict[str, str] = {
    "air-express": "Priority Express (1-2 days)",
    "air-consolidated": "Standard Air (3-5 days)",
    "air-charter": "Air Charter (Custom)",
    "air-standard": "Economy Air (5-7 days)",
    "sea-lcl": "LCL Ocean (25-30 days)",
    "sea-fcl": "FCL Ocean (18-25 days)",
    "sea-bulk": "Bulk Ocean (20-30 days)",
    "sea-standard": "Standard Ocean (20-28 days)",
    "rail-container": "Container Rail (10-18 days)",
    "rail-bulk": "Bulk Rail (12-20 days)",
    "rail-standard": "Standard Rail (15-20 days)",
    "road-express": "Express Road (1-3 days)",
    "road-ltl": "LTL Road (3-5 days)",
    "road-ftl": "FTL Road (2-4 days)",
    "road-standard": "Standard Road (3-7 days)",
}
DEFAULT_SERVICE_LEVEL = "Standard Service"
DEFAULT_TRANSIT_DAYS = 5
CUSTOMS_CLEARANCE_DAYS = 2

CARRIERS: Dict[str, List[str]] = {
    "Air Freight": ["DHL Air", "FedEx Air", "UPS Air", "Lufthansa Cargo"],
    "Sea Freight": ["Maersk", "MSC", "CMA CGM", "COSCO"],
    "Rail Freight": ["DB Cargo", "BNSF", "CN Rail", "Union Pacific"],
    "Road Transport": ["DHL Ground", "UPS Ground", "FedEx Ground", "XPO Logistics"],
}

# 특정 국가쌍 운송일수 보정
COUNTRY_PAIR_TRANSIT_ADJUSTMENTS: Dict[Tuple[str, str], int] = {
    ("US", "CN"): 1, ("CN", "US"): 1,
    ("US", "UK"): -1, ("UK", "US"): -1,
    ("US", "CA"): -1, ("CA", "US"): -1,
}


# ============================================================
# Tier 3 운송수단별 계수
# ============================================================

RATE_PER_KG_KM: Dict[str, float] = {
    "Air Freight": 0.00050,     # 1,000km당 kg당 $0.50
    "Sea Freight": 0.00012,
    "Rail Freight": 0.00020,
    "Road Transport": 0.00035,
}
DEFAULT_RATE_PER_KG_KM = 0.00025

# 부피무게 계수 (cm³ / 계수 = kg)
VOLUMETRIC_DIVISORS: Dict[str, float] = {
    "Air Freight": 6000,
    "Sea Freight": 1000,
    "Rail Freight": 4000,
    "Road Transport": 5000,
}
DEFAULT_VOLUMETRIC_DIVISOR = 5000

FUEL_SURCHARGES: Dict[str, float] = {
    "Air Freight": 1.18,
    "Sea Freight": 1.15,
    "Rail Freight": 1.12,
    "Road Transport": 1.14,
}
DEFAULT_FUEL_SURCHARGE = 1.15

PACKAGE_TYPE_FACTORS: Dict[str, float] = {
    "Cardboard Box": 1.0,
    "Wooden Crate": 1.15,
    "Pallet": 1.1,
    "Drum": 1.2,
    "Bag": 0.95,
}

SHIPMENT_TYPE_FACTORS: Dict[str, float] = {
    "LCL": 1.2,         # 혼재 화물 할증
    "FCL": 0.85,
    "Express": 1.6,
    "Bulk": 0.75,
}

# 최종 고정 요율
FLAT_BASE_COST = 50.0
FLAT_RATE_PER_KG = 2.0
FLAT_CROSS_REGION_MULTIPLIER = 1.5


# ============================================================
# 공용 함수
# ============================================================

def get_region(country: str) -> str:
    return REGION_MAP.get(country, UNKNOWN_REGION)


def _symmetric_lookup(table: Dict[Tuple[str, str], int], a: str, b: str) -> Optional[int]:
    if (a, b) in table:
        return table[(a, b)]
    return table.get((b, a))


def get_country_distance(origin_country: str, destination_country: str) -> float:
    """두 국가 간 근사 거리 (km)

    동일 국가 500km → 국가쌍 표 → 동일 지역 1500km → 지역쌍 표 → 8000km
    """
    if origin_country == destination_country:
        return SAME_COUNTRY_DISTANCE_KM

    distance = _symmetric_lookup(COUNTRY_DISTANCES_KM, origin_country, destination_country)
    if distance is not None:
        return distance

    origin_region = get_region(origin_country)
    destination_region = get_region(destination_country)
    if origin_region == destination_region:
        return INTRA_REGION_DISTANCE_KM

    distance = _symmetric_lookup(INTER_REGION_DISTANCES_KM, origin_region, destination_region)
    if distance is not None:
        return distance

    return DEFAULT_DISTANCE_KM


def calculate_volumetric_weight(
    length: float, width: float, height: float, transport_mode: str
) -> float:
    """부피무게 = (가로 x 세로 x 높이, cm) / 운송수단별 계수"""
    divisor = VOLUMETRIC_DIVISORS.get(transport_mode, DEFAULT_VOLUMETRIC_DIVISOR)
    return (length * width * height) / divisor


def get_chargeable_weight(actual: float, volumetric: float) -> float:
    """청구무게 = Max(실무게, 부피무게)"""
    return max(actual, volumetric)


def first_option(options: List[str]) -> str:
    """기본 운송사 선택: 첫 번째 후보"""
    return options[0]


# ============================================================
# Tier 2 견적기
# ============================================================

class RateTableQuoter(CarrierRateProvider):
    """요율표 기반 견적 (제3자 요율 API 대체)

    cost = 기본요율(운임유형) x 중량구간 계수 x 지역거리 계수
    """

    name = "rate-table"

    def __init__(self, carrier_picker: Callable[[List[str]], str] = None):
        """
        Args:
            carrier_picker: 운송사 후보 목록에서 하나를 고르는 함수.
                재현 가능한 결과를 위해 기본값은 첫 번째 후보.
                예: random.Random(42).choice
        """
        self.carrier_picker = carrier_picker or first_option

    def get_quote(
        self,
        origin_country: str,
        destination_country: str,
        shipping: ShippingDetails,
    ) -> ShippingQuote:
        rate_type = self.determine_rate_type(shipping.transport_mode, shipping.shipment_type)
        base_rate = BASE_RATES_BY_TYPE.get(rate_type, DEFAULT_BASE_RATE)
        weight_factor = self.calculate_weight_factor(shipping.weight, rate_type)
        distance_factor = self.calculate_distance_factor(origin_country, destination_country)

        cost = base_rate * weight_factor * distance_factor

        return ShippingQuote(
            carrier=self.select_carrier(shipping.transport_mode),
            service=SERVICE_LEVELS.get(rate_type, DEFAULT_SERVICE_LEVEL),
            delivery_time=self.estimate_delivery_time(origin_country, destination_country, rate_type),
            cost=cost,
            total_cost=cost,
        )

    @staticmethod
    def determine_rate_type(transport_mode: str, shipment_type: str) -> str:
        """운송수단 x 화물형태 → 운임유형 (미등록 조합은 수단별 기본)"""
        mode_rates = RATE_TYPES.get(transport_mode, RATE_TYPES["Road Transport"])
        return mode_rates.get(shipment_type, mode_rates["default"])

    @staticmethod
    def calculate_weight_factor(weight: float, rate_type: str) -> float:
        """중량 구간 할인 계수 (무거울수록 낮음)"""
        mode = rate_type.split("-", 1)[0]
        breaks, heaviest = WEIGHT_BREAKS.get(mode, WEIGHT_BREAKS["road"])
        for upper, factor in breaks:
            if weight <= upper:
                return factor
        return heaviest

    @staticmethod
    def calculate_distance_factor(origin_country: str, destination_country: str) -> float:
        """지역 간 운임 계수 (동일 지역 1.0)"""
        origin_region = get_region(origin_country)
        destination_region = get_region(destination_country)
        if origin_region == destination_region:
            return 1.0
        return REGION_DISTANCE_FACTORS.get(origin_region, {}).get(
            destination_region, DEFAULT_DISTANCE_FACTOR
        )

    def select_carrier(self, transport_mode: str) -> str:
        options = CARRIERS.get(transport_mode, CARRIERS["Road Transport"])
        return self.carrier_picker(options)

    @staticmethod
    def estimate_delivery_time(origin_country: str, destination_country: str, rate_type: str) -> str:
        """예상 운송일수 문자열 ("N-M business days")"""
        service = SERVICE_LEVELS.get(rate_type, DEFAULT_SERVICE_LEVEL)
        match = re.search(r"\((\d+)-(\d+) days\)", service)
        if match:
            days = (int(match.group(1)) + int(match.group(2))) // 2
        else:
            days = DEFAULT_TRANSIT_DAYS

        if origin_country != destination_country:
            days += CUSTOMS_CLEARANCE_DAYS
        days += COUNTRY_PAIR_TRANSIT_ADJUSTMENTS.get((origin_country, destination_country), 0)

        return f"{max(1, days - 1)}-{days + 1} business days"


# ============================================================
# 리졸버
# ============================================================

class ShippingResolver:
    """운송비 리졸버"""

    def __init__(
        self,
        carrier_provider: Optional[CarrierRateProvider] = None,
        rate_quoter: Optional[CarrierRateProvider] = None,
        config: Optional[EngineConfig] = None,
        use_rate_table: bool = True,
    ):
        """
        Args:
            carrier_provider: Tier 1 운송사 API. None이면 건너뜀
            rate_quoter: Tier 2 요율 견적기. None이면 RateTableQuoter
            config: 타임아웃 설정
            use_rate_table: False면 Tier 2 건너뜀
        """
        self.carrier_provider = carrier_provider
        if rate_quoter is None and use_rate_table:
            rate_quoter = RateTableQuoter()
        self.rate_quoter = rate_quoter
        self.config = config or DEFAULT_CONFIG

    def resolve_shipping_cost(self, product: ProductDetails, shipping: ShippingDetails) -> float:
        """운송비 (항상 0 이상의 숫자)"""
        return self.resolve_shipping_estimate(product, shipping).cost

    def resolve_shipping_estimate(
        self, product: ProductDetails, shipping: ShippingDetails
    ) -> ShippingEstimate:
        """운송비 + 출처 + 견적"""
        origin = product.origin_country
        destination = product.destination_country

        logger.info("TIER 1: Attempting to use carrier API for shipping calculation")
        quote = self._quote(self.carrier_provider, "Carrier API shipping quote", origin, destination, shipping)
        if quote is not None:
            return ShippingEstimate(cost=quote.total_cost, source=ShippingSource.CARRIER_API, quote=quote)

        logger.info("TIER 2: Attempting to use shipping rate API for shipping calculation")
        quote = self._quote(self.rate_quoter, "Shipping rate API quote", origin, destination, shipping)
        if quote is not None:
            return ShippingEstimate(cost=quote.total_cost, source=ShippingSource.RATE_API, quote=quote)

        logger.info("TIER 3: Using distance-based calculation for shipping estimation")
        return self.calculate_distance_based_shipping(origin, destination, shipping)

    def _quote(
        self,
        provider: Optional[CarrierRateProvider],
        name: str,
        origin: str,
        destination: str,
        shipping: ShippingDetails,
    ) -> Optional[ShippingQuote]:
        if provider is None:
            return None

        def query() -> Optional[ShippingQuote]:
            quote = provider.get_quote(origin, destination, shipping)
            if quote is None:
                return None
            if not isinstance(quote, ShippingQuote):
                raise ProviderError(
                    f"{name} returned {type(quote).__name__}, expected ShippingQuote",
                    provider=name,
                    error_code=ErrorCodes.PROVIDER_BAD_RESPONSE,
                )
            cost = float(quote.total_cost)
            if not math.isfinite(cost) or cost < 0:
                raise ProviderError(
                    f"{name} returned an invalid total cost: {quote.total_cost!r}",
                    provider=name,
                    error_code=ErrorCodes.PROVIDER_BAD_RESPONSE,
                )
            return replace(quote, total_cost=cost)

        return run_tier(name, query, timeout=self.config.tier_timeout_seconds)

    def calculate_distance_based_shipping(
        self,
        origin_country: str,
        destination_country: str,
        shipping: ShippingDetails,
    ) -> ShippingEstimate:
        """Tier 3: 거리 x 청구무게 x kg-km 요율 x 할증 계수"""
        try:
            mode = shipping.transport_mode
            dims = shipping.dimensions.to_cm()

            distance = get_country_distance(origin_country, destination_country)
            rate_per_kg_km = RATE_PER_KG_KM.get(mode, DEFAULT_RATE_PER_KG_KM)
            volumetric = calculate_volumetric_weight(dims.length, dims.width, dims.height, mode)
            chargeable = get_chargeable_weight(shipping.weight, volumetric)

            cost = chargeable * distance * rate_per_kg_km
            cost *= FUEL_SURCHARGES.get(mode, DEFAULT_FUEL_SURCHARGE)
            cost *= PACKAGE_TYPE_FACTORS.get(shipping.package_type, 1.0)
            cost *= SHIPMENT_TYPE_FACTORS.get(shipping.shipment_type, 1.0)

            return ShippingEstimate(cost=round_half_up(cost, 2), source=ShippingSource.DISTANCE_MODEL)

        except Exception as e:
            logger.error(f"Error calculating distance-based shipping: {e}")
            weight = getattr(shipping, "weight", None)
            return ShippingEstimate(
                cost=self.flat_rate_fallback(weight, origin_country, destination_country),
                source=ShippingSource.FLAT_RATE,
            )

    @staticmethod
    def flat_rate_fallback(weight, origin_country: str, destination_country: str) -> float:
        """최종 고정 요율: (50 + kg x 2), 지역이 다르면 x1.5"""
        try:
            weight = max(0.0, float(weight))
        except (TypeError, ValueError):
            weight = 0.0

        cost = FLAT_BASE_COST + weight * FLAT_RATE_PER_KG
        if get_region(origin_country) != get_region(destination_country):
            cost *= FLAT_CROSS_REGION_MULTIPLIER
        return round_half_up(cost, 2)
