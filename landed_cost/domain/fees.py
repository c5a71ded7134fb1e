"""
fees.py - 부대비용 계산 (보험, 통관, 라스트마일, 핸들링)

외부 의존성 없는 순수 함수. 모든 금액은 소수 둘째 자리 사사오입.
"""

from typing import Dict

from ..utils.helpers import round_half_up
from .models import ShippingDetails


# 운송수단별 적하보험 요율 (상품가 대비)
INSURANCE_RATES: Dict[str, float] = {
    "Air Freight": 0.005,
    "Sea Freight": 0.01,
    "Rail Freight": 0.008,
    "Road Transport": 0.015,
}
DEFAULT_INSURANCE_RATE = 0.01

# 통관 수수료
US_CUSTOMS_RATE = 0.0021        # MPF 0.21%, 최소 $25 ~ 최대 $500
US_CUSTOMS_MIN = 25.0
US_CUSTOMS_MAX = 500.0
CA_CUSTOMS_RATE = 0.0085
CA_CUSTOMS_MAX = 295.0
FLAT_CUSTOMS_FEES: Dict[str, float] = {
    "UK": 15.0,
    "AU": 88.0,
}
DEFAULT_CUSTOMS_RATE = 0.005

# 라스트마일
LAST_MILE_BASE_RATES: Dict[str, float] = {
    "US": 15.0,
    "CA": 18.0,
    "UK": 12.0,
    "AU": 20.0,
}
DEFAULT_LAST_MILE_BASE = 15.0
LAST_MILE_FREE_WEIGHT_KG = 10.0
LAST_MILE_RATE_PER_KG = 1.0
LAST_MILE_FREE_VOLUME_M3 = 0.1
LAST_MILE_RATE_PER_M3 = 500.0

# 핸들링
BASE_HANDLING_FEE = 25.0
HANDLING_FEE_PER_UNIT = 0.5
PACKAGE_HANDLING_FEES: Dict[str, float] = {
    "Cardboard Box": 0.0,
    "Wooden Crate": 15.0,
    "Pallet": 30.0,
    "Drum": 20.0,
    "Bag": 5.0,
    "Special Handling": 50.0,
}


def calculate_insurance(product_value: float, transport_mode: str) -> float:
    """적하보험료 = 상품가 x 운송수단별 요율"""
    rate = INSURANCE_RATES.get(transport_mode, DEFAULT_INSURANCE_RATE)
    return round_half_up(product_value * rate, 2)


def calculate_customs_fees(destination_country: str, product_value: float) -> float:
    """도착국 통관 수수료"""
    if destination_country == "US":
        fee = min(max(product_value * US_CUSTOMS_RATE, US_CUSTOMS_MIN), US_CUSTOMS_MAX)
    elif destination_country == "CA":
        fee = min(product_value * CA_CUSTOMS_RATE, CA_CUSTOMS_MAX)
    elif destination_country in FLAT_CUSTOMS_FEES:
        fee = FLAT_CUSTOMS_FEES[destination_country]
    else:
        fee = product_value * DEFAULT_CUSTOMS_RATE
    return round_half_up(fee, 2)


def calculate_last_mile_delivery(destination_country: str, shipping: ShippingDetails) -> float:
    """라스트마일 배송비

    국가 기본요금 + 10kg 초과분 kg당 $1 + 0.1m³ 초과분 m³당 $500
    """
    base = LAST_MILE_BASE_RATES.get(destination_country, DEFAULT_LAST_MILE_BASE)
    weight_adjustment = max(0.0, shipping.weight - LAST_MILE_FREE_WEIGHT_KG) * LAST_MILE_RATE_PER_KG
    volume_adjustment = (
        max(0.0, shipping.dimensions.volume_m3 - LAST_MILE_FREE_VOLUME_M3) * LAST_MILE_RATE_PER_M3
    )
    return round_half_up(base + weight_adjustment + volume_adjustment, 2)


def calculate_handling_fees(shipping: ShippingDetails) -> float:
    """핸들링 수수료 = 기본 $25 + 개당 $0.5 + 포장별 추가요금"""
    quantity_fee = shipping.quantity * HANDLING_FEE_PER_UNIT
    package_fee = PACKAGE_HANDLING_FEES.get(shipping.package_type, 0.0)
    return round_half_up(BASE_HANDLING_FEE + quantity_fee + package_fee, 2)
