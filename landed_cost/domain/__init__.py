"""도메인 모듈 - 모델과 부대비용 계산

LandedCostCalculator 는 리졸버에 의존하므로 landed_cost.domain.logic 에서 직접 import.
"""
from .models import (
    TransportMode,
    ShipmentType,
    PackageType,
    CostCategory,
    DataSource,
    ShippingSource,
    ProductDetails,
    Dimensions,
    ShippingDetails,
    DutyRate,
    TaxRate,
    ShippingQuote,
    ShippingEstimate,
    CostBreakdown,
    CostComponent,
    CostCalculationResult,
)
from .fees import (
    calculate_insurance,
    calculate_customs_fees,
    calculate_last_mile_delivery,
    calculate_handling_fees,
)

__all__ = [
    # 열거형 / 출처 태그
    "TransportMode",
    "ShipmentType",
    "PackageType",
    "CostCategory",
    "DataSource",
    "ShippingSource",
    # 입력
    "ProductDetails",
    "Dimensions",
    "ShippingDetails",
    # 결과
    "DutyRate",
    "TaxRate",
    "ShippingQuote",
    "ShippingEstimate",
    "CostBreakdown",
    "CostComponent",
    "CostCalculationResult",
    # 부대비용
    "calculate_insurance",
    "calculate_customs_fees",
    "calculate_last_mile_delivery",
    "calculate_handling_fees",
]
