"""
models.py - 도메인 모델 (v1.0)

순수 파이썬 데이터 클래스. 외부 의존성 없음.
입력(ProductDetails, ShippingDetails)은 불변이며 계산 1회마다 호출자가 생성.
JSON 경계에서는 camelCase 키를 사용한다.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class TransportMode(str, Enum):
    """운송 수단"""
    AIR = "Air Freight"
    SEA = "Sea Freight"
    RAIL = "Rail Freight"
    ROAD = "Road Transport"


class ShipmentType(str, Enum):
    """화물 형태"""
    LCL = "LCL"             # 혼재 (Less than Container Load)
    FCL = "FCL"             # 컨테이너 단독 (Full Container Load)
    EXPRESS = "Express"
    BULK = "Bulk"


class PackageType(str, Enum):
    """포장 형태"""
    CARDBOARD_BOX = "Cardboard Box"
    WOODEN_CRATE = "Wooden Crate"
    PALLET = "Pallet"
    DRUM = "Drum"
    BAG = "Bag"
    SPECIAL_HANDLING = "Special Handling"


class CostCategory(str, Enum):
    """비용 항목 분류"""
    PRODUCT = "product"
    DUTY = "duty"
    TAX = "tax"
    SHIPPING = "shipping"
    OTHER = "other"


class DataSource:
    """관세율 출처 태그"""
    CACHED = "Cached"
    API = "API"
    DATABASE = "Database"
    DATABASE_GENERAL = "Database (General Rate)"
    MODEL = "Model-based estimate"


class ShippingSource:
    """운송비 출처 태그"""
    CARRIER_API = "Carrier API"
    RATE_API = "Rate API"
    DISTANCE_MODEL = "Distance model"
    FLAT_RATE = "Flat-rate fallback"


# 치수 단위 → cm 환산 계수
UNIT_TO_CM: Dict[str, float] = {
    "cm": 1.0,
    "mm": 0.1,
    "m": 100.0,
    "in": 2.54,
}


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """camelCase / snake_case 키 중 먼저 발견되는 값"""
    for key in keys:
        if key in data:
            return data[key]
    return default


@dataclass(frozen=True)
class ProductDetails:
    """상품 정보"""
    description: str
    category: str
    hs_code: str                    # HS 코드 (빈 값/부분 코드 허용)
    origin_country: str             # 원산지 국가 코드
    destination_country: str        # 도착지 국가 코드
    value: float                    # 단가

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProductDetails":
        return cls(
            description=_pick(data, "description", default=""),
            category=_pick(data, "category", default=""),
            hs_code=_pick(data, "hsCode", "hs_code", default=""),
            origin_country=_pick(data, "originCountry", "origin_country", default=""),
            destination_country=_pick(data, "destinationCountry", "destination_country", default=""),
            value=_pick(data, "value"),
        )


@dataclass(frozen=True)
class Dimensions:
    """포장 치수"""
    length: float
    width: float
    height: float
    unit: str = "cm"

    def to_cm(self) -> "Dimensions":
        """cm 단위로 환산한 치수"""
        factor = UNIT_TO_CM[self.unit.lower()]
        return Dimensions(
            length=self.length * factor,
            width=self.width * factor,
            height=self.height * factor,
            unit="cm",
        )

    @property
    def volume_cm3(self) -> float:
        dims = self.to_cm()
        return dims.length * dims.width * dims.height

    @property
    def volume_m3(self) -> float:
        """CBM(Cubic Meter)"""
        return self.volume_cm3 / 1_000_000

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dimensions":
        return cls(
            length=data.get("length"),
            width=data.get("width"),
            height=data.get("height"),
            unit=data.get("unit") or "cm",
        )


@dataclass(frozen=True)
class ShippingDetails:
    """운송 정보"""
    quantity: int
    transport_mode: str
    shipment_type: str
    package_type: str
    weight: float                   # 실제 무게 (kg)
    dimensions: Dimensions

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShippingDetails":
        dims = _pick(data, "dimensions")
        return cls(
            quantity=_pick(data, "quantity"),
            transport_mode=_pick(data, "transportMode", "transport_mode", default=""),
            shipment_type=_pick(data, "shipmentType", "shipment_type", default=""),
            package_type=_pick(data, "packageType", "package_type", default=""),
            weight=_pick(data, "weight"),
            dimensions=Dimensions.from_dict(dims) if isinstance(dims, dict) else dims,
        )


@dataclass(frozen=True)
class DutyRate:
    """관세율 조회 결과"""
    rate: float                     # 종가세율 (%)
    source: str                     # 출처 티어
    description: Optional[str] = None


@dataclass(frozen=True)
class TaxRate:
    """부가세(소비세) 조회 결과"""
    rate: float                     # 세율 (%)
    amount: float                   # 세액
    description: str
    name: str = "Tax"               # 세목명 (VAT, GST 등)


@dataclass(frozen=True)
class ShippingQuote:
    """운송 견적"""
    carrier: str
    service: str
    delivery_time: str
    cost: float
    total_cost: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "carrier": self.carrier,
            "service": self.service,
            "deliveryTime": self.delivery_time,
            "cost": self.cost,
            "totalCost": self.total_cost,
        }


@dataclass(frozen=True)
class ShippingEstimate:
    """운송비 산정 결과 (출처 포함)"""
    cost: float
    source: str
    quote: Optional[ShippingQuote] = None


@dataclass
class CostBreakdown:
    """비용 세부 내역"""
    product_cost: float
    duty_amount: float
    duty_rate: float
    tax_amount: float
    tax_rate: float
    shipping_cost: float
    insurance_cost: float
    customs_fees: float
    last_mile_delivery: float
    handling_fees: float
    total_landed_cost: float
    data_source: str                # 관세율 출처
    shipping_source: str = ""       # 운송비 출처

    def amounts(self) -> List[float]:
        """총액을 구성하는 8개 금액"""
        return [
            self.product_cost,
            self.duty_amount,
            self.tax_amount,
            self.shipping_cost,
            self.insurance_cost,
            self.customs_fees,
            self.last_mile_delivery,
            self.handling_fees,
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productCost": self.product_cost,
            "dutyAmount": self.duty_amount,
            "dutyRate": self.duty_rate,
            "taxAmount": self.tax_amount,
            "taxRate": self.tax_rate,
            "shippingCost": self.shipping_cost,
            "insuranceCost": self.insurance_cost,
            "customsFees": self.customs_fees,
            "lastMileDelivery": self.last_mile_delivery,
            "handlingFees": self.handling_fees,
            "totalLandedCost": self.total_landed_cost,
            "dataSource": self.data_source,
            "shippingSource": self.shipping_source,
        }


@dataclass
class CostComponent:
    """비율이 표시된 비용 항목"""
    name: str
    value: float
    percentage: float
    description: str
    category: CostCategory

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "percentage": self.percentage,
            "description": self.description,
            "category": self.category.value,
        }


@dataclass
class CostCalculationResult:
    """비용 계산 결과"""
    breakdown: CostBreakdown
    components: List[CostComponent] = field(default_factory=list)
    duty_description: Optional[str] = None
    shipping_quote: Optional[ShippingQuote] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "breakdown": self.breakdown.to_dict(),
            "components": [c.to_dict() for c in self.components],
        }
        if self.duty_description:
            result["dutyDescription"] = self.duty_description
        if self.shipping_quote:
            result["shippingQuote"] = self.shipping_quote.to_dict()
        return result
