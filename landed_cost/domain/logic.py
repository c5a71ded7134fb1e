"""
logic.py - 도착원가(Landed Cost) 집계기

입력 검증 → 관세 → 운송비 → 보험/통관 → 부가세 → 라스트마일/핸들링 → 합계.

과세표준 = 상품가 + 관세 (운임/보험료 제외).
각 리졸버는 항상 값을 돌려주므로 외부 공급자 장애로 계산이 실패하지 않는다.
"""

import logging
from typing import List, Optional

from ..core.config import DEFAULT_CONFIG, EngineConfig
from ..core.exceptions import CalculationError
from ..core.logging import get_perf_logger
from ..providers.reference_store import InMemoryReferenceStore
from ..resolvers.duty_resolver import DutyResolver
from ..resolvers.shipping_resolver import ShippingResolver
from ..resolvers.tax_resolver import TaxResolver
from ..utils.cache import MemoryCache
from ..utils.helpers import safe_divide
from ..utils.validators import validate_inputs
from .fees import (
    calculate_customs_fees,
    calculate_handling_fees,
    calculate_insurance,
    calculate_last_mile_delivery,
)
from .models import (
    CostBreakdown,
    CostCalculationResult,
    CostCategory,
    CostComponent,
    ProductDetails,
    ShippingDetails,
    TaxRate,
)

logger = logging.getLogger(__name__)


class LandedCostCalculator:
    """도착원가 계산기

    리졸버는 주입 가능. 생략하면 메모리 캐시 + 기본 참조 테이블로 구성되며
    외부 API 없이 Tier 2/3 만으로 계산한다.
    """

    def __init__(
        self,
        duty_resolver: Optional[DutyResolver] = None,
        shipping_resolver: Optional[ShippingResolver] = None,
        tax_resolver: Optional[TaxResolver] = None,
        config: Optional[EngineConfig] = None,
    ):
        """
        Args:
            duty_resolver: 관세율 리졸버
            shipping_resolver: 운송비 리졸버
            tax_resolver: 부가세 리졸버
            config: 엔진 설정. None이면 기본값 사용.
        """
        self.config = config or DEFAULT_CONFIG
        self.duty_resolver = duty_resolver or DutyResolver(
            cache=MemoryCache(),
            reference_store=InMemoryReferenceStore(),
            config=self.config,
        )
        self.shipping_resolver = shipping_resolver or ShippingResolver(config=self.config)
        self.tax_resolver = tax_resolver or TaxResolver(config=self.config)
        self.perf = get_perf_logger(__name__)

    def calculate_costs(
        self,
        product: ProductDetails,
        shipping: ShippingDetails,
    ) -> CostCalculationResult:
        """비용 계산 실행

        Args:
            product: 상품 정보
            shipping: 운송 정보

        Returns:
            CostCalculationResult: 세부 내역 + 비율이 표시된 8개 항목

        Raises:
            ValidationError: 입력이 유효하지 않을 때 (조회 전에 발생)
            CalculationError: 그 밖의 예기치 못한 실패
        """
        product, shipping = validate_inputs(product, shipping)

        logger.info(
            f"Trade calculation for {product.hs_code} from "
            f"{product.origin_country} to {product.destination_country}"
        )

        stage = "product"
        try:
            with self.perf.track("calculate_costs", hs_code=product.hs_code):
                # 1. 상품가
                product_cost = product.value * shipping.quantity

                # 2. 관세
                stage = "duty"
                duty = self.duty_resolver.resolve_duty_rate(
                    product.hs_code,
                    product.origin_country,
                    product.destination_country,
                    product.category,
                )
                duty_amount = product_cost * duty.rate / 100
                logger.info(f"Calculated duty rate for {product.hs_code}: {duty.rate}%")
                logger.info(f"Duty amount: ${duty_amount:.2f}")
                logger.info(f"Data source: {duty.source}")

                # 3. 운송비
                stage = "shipping"
                shipping_estimate = self.shipping_resolver.resolve_shipping_estimate(product, shipping)
                shipping_cost = shipping_estimate.cost

                # 4. 보험 / 통관
                stage = "fees"
                insurance_cost = calculate_insurance(product_cost, shipping.transport_mode)
                customs_fees = calculate_customs_fees(product.destination_country, product_cost)

                # 5. 부가세 (과세표준 = 상품가 + 관세)
                stage = "tax"
                tax = self.tax_resolver.resolve_tax_rate(
                    product.hs_code,
                    product.destination_country,
                    product_cost + duty_amount,
                )

                # 6. 라스트마일 / 핸들링
                stage = "fees"
                last_mile_delivery = calculate_last_mile_delivery(product.destination_country, shipping)
                handling_fees = calculate_handling_fees(shipping)

                # 7. 합계
                stage = "aggregate"
                breakdown = CostBreakdown(
                    product_cost=product_cost,
                    duty_amount=duty_amount,
                    duty_rate=duty.rate,
                    tax_amount=tax.amount,
                    tax_rate=tax.rate,
                    shipping_cost=shipping_cost,
                    insurance_cost=insurance_cost,
                    customs_fees=customs_fees,
                    last_mile_delivery=last_mile_delivery,
                    handling_fees=handling_fees,
                    total_landed_cost=0.0,
                    data_source=duty.source,
                    shipping_source=shipping_estimate.source,
                )
                total = 0.0
                for amount in breakdown.amounts():
                    total += amount
                breakdown.total_landed_cost = total

                return CostCalculationResult(
                    breakdown=breakdown,
                    components=self.format_cost_components(breakdown, tax),
                    duty_description=duty.description,
                    shipping_quote=shipping_estimate.quote,
                )

        except Exception as e:
            logger.error(f"Error calculating cost breakdown: {e}")
            raise CalculationError(stage=stage, cause=e) from e

    @staticmethod
    def format_cost_components(breakdown: CostBreakdown, tax: TaxRate) -> List[CostComponent]:
        """표시용 비용 항목 (순서 고정)"""
        total = breakdown.total_landed_cost

        def component(name, value, description, category):
            return CostComponent(
                name=name,
                value=value,
                percentage=safe_divide(value, total) * 100,
                description=description,
                category=category,
            )

        return [
            component(
                "Product Value", breakdown.product_cost,
                "Value of the goods being shipped",
                CostCategory.PRODUCT,
            ),
            component(
                f"Import Duty ({breakdown.duty_rate:.1f}%)", breakdown.duty_amount,
                f"Import duty calculated at {breakdown.duty_rate:.1f}% of product value",
                CostCategory.DUTY,
            ),
            component(
                f"{tax.name} ({breakdown.tax_rate:.1f}%)", breakdown.tax_amount,
                f"{tax.name} calculated at {breakdown.tax_rate:.1f}% of dutiable value",
                CostCategory.TAX,
            ),
            component(
                "Freight Cost", breakdown.shipping_cost,
                "Cost of international transportation",
                CostCategory.SHIPPING,
            ),
            component(
                "Insurance", breakdown.insurance_cost,
                "Insurance coverage for goods in transit",
                CostCategory.SHIPPING,
            ),
            component(
                "Customs Clearance", breakdown.customs_fees,
                "Fees for customs processing and declarations",
                CostCategory.OTHER,
            ),
            component(
                "Last Mile Delivery", breakdown.last_mile_delivery,
                "Cost of final delivery to destination",
                CostCategory.SHIPPING,
            ),
            component(
                "Handling Fees", breakdown.handling_fees,
                "Fees for cargo handling and processing",
                CostCategory.OTHER,
            ),
        ]
