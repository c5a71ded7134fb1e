"""
test_landed_cost_calculator.py - LandedCostCalculator 단위 테스트

1. 외부 공급자 전부 불가 시 US→CN 전자제품 시나리오
2. 항목 합계 = 총액, 비율 합계 ≈ 100%
3. 입력 오류는 조회 전에 ValidationError
4. 예기치 못한 실패는 CalculationError (재시도 가능)
"""

import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from landed_cost.core.exceptions import CalculationError, ProviderError, ValidationError
from landed_cost.domain.logic import LandedCostCalculator
from landed_cost.domain.models import (
    CostCategory,
    DataSource,
    Dimensions,
    ProductDetails,
    ShippingDetails,
    ShippingQuote,
    ShippingSource,
    TransportMode,
)
from landed_cost.factory import create_calculator
from landed_cost.core.config import EngineConfig
from landed_cost.providers.base import CarrierRateProvider, DutyRateProvider
from landed_cost.providers.reference_store import InMemoryReferenceStore
from landed_cost.resolvers.duty_resolver import DutyResolver
from landed_cost.resolvers.shipping_resolver import ShippingResolver
from landed_cost.utils.cache import MemoryCache


def make_product(**overrides) -> ProductDetails:
    data = dict(
        description="Smartphone",
        category="Electronics",
        hs_code="8517.62",
        origin_country="US",
        destination_country="CN",
        value=100,
    )
    data.update(overrides)
    return ProductDetails(**data)


def make_shipping(**overrides) -> ShippingDetails:
    data = dict(
        quantity=10,
        transport_mode=TransportMode.AIR,
        shipment_type="LCL",
        package_type="Cardboard Box",
        weight=5,
        dimensions=Dimensions(20, 20, 10),
    )
    data.update(overrides)
    return ShippingDetails(**data)


def make_offline_calculator() -> LandedCostCalculator:
    """외부 공급자/참조 데이터 없이 추정 모델만 사용"""
    duty_provider = Mock(spec=DutyRateProvider)
    duty_provider.get_duty_rate.side_effect = ProviderError("tariff-api unavailable")
    carrier = Mock(spec=CarrierRateProvider)
    carrier.get_quote.side_effect = ProviderError("carrier-api unavailable")

    return LandedCostCalculator(
        duty_resolver=DutyResolver(
            cache=MemoryCache(),
            provider=duty_provider,
            reference_store=InMemoryReferenceStore(rates={}),
        ),
        shipping_resolver=ShippingResolver(carrier_provider=carrier, use_rate_table=False),
    )


class TestOfflineScenario:
    """US→CN 전자제품, 공급자 전부 불가"""

    def setup_method(self):
        self.result = make_offline_calculator().calculate_costs(make_product(), make_shipping())
        self.breakdown = self.result.breakdown

    def test_duty_from_model(self):
        assert self.breakdown.data_source == DataSource.MODEL
        assert self.breakdown.duty_rate > 0
        assert self.breakdown.duty_rate == 5.5
        assert self.breakdown.duty_amount == pytest.approx(55.0)

    def test_amounts(self):
        b = self.breakdown
        assert b.product_cost == 1000
        assert b.shipping_cost == pytest.approx(38.94)
        assert b.shipping_source == ShippingSource.DISTANCE_MODEL
        assert b.insurance_cost == 5.0
        assert b.customs_fees == 5.0
        # 부가세 13% x (1000 + 55)
        assert b.tax_rate == 13.0
        assert b.tax_amount == 137.15
        assert b.last_mile_delivery == 15.0
        assert b.handling_fees == 30.0

    def test_total_is_exact_sum(self):
        """총액 = 8개 금액의 합 (정확히)"""
        assert self.breakdown.total_landed_cost == sum(self.breakdown.amounts())
        assert self.breakdown.total_landed_cost == pytest.approx(1286.09)

    def test_components_sum_to_total(self):
        total = self.breakdown.total_landed_cost
        assert sum(c.value for c in self.result.components) == pytest.approx(total)

    def test_percentages_sum_to_100(self):
        assert sum(c.percentage for c in self.result.components) == pytest.approx(100.0)

    def test_component_percentage_matches_value(self):
        total = self.breakdown.total_landed_cost
        for component in self.result.components:
            assert component.percentage == pytest.approx(component.value / total * 100)

    def test_component_order_and_names(self):
        names = [c.name for c in self.result.components]
        assert names == [
            "Product Value",
            "Import Duty (5.5%)",
            "VAT (13.0%)",
            "Freight Cost",
            "Insurance",
            "Customs Clearance",
            "Last Mile Delivery",
            "Handling Fees",
        ]

    def test_component_categories(self):
        categories = [c.category for c in self.result.components]
        assert categories == [
            CostCategory.PRODUCT,
            CostCategory.DUTY,
            CostCategory.TAX,
            CostCategory.SHIPPING,
            CostCategory.SHIPPING,
            CostCategory.OTHER,
            CostCategory.SHIPPING,
            CostCategory.OTHER,
        ]

    def test_to_dict_uses_camel_case(self):
        data = self.result.to_dict()
        assert data["breakdown"]["totalLandedCost"] == self.breakdown.total_landed_cost
        assert data["breakdown"]["dataSource"] == "Model-based estimate"
        assert data["components"][0]["category"] == "product"
        assert "dutyDescription" in data


class TestDefaultCalculator:
    """기본 구성 (참조 테이블 + 요율표)"""

    def test_reference_data_and_rate_table(self):
        result = LandedCostCalculator().calculate_costs(make_product(), make_shipping())

        assert result.breakdown.data_source == DataSource.DATABASE_GENERAL
        assert result.breakdown.duty_rate == 7.5
        assert result.breakdown.shipping_source == ShippingSource.RATE_API
        assert result.shipping_quote is not None
        assert result.breakdown.total_landed_cost == sum(result.breakdown.amounts())

    def test_country_alias(self):
        """GB 는 UK 로 정규화"""
        result = LandedCostCalculator().calculate_costs(
            make_product(destination_country="gb"), make_shipping()
        )
        assert result.breakdown.tax_rate == 20.0
        assert result.components[2].name == "VAT (20.0%)"

    def test_same_country_shipment(self):
        result = LandedCostCalculator().calculate_costs(
            make_product(origin_country="US", destination_country="US"),
            make_shipping(),
        )
        assert result.breakdown.tax_amount == 0.0
        assert result.components[2].name == "Sales Tax (0.0%)"

    def test_factory_builds_equivalent_calculator(self):
        calculator = create_calculator(config=EngineConfig())
        result = calculator.calculate_costs(make_product(), make_shipping())
        assert result.breakdown.data_source == DataSource.DATABASE_GENERAL


class TestValidation:
    """입력 검증 테스트"""

    def setup_method(self):
        self.duty_resolver = Mock(spec=DutyResolver)
        self.calculator = LandedCostCalculator(duty_resolver=self.duty_resolver)

    def test_negative_value(self):
        """조회 전에 거부"""
        with pytest.raises(ValidationError) as exc_info:
            self.calculator.calculate_costs(make_product(value=-1), make_shipping())

        assert exc_info.value.field == "value"
        self.duty_resolver.resolve_duty_rate.assert_not_called()

    def test_missing_dimensions(self):
        with pytest.raises(ValidationError) as exc_info:
            self.calculator.calculate_costs(make_product(), make_shipping(dimensions=None))
        assert exc_info.value.field == "dimensions"

    def test_all_errors_reported(self):
        with pytest.raises(ValidationError) as exc_info:
            self.calculator.calculate_costs(
                make_product(value=0, origin_country=""),
                make_shipping(quantity=0, weight=None),
            )
        assert len(exc_info.value.errors) == 4


class TestCalculationError:
    """예기치 못한 실패 테스트"""

    def test_unexpected_error_is_wrapped(self):
        duty_resolver = Mock(spec=DutyResolver)
        duty_resolver.resolve_duty_rate.side_effect = RuntimeError("boom")
        calculator = LandedCostCalculator(duty_resolver=duty_resolver)

        with pytest.raises(CalculationError) as exc_info:
            calculator.calculate_costs(make_product(), make_shipping())

        error = exc_info.value
        assert error.message == "Failed to calculate cost breakdown"
        assert error.retryable is True
        assert error.stage == "duty"
        assert isinstance(error.__cause__, RuntimeError)
        assert error.cause is error.__cause__

    def test_shipping_stage_failure(self):
        shipping_resolver = Mock(spec=ShippingResolver)
        shipping_resolver.resolve_shipping_estimate.side_effect = KeyError("rate")
        calculator = LandedCostCalculator(shipping_resolver=shipping_resolver)

        with pytest.raises(CalculationError) as exc_info:
            calculator.calculate_costs(make_product(), make_shipping())

        assert exc_info.value.stage == "shipping"


class TestMalformedProviderAnswers:
    """공급자가 잘못된 값을 돌려줘도 계산은 성공"""

    def setup_method(self):
        self.duty_provider = Mock(spec=DutyRateProvider)
        self.duty_provider.get_duty_rate.return_value = "five"
        carrier = Mock(spec=CarrierRateProvider)
        carrier.get_quote.return_value = ShippingQuote(
            "FastShip", "Express", "2-3 business days", float("nan"), float("nan")
        )
        self.cache = MemoryCache()
        self.calculator = LandedCostCalculator(
            duty_resolver=DutyResolver(
                cache=self.cache,
                provider=self.duty_provider,
                reference_store=InMemoryReferenceStore(rates={}),
            ),
            shipping_resolver=ShippingResolver(carrier_provider=carrier, use_rate_table=False),
        )

    def test_repeated_calculations_fall_back(self):
        for _ in range(2):
            breakdown = self.calculator.calculate_costs(make_product(), make_shipping()).breakdown

            assert breakdown.data_source == DataSource.MODEL
            assert breakdown.shipping_source == ShippingSource.DISTANCE_MODEL
            assert breakdown.total_landed_cost == pytest.approx(1286.09)

        assert len(self.cache) == 0
        assert self.duty_provider.get_duty_rate.call_count == 2
