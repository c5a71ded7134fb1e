"""
landed_cost - 국제 운송 도착원가 계산 엔진

사용법:
    from landed_cost import create_calculator, ProductDetails, ShippingDetails, Dimensions

    calculator = create_calculator()
    result = calculator.calculate_costs(product, shipping)
    print(result.breakdown.total_landed_cost)
"""
from .core import (
    EngineConfig,
    LandedCostError,
    ValidationError,
    CalculationError,
    get_settings,
)
from .domain import (
    TransportMode,
    ShipmentType,
    PackageType,
    ProductDetails,
    Dimensions,
    ShippingDetails,
    CostBreakdown,
    CostComponent,
    CostCalculationResult,
)
from .domain.logic import LandedCostCalculator
from .factory import create_calculator

__version__ = "1.0.0"

__all__ = [
    "EngineConfig",
    "LandedCostError",
    "ValidationError",
    "CalculationError",
    "get_settings",
    "TransportMode",
    "ShipmentType",
    "PackageType",
    "ProductDetails",
    "Dimensions",
    "ShippingDetails",
    "CostBreakdown",
    "CostComponent",
    "CostCalculationResult",
    "LandedCostCalculator",
    "create_calculator",
]
