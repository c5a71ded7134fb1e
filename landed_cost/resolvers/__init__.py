"""리졸버 모듈 (관세, 부가세, 운송비)"""
from .tiers import run_tier, call_with_timeout
from .duty_resolver import DutyResolver, find_trade_agreement
from .tax_resolver import TaxResolver
from .shipping_resolver import (
    ShippingResolver,
    RateTableQuoter,
    get_country_distance,
    calculate_volumetric_weight,
)

__all__ = [
    "run_tier",
    "call_with_timeout",
    "DutyResolver",
    "find_trade_agreement",
    "TaxResolver",
    "ShippingResolver",
    "RateTableQuoter",
    "get_country_distance",
    "calculate_volumetric_weight",
]
