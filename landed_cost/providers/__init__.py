"""외부 협력자 모듈 (요율 공급자, 참조 데이터)"""
from .base import (
    DutyRateProvider,
    TaxRateProvider,
    CarrierRateProvider,
    ReferenceDataStore,
)
from .http import HttpTariffProvider, HttpCarrierRateProvider
from .reference_store import InMemoryReferenceStore, DEFAULT_DUTY_RATES

__all__ = [
    "DutyRateProvider",
    "TaxRateProvider",
    "CarrierRateProvider",
    "ReferenceDataStore",
    "HttpTariffProvider",
    "HttpCarrierRateProvider",
    "InMemoryReferenceStore",
    "DEFAULT_DUTY_RATES",
]
