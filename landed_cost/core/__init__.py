"""코어 모듈"""
from .exceptions import (
    LandedCostError,
    ValidationError,
    ConfigurationError,
    ProviderError,
    ProviderTimeoutError,
    CalculationError,
    ErrorCodes,
)
from .config import EngineConfig, DEFAULT_CONFIG, get_settings, reload_settings
from .logging import setup_logger, PerformanceLogger, get_perf_logger

__all__ = [
    # 예외
    "LandedCostError",
    "ValidationError",
    "ConfigurationError",
    "ProviderError",
    "ProviderTimeoutError",
    "CalculationError",
    "ErrorCodes",
    # 설정
    "EngineConfig",
    "DEFAULT_CONFIG",
    "get_settings",
    "reload_settings",
    # 로깅
    "setup_logger",
    "PerformanceLogger",
    "get_perf_logger",
]
