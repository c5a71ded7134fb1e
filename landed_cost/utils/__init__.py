"""유틸리티 모듈"""
from .cache import CacheStore, CacheEntry, MemoryCache
from .helpers import (
    round_half_up,
    safe_divide,
    enum_value,
    normalize_country,
    format_currency,
    format_percent,
)

__all__ = [
    "CacheStore",
    "CacheEntry",
    "MemoryCache",
    "round_half_up",
    "safe_divide",
    "enum_value",
    "normalize_country",
    "format_currency",
    "format_percent",
]
