"""
helpers.py - 헬퍼 유틸리티
"""

from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any


def round_half_up(value: float, decimals: int = 2) -> float:
    """사사오입 반올림 (금액 표시 기준)"""
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """안전한 나눗셈"""
    if denominator == 0:
        return default
    return numerator / denominator


def enum_value(value: Any) -> Any:
    """Enum 멤버면 값, 아니면 그대로"""
    if isinstance(value, Enum):
        return value.value
    return value


# 참조 테이블은 영국을 UK 로 표기
COUNTRY_ALIASES = {"GB": "UK"}


def normalize_country(code: Any) -> str:
    """국가 코드 정규화 (공백 제거, 대문자, 별칭 통일)"""
    normalized = str(enum_value(code) or "").strip().upper()
    return COUNTRY_ALIASES.get(normalized, normalized)


def format_currency(amount: float, symbol: str = "$") -> str:
    """통화 포맷"""
    return f"{symbol}{amount:,.2f}"


def format_percent(value: float, decimals: int = 1) -> str:
    """퍼센트 포맷"""
    return f"{value:.{decimals}f}%"
