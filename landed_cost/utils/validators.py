"""
validators.py - 입력 데이터 검증 유틸리티

계산 시작 전에 ProductDetails / ShippingDetails 를 검증하고
국가 코드 등을 정규화한다. 오류가 하나라도 있으면 ValidationError 하나로 보고.
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from numbers import Real
from typing import Any, List, Tuple

from ..core.exceptions import ValidationError
from ..domain.models import UNIT_TO_CM, Dimensions, ProductDetails, ShippingDetails
from .helpers import enum_value, normalize_country


class ValidationSeverity(Enum):
    """검증 심각도"""
    ERROR = "error"
    WARNING = "warning"


@dataclass
class ValidationIssue:
    """검증 이슈"""
    field: str
    message: str
    severity: ValidationSeverity = ValidationSeverity.ERROR


@dataclass
class ValidationResult:
    """검증 결과"""
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    issues: List[ValidationIssue] = field(default_factory=list)

    def add_error(self, field_name: str, message: str):
        """에러 추가"""
        self.is_valid = False
        self.errors.append(message)
        self.issues.append(ValidationIssue(field=field_name, message=message))

    def add_warning(self, field_name: str, message: str):
        """경고 추가"""
        self.warnings.append(message)
        self.issues.append(ValidationIssue(
            field=field_name, message=message, severity=ValidationSeverity.WARNING
        ))

    def merge(self, other: "ValidationResult"):
        """다른 결과 병합"""
        if not other.is_valid:
            self.is_valid = False
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        self.issues.extend(other.issues)

    def raise_if_invalid(self):
        """에러가 있으면 ValidationError 발생"""
        if self.is_valid:
            return
        first = next(i for i in self.issues if i.severity == ValidationSeverity.ERROR)
        raise ValidationError(
            "; ".join(self.errors),
            field=first.field,
            errors=list(self.errors),
        )


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


class DataValidator:
    """필드 단위 검증기"""

    @staticmethod
    def required(value: Any, field_name: str) -> ValidationResult:
        """필수값 검증"""
        result = ValidationResult()
        if value is None:
            result.add_error(field_name, f"{field_name} is required")
        elif isinstance(value, str) and not value.strip():
            result.add_error(field_name, f"{field_name} must not be empty")
        return result

    @staticmethod
    def positive_number(value: Any, field_name: str) -> ValidationResult:
        """양수 검증 (0 제외)"""
        result = ValidationResult()
        if not _is_number(value):
            result.add_error(field_name, f"{field_name} must be a number")
        elif value <= 0:
            result.add_error(field_name, f"{field_name} must be greater than 0")
        return result

    @staticmethod
    def positive_integer(value: Any, field_name: str) -> ValidationResult:
        """양의 정수 검증"""
        result = ValidationResult()
        if isinstance(value, bool) or not isinstance(value, int):
            result.add_error(field_name, f"{field_name} must be an integer")
        elif value <= 0:
            result.add_error(field_name, f"{field_name} must be greater than 0")
        return result

    @staticmethod
    def dimensions(dims: Any) -> ValidationResult:
        """포장 치수 검증 (가로, 세로, 높이, 단위)"""
        result = ValidationResult()
        if not isinstance(dims, Dimensions):
            result.add_error("dimensions", "dimensions must provide length, width and height")
            return result

        for name in ("length", "width", "height"):
            result.merge(DataValidator.positive_number(getattr(dims, name), f"dimensions.{name}"))

        unit = str(dims.unit or "").lower()
        if unit not in UNIT_TO_CM:
            result.add_error(
                "dimensions.unit",
                f"dimensions.unit must be one of {sorted(UNIT_TO_CM)}"
            )
        return result


def validate_product_details(product: ProductDetails) -> ValidationResult:
    """상품 정보 검증"""
    result = ValidationResult()
    result.merge(DataValidator.positive_number(product.value, "value"))
    result.merge(DataValidator.required(product.origin_country, "origin_country"))
    result.merge(DataValidator.required(product.destination_country, "destination_country"))

    if not product.hs_code:
        result.add_warning("hs_code", "hs_code is empty; duty rate will be estimated")
    return result


def validate_shipping_details(shipping: ShippingDetails) -> ValidationResult:
    """운송 정보 검증"""
    result = ValidationResult()
    result.merge(DataValidator.positive_integer(shipping.quantity, "quantity"))
    result.merge(DataValidator.positive_number(shipping.weight, "weight"))
    result.merge(DataValidator.dimensions(shipping.dimensions))
    return result


def validate_inputs(
    product: ProductDetails,
    shipping: ShippingDetails,
) -> Tuple[ProductDetails, ShippingDetails]:
    """계산 입력 검증 후 정규화된 사본 반환

    Raises:
        ValidationError: 하나 이상의 필드가 유효하지 않을 때
    """
    result = validate_product_details(product)
    result.merge(validate_shipping_details(shipping))
    result.raise_if_invalid()

    normalized_product = replace(
        product,
        hs_code=str(product.hs_code or "").strip(),
        category=str(enum_value(product.category) or "").strip(),
        origin_country=normalize_country(product.origin_country),
        destination_country=normalize_country(product.destination_country),
    )
    normalized_shipping = replace(
        shipping,
        transport_mode=enum_value(shipping.transport_mode) or "",
        shipment_type=enum_value(shipping.shipment_type) or "",
        package_type=enum_value(shipping.package_type) or "",
        dimensions=shipping.dimensions.to_cm(),
    )
    return normalized_product, normalized_shipping
