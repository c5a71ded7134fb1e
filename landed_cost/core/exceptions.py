"""
커스텀 예외 클래스

Landed Cost 엔진에서 사용하는 모든 커스텀 예외를 정의
- 입력 검증 오류: 호출자에게 그대로 전달 (입력 수정 필요)
- 공급자/타임아웃 오류: 리졸버 내부에서 다음 티어로 폴백 (외부 노출 없음)
- 계산 오류: 집계 단계의 예기치 못한 실패 (재시도 가능)
"""

from typing import Optional, Dict, Any, List


class LandedCostError(Exception):
    """기본 예외 클래스"""

    def __init__(
        self,
        message: str,
        error_code: str = None,
        details: Dict[str, Any] = None,
        cause: Exception = None
    ):
        """
        Args:
            message: 에러 메시지
            error_code: 에러 코드
            details: 추가 상세 정보
            cause: 원인 예외
        """
        self.message = message
        self.error_code = error_code or self._default_code()
        self.details = details or {}
        self.cause = cause
        super().__init__(self.message)

    def _default_code(self) -> str:
        return "LCE_UNKNOWN"

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환"""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "type": self.__class__.__name__
        }

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class ValidationError(LandedCostError):
    """입력 데이터 검증 오류"""

    def __init__(
        self,
        message: str,
        field: str = None,
        value: Any = None,
        errors: List[str] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        self.errors = errors or [message]
        details = kwargs.pop("details", {})
        details["field"] = field
        details["value"] = str(value)[:100]  # 값 길이 제한
        details["errors"] = self.errors
        super().__init__(message, details=details, **kwargs)

    def _default_code(self) -> str:
        return "LCE_VALIDATION"


class ConfigurationError(LandedCostError):
    """설정 오류"""

    def __init__(
        self,
        message: str,
        config_key: str = None,
        **kwargs
    ):
        self.config_key = config_key
        details = kwargs.pop("details", {})
        details["config_key"] = config_key
        super().__init__(message, details=details, **kwargs)

    def _default_code(self) -> str:
        return "LCE_CONFIG"


class ProviderError(LandedCostError):
    """외부 요율 공급자 호출 오류"""

    def __init__(
        self,
        message: str,
        provider: str = None,
        status_code: int = None,
        endpoint: str = None,
        **kwargs
    ):
        self.provider = provider
        self.status_code = status_code
        self.endpoint = endpoint
        details = kwargs.pop("details", {})
        details["provider"] = provider
        details["status_code"] = status_code
        details["endpoint"] = endpoint
        super().__init__(message, details=details, **kwargs)

    def _default_code(self) -> str:
        return "LCE_PROVIDER"


class ProviderTimeoutError(ProviderError):
    """티어 호출 타임아웃"""

    def __init__(
        self,
        message: str,
        timeout_seconds: float = None,
        **kwargs
    ):
        self.timeout_seconds = timeout_seconds
        details = kwargs.pop("details", {})
        details["timeout_seconds"] = timeout_seconds
        super().__init__(message, details=details, **kwargs)

    def _default_code(self) -> str:
        return "LCE_TIMEOUT"


class CalculationError(LandedCostError):
    """비용 집계 실패 (호출자는 재시도 가능)"""

    retryable = True

    def __init__(
        self,
        message: str = "Failed to calculate cost breakdown",
        stage: Optional[str] = None,
        **kwargs
    ):
        self.stage = stage
        details = kwargs.pop("details", {})
        details["stage"] = stage
        details["retryable"] = self.retryable
        super().__init__(message, details=details, **kwargs)

    def _default_code(self) -> str:
        return "LCE_CALCULATION"


# 에러 코드 상수
class ErrorCodes:
    """에러 코드 상수"""

    # 일반
    UNKNOWN = "LCE_UNKNOWN"
    VALIDATION = "LCE_VALIDATION"
    CONFIG = "LCE_CONFIG"

    # 공급자
    PROVIDER_ERROR = "LCE_PROVIDER"
    PROVIDER_NOT_FOUND = "LCE_PROVIDER_NOT_FOUND"
    PROVIDER_BAD_RESPONSE = "LCE_PROVIDER_RESPONSE"
    TIMEOUT = "LCE_TIMEOUT"

    # 계산
    CALCULATION_FAILED = "LCE_CALCULATION"
