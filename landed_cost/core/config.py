"""
config.py - 엔진 설정 (v1.0)

환경변수(.env 포함) 기반 설정을 중앙 관리
- 공급자 API 주소 / 키
- 티어 타임아웃, 관세율 캐시 TTL
"""

import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv


@dataclass
class EngineConfig:
    """비용 계산 엔진 설정"""

    # --- 외부 공급자 (미설정 시 해당 티어 건너뜀) ---
    tariff_api_url: Optional[str] = None        # 관세율 API (Tier 1)
    carrier_api_url: Optional[str] = None       # 운송사 견적 API (Tier 1)
    api_key: Optional[str] = None

    # --- 타임아웃 ---
    tier_timeout_seconds: float = 5.0           # 티어 1회 시도 상한
    http_timeout_seconds: float = 10.0          # requests 타임아웃

    # --- 캐시 ---
    duty_cache_ttl_seconds: int = 86400         # API 관세율 24시간 캐시

    # --- 기타 ---
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "EngineConfig":
        """환경변수에서 설정 로드"""
        load_dotenv(dotenv_path)
        return cls(
            tariff_api_url=os.getenv("LANDED_COST_TARIFF_API_URL") or None,
            carrier_api_url=os.getenv("LANDED_COST_CARRIER_API_URL") or None,
            api_key=os.getenv("LANDED_COST_API_KEY") or None,
            tier_timeout_seconds=float(os.getenv("LANDED_COST_TIER_TIMEOUT", "5")),
            http_timeout_seconds=float(os.getenv("LANDED_COST_HTTP_TIMEOUT", "10")),
            duty_cache_ttl_seconds=int(os.getenv("LANDED_COST_DUTY_CACHE_TTL", "86400")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    def validate(self) -> List[str]:
        """설정 유효성 검사"""
        errors = []

        if self.tier_timeout_seconds <= 0:
            errors.append("tier_timeout_seconds must be greater than 0")

        if self.http_timeout_seconds <= 0:
            errors.append("http_timeout_seconds must be greater than 0")

        if self.duty_cache_ttl_seconds < 0:
            errors.append("duty_cache_ttl_seconds must not be negative")

        for key in ("tariff_api_url", "carrier_api_url"):
            url = getattr(self, key)
            if url and not url.startswith(("http://", "https://")):
                errors.append(f"{key} must be an http(s) URL")

        return errors


# 기본 설정 인스턴스
DEFAULT_CONFIG = EngineConfig()

_settings: Optional[EngineConfig] = None


def get_settings() -> EngineConfig:
    """설정 인스턴스 반환 (최초 호출 시 환경변수 로드)"""
    global _settings
    if _settings is None:
        _settings = EngineConfig.from_env()
    return _settings


def reload_settings() -> EngineConfig:
    """설정 다시 로드"""
    global _settings
    _settings = EngineConfig.from_env()
    return _settings
