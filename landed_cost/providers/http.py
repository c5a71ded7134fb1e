"""
http.py - HTTP 기반 요율 공급자

관세율 API, 운송사 견적 API 호출.
네트워크 오류/HTTP 오류/응답 형식 오류는 모두 ProviderError 로 변환.
"""

import logging
from typing import Any, Dict, Optional

import requests

from ..core.exceptions import ErrorCodes, ProviderError
from ..domain.models import ShippingDetails, ShippingQuote
from .base import CarrierRateProvider, DutyRateProvider

logger = logging.getLogger(__name__)


class _HttpClient:
    """공통 GET 호출"""

    name = "http"

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            base_url: API 기본 주소
            api_key: Bearer 토큰 (선택)
            timeout: requests 타임아웃 (초)
            session: 재사용할 세션 (테스트 시 주입)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get_json(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        logger.debug(f"GET {url} params={params}")
        try:
            response = self.session.get(
                url,
                headers=headers,
                params=params,
                timeout=self.timeout
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            code = ErrorCodes.PROVIDER_NOT_FOUND if status == 404 else ErrorCodes.PROVIDER_ERROR
            raise ProviderError(
                f"{self.name} returned HTTP {status}",
                provider=self.name,
                status_code=status,
                endpoint=url,
                error_code=code,
                cause=e,
            ) from e
        except requests.RequestException as e:
            raise ProviderError(
                f"{self.name} request failed: {e}",
                provider=self.name,
                endpoint=url,
                cause=e,
            ) from e

        # requests.JSONDecodeError 도 ValueError 하위 클래스
        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(
                f"{self.name} returned invalid JSON",
                provider=self.name,
                endpoint=url,
                error_code=ErrorCodes.PROVIDER_BAD_RESPONSE,
                cause=e,
            ) from e


class HttpTariffProvider(_HttpClient, DutyRateProvider):
    """관세율 API 클라이언트

    GET {base_url}/api/tariffs/{hs_code}?origin=..&destination=..
    응답: {"dutyRate": 5.0}
    """

    name = "tariff-api"

    def get_duty_rate(self, hs_code: str, origin_country: str, destination_country: str) -> float:
        data = self._get_json(
            f"/api/tariffs/{hs_code}",
            {"origin": origin_country, "destination": destination_country},
        )

        rate = data.get("dutyRate") if isinstance(data, dict) else None
        if not isinstance(rate, (int, float)) or isinstance(rate, bool) or rate < 0:
            raise ProviderError(
                "tariff-api response has no valid dutyRate",
                provider=self.name,
                error_code=ErrorCodes.PROVIDER_BAD_RESPONSE,
            )
        return float(rate)


class HttpCarrierRateProvider(_HttpClient, CarrierRateProvider):
    """운송사 실시간 견적 API 클라이언트

    GET {base_url}/api/shipping/carrier-rates
    응답: {"carrier", "service", "deliveryTime", "cost", "totalCost"}
    """

    name = "carrier-api"

    def get_quote(
        self,
        origin_country: str,
        destination_country: str,
        shipping: ShippingDetails,
    ) -> ShippingQuote:
        data = self._get_json(
            "/api/shipping/carrier-rates",
            {
                "origin": origin_country,
                "destination": destination_country,
                "weight": shipping.weight,
                "length": shipping.dimensions.length,
                "width": shipping.dimensions.width,
                "height": shipping.dimensions.height,
                "transportMode": shipping.transport_mode,
                "shipmentType": shipping.shipment_type,
            },
        )

        try:
            return ShippingQuote(
                carrier=str(data["carrier"]),
                service=str(data.get("service", "")),
                delivery_time=str(data.get("deliveryTime", "")),
                cost=float(data["cost"]),
                total_cost=float(data["totalCost"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError(
                "carrier-api response is missing quote fields",
                provider=self.name,
                error_code=ErrorCodes.PROVIDER_BAD_RESPONSE,
                cause=e,
            ) from e
