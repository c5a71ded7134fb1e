"""
tiers.py - 티어 실행기

외부 공급자 호출을 시간 제한 안에서 실행하고
성공이면 값, 실패/타임아웃이면 None 을 돌려준다.
리졸버의 캐스케이드는 None 여부만 보고 다음 티어로 넘어간다 (재시도 없음).

타임아웃된 호출은 끝날 때까지 워커를 점유하므로
스레드 풀은 티어(공급자)마다 따로 둔다.
"""

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Any, Callable, Dict, Optional, TypeVar

from ..core.exceptions import ErrorCodes, ProviderError, ProviderTimeoutError

T = TypeVar("T")

logger = logging.getLogger(__name__)

POOL_MAX_WORKERS = 8

_executors: Dict[str, ThreadPoolExecutor] = {}
_executors_lock = threading.Lock()


def _get_executor(pool: str) -> ThreadPoolExecutor:
    with _executors_lock:
        executor = _executors.get(pool)
        if executor is None:
            executor = ThreadPoolExecutor(
                max_workers=POOL_MAX_WORKERS,
                thread_name_prefix=f"landed-cost-{pool.lower().replace(' ', '-')}",
            )
            _executors[pool] = executor
        return executor


def call_with_timeout(
    func: Callable[[], T],
    timeout: Optional[float],
    pool: str = "default",
) -> T:
    """func 실행, timeout 초과 시 ProviderTimeoutError

    timeout 이 None 이면 현재 스레드에서 바로 실행한다.
    초과된 호출은 기다리지 않고 버려진다.

    Args:
        func: 인자 없는 호출
        timeout: 상한 시간 (초)
        pool: 스레드 풀 이름 (같은 이름끼리만 워커 공유)
    """
    if timeout is None:
        return func()

    future = _get_executor(pool).submit(func)
    try:
        return future.result(timeout=timeout)
    except FutureTimeout as e:
        future.cancel()
        raise ProviderTimeoutError(
            f"tier call exceeded {timeout}s",
            timeout_seconds=timeout,
        ) from e


def run_tier(
    name: str,
    func: Callable[[], T],
    timeout: Optional[float] = None,
) -> Optional[T]:
    """티어 1회 시도

    Args:
        name: 로그용 티어 이름 (스레드 풀 이름으로도 사용)
        func: 인자 없는 호출 (값 반환 또는 예외)
        timeout: 상한 시간 (초). None이면 현재 스레드에서 실행

    Returns:
        성공 시 func 결과, 실패/타임아웃/None 결과면 None
    """
    try:
        return call_with_timeout(func, timeout, pool=name)
    except Exception as e:
        logger.warning(f"{name} failed, falling back to next tier: {e}")
        return None


def checked_rate(value: Any, provider: str) -> Optional[float]:
    """공급자 응답 요율(%) 검사

    None 은 그대로 None (데이터 없음).
    숫자로 바꿀 수 없거나 음수/무한대/NaN 이면 ProviderError.
    """
    if value is None:
        return None

    try:
        rate = float(value)
    except (TypeError, ValueError) as e:
        raise ProviderError(
            f"{provider} returned a non-numeric rate: {value!r}",
            provider=provider,
            error_code=ErrorCodes.PROVIDER_BAD_RESPONSE,
            cause=e,
        ) from e

    if not math.isfinite(rate) or rate < 0:
        raise ProviderError(
            f"{provider} returned an invalid rate: {value!r}",
            provider=provider,
            error_code=ErrorCodes.PROVIDER_BAD_RESPONSE,
        )
    return rate
