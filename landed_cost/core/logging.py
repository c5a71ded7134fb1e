"""
logging.py - 로깅 설정

- Rich 포맷 콘솔 로거
- 성능 추적 (실행 시간 측정)
"""

import logging
import time
from contextlib import contextmanager

from rich.console import Console
from rich.logging import RichHandler


def setup_logger(name: str = "landed_cost", level=logging.INFO) -> logging.Logger:
    """Rich 포맷 로거 설정"""
    logger = logging.getLogger(name)
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(level)

    if not logger.handlers:
        handler = RichHandler(console=Console(stderr=True), rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

    return logger


class PerformanceLogger:
    """성능 추적 로거"""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    @contextmanager
    def track(self, operation: str, **context):
        """
        작업 실행 시간 추적

        사용법:
            with perf_logger.track("calculate_costs", hs_code="8517.62"):
                calculator.calculate_costs(product, shipping)
        """
        start_time = time.perf_counter()
        self.logger.debug(f"Started: {operation}", extra={"context": context})

        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start_time
            self.logger.error(
                f"Failed: {operation} ({elapsed:.3f}s) - {str(e)}",
                extra={"context": {**context, "error": str(e), "duration_ms": elapsed * 1000}},
            )
            raise
        else:
            elapsed = time.perf_counter() - start_time
            self.logger.info(
                f"Completed: {operation} ({elapsed:.3f}s)",
                extra={"context": {**context, "duration_ms": elapsed * 1000}}
            )


def get_perf_logger(name: str = "landed_cost") -> PerformanceLogger:
    """성능 추적 로거 반환"""
    return PerformanceLogger(logging.getLogger(name))
