"""
cache.py - TTL 캐시

조회 비용이 큰 결과(API 관세율 등)를 만료 시각과 함께 저장.
- 만료된 항목은 다음 조회 시점에 삭제 (미스는 오류가 아님)
- 크기 제한/LRU 없음 (항목이 작고 수명이 짧음)
- 여러 계산이 동시에 읽고 써도 안전 (단일 RLock)
"""

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


class CacheStore(ABC):
    """캐시 저장소 인터페이스 (메모리, 외부 캐시 서비스 등)"""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """유효한 값 반환, 없거나 만료되면 None"""

    @abstractmethod
    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """만료 시각 = 현재 + ttl 로 저장 (기존 항목 덮어씀)"""

    @abstractmethod
    def delete(self, key: str) -> None:
        """항목 삭제"""

    @abstractmethod
    def clear(self) -> None:
        """전체 삭제"""


@dataclass
class CacheEntry:
    """캐시 항목"""
    key: str
    data: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class MemoryCache(CacheStore):
    """프로세스 내 TTL 캐시"""

    def __init__(self, clock: Callable[[], float] = None):
        """
        Args:
            clock: 현재 시각(초) 반환 함수. None이면 time.time
        """
        self._clock = clock or time.time
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None

            if entry.is_expired(self._clock()):
                del self._entries[key]
                self._misses += 1
                return None

            self._hits += 1
            return entry.data

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(
                key=key,
                data=value,
                expires_at=self._clock() + ttl_seconds,
            )

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def get_or_set(self, key: str, factory: Callable[[], Any], ttl_seconds: float) -> Any:
        """캐시 값 반환, 미스면 factory 결과를 저장 후 반환

        factory 예외는 그대로 전파되며 아무것도 저장하지 않는다.
        factory 는 잠금 밖에서 실행된다 (동시 미스면 둘 다 실행, 나중 값이 저장됨).
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        value = factory()
        self.set(key, value, ttl_seconds)
        return value

    def delete_pattern(self, fragment: str) -> int:
        """키에 fragment가 포함된 항목 삭제

        Returns:
            삭제된 항목 수
        """
        with self._lock:
            keys = [k for k in self._entries if fragment in k]
            for key in keys:
                del self._entries[key]
            return len(keys)

    def stats(self) -> Dict[str, int]:
        """히트/미스/항목 수"""
        with self._lock:
            return {
                "hits": self._hits,
                "misses": self._misses,
                "entries": len(self._entries),
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
