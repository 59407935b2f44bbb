from abc import ABC, abstractmethod
from typing import Any, Optional


class Cache(ABC):
    """Key/value cache with per-entry expiry"""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when missing or expired"""
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        pass
