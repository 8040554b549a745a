"""
Short callback keys for long values.

Telegram limits inline button callback data to 64 bytes, so anime URLs and
search queries are swapped for short hash keys kept in memory.
"""
import hashlib
from collections import OrderedDict
from typing import Optional

from .constants import LINK_REGISTRY_SIZE


class LinkRegistry:
    """Bounded LRU map of short key -> value.

    Keys are derived from the value, so the same URL always gets the same
    key within and across processes.
    """

    def __init__(self, max_size: int = LINK_REGISTRY_SIZE) -> None:
        self.max_size = max_size
        self._values: "OrderedDict[str, str]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._values)

    @staticmethod
    def make_key(value: str) -> str:
        return hashlib.sha1(value.encode("utf-8")).hexdigest()[:12]

    def key_for(self, value: str) -> str:
        key = self.make_key(value)
        self._values[key] = value
        self._values.move_to_end(key)
        while len(self._values) > self.max_size:
            self._values.popitem(last=False)
        return key

    def value_for(self, key: str) -> Optional[str]:
        value = self._values.get(key)
        if value is not None:
            self._values.move_to_end(key)
        return value
