"""
In-process translation cache.

Entries are keyed by ``(target_language, source_text)`` and live as long as
the process unless ``max_entries`` is set, in which case the least recently
used entry is evicted first. Source texts longer than ``hash_threshold``
characters are keyed by their SHA-256 digest so full AI answers do not sit in
memory twice.
"""

import hashlib
from collections import OrderedDict
from typing import Optional, Tuple

DEFAULT_HASH_THRESHOLD = 256

CacheKey = Tuple[str, str]


class TranslationCache:
    """Injectable ``(language, text) -> translation`` store."""

    def __init__(self, max_entries: Optional[int] = None, hash_threshold: int = DEFAULT_HASH_THRESHOLD):
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be positive or None")
        self.max_entries = max_entries
        self.hash_threshold = hash_threshold
        self._entries: "OrderedDict[CacheKey, str]" = OrderedDict()

    def _key(self, target_language: str, source_text: str) -> CacheKey:
        if len(source_text) > self.hash_threshold:
            digest = hashlib.sha256(source_text.encode("utf-8")).hexdigest()
            return target_language, f"sha256:{digest}"
        return target_language, source_text

    def get(self, target_language: str, source_text: str) -> Optional[str]:
        key = self._key(target_language, source_text)
        value = self._entries.get(key)
        if value is not None and self.max_entries is not None:
            self._entries.move_to_end(key)
        return value

    def set(self, target_language: str, source_text: str, translated: str) -> None:
        key = self._key(target_language, source_text)
        self._entries[key] = translated
        if self.max_entries is not None:
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, item: CacheKey) -> bool:
        target_language, source_text = item
        return self._key(target_language, source_text) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
