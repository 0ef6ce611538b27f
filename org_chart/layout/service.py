"""
Layout Service v1.0

Stateful memoisation in front of the pure layout strategies.

Caching strategy:
  - The caller supplies a forest version that changes whenever a new
    forest is committed. A new version clears the cache.
  - Cache key = (kind, LayoutOptions). Options are frozen, so a key can
    never change under the cache.
  - Camera moves never reach this service: only forest, scope, depth
    and ordering changes produce new keys.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from typing import Callable, Dict, Optional, Tuple

from ..domain_types import ParseResult
from .layout_types import LAYOUT_RADIAL, LAYOUT_TREE, LayoutOptions, LayoutResult
from .radial_layout import radial_layout
from .tree_layout import tree_layout

logger = logging.getLogger(__name__)

_STRATEGIES: Dict[str, Callable[[ParseResult, Optional[LayoutOptions]], LayoutResult]] = {
    LAYOUT_TREE: tree_layout,
    LAYOUT_RADIAL: radial_layout,
}


def compute_layout(
    forest: ParseResult,
    kind: str,
    options: Optional[LayoutOptions] = None,
) -> LayoutResult:
    """Dispatch to the strategy for kind. Raises ValueError for unknown kinds."""
    try:
        strategy = _STRATEGIES[kind]
    except KeyError:
        raise ValueError(f"Unknown layout kind {kind!r}") from None
    return strategy(forest, options)


class LayoutService:
    """Builds and caches LayoutResults for one forest version at a time."""

    def __init__(self, max_entries: int = 16) -> None:
        self._max_entries = max_entries
        self._version: Optional[int] = None
        self._cache: "OrderedDict[Tuple[str, LayoutOptions], LayoutResult]" = OrderedDict()
        self.hits = 0
        self.misses = 0
        self.last_compute_ms = 0.0

    @property
    def version(self) -> Optional[int]:
        return self._version

    def __len__(self) -> int:
        return len(self._cache)

    def layout(
        self,
        forest: ParseResult,
        version: int,
        kind: str,
        options: Optional[LayoutOptions] = None,
    ) -> LayoutResult:
        if version != self._version:
            self.invalidate()
            self._version = version

        key = (kind, options or LayoutOptions())
        cached = self._cache.get(key)
        if cached is not None:
            self.hits += 1
            self._cache.move_to_end(key)
            return cached

        self.misses += 1
        t0 = time.perf_counter()
        result = compute_layout(forest, kind, key[1])
        self.last_compute_ms = (time.perf_counter() - t0) * 1000
        logger.debug(
            "Computed %s layout for version %d: %d node(s) in %.1f ms",
            kind, version, len(result.positions), self.last_compute_ms,
        )

        self._cache[key] = result
        if len(self._cache) > self._max_entries:
            self._cache.popitem(last=False)
        return result

    def invalidate(self) -> None:
        self._cache.clear()
        self._version = None
