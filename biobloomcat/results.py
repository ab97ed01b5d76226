"""Per-filter hit tallies and the tab-separated summary report."""

from __future__ import annotations

import math
import threading
from collections.abc import Iterable, Sequence
from typing import Any

NO_MATCH = "noMatch"
MULTI_MATCH = "multiMatch"
UNKNOWN = "unknown"

SUMMARY_HEADER = (
    "filter_id\thits\tmisses\tshared\trate_hit\trate_miss\trate_shared\n"
)


def _hit_id(hit: Any) -> int:
    """Accept plain filter indices or result objects carrying an ``id``."""
    if isinstance(hit, int):
        return hit
    return int(hit.id)


def _ratio(count: int, total: int) -> str:
    if total == 0:
        if count == 0:
            return "nan"
        return "inf" if count > 0 else "-inf"
    return "%g" % (count / total)


class ResultsManager:
    """Tallies how reads are assigned to filters and renders a summary."""

    def __init__(self, filter_order: Sequence[str], inclusive: bool = False):
        self._filter_order = list(filter_order)
        self._inclusive = inclusive
        self._no_match_index = len(self._filter_order)
        self._multi_match_index = len(self._filter_order) + 1
        self._above_threshold = [0] * (len(self._filter_order) + 2)
        self._unique = [0] * (len(self._filter_order) + 2)
        self._multi_match = 0
        self._no_match = 0
        self._lock = threading.Lock()

    @property
    def no_match_index(self) -> int:
        """Index used for reads that hit no filter."""
        return self._no_match_index

    @property
    def multi_match_index(self) -> int:
        """Index used for reads that hit more than one filter."""
        return self._multi_match_index

    @property
    def filter_order(self) -> list[str]:
        return list(self._filter_order)

    def _assign(self, current: int, hit: int) -> int:
        self._above_threshold[hit] += 1
        if current == self._no_match_index:
            return hit
        return self._multi_match_index

    def _record(self, index: int) -> int:
        if index == self._no_match_index:
            self._no_match += 1
        elif index == self._multi_match_index:
            self._multi_match += 1
        else:
            self._unique[index] += 1
        return index

    def update(self, hits: Iterable[Any]) -> int:
        """Record the filters one read hit and return its output index."""
        with self._lock:
            index = self._no_match_index
            for hit in hits:
                index = self._assign(index, _hit_id(hit))
            return self._record(index)

    def update_pair(self, hits1: Sequence[int], hits2: Sequence[int]) -> int:
        """Record a read pair from two sorted hit lists; return its output index.

        In inclusive mode a hit on either mate counts; otherwise both mates
        must hit the same filter.
        """
        with self._lock:
            index = self._no_match_index
            i1 = i2 = 0
            n1, n2 = len(hits1), len(hits2)
            while i1 < n1 and i2 < n2:
                a, b = hits1[i1], hits2[i2]
                if a == b:
                    index = self._assign(index, a)
                    i1 += 1
                    i2 += 1
                elif a < b:
                    if self._inclusive:
                        index = self._assign(index, a)
                    i1 += 1
                else:
                    if self._inclusive:
                        index = self._assign(index, b)
                    i2 += 1
            if self._inclusive:
                for a in hits1[i1:]:
                    index = self._assign(index, a)
                for b in hits2[i2:]:
                    index = self._assign(index, b)
            return self._record(index)

    def summary(self, read_count: int) -> str:
        """Render the tab-separated summary for `read_count` processed reads."""
        lines = [SUMMARY_HEADER]
        for i, filter_id in enumerate(self._filter_order):
            above = self._above_threshold[i]
            shared = above - self._unique[i]
            misses = read_count - above
            lines.append(
                f"{filter_id}\t{above}\t{misses}\t{shared}"
                f"\t{_ratio(above, read_count)}"
                f"\t{_ratio(misses, read_count)}"
                f"\t{_ratio(shared, read_count)}\n"
            )
        for name, count in ((MULTI_MATCH, self._multi_match),
                            (NO_MATCH, self._no_match)):
            misses = read_count - count
            lines.append(
                f"{name}\t{count}\t{misses}\t0"
                f"\t{_ratio(count, read_count)}"
                f"\t{_ratio(misses, read_count)}\t0\n"
            )
        return "".join(lines)


__all__ = ["ResultsManager", "NO_MATCH", "MULTI_MATCH", "UNKNOWN", "SUMMARY_HEADER"]

_ = math  # kept for callers formatting ratios alongside this module