"""Memoized ordered compositions for stack-split enumeration.

スライド手の「落とし方」を列挙するための組み合わせテーブル。

k 個の石を m マスに落とす方法は、k を m 個の正の整数の順序付き和
（composition）に分ける方法と一対一に対応する。例: k=3, m=2 → (1,2), (2,1)。
順序が「どのマスに何個落とすか」を決めるので、分割（partition）ではない。

数は C(k-1, m-1) で急増するため、(k, m) をキーにキャッシュする。
キーは整数だけなので、異なる対局・探索の間で安全に共有できる。
"""

from __future__ import annotations

Composition = tuple[int, ...]


class CompositionCache:
    """Injectable memo of ``(total, parts) -> compositions``.

    Tests can pass a fresh instance for a cold cache; the engine shares
    ``DEFAULT_CACHE`` across searches.
    """

    def __init__(self) -> None:
        self._table: dict[tuple[int, int], tuple[Composition, ...]] = {}
        self.hits = 0
        self.misses = 0

    def exact(self, total: int, parts: int) -> tuple[Composition, ...]:
        """Every ordered sequence of ``parts`` positive ints summing to ``total``.

        Each sequence appears exactly once, in lexicographic order.
        ``exact(0, 0)`` is the single empty composition.
        """
        key = (total, parts)
        cached = self._table.get(key)
        if cached is not None:
            self.hits += 1
            return cached

        self.misses += 1
        result = tuple(_compose(total, parts))
        self._table[key] = result
        return result

    def up_to(self, total: int, max_parts: int) -> list[Composition]:
        """Compositions of ``total`` with 1 to ``max_parts`` parts, shortest first."""
        result: list[Composition] = []
        for parts in range(1, min(total, max_parts) + 1):
            result.extend(self.exact(total, parts))
        return result

    def warm(self, max_total: int, max_parts: int) -> None:
        """Precompute every table entry up to the given bounds."""
        for total in range(1, max_total + 1):
            for parts in range(1, min(total, max_parts) + 1):
                self.exact(total, parts)

    def clear(self) -> None:
        self._table.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, key: object) -> bool:
        return key in self._table


def _compose(total: int, parts: int) -> list[Composition]:
    """Build compositions directly (no partition + permutation + dedupe)."""
    if parts == 0:
        return [()] if total == 0 else []
    if total < parts:
        return []  # 各マスに最低1個は落とす必要がある
    if parts == 1:
        return [(total,)]

    result: list[Composition] = []
    # 先頭の値を決め、残りを再帰的に分ける（残り parts-1 マスに最低1個ずつ）
    for first in range(1, total - parts + 2):
        for rest in _compose(total - first, parts - 1):
            result.append((first, *rest))
    return result


# プロセス全体で共有するデフォルトのキャッシュ
DEFAULT_CACHE = CompositionCache()
