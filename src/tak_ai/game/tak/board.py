"""Board representation for Tak.

盤面のデータ構造。N×N のマスそれぞれに石の山（Stack）を持つ。

Tak の盤面はミュータブル（その場で変更）設計。
探索では局面ごとに copy() して独立した盤面を作る。

道判定用の RoadGraph は盤面の派生ビュー。一番上の石が変わる操作はすべて
Board のメソッドを通り、_refresh() で RoadGraph を同時に更新する。
呼び出し側が更新を忘れて道判定がずれることはない。
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, replace

from tak_ai.game.tak.road import UNOWNED, RoadGraph
from tak_ai.game.tak.types import Player, StoneKind


@dataclass(frozen=True)  # イミュータブル: 盤面の複製間で石オブジェクトを共有できる
class Stone:
    """A single stone: its owner and kind."""

    owner: Player
    kind: StoneKind = StoneKind.FLAT

    def flattened(self) -> Stone:
        """Return the flat version of this stone (capstone/standing → flat)."""
        if self.kind == StoneKind.FLAT:
            return self
        return replace(self, kind=StoneKind.FLAT)


class Stack:
    """Stones on one square, bottom-first. An empty stack is an empty square.

    一番上の石だけがそのマスの支配者（道・平石数の判定）を決める。
    """

    __slots__ = ("_stones",)

    def __init__(self, stones: list[Stone] | None = None) -> None:
        self._stones: list[Stone] = list(stones) if stones else []

    @property
    def height(self) -> int:
        return len(self._stones)

    @property
    def is_empty(self) -> bool:
        return not self._stones

    @property
    def top(self) -> Stone | None:
        """The top stone, or None for an empty square."""
        return self._stones[-1] if self._stones else None

    @property
    def controller(self) -> Player | None:
        top = self.top
        return None if top is None else top.owner

    @property
    def stones(self) -> tuple[Stone, ...]:
        return tuple(self._stones)

    def push(self, stone: Stone) -> None:
        self._stones.append(stone)

    def push_many(self, stones: list[Stone]) -> None:
        """Append stones given bottom-first."""
        self._stones.extend(stones)

    def lift(self, count: int) -> list[Stone]:
        """Remove and return the top ``count`` stones, bottom-first."""
        if not 0 < count <= len(self._stones):
            msg = f"Cannot lift {count} stones from a stack of {len(self._stones)}"
            raise ValueError(msg)
        lifted = self._stones[-count:]
        del self._stones[-count:]
        return lifted

    def top_view(self, k: int) -> tuple[Stone, ...]:
        """The top ``k`` stones, bottom-first, without removing them."""
        if not 0 <= k <= len(self._stones):
            msg = f"Stack of {len(self._stones)} has no top {k} stones"
            raise ValueError(msg)
        return tuple(self._stones[len(self._stones) - k:])

    def flatten_top(self) -> None:
        """Turn the top stone flat (a capstone arriving on a standing stone)."""
        if not self._stones:
            raise ValueError("Cannot flatten an empty stack")
        self._stones[-1] = self._stones[-1].flattened()

    def copy(self) -> Stack:
        return Stack(self._stones)

    def __len__(self) -> int:
        return len(self._stones)

    def __iter__(self) -> Iterator[Stone]:
        return iter(self._stones)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Stack):
            return NotImplemented
        return self._stones == other._stones

    def __repr__(self) -> str:
        return f"Stack({self._stones!r})"


def road_owner(stack: Stack) -> int:
    """Road projection of a square: owner of a flat top stone, else UNOWNED.

    キャップストーンは道に数えない。
    """
    top = stack.top
    if top is None or top.kind != StoneKind.FLAT:
        return UNOWNED
    return top.owner.value


class Board:
    """N×N grid of stacks plus the road projection derived from it.

    squares: N*N 要素のリスト。squares[x + size * y] でマス(x, y)にアクセス。
    """

    def __init__(self, size: int) -> None:
        self.size = size
        self.squares: list[Stack] = [Stack() for _ in range(size * size)]
        self.roads = RoadGraph(size)

    def copy(self) -> Board:
        other = Board.__new__(Board)
        other.size = self.size
        other.squares = [stack.copy() for stack in self.squares]
        other.roads = self.roads.copy()
        return other

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def stack_at(self, x: int, y: int) -> Stack:
        """Return the stack at (x, y). Mutate it only through Board methods."""
        if not self.in_bounds(x, y):
            msg = f"({x}, {y}) is out of bounds"
            raise IndexError(msg)
        return self.squares[x + self.size * y]

    def top_at(self, x: int, y: int) -> Stone | None:
        return self.stack_at(x, y).top

    def coords(self) -> Iterator[tuple[int, int]]:
        """All squares, x-major (a1, a2, ..., b1, ...)."""
        for x in range(self.size):
            for y in range(self.size):
                yield x, y

    def empty_squares(self) -> Iterator[tuple[int, int]]:
        for x, y in self.coords():
            if self.stack_at(x, y).is_empty:
                yield x, y

    def has_empty_square(self) -> bool:
        return any(stack.is_empty for stack in self.squares)

    # --- 一番上の石を変える操作（必ず _refresh を通す） ---

    def place(self, x: int, y: int, stone: Stone) -> None:
        self.stack_at(x, y).push(stone)
        self._refresh(x, y)

    def lift(self, x: int, y: int, count: int) -> list[Stone]:
        stones = self.stack_at(x, y).lift(count)
        self._refresh(x, y)
        return stones

    def drop(self, x: int, y: int, stones: list[Stone]) -> None:
        self.stack_at(x, y).push_many(stones)
        self._refresh(x, y)

    def flatten_top(self, x: int, y: int) -> None:
        self.stack_at(x, y).flatten_top()
        self._refresh(x, y)

    def _refresh(self, x: int, y: int) -> None:
        self.roads.update_vertex(x, y, road_owner(self.stack_at(x, y)))

    def flat_counts(self) -> tuple[int, int]:
        """Number of flat-topped stacks owned by (white, black)."""
        counts = [0, 0]
        for stack in self.squares:
            top = stack.top
            if top is not None and top.kind == StoneKind.FLAT:
                counts[top.owner.value] += 1
        return counts[0], counts[1]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.size == other.size and self.squares == other.squares
