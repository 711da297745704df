"""Road connectivity structure for Tak.

道（ロード）判定用のグラフ構造。

各マスの所有者を整数で持つ（0=白, 1=黒, UNOWNED=-1）。
所有者は「一番上の石が平石ならその持ち主、それ以外は UNOWNED」。

盤外に4つの仮想ノード TOP, BOTTOM, LEFT, RIGHT を置く。
「バックウォッシュ」（角を経由して TOP と RIGHT が誤って繋がる現象）を防ぐため、
辺は有向にする:
- LEFT / TOP → 左端列 / 上端行の所有マス（出る辺のみ）
- 右端列 / 下端行の所有マス → RIGHT / BOTTOM（入る辺のみ）
"""

from __future__ import annotations

from collections import deque

UNOWNED = -1

# 上下左右の隣接方向 (dx, dy)
_NEIGHBOR_STEPS = ((0, 1), (0, -1), (-1, 0), (1, 0))


class RoadGraph:
    """Per-square ownership projection plus four directed sentinel nodes.

    Vertex index of square (x, y) is ``x + size * y``; the sentinels take the
    four indices after the board.
    """

    def __init__(self, size: int) -> None:
        self.size = size
        self.vertices: list[int] = [UNOWNED] * (size * size)

        n = size * size
        self.TOP = n
        self.BOTTOM = n + 1
        self.LEFT = n + 2
        self.RIGHT = n + 3

        # 仮想ノードから出る辺の行き先（左端列・上端行）
        self._left_column = [self.index(0, y) for y in range(size)]
        self._top_row = [self.index(x, size - 1) for x in range(size)]

    def index(self, x: int, y: int) -> int:
        return x + self.size * y

    def copy(self) -> RoadGraph:
        other = RoadGraph.__new__(RoadGraph)
        other.__dict__.update(self.__dict__)
        other.vertices = list(self.vertices)  # 所有者配列だけ複製すればよい
        return other

    def update_vertex(self, x: int, y: int, owner: int) -> None:
        """Set the road owner of (x, y): a player index or UNOWNED."""
        self.vertices[self.index(x, y)] = owner

    def owner_at(self, x: int, y: int) -> int:
        return self.vertices[self.index(x, y)]

    def is_left_to_right(self, player: int) -> bool:
        """True if ``player`` connects the left and right edges."""
        return self._is_connected(self._left_column, self.RIGHT, player)

    def is_top_to_bottom(self, player: int) -> bool:
        """True if ``player`` connects the top and bottom edges."""
        return self._is_connected(self._top_row, self.BOTTOM, player)

    def has_road(self, player: int) -> bool:
        return self.is_top_to_bottom(player) or self.is_left_to_right(player)

    def _is_connected(self, start_edge: list[int], end: int, player: int) -> bool:
        """Breadth-first search from a source sentinel to ``end``.

        start_edge は仮想ノード（LEFT/TOP）の隣接マス。
        player が所有するマスだけを辿る。
        """
        visited = [False] * (self.size * self.size)
        queue: deque[int] = deque()
        for v in start_edge:
            if self.vertices[v] == player:
                visited[v] = True
                queue.append(v)

        while queue:
            node = queue.popleft()
            for neighbor in self._neighbors(node, player):
                if neighbor == end:
                    return True
                if neighbor >= self.size * self.size:
                    continue  # 反対側の仮想ノード（RIGHT/BOTTOM）は行き止まり
                if not visited[neighbor]:
                    visited[neighbor] = True
                    queue.append(neighbor)
        return False

    def _neighbors(self, node: int, player: int) -> list[int]:
        """Directed neighbors of an owned square within ``player``'s subgraph."""
        x, y = node % self.size, node // self.size
        result: list[int] = []
        for dx, dy in _NEIGHBOR_STEPS:
            nx, ny = x + dx, y + dy
            if 0 <= nx < self.size and 0 <= ny < self.size:
                idx = self.index(nx, ny)
                if self.vertices[idx] == player:
                    result.append(idx)
        if x == self.size - 1:
            result.append(self.RIGHT)
        if y == 0:
            result.append(self.BOTTOM)
        return result

    def __str__(self) -> str:
        """Ownership map, top row first ("W" white, "B" black, "_" nobody)."""
        chars = {0: "W", 1: "B", UNOWNED: "_"}
        lines = []
        for y in range(self.size - 1, -1, -1):
            lines.append(" ".join(chars[self.owner_at(x, y)] for x in range(self.size)))
        return "\n".join(lines)
