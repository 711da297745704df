"""Lazily expanded game tree used by the search engine.

探索木のノード。各ノードは1つの局面（TakState）を専有する。

子ノードは必要になった時点で1つずつ作る（遅延展開）:
  親の局面を clone() → 手を適用 → 子ノード
各枝が独立した局面の複製を持つので、枝どうしで盤面を共有しない。
木構造（部分木の共有なし）なので循環も起きない。
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from tak_ai.game.tak.compositions import CompositionCache
from tak_ai.game.tak.moves import Move, generate_moves
from tak_ai.game.tak.state import TakState


@dataclass
class GameTree:
    """A search node: one private state plus children keyed by move.

    state:    このノードの局面（release() 後は None）
    children: 展開済みの子ノード（手 → 子ノード）
    expanded: すべての合法手を展開し終えたら True
    """

    state: TakState | None
    children: dict[Move, GameTree] = field(default_factory=dict)
    expanded: bool = False

    def expand(self, cache: CompositionCache | None = None) -> Iterator[tuple[Move, GameTree]]:
        """Yield (move, child), creating children on first visit.

        途中で反復をやめても、それまでに作った子ノードは children に残る。
        """
        if self.expanded:
            yield from self.children.items()
            return
        if self.state is None:
            raise ValueError("Cannot expand a released node")

        state = self.state
        for move in generate_moves(state, cache):
            child = self.children.get(move)
            if child is None:
                next_state = state.clone()
                next_state.apply_move_unchecked(move)
                child = GameTree(next_state)
                self.children[move] = child
            yield move, child
        self.expanded = True

    def release(self) -> None:
        """Drop this node's state and its whole subtree."""
        for child in self.children.values():
            child.release()
        self.children.clear()
        self.state = None
        self.expanded = False

    def size(self) -> int:
        """Number of nodes in this subtree (including this one)."""
        return 1 + sum(child.size() for child in self.children.values())
