"""Static evaluators for Tak positions.

局面の静的評価関数。探索エンジンに差し替え可能な形で渡す。

符号の約束（手番ではなく常に白の視点）:
- 白の勝ち → +inf
- 黒の勝ち → -inf
- 引き分け → 0
- それ以外 → ヒューリスティックな実数（正なら白が有利）
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass

import torch

from tak_ai.game.tak.state import TakState
from tak_ai.game.tak.types import GameResult, Player, StoneKind
from tak_ai.model.network import ValueNetwork

Evaluator = Callable[[TakState], float]


def terminal_value(state: TakState) -> float | None:
    """Value of a finished game from White's view, or None if still ongoing."""
    if state.result is GameResult.WHITE_WIN:
        return math.inf
    if state.result is GameResult.BLACK_WIN:
        return -math.inf
    if state.result is GameResult.TIE:
        return 0.0
    return None


def trivial_evaluate(state: TakState) -> float:
    """Only knows about finished games; every other position scores 0."""
    value = terminal_value(state)
    return 0.0 if value is None else value


@dataclass(frozen=True)
class HeuristicWeights:
    """Weights for HeuristicEvaluator.

    control: 盤面支配（山の上ほど重い石の所有数）の重み
    roads:   道の見込み（縦横の最長ライン）の重み
    decay:   山の中で1段下がるごとに掛ける減衰率
    """

    control: float = 1.0
    roads: float = 1.0
    decay: float = 0.45


class HeuristicEvaluator:
    """Board control plus road potential, both from White's point of view."""

    def __init__(self, weights: HeuristicWeights | None = None) -> None:
        self.weights = weights or HeuristicWeights()

    def __call__(self, state: TakState) -> float:
        value = terminal_value(state)
        if value is not None:
            return value
        w = self.weights
        return w.control * self.board_control(state) + w.roads * self.total_roads(state)

    def board_control(self, state: TakState) -> float:
        """Sum of stone ownership, each stone weighted by decay**depth from the top.

        一番上の石は 1、その下は decay、さらに下は decay² … として数える。
        """
        score = 0.0
        for stack in state.board.squares:
            weight = 1.0
            for stone in reversed(stack.stones):
                score += weight if stone.owner == Player.WHITE else -weight
                weight *= self.weights.decay
        return score

    def total_roads(self, state: TakState) -> float:
        white = self.road_potential(state, Player.WHITE)
        black = self.road_potential(state, Player.BLACK)
        return float(white - black)

    def road_potential(self, state: TakState, player: Player) -> int:
        """Best row count plus best column count of road-eligible squares.

        立石以外で player が一番上を持つマスを数える（キャップストーンも含む）。
        """
        board = state.board
        n = board.size
        eligible = [[False] * n for _ in range(n)]
        for x, y in board.coords():
            top = board.top_at(x, y)
            eligible[y][x] = top is not None and top.owner == player and top.kind != StoneKind.STANDING

        best_row = max(sum(row) for row in eligible)
        best_col = max(sum(eligible[y][x] for y in range(n)) for x in range(n))
        return best_row + best_col


class NetworkEvaluator:
    """Wrap a ValueNetwork as an evaluator.

    ネットワークの出力は「手番側から見た価値」[-1, 1] なので、
    黒番の局面では符号を反転して白の視点に揃える。
    """

    def __init__(self, network: ValueNetwork, scale: float = 10.0) -> None:
        self.network = network
        self.scale = scale
        self.device = next(network.parameters()).device

    @torch.no_grad()
    def __call__(self, state: TakState) -> float:
        value = terminal_value(state)
        if value is not None:
            return value
        self.network.eval()
        planes = state.to_tensor_planes().unsqueeze(0).to(self.device)
        v = float(self.network(planes).item())
        if state.current_player == Player.BLACK:
            v = -v
        return self.scale * v
