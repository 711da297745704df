"""Minimax search with alpha-beta pruning for Tak."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field, replace

from tak_ai.engine.evaluation import Evaluator, HeuristicEvaluator
from tak_ai.engine.tree import GameTree
from tak_ai.game.tak.compositions import CompositionCache
from tak_ai.game.tak.moves import Move, generate_moves
from tak_ai.game.tak.state import TakState
from tak_ai.game.tak.types import Player

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchConfig:
    """Configuration for search().

    depth:       探索深さ（手数）。time_budget だけを指定した場合は使わない
    time_budget: 思考時間（秒）。None なら時間制限なし
    max_depth:   時間制限つき反復深化で到達できる最大深さ
    """

    depth: int = 2
    time_budget: float | None = None
    max_depth: int = 8


@dataclass
class SearchResult:
    """Root moves ranked best-first for the side to move.

    ranked の評価値は白の視点（正なら白が有利）。
    最善手の値はミニマックスの値と一致する。それ以外の手の値は
    αβ枝刈りで得られた上界/下界であり、正確な値とは限らない。
    """

    ranked: list[tuple[Move, float]] = field(default_factory=list)
    depth: int = 0
    nodes: int = 0
    complete: bool = True
    elapsed: float = 0.0

    def best_move(self) -> Move | None:
        return self.ranked[0][0] if self.ranked else None

    def best_value(self) -> float | None:
        return self.ranked[0][1] if self.ranked else None


class _Budget:
    """Node counter plus an optional deadline checked between sibling moves."""

    def __init__(self, deadline: float | None) -> None:
        self.deadline = deadline
        self.nodes = 0
        self.cut_off = False

    def expired(self) -> bool:
        if self.deadline is not None and time.monotonic() >= self.deadline:
            self.cut_off = True
        return self.cut_off


def _colour(state: TakState) -> int:
    """+1 when White is to move, -1 for Black (negamax sign)."""
    return 1 if state.current_player == Player.WHITE else -1


def negamax(
    node: GameTree,
    depth: int,
    alpha: float,
    beta: float,
    evaluator: Evaluator,
    budget: _Budget | None = None,
    cache: CompositionCache | None = None,
    colour: int | None = None,
) -> tuple[Move | None, float]:
    """Negamax search with alpha-beta pruning.

    ネガマックス法 + αβ枝刈りによる探索。
    評価関数は白の視点なので、手番側の視点に直すため colour（±1）を掛ける。

    alpha:  現在のプレイヤーが保証できる最低スコア
    beta:   相手が許す上限（alpha >= beta で枝刈り）
    colour: このノードで手番を持つ側の符号（白 +1、黒 -1）。省略時は局面から求める。
            終局した局面では手番が切り替わらないため、子ノードへは -colour を渡す。

    Returns (best_move, score) from the side to move's perspective.
    best_move is None at depth 0 or at terminal states.
    """
    state = node.state
    assert state is not None
    if colour is None:
        colour = _colour(state)

    if depth == 0 or state.is_terminal:
        return None, colour * evaluator(state)

    best_move: Move | None = None
    best_score = -math.inf

    for move, child in node.expand(cache):
        # 時間切れは兄弟手の間でのみ確認する（最初の手は必ず読む）
        if best_move is not None and budget is not None and budget.expired():
            break
        if budget is not None:
            budget.nodes += 1

        _, score = negamax(child, depth - 1, -beta, -alpha, evaluator, budget, cache, -colour)
        score = -score
        child.release()  # 読み終えた部分木の局面を解放

        if best_move is None or score > best_score:
            best_score = score
            best_move = move

        alpha = max(alpha, score)
        if alpha >= beta:
            break  # βカットオフ

    if best_move is None:
        # 合法手がない（置ける石もなく動かせる山もない）局面は静的評価
        return None, colour * evaluator(state)
    return best_move, best_score


def minimax(
    state: TakState,
    depth: int,
    evaluator: Evaluator,
    cache: CompositionCache | None = None,
) -> tuple[Move | None, float]:
    """Exhaustive minimax without pruning; value from White's view.

    白は最大化、黒は最小化。αβ探索の検証用の参照実装で、
    同点の場合は先に見つかった手を選ぶ（αβ探索と同じ規則）。
    """
    if depth == 0 or state.is_terminal:
        return None, evaluator(state)

    maximizing = state.current_player == Player.WHITE
    best_move: Move | None = None
    best_value = -math.inf if maximizing else math.inf

    for move in generate_moves(state, cache):
        _, value = minimax(state.apply_move(move), depth - 1, evaluator, cache)
        better = value > best_value if maximizing else value < best_value
        if best_move is None or better:
            best_move = move
            best_value = value

    if best_move is None:
        return None, evaluator(state)
    return best_move, best_value


def _search_root(
    state: TakState,
    depth: int,
    evaluator: Evaluator,
    deadline: float | None,
    cache: CompositionCache | None,
) -> SearchResult:
    """One fixed-depth alpha-beta pass that keeps a value for every root move."""
    start = time.monotonic()
    budget = _Budget(deadline)
    root = GameTree(state.clone())  # 呼び出し側の局面は変更しない
    colour = _colour(state)

    scored: list[tuple[Move, float]] = []
    alpha, beta = -math.inf, math.inf
    for move, child in root.expand(cache):
        if scored and budget.expired():
            break
        budget.nodes += 1
        _, score = negamax(child, depth - 1, -beta, -alpha, evaluator, budget, cache, -colour)
        score = -score
        child.release()
        scored.append((move, score))
        alpha = max(alpha, score)

    # 安定ソート: 同点なら生成順の早い手が先（= negamax の最善手と同じ）
    scored.sort(key=lambda entry: entry[1], reverse=True)
    ranked = [(move, colour * score) for move, score in scored]
    root.release()

    return SearchResult(
        ranked=ranked,
        depth=depth,
        nodes=budget.nodes,
        complete=not budget.cut_off,
        elapsed=time.monotonic() - start,
    )


def search(
    state: TakState,
    depth: int | None = None,
    time_budget: float | None = None,
    evaluator: Evaluator | None = None,
    cache: CompositionCache | None = None,
    config: SearchConfig | None = None,
) -> SearchResult:
    """Rank the side to move's moves with alpha-beta search.

    ミニマックス探索で合法手を評価順に並べて返す。

    - depth を指定: その深さまで読む（time_budget があれば時間切れで打ち切り）
    - time_budget だけを指定: 深さ1から反復深化し、読み切った最深の結果を返す
    - どちらもなし: config.depth まで読む

    時間切れで打ち切った場合も、それまでの順位付けを捨てずに返す
    （complete=False）。
    """
    config = config or SearchConfig()
    evaluator = evaluator or HeuristicEvaluator()
    budget_seconds = time_budget if time_budget is not None else config.time_budget
    start = time.monotonic()
    deadline = None if budget_seconds is None else start + budget_seconds

    if state.is_terminal:
        return SearchResult(depth=0)

    if depth is not None or deadline is None:
        target = depth if depth is not None else config.depth
        if target < 1:
            msg = f"Search depth must be at least 1, got {target}"
            raise ValueError(msg)
        result = _search_root(state, target, evaluator, deadline, cache)
    else:
        result = _iterative_deepening(state, config.max_depth, evaluator, deadline, cache)

    result.elapsed = time.monotonic() - start
    logger.debug(
        "Searched depth %d (%s): %d nodes in %.3fs, best %s = %s",
        result.depth,
        "complete" if result.complete else "cut off",
        result.nodes,
        result.elapsed,
        result.best_move(),
        result.best_value(),
    )
    return result


def _iterative_deepening(
    state: TakState,
    max_depth: int,
    evaluator: Evaluator,
    deadline: float,
    cache: CompositionCache | None,
) -> SearchResult:
    best: SearchResult | None = None
    nodes = 0
    for depth in range(1, max_depth + 1):
        result = _search_root(state, depth, evaluator, deadline, cache)
        nodes += result.nodes
        if best is None or result.complete:
            best = result
        if not result.complete:
            break
        value = result.best_value()
        if value is not None and math.isinf(value):
            break  # 勝敗が読み切れたらそれ以上深く読まない
        if time.monotonic() >= deadline:
            break
    assert best is not None
    return replace(best, nodes=nodes)


def minimax_move(
    state: TakState,
    depth: int = 2,
    evaluator: Evaluator | None = None,
) -> Move:
    """Return the best move for the current player using minimax search.

    ミニマックス探索で最善手を返す。
    depth=2 は 5×5 盤でも一瞬で返る深さ。
    """
    move = search(state, depth=depth, evaluator=evaluator).best_move()
    if move is None:
        raise ValueError("No legal moves available")
    return move
