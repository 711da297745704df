"""Move types and legal move generation for Tak.

手の定義と合法手の生成。

手は2種類:
  PlaceMove: 空きマスに石を1つ置く
  SlideMove: 自分が支配する山の上から pickup 個を持ち上げ、
             direction 方向に1マスずつ進みながら drops[i] 個ずつ落とす

Tak の手は固定長の整数にはエンコードしない
（スライド手の数が山の高さで組み合わせ的に増えるため）。
手は frozen dataclass なのでハッシュ可能で、探索木の辞書キーに使える。
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from tak_ai.game.tak.board import Board
from tak_ai.game.tak.compositions import DEFAULT_CACHE, CompositionCache
from tak_ai.game.tak.types import Direction, StoneKind

if TYPE_CHECKING:
    from tak_ai.game.tak.state import TakState


@dataclass(frozen=True)
class PlaceMove:
    """Place a new stone of ``kind`` on the empty square (x, y)."""

    x: int
    y: int
    kind: StoneKind = StoneKind.FLAT


@dataclass(frozen=True)
class SlideMove:
    """Pick up ``pickup`` stones at (x, y) and drop them along ``direction``.

    drops[i] は i+1 マス目に落とす石の数（持ち上げた山の下側から順に落とす）。
    sum(drops) == pickup で、len(drops) が進むマス数になる。
    """

    x: int
    y: int
    direction: Direction
    pickup: int
    drops: tuple[int, ...]

    def landing_squares(self) -> list[tuple[int, int]]:
        """Squares receiving stones, in drop order."""
        dx, dy = self.direction.dx, self.direction.dy
        return [(self.x + dx * (i + 1), self.y + dy * (i + 1)) for i in range(len(self.drops))]


Move = Union[PlaceMove, SlideMove]

# 置ける石の種類（生成順）
_PLACE_KINDS = (StoneKind.FLAT, StoneKind.STANDING, StoneKind.CAPSTONE)


def travel_distance(board: Board, x: int, y: int, direction: Direction) -> int:
    """Number of consecutive squares from (x, y) that a slide can pass over.

    盤端か、一番上が平石でない（立石・キャップストーン）マスの手前まで数える。
    空きマスと平石のマスは通過できる。
    """
    distance = 0
    nx, ny = x + direction.dx, y + direction.dy
    while board.in_bounds(nx, ny):
        top = board.top_at(nx, ny)
        if top is not None and top.kind != StoneKind.FLAT:
            break
        distance += 1
        nx, ny = nx + direction.dx, ny + direction.dy
    return distance


def placement_moves(state: TakState) -> Iterator[PlaceMove]:
    """Every legal placement for the side to move.

    空きマスごとに、手番側（開局ルールでは相手）の持ち石にある種類を置く。
    開局（各自の最初の1手）は平石のみ。
    """
    if state.first_move:
        kinds: tuple[StoneKind, ...] = (StoneKind.FLAT,)
    else:
        kinds = _PLACE_KINDS
    inventory = state.inventories[state.stone_player.value]
    available = [kind for kind in kinds if inventory.remaining(kind) > 0]
    if not available:
        return

    for x, y in state.board.empty_squares():
        for kind in available:
            yield PlaceMove(x, y, kind)


def slide_moves(state: TakState, cache: CompositionCache | None = None) -> Iterator[SlideMove]:
    """Every legal stack slide for the side to move."""
    if state.first_move:
        return  # 開局では山を動かせない
    cache = cache if cache is not None else DEFAULT_CACHE
    board = state.board
    player = state.current_player

    for x, y in board.coords():
        stack = board.stack_at(x, y)
        top = stack.top
        if top is None or top.owner != player:
            continue
        max_pickup = min(stack.height, board.size)

        for direction in Direction:
            travel = travel_distance(board, x, y, direction)
            flatten_target = _standing_beyond(board, x, y, direction, travel)
            can_flatten = top.kind == StoneKind.CAPSTONE and flatten_target

            for pickup in range(1, max_pickup + 1):
                for drops in cache.up_to(pickup, travel):
                    yield SlideMove(x, y, direction, pickup, drops)
                if can_flatten:
                    # 最後の1マスでキャップストーン単独で立石を平らにする
                    for drops in cache.exact(pickup - 1, travel):
                        yield SlideMove(x, y, direction, pickup, (*drops, 1))


def _standing_beyond(board: Board, x: int, y: int, direction: Direction, travel: int) -> bool:
    """True if the square just past the travel distance holds a standing stone."""
    bx = x + direction.dx * (travel + 1)
    by = y + direction.dy * (travel + 1)
    if not board.in_bounds(bx, by):
        return False
    top = board.top_at(bx, by)
    return top is not None and top.kind == StoneKind.STANDING


def generate_moves(state: TakState, cache: CompositionCache | None = None) -> Iterator[Move]:
    """Lazily yield every legal move: placements first, then slides.

    呼び出すたびに新しいジェネレータを返す（共有カーソルはない）。
    終局後は何も生成しない。
    """
    if state.is_terminal:
        return
    yield from placement_moves(state)
    yield from slide_moves(state, cache)


def legal_moves(state: TakState, cache: CompositionCache | None = None) -> list[Move]:
    """All legal moves for the side to move, in generation order."""
    return list(generate_moves(state, cache))
