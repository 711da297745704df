"""Terminal display for Tak boards.

Tak の盤面をターミナルに表示するためのモジュール。
"""

from __future__ import annotations

from tak_ai.game.tak.board import Board, Stack, Stone
from tak_ai.game.tak.state import TakState
from tak_ai.game.tak.types import Player, StoneKind

# 石の表示文字: 大文字=白、小文字=黒
STONE_CHARS: dict[StoneKind, str] = {
    StoneKind.FLAT: "F",
    StoneKind.STANDING: "S",
    StoneKind.CAPSTONE: "C",
}


def stone_to_str(stone: Stone) -> str:
    """Convert a stone to its display character.

    白は大文字、黒は小文字。
    """
    char = STONE_CHARS[stone.kind]
    if stone.owner == Player.BLACK:
        return char.lower()
    return char


def stack_to_str(stack: Stack) -> str:
    """Whole stack bottom-to-top, e.g. "ffF"; "." for an empty square."""
    if stack.is_empty:
        return "."
    return "".join(stone_to_str(stone) for stone in stack)


def board_to_str(board: Board) -> str:
    """Convert a board to a human-readable string.

    盤面を人間が読みやすい文字列に変換する。

    Example output (3x3):
        3 .   .   F
        2 .   fS  .
        1 F   .   c
          a   b   c

    - 各マスは山を下から上へ並べたもの（最後の文字が一番上）
    - 段ラベルは上から N..1、筋ラベルは a..
    """
    cells = [[stack_to_str(board.stack_at(x, y)) for x in range(board.size)] for y in range(board.size)]
    width = max(3, *(len(cell) for row in cells for cell in row)) + 1

    lines: list[str] = []
    for y in range(board.size - 1, -1, -1):
        row = "".join(cell.ljust(width) for cell in cells[y]).rstrip()
        lines.append(f"{y + 1} {row}")
    files = "".join(chr(ord("a") + x).ljust(width) for x in range(board.size)).rstrip()
    lines.append(f"  {files}")
    return "\n".join(lines)


def road_map_str(state: TakState) -> str:
    """Road ownership map ("W", "B", "_"), top row first."""
    return str(state.board.roads)


def state_to_str(state: TakState) -> str:
    """Board plus inventories and whose turn it is."""
    white, black = state.inventories
    lines = [
        f"BLACK stones: {black.stones} caps: {black.capstones}",
        board_to_str(state.board),
        f"WHITE stones: {white.stones} caps: {white.capstones}",
    ]
    if state.is_terminal:
        lines.append(state.result.value)
    else:
        lines.append(f"{state.player.name} to move (ply {state.ply + 1})")
    return "\n".join(lines)
