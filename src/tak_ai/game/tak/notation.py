"""Portable Tak Notation (PTN) for moves.

PTN 形式の文字列と手オブジェクトの相互変換。

  置く手:     [F|S|C]<筋><段>        例: "a1", "Sb3", "Cc5"（種類省略は平石）
  スライド手: [個数]<筋><段><方向>[落とす数...]  例: "3c3>12", "a1+"

  方向: "+"=上, "-"=下, "<"=左, ">"=右
  個数を省略すると 1、落とす数を省略すると「全部を1マス目に落とす」。
"""

from __future__ import annotations

import re

from tak_ai.game.tak.errors import NotationError
from tak_ai.game.tak.moves import Move, PlaceMove, SlideMove
from tak_ai.game.tak.types import Direction, StoneKind

KIND_CHARS: dict[StoneKind, str] = {
    StoneKind.FLAT: "F",
    StoneKind.STANDING: "S",
    StoneKind.CAPSTONE: "C",
}

DIRECTION_CHARS: dict[Direction, str] = {
    Direction.UP: "+",
    Direction.DOWN: "-",
    Direction.LEFT: "<",
    Direction.RIGHT: ">",
}

_CHAR_KINDS = {c: k for k, c in KIND_CHARS.items()}
_CHAR_DIRECTIONS = {c: d for d, c in DIRECTION_CHARS.items()}

_PLACE_RE = re.compile(r"^([FSC]?)([a-h])([1-8])$")
_SLIDE_RE = re.compile(r"^([1-8]?)([a-h])([1-8])([-+<>])([1-8]*)$")


def square_name(x: int, y: int) -> str:
    """(0, 0) → "a1"."""
    return f"{chr(ord('a') + x)}{y + 1}"


def parse_square(text: str) -> tuple[int, int]:
    """"a1" → (0, 0)."""
    if len(text) != 2 or not ("a" <= text[0] <= "h") or not ("1" <= text[1] <= "8"):
        msg = f"Invalid square: {text!r}"
        raise NotationError(msg)
    return ord(text[0]) - ord("a"), int(text[1]) - 1


def parse_move(text: str, size: int | None = None) -> Move:
    """Parse a PTN move string.

    size を渡すと盤外の座標も NotationError にする。
    """
    text = text.strip()
    move: Move
    place = _PLACE_RE.match(text)
    slide = _SLIDE_RE.match(text)
    if place is not None:
        kind_char, file_char, rank_char = place.groups()
        x, y = parse_square(file_char + rank_char)
        kind = _CHAR_KINDS[kind_char] if kind_char else StoneKind.FLAT
        move = PlaceMove(x, y, kind)
    elif slide is not None:
        pickup_str, file_char, rank_char, dir_char, drops_str = slide.groups()
        x, y = parse_square(file_char + rank_char)
        pickup = int(pickup_str) if pickup_str else 1
        drops = tuple(int(c) for c in drops_str) if drops_str else (pickup,)
        if sum(drops) != pickup:
            msg = f"Drop counts {drops_str} do not add up to {pickup} in {text!r}"
            raise NotationError(msg)
        move = SlideMove(x, y, _CHAR_DIRECTIONS[dir_char], pickup, drops)
    else:
        msg = f"Error in parsing move: {text!r}"
        raise NotationError(msg)

    if size is not None and not (0 <= move.x < size and 0 <= move.y < size):
        msg = f"Square {square_name(move.x, move.y)} is off a {size}x{size} board"
        raise NotationError(msg)
    return move


def format_move(move: Move) -> str:
    """Format a move as PTN; flat placements omit the kind letter."""
    square = square_name(move.x, move.y)
    if isinstance(move, PlaceMove):
        if move.kind == StoneKind.FLAT:
            return square  # 平石は種類を省略する慣例
        return KIND_CHARS[move.kind] + square
    drops = "".join(str(d) for d in move.drops)
    return f"{move.pickup}{square}{DIRECTION_CHARS[move.direction]}{drops}"
