"""Tests for board display."""

from tak_ai.game.tak.board import Board, Stack, Stone
from tak_ai.game.tak.display import (
    board_to_str,
    road_map_str,
    stack_to_str,
    state_to_str,
    stone_to_str,
)
from tak_ai.game.tak.notation import parse_move
from tak_ai.game.tak.state import new_game
from tak_ai.game.tak.types import Player, StoneKind


def test_white_stone_uppercase() -> None:
    assert stone_to_str(Stone(Player.WHITE, StoneKind.CAPSTONE)) == "C"


def test_black_stone_lowercase() -> None:
    assert stone_to_str(Stone(Player.BLACK, StoneKind.STANDING)) == "s"


def test_stack_bottom_to_top() -> None:
    stack = Stack([Stone(Player.WHITE), Stone(Player.BLACK, StoneKind.STANDING)])
    assert stack_to_str(stack) == "Fs"
    assert stack_to_str(Stack()) == "."


def test_empty_board_display() -> None:
    lines = board_to_str(Board(3)).split("\n")
    assert lines == [
        "3 .   .   .",
        "2 .   .   .",
        "1 .   .   .",
        "  a   b   c",
    ]


def test_tall_stack_widens_columns() -> None:
    board = Board(3)
    for _ in range(4):
        board.place(1, 0, Stone(Player.BLACK))
    lines = board_to_str(board).split("\n")
    assert lines[2] == "1 .    ffff ."
    assert lines[3] == "  a    b    c"


def test_road_map() -> None:
    state = new_game(3)
    state.apply_move_checked(parse_move("a1"))
    assert road_map_str(state) == "_ _ _\n_ _ _\nB _ _"


def test_state_header_and_footer() -> None:
    output = state_to_str(new_game(3))
    lines = output.split("\n")
    assert lines[0] == "BLACK stones: 10 caps: 0"
    assert lines[-2] == "WHITE stones: 10 caps: 0"
    assert lines[-1] == "WHITE to move (ply 1)"


def test_finished_game_shows_result() -> None:
    state = new_game(3)
    for ptn in ["a1", "a2", "b2", "c3", "c2"]:
        state.apply_move_checked(parse_move(ptn))
    assert state_to_str(state).endswith("White wins!")
