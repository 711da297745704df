"""Tak: the N×N stacking road game."""

from tak_ai.game.tak.board import Board, Stack, Stone
from tak_ai.game.tak.display import board_to_str
from tak_ai.game.tak.moves import Move, PlaceMove, SlideMove, legal_moves
from tak_ai.game.tak.notation import format_move, parse_move
from tak_ai.game.tak.state import TakState, new_game
from tak_ai.game.tak.types import Direction, GameResult, Player, StoneKind

__all__ = [
    "Board",
    "Direction",
    "GameResult",
    "Move",
    "PlaceMove",
    "Player",
    "SlideMove",
    "Stack",
    "Stone",
    "StoneKind",
    "TakState",
    "board_to_str",
    "format_move",
    "legal_moves",
    "new_game",
    "parse_move",
]
