"""Tests for TakState."""

from __future__ import annotations

import pytest
import torch

from tak_ai.game.protocol import GameState
from tak_ai.game.tak.board import Stone
from tak_ai.game.tak.errors import (
    BlockedPath,
    GameOver,
    InsufficientInventory,
    InsufficientStack,
    InvalidCapstoneFlatten,
    InvalidDropPattern,
    NotOwner,
    OccupiedSquare,
    OpeningRuleViolation,
    OutOfBounds,
    RuleViolation,
)
from tak_ai.game.tak.moves import Move, PlaceMove, SlideMove
from tak_ai.game.tak.notation import parse_move
from tak_ai.game.tak.state import NUM_PLANES, TakState, new_game
from tak_ai.game.tak.types import Direction, GameResult, Player, StoneKind

W = Stone(Player.WHITE)
B = Stone(Player.BLACK)
W_CAP = Stone(Player.WHITE, StoneKind.CAPSTONE)
B_CAP = Stone(Player.BLACK, StoneKind.CAPSTONE)
B_WALL = Stone(Player.BLACK, StoneKind.STANDING)


def _play(state: TakState, *moves: str) -> TakState:
    for ptn in moves:
        state.apply_move_checked(parse_move(ptn, size=state.size))
    return state


def _position(
    size: int,
    stacks: dict[tuple[int, int], list[Stone]],
    player: Player = Player.WHITE,
) -> TakState:
    """Helper: a post-opening state with the given stacks (bottom-first)."""
    state = new_game(size)
    for (x, y), stones in stacks.items():
        for stone in stones:
            state.board.place(x, y, stone)
    state.ply = 2
    state._current_player = player
    return state


class TestProtocolCompliance:
    def test_implements_game_state(self) -> None:
        assert isinstance(new_game(), GameState)


class TestNewGame:
    def test_defaults(self) -> None:
        state = new_game()
        assert state.size == 5
        assert state.current_player == Player.WHITE.value
        assert state.ply == 0
        assert state.result is GameResult.ONGOING
        assert not state.is_terminal
        assert state.winner is None
        assert [(inv.stones, inv.capstones) for inv in state.inventories] == [(21, 1), (21, 1)]

    def test_custom_inventory(self) -> None:
        state = new_game(4, stones=3)
        assert (state.inventories[0].stones, state.inventories[0].capstones) == (3, 0)
        assert state.config.stones == 3

    def test_unsupported_size(self) -> None:
        with pytest.raises(ValueError):
            new_game(9)


class TestTurnOrder:
    def test_players_alternate(self) -> None:
        state = new_game(5)
        expected = Player.WHITE
        for ptn in ["a1", "e5", "b2", "c3", "b3", "d4"]:
            assert state.player == expected
            _play(state, ptn)
            expected = expected.opponent
        assert state.ply == 6
        assert state.player == Player.WHITE

    def test_apply_move_does_not_mutate(self) -> None:
        state = new_game(5)
        child = state.apply_move(PlaceMove(0, 0))
        assert state.ply == 0
        assert state.board.stack_at(0, 0).is_empty
        assert child.ply == 1
        assert child.current_player == Player.BLACK.value

    def test_clone_is_independent(self) -> None:
        state = _play(new_game(5), "a1", "e5")
        other = state.clone()
        _play(other, "c3")
        assert state.board.stack_at(2, 2).is_empty
        assert state.inventories[Player.WHITE].stones == 20
        assert other.inventories[Player.WHITE].stones == 19


class TestOpeningRule:
    def test_first_moves_place_opponent_stones(self) -> None:
        state = _play(new_game(5), "a1")
        assert state.board.top_at(0, 0) == B
        assert state.inventories[Player.BLACK].stones == 20
        assert state.inventories[Player.WHITE].stones == 21
        _play(state, "e5")
        assert state.board.top_at(4, 4) == W
        assert state.inventories[Player.WHITE].stones == 20

    def test_third_ply_places_own_stone(self) -> None:
        state = _play(new_game(5), "a1", "e5", "c3")
        assert state.board.top_at(2, 2) == W
        assert not state.first_move
        assert state.stone_player == Player.BLACK

    def test_standing_stone_rejected(self) -> None:
        with pytest.raises(OpeningRuleViolation):
            new_game(5).apply_move_checked(PlaceMove(0, 0, StoneKind.STANDING))

    def test_second_ply_capstone_rejected(self) -> None:
        state = _play(new_game(5), "a1")
        with pytest.raises(OpeningRuleViolation):
            state.apply_move_checked(PlaceMove(2, 2, StoneKind.CAPSTONE))

    def test_slide_rejected(self) -> None:
        state = _play(new_game(5), "a1")
        with pytest.raises(OpeningRuleViolation):
            state.apply_move_checked(SlideMove(0, 0, Direction.UP, 1, (1,)))


class TestRuleViolations:
    @pytest.mark.parametrize(
        ("stacks", "move", "error"),
        [
            ({}, PlaceMove(5, 0), OutOfBounds),
            ({(0, 0): [B]}, PlaceMove(0, 0), OccupiedSquare),
            ({(0, 0): [B]}, SlideMove(0, 0, Direction.UP, 1, (1,)), NotOwner),
            ({(1, 1): [W]}, SlideMove(1, 1, Direction.UP, 1, (1,)), None),
            ({(1, 1): [W]}, SlideMove(1, 1, Direction.UP, 2, (2,)), InsufficientStack),
            ({(1, 1): [W] * 6}, SlideMove(1, 1, Direction.UP, 6, (3, 3)), InsufficientStack),
            ({(1, 1): [W]}, SlideMove(1, 1, Direction.UP, 1, (2,)), InvalidDropPattern),
            ({(1, 1): [W, W]}, SlideMove(1, 1, Direction.UP, 2, (2, 0)), InvalidDropPattern),
            ({(1, 1): [W]}, SlideMove(1, 1, Direction.UP, 1, ()), InvalidDropPattern),
            ({(0, 0): [W]}, SlideMove(0, 0, Direction.LEFT, 1, (1,)), OutOfBounds),
            ({(0, 0): [W, W]}, SlideMove(0, 0, Direction.DOWN, 2, (1, 1)), OutOfBounds),
            (
                {(0, 0): [W, W], (0, 1): [B_WALL]},
                SlideMove(0, 0, Direction.UP, 2, (1, 1)),
                BlockedPath,
            ),
            ({(0, 0): [W_CAP], (0, 1): [B_CAP]}, SlideMove(0, 0, Direction.UP, 1, (1,)), BlockedPath),
            ({(0, 0): [W], (0, 1): [B_WALL]}, SlideMove(0, 0, Direction.UP, 1, (1,)), InvalidCapstoneFlatten),
            (
                {(0, 0): [W, W_CAP], (0, 1): [B_WALL]},
                SlideMove(0, 0, Direction.UP, 2, (2,)),
                InvalidCapstoneFlatten,
            ),
        ],
    )
    def test_validation(
        self,
        stacks: dict[tuple[int, int], list[Stone]],
        move: Move,
        error: type[RuleViolation] | None,
    ) -> None:
        state = _position(5, stacks)
        if error is None:
            state.validate(move)
            return
        with pytest.raises(error):
            state.validate(move)
        assert not state.is_legal(move)

    def test_insufficient_inventory(self) -> None:
        state = _position(3, {})
        with pytest.raises(InsufficientInventory):
            state.apply_move_checked(PlaceMove(1, 1, StoneKind.CAPSTONE))

    def test_rejected_move_leaves_state_unchanged(self) -> None:
        state = _position(5, {(0, 0): [W], (0, 1): [B_WALL]})
        before = state.clone()
        with pytest.raises(RuleViolation):
            state.apply_move_checked(SlideMove(0, 0, Direction.UP, 1, (1,)))
        assert state.board == before.board
        assert state.ply == before.ply
        assert state.player == before.player

    def test_violations_are_value_errors(self) -> None:
        with pytest.raises(ValueError, match="out of bounds"):
            new_game(3).apply_move_checked(PlaceMove(3, 3))

    def test_move_after_game_over(self) -> None:
        state = _play(new_game(3), "a1", "a2", "b2", "c3", "c2")
        assert state.is_terminal
        with pytest.raises(GameOver):
            state.apply_move_checked(PlaceMove(1, 0))
        with pytest.raises(GameOver):
            state.apply_move_unchecked(PlaceMove(1, 0))


class TestSlides:
    def test_slide_drops_bottom_first(self) -> None:
        state = _position(5, {(0, 0): [B, W, B, W]})
        state.apply_move_checked(SlideMove(0, 0, Direction.RIGHT, 3, (1, 2)))
        assert state.board.stack_at(0, 0).stones == (B,)
        assert state.board.stack_at(1, 0).stones == (W,)
        assert state.board.stack_at(2, 0).stones == (B, W)

    def test_slide_onto_flat_stacks(self) -> None:
        state = _position(5, {(0, 0): [W], (0, 1): [B]})
        state.apply_move_checked(SlideMove(0, 0, Direction.UP, 1, (1,)))
        assert state.board.stack_at(0, 1).stones == (B, W)
        assert state.board.stack_at(0, 0).is_empty

    def test_capstone_flattens_wall(self) -> None:
        state = _position(5, {(0, 0): [W, W_CAP], (0, 2): [B_WALL]})
        state.apply_move_checked(SlideMove(0, 0, Direction.UP, 2, (1, 1)))
        assert state.board.stack_at(0, 1).stones == (W,)
        assert state.board.stack_at(0, 2).stones == (B, W_CAP)
        assert state.board.top_at(0, 2) == W_CAP

    def test_road_projection_follows_slides(self) -> None:
        state = _position(5, {(0, 0): [B, W]})
        state.apply_move_checked(SlideMove(0, 0, Direction.UP, 1, (1,)))
        roads = state.board.roads
        assert roads.owner_at(0, 0) == Player.BLACK.value
        assert roads.owner_at(0, 1) == Player.WHITE.value


class TestRoadWins:
    def test_vertical_road_scenario(self) -> None:
        state = _play(new_game(5), "b1", "a1", "a2", "b2", "a3", "b3", "a4", "b4")
        assert not state.is_terminal
        _play(state, "a5")
        assert state.result is GameResult.WHITE_WIN
        assert state.winner == Player.WHITE.value
        assert state.result.value == "White wins!"

    def test_black_horizontal_road(self) -> None:
        state = _play(new_game(3), "a3", "a1", "b1", "b3", "a2", "c3")
        assert state.result is GameResult.BLACK_WIN

    def test_walls_do_not_make_roads(self) -> None:
        state = _play(new_game(3), "a3", "a1", "b1", "b3", "a2", "Sc3")
        assert not state.is_terminal

    def test_capstones_do_not_make_roads(self) -> None:
        state = _position(5, {(x, 0): [W] for x in range(4)})
        state.apply_move_checked(PlaceMove(4, 0, StoneKind.CAPSTONE))
        assert not state.is_terminal

    def test_mover_wins_double_road(self) -> None:
        # 白が b2 の山から1枚下ろすと、白の1段目と黒の2段目が同時に完成する
        state = _position(
            3,
            {
                (0, 0): [W],
                (2, 0): [W],
                (0, 1): [B],
                (2, 1): [B],
                (1, 1): [B, W],
            },
        )
        state.apply_move_checked(SlideMove(1, 1, Direction.DOWN, 1, (1,)))
        assert state.board.roads.has_road(Player.BLACK.value)
        assert state.result is GameResult.WHITE_WIN

    def test_uncovering_opponent_road_loses(self) -> None:
        state = _position(3, {(0, 1): [B], (2, 1): [B], (1, 1): [B, W]})
        state.apply_move_checked(SlideMove(1, 1, Direction.UP, 1, (1,)))
        assert state.result is GameResult.BLACK_WIN


class TestFlatWins:
    def test_out_of_stones_counts_flats(self) -> None:
        state = _play(new_game(3, stones=3), "a1", "c3", "c1", "a3", "b2")
        assert not state.is_terminal
        _play(state, "Sb1")
        assert state.flat_counts() == (3, 2)
        assert state.result is GameResult.WHITE_WIN

    def test_equal_flats_is_a_tie(self) -> None:
        state = _play(new_game(3, stones=3), "a1", "c3", "c1", "a3", "b2", "b1")
        assert state.flat_counts() == (3, 3)
        assert state.result is GameResult.TIE
        assert state.winner is None

    def test_full_board_counts_flats(self) -> None:
        state = _position(
            3,
            {
                (0, 0): [W], (1, 0): [B], (2, 0): [W],
                (0, 1): [B], (1, 1): [B], (2, 1): [W],
                (0, 2): [W], (1, 2): [W_CAP],
            },
        )
        state.apply_move_checked(PlaceMove(2, 2, StoneKind.STANDING))
        assert not state.board.has_empty_square()
        # 平石: 白 4, 黒 3（キャップと立石は数えない）
        assert state.flat_counts() == (4, 3)
        assert state.result is GameResult.WHITE_WIN


class TestTensorPlanes:
    def test_shape(self) -> None:
        planes = new_game(5).to_tensor_planes()
        assert planes.shape == (NUM_PLANES, 5, 5)

    def test_initial_planes(self) -> None:
        planes = new_game(5).to_tensor_planes()
        assert planes[:8].sum() == 0
        assert torch.all(planes[8] == 1.0)
        assert torch.all(planes[12] == 1.0)
        assert torch.all(planes[13] == 1.0)

    def test_top_stone_from_side_to_move_view(self) -> None:
        state = _position(5, {(1, 2): [W], (3, 0): [B_WALL]}, player=Player.BLACK)
        planes = state.to_tensor_planes()
        # 黒番: 黒の立石は自分側の ch.1、白の平石は相手側の ch.3
        assert planes[1, 0, 3] == 1.0
        assert planes[3, 2, 1] == 1.0
        assert torch.all(planes[13] == 0.0)
