"""CLI entry point for tak-ai: Human vs minimax engine.

コマンドラインで動く Tak 対局プログラム。
プレイヤー対ミニマックス探索エンジンで対局できる。

起動方法: `uv run tak-cli --size 5 --depth 2`
"""

from __future__ import annotations

import argparse
import logging

from tak_ai.engine.minimax import search
from tak_ai.game.tak.display import state_to_str
from tak_ai.game.tak.errors import NotationError, RuleViolation
from tak_ai.game.tak.notation import format_move, parse_move
from tak_ai.game.tak.state import TakState, new_game
from tak_ai.game.tak.types import DEFAULT_SIZE, PIECE_TABLE, Player

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tak-cli",
        description="Play Tak against a minimax engine.",
    )
    parser.add_argument(
        "--size",
        type=int,
        default=DEFAULT_SIZE,
        choices=sorted(PIECE_TABLE),
        help="board size (default: %(default)s)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=None,
        help="search depth in plies (default: 2, or iterative deepening with --time)",
    )
    parser.add_argument(
        "--time",
        type=float,
        default=None,
        metavar="SECONDS",
        help="thinking time per engine move",
    )
    parser.add_argument(
        "--engine-plays",
        choices=("white", "black"),
        default="black",
        help="which side the engine plays (default: %(default)s)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="log search statistics",
    )
    return parser


def _read_human_move(state: TakState) -> bool:
    """Prompt until a legal move is applied; False if the player quits.

    入力検証ループ（合法手が入力されるまで繰り返す）。
    """
    while True:
        try:
            text = input("Your move (PTN, 'moves' to list, 'quit' to resign): ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nGame aborted.")
            return False

        if text in ("quit", "exit"):
            print("Game aborted.")
            return False
        if text == "moves":
            print(" ".join(format_move(m) for m in state.legal_moves()))
            continue

        try:
            move = parse_move(text, size=state.size)
            state.apply_move_checked(move)
        except (NotationError, RuleViolation) as exc:
            print(f"Invalid move: {exc}")
            continue
        return True


def play(
    size: int = DEFAULT_SIZE,
    engine_player: Player = Player.BLACK,
    depth: int | None = None,
    time_budget: float | None = None,
) -> TakState:
    """Run one Human vs engine game and return the final state.

    ゲームの流れ:
    1. 盤面を表示
    2. 人間の番なら PTN で手を入力、エンジンの番なら探索して指す
    3. 終局まで繰り返す
    """
    state = new_game(size)

    print(f"=== Tak {size}x{size} ===")
    print(f"You are {engine_player.opponent.name}. The engine is {engine_player.name}.")
    print("Uppercase stones are WHITE, lowercase are BLACK (F flat, S standing, C capstone).")
    print()

    while not state.is_terminal:
        print(state_to_str(state))
        print()

        if state.player == engine_player:
            result = search(state, depth=depth, time_budget=time_budget)
            move = result.best_move()
            assert move is not None
            print(f"Engine plays: {format_move(move)}")
            logger.info(
                "Engine searched depth %d, %d nodes in %.2fs (value %s)",
                result.depth,
                result.nodes,
                result.elapsed,
                result.best_value(),
            )
            state.apply_move_checked(move)
        elif not _read_human_move(state):
            return state

        print()

    # 終局: 結果を表示
    print(state_to_str(state))
    winner = state.result.winner
    if winner is None:
        print("Draw!")
    elif winner == engine_player:
        print("Engine wins!")
    else:
        print("You win!")
    return state


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # 深さと時間の両方を指定: 指定深さまで読み、時間切れなら打ち切る
    # 時間だけ: 反復深化、どちらもなし: 既定の深さ
    engine_player = Player.WHITE if args.engine_plays == "white" else Player.BLACK
    play(args.size, engine_player, depth=args.depth, time_budget=args.time)


if __name__ == "__main__":
    main()
