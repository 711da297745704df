"""Random player: selects a legal move uniformly at random.

ランダムプレイヤー: 合法手の中からランダムに手を選ぶ。

用途:
- ルール実装の動作確認（ランダム対局が最後まで進むか）
- 探索エンジンの比較対象（ランダムに勝てないAIは弱すぎる）
"""

from __future__ import annotations

import random
from collections.abc import Hashable

from tak_ai.game.protocol import GameState


def random_move(state: GameState, rng: random.Random | None = None) -> Hashable:
    """Return a random legal move.

    合法手の中から一様ランダムで1手を返す。
    合法手がない場合は ValueError を送出する（終局局面では呼ばれないはず）。
    rng を渡すと再現可能な乱数列で選ぶ。
    """
    moves = state.legal_moves()
    if not moves:
        raise ValueError("No legal moves available")
    return (rng or random).choice(moves)  # 一様ランダムサンプリング
