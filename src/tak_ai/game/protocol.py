"""GameState protocol: engines search any state implementing this interface.

ゲーム状態の共通インタフェース（プロトコル）。

ミニマックスやランダムプレイヤーはこのプロトコルだけに依存する。
これを「ポリモーフィズム」または「ダックタイピング」と呼ぶ。

重要: apply_move() は新しい状態を返し、元の状態は変更しない。
探索木の各ノードが独立した局面を持つための約束。
"""

from __future__ import annotations

from collections.abc import Hashable, Sequence
from typing import Protocol, runtime_checkable

import torch


@runtime_checkable  # isinstance() でのランタイムチェックを有効にする
class GameState(Protocol):
    """Common interface for searchable two-player game states."""

    @property
    def current_player(self) -> int:
        """現在手番のプレイヤー（0=先手/白, 1=後手/黒）を返す。"""
        ...

    @property
    def is_terminal(self) -> bool:
        """ゲームが終了していれば True を返す。"""
        ...

    @property
    def winner(self) -> int | None:
        """勝者（0 or 1）を返す。引き分けや対局中は None。"""
        ...

    def legal_moves(self) -> Sequence[Hashable]:
        """合法手のリストを返す（手はハッシュ可能なオブジェクト）。"""
        ...

    def apply_move(self, move: Hashable) -> GameState:
        """手を適用した新しい状態を返す（元の状態は変化しない）。"""
        ...

    def to_tensor_planes(self) -> torch.Tensor:
        """局面をニューラルネットワーク入力用テンソルに変換する。"""
        ...
