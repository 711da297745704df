"""Network configuration for the Tak value network.

ニューラルネットワークの設定定義。
盤面サイズによって入力テンソルの大きさが変わるため、設定クラスで管理する。
"""

from __future__ import annotations

from dataclasses import dataclass

from tak_ai.game.tak.state import NUM_PLANES


@dataclass(frozen=True)
class NetworkConfig:
    """Configuration for ValueNetwork.

    ValueNetwork の設定パラメータ。

    Attributes:
        board_size:     盤面の一辺のマス数
        in_channels:    入力特徴プレーン数（TakState.to_tensor_planes() と一致させる）
        num_res_blocks: 残差ブロックの数（多いほど表現力が高いが評価が重い）
        num_channels:   畳み込み層のチャンネル数
        value_hidden:   価値ヘッドの隠れ層のユニット数
    """

    board_size: int
    in_channels: int = NUM_PLANES
    num_res_blocks: int = 3
    num_channels: int = 64
    value_hidden: int = 64


# 5×5 用のプリセット設定
# 探索の葉ごとに評価するため、浅く細いネットワークにする
TAK_5_CONFIG = NetworkConfig(board_size=5, num_res_blocks=3, num_channels=64)

# 6×6 用のプリセット設定
TAK_6_CONFIG = NetworkConfig(board_size=6, num_res_blocks=4, num_channels=96)
