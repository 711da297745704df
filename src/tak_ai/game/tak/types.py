"""Types and constants for Tak.

Tak の基本型・定数定義。
盤面は N×N（標準は 5×5）で、石は平石・立石・キャップストーンの3種類。

座標系:
  x = 筋（列）。a=0 が左端（LEFT）、N-1 が右端（RIGHT）。
  y = 段（行）。1=0 が下端（BOTTOM）、N-1 が上端（TOP）。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum, unique

DEFAULT_SIZE = 5  # 標準の盤面サイズ

# 盤面サイズごとの持ち石数: size -> (平石/立石の数, キャップストーンの数)
PIECE_TABLE: dict[int, tuple[int, int]] = {
    3: (10, 0),
    4: (15, 0),
    5: (21, 1),
    6: (30, 1),
    7: (40, 2),
    8: (50, 2),
}


@unique
class Player(IntEnum):
    """Player identifiers.

    白（WHITE）が先手、黒（BLACK）が後手。
    """

    WHITE = 0  # 先手
    BLACK = 1  # 後手

    @property
    def opponent(self) -> Player:
        """相手プレイヤーを返す。0↔1 の切り替え。"""
        return Player(1 - self.value)


@unique
class StoneKind(IntEnum):
    """Stone kinds.

    値は to_tensor_planes() でのチャンネルオフセットに対応する。
    """

    FLAT = 0      # 平石: 道と平石数に数えられる
    STANDING = 1  # 立石: 移動を塞ぐ壁
    CAPSTONE = 2  # キャップストーン: 立石を平らにできる


@unique
class Direction(Enum):
    """Slide directions as (dx, dy) unit steps."""

    UP = (0, 1)
    DOWN = (0, -1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]


@unique
class GameResult(Enum):
    """Outcome of a game.

    value はメッセージ文字列（CLI の終局表示で使用）。
    """

    ONGOING = "The game is ongoing."
    WHITE_WIN = "White wins!"
    BLACK_WIN = "Black wins!"
    TIE = "Game was a tie!"

    @property
    def is_over(self) -> bool:
        return self is not GameResult.ONGOING

    @property
    def winner(self) -> Player | None:
        """勝者を返す。引き分けや対局中は None。"""
        if self is GameResult.WHITE_WIN:
            return Player.WHITE
        if self is GameResult.BLACK_WIN:
            return Player.BLACK
        return None

    @property
    def white_payoff(self) -> float:
        """White's payoff: 1 for a win, 0 for a loss, 0.5 otherwise."""
        if self is GameResult.WHITE_WIN:
            return 1.0
        if self is GameResult.BLACK_WIN:
            return 0.0
        return 0.5

    @staticmethod
    def win_for(player: Player) -> GameResult:
        return GameResult.WHITE_WIN if player == Player.WHITE else GameResult.BLACK_WIN


@dataclass(frozen=True)
class GameConfig:
    """Board size and starting inventory for a game.

    対局の設定。盤面サイズと各プレイヤーの初期持ち石数。

    Attributes:
        size:      盤面の一辺のマス数
        stones:    平石/立石として使える石の数
        capstones: キャップストーンの数
    """

    size: int = DEFAULT_SIZE
    stones: int = PIECE_TABLE[DEFAULT_SIZE][0]
    capstones: int = PIECE_TABLE[DEFAULT_SIZE][1]

    @staticmethod
    def for_size(size: int) -> GameConfig:
        """Return the standard configuration for a board size (3-8)."""
        if size not in PIECE_TABLE:
            msg = f"Unsupported board size: {size} (expected 3-8)"
            raise ValueError(msg)
        stones, capstones = PIECE_TABLE[size]
        return GameConfig(size=size, stones=stones, capstones=capstones)


# 5×5 の標準設定
TAK_5 = GameConfig.for_size(5)
