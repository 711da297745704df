"""GameState implementation for Tak.

Tak の対局状態（ルールの状態機械）。
Board が盤面データを持ち、TakState が手の検証・適用・勝敗判定を担当する。

TakState はその場で変更する:
- apply_move_checked():   検証してから適用（不正なら RuleViolation、局面は不変）
- apply_move_unchecked(): 検証なしで適用（探索用の高速パス）
- apply_move():           GameState プロトコル用。複製に適用して新しい局面を返す

状態遷移: ONGOING → {WHITE_WIN, BLACK_WIN, TIE}（終局後は遷移しない）
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import torch

from tak_ai.game.tak.board import Board, Stone
from tak_ai.game.tak.compositions import CompositionCache
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
from tak_ai.game.tak.moves import Move, PlaceMove, SlideMove, generate_moves
from tak_ai.game.tak.types import GameConfig, GameResult, Player, StoneKind

logger = logging.getLogger(__name__)

# to_tensor_planes() のチャンネル数
NUM_PLANES = 14


@dataclass
class Inventory:
    """Stones a player has left to place. Counts only ever decrease.

    stones:    平石・立石として置ける石
    capstones: キャップストーン
    """

    stones: int
    capstones: int

    def remaining(self, kind: StoneKind) -> int:
        if kind == StoneKind.CAPSTONE:
            return self.capstones
        return self.stones

    def take(self, kind: StoneKind) -> None:
        if kind == StoneKind.CAPSTONE:
            self.capstones -= 1
        else:
            self.stones -= 1

    @property
    def total(self) -> int:
        return self.stones + self.capstones


@dataclass(eq=False)
class TakState:
    """Mutable Tak game state. Implements the GameState protocol.

    ply: これまでに指された手数。ply < 2 の間は開局（各自の最初の1手）で、
         相手の石を平石で置く（オープニング・スワップ）。
    """

    board: Board
    inventories: list[Inventory]
    _current_player: Player = Player.WHITE
    ply: int = 0
    result: GameResult = GameResult.ONGOING
    config: GameConfig = field(default_factory=GameConfig)

    # --- GameState プロトコル ---

    @property
    def current_player(self) -> int:
        """現在の手番プレイヤー（0=白, 1=黒）。"""
        return self._current_player.value

    @property
    def is_terminal(self) -> bool:
        return self.result.is_over

    @property
    def winner(self) -> int | None:
        """勝者（0 or 1）。引き分けや対局中は None。"""
        winner = self.result.winner
        return None if winner is None else winner.value

    def legal_moves(self, cache: CompositionCache | None = None) -> list[Move]:
        return list(generate_moves(self, cache))

    def apply_move(self, move: Move) -> TakState:
        """Return a new state with ``move`` applied; this state is unchanged."""
        child = self.clone()
        child.apply_move_unchecked(move)
        return child

    # --- 読み出し ---

    @property
    def size(self) -> int:
        return self.board.size

    @property
    def player(self) -> Player:
        return self._current_player

    @property
    def first_move(self) -> bool:
        """True during each side's first ply (the opening swap)."""
        return self.ply < 2

    @property
    def stone_player(self) -> Player:
        """Owner of a stone placed now: the opponent during the opening."""
        if self.first_move:
            return self._current_player.opponent
        return self._current_player

    def flat_counts(self) -> tuple[int, int]:
        return self.board.flat_counts()

    def clone(self) -> TakState:
        """Independent copy for search; stones are shared since they are immutable."""
        return TakState(
            board=self.board.copy(),
            inventories=[Inventory(inv.stones, inv.capstones) for inv in self.inventories],
            _current_player=self._current_player,
            ply=self.ply,
            result=self.result,
            config=self.config,
        )

    # --- 手の検証 ---

    def is_legal(self, move: Move) -> bool:
        try:
            self.validate(move)
        except RuleViolation:
            return False
        return True

    def validate(self, move: Move) -> None:
        """Raise the RuleViolation for the first rule ``move`` breaks.

        検証順序:
        0. 終局済み
        1. 盤内か
        2. 開局ルール（最初の1手は平石を置く）
        3. 置く手 / スライド手それぞれのルール
        """
        if self.is_terminal:
            raise GameOver(self.result.value)
        if not self.board.in_bounds(move.x, move.y):
            raise OutOfBounds(f"({move.x}, {move.y})")
        if self.first_move and not (
            isinstance(move, PlaceMove) and move.kind == StoneKind.FLAT
        ):
            raise OpeningRuleViolation()

        if isinstance(move, PlaceMove):
            self._validate_place(move)
        else:
            self._validate_slide(move)

    def _validate_place(self, move: PlaceMove) -> None:
        if not self.board.stack_at(move.x, move.y).is_empty:
            raise OccupiedSquare(f"({move.x}, {move.y})")
        # 開局では相手の持ち石から置く
        inventory = self.inventories[self.stone_player.value]
        if inventory.remaining(move.kind) <= 0:
            raise InsufficientInventory(move.kind.name.lower())

    def _validate_slide(self, move: SlideMove) -> None:
        source = self.board.stack_at(move.x, move.y)
        if source.controller != self._current_player:
            raise NotOwner(f"({move.x}, {move.y})")
        if not 1 <= move.pickup <= min(source.height, self.size):
            raise InsufficientStack(f"pickup {move.pickup} from a stack of {source.height}")
        if not move.drops or any(d <= 0 for d in move.drops) or sum(move.drops) != move.pickup:
            raise InvalidDropPattern(f"{move.drops} for pickup {move.pickup}")

        squares = move.landing_squares()
        fx, fy = squares[-1]
        if not self.board.in_bounds(fx, fy):
            raise OutOfBounds(f"slide leaves the board at ({fx}, {fy})")

        # 途中のマスはすべて空きか平石
        for x, y in squares[:-1]:
            top = self.board.top_at(x, y)
            if top is not None and top.kind != StoneKind.FLAT:
                raise BlockedPath(f"({x}, {y})")

        # 最後のマス: 立石なら、キャップストーン単独で平らにできる場合のみ可
        target = self.board.top_at(fx, fy)
        if target is None or target.kind == StoneKind.FLAT:
            return
        if target.kind == StoneKind.CAPSTONE:
            raise BlockedPath(f"capstone at ({fx}, {fy})")
        carried_top = source.top
        assert carried_top is not None
        if carried_top.kind != StoneKind.CAPSTONE or move.drops[-1] != 1:
            raise InvalidCapstoneFlatten(f"({fx}, {fy})")

    # --- 手の適用 ---

    def apply_move_checked(self, move: Move) -> None:
        """Validate ``move`` and apply it; on failure the state is unchanged."""
        try:
            self.validate(move)
        except RuleViolation as exc:
            logger.debug("Rejected move %s: %s", move, exc)
            raise
        self.apply_move_unchecked(move)

    def apply_move_unchecked(self, move: Move) -> None:
        """Apply ``move`` without legality checks (the search fast path)."""
        if self.is_terminal:
            raise GameOver(self.result.value)

        if isinstance(move, PlaceMove):
            owner = self.stone_player
            self.inventories[owner.value].take(move.kind)
            self.board.place(move.x, move.y, Stone(owner, move.kind))
        else:
            self._slide(move)

        self.ply += 1
        self._update_result()

    def _slide(self, move: SlideMove) -> None:
        carried = self.board.lift(move.x, move.y, move.pickup)
        squares = move.landing_squares()
        offset = 0
        for (x, y), count in zip(squares, move.drops):
            top = self.board.top_at(x, y)
            if top is not None and top.kind == StoneKind.STANDING:
                self.board.flatten_top(x, y)  # キャップストーンが立石を平らにする
            # 持ち上げた山の下側から順に落とす
            self.board.drop(x, y, carried[offset:offset + count])
            offset += count

    def _update_result(self) -> None:
        """Termination check after a move; flips the turn if the game goes on.

        判定順序:
        1. 手番側の道 → 相手の道（同時に道ができたら手番側の勝ち）
        2. 次の手番側が置ける石がない、または空きマスがない → 平石数で決着
        """
        mover = self._current_player
        roads = self.board.roads
        for player in (mover, mover.opponent):
            if roads.has_road(player.value):
                self._finish(GameResult.win_for(player), "road")
                return

        # 次の手番側が置く石の持ち主（ply は加算済みなので開局判定もそのまま使える）
        following = mover.opponent
        supplier = following.opponent if self.first_move else following
        if self.inventories[supplier.value].total == 0 or not self.board.has_empty_square():
            self._finish(self._flat_winner(), "flats")
            return
        self._current_player = following

    def _flat_winner(self) -> GameResult:
        white, black = self.board.flat_counts()
        if white > black:
            return GameResult.WHITE_WIN
        if black > white:
            return GameResult.BLACK_WIN
        return GameResult.TIE

    def _finish(self, result: GameResult, reason: str) -> None:
        self.result = result
        logger.info("Game over after %d plies by %s: %s", self.ply, reason, result.value)

    def to_tensor_planes(self) -> torch.Tensor:
        """Convert to tensor planes for neural network input.

        局面をニューラルネットワーク入力用テンソルに変換する（14チャンネル）。
        AlphaZero と同じく常に「現プレイヤーの視点」で作る。

        Planes の構成:
        ch.0-2:  現プレイヤーの一番上の石（平石・立石・キャップ）
        ch.3-5:  相手の一番上の石
        ch.6:    山の中の現プレイヤーの石の数 / N
        ch.7:    山の中の相手の石の数 / N
        ch.8-9:  現プレイヤーの残り石・キャップ（初期数に対する割合）
        ch.10-11: 相手の残り石・キャップ
        ch.12:   開局インジケータ
        ch.13:   手番インジケータ（白番なら全1）
        """
        n = self.size
        planes = torch.zeros(NUM_PLANES, n, n)
        cp = self._current_player

        for x, y in self.board.coords():
            stack = self.board.stack_at(x, y)
            top = stack.top
            if top is None:
                continue
            offset = 0 if top.owner == cp else 3
            planes[offset + top.kind.value, y, x] = 1.0
            own = sum(1 for stone in stack if stone.owner == cp)
            planes[6, y, x] = own / n
            planes[7, y, x] = (stack.height - own) / n

        for base, player in ((8, cp), (10, cp.opponent)):
            inv = self.inventories[player.value]
            if self.config.stones > 0:
                planes[base, :, :] = inv.stones / self.config.stones
            if self.config.capstones > 0:
                planes[base + 1, :, :] = inv.capstones / self.config.capstones

        if self.first_move:
            planes[12, :, :] = 1.0
        if cp == Player.WHITE:
            planes[13, :, :] = 1.0

        return planes


def new_game(
    size: int = 5,
    stones: int | None = None,
    capstones: int | None = None,
) -> TakState:
    """Start a game on an empty ``size``×``size`` board.

    持ち石数を省略すると PIECE_TABLE の標準値を使う。
    テストでは少ない持ち石で「石切れ」の終局を作れる。
    """
    config = GameConfig.for_size(size)
    if stones is not None or capstones is not None:
        config = GameConfig(
            size=size,
            stones=config.stones if stones is None else stones,
            capstones=config.capstones if capstones is None else capstones,
        )
    return TakState(
        board=Board(size),
        inventories=[Inventory(config.stones, config.capstones) for _ in Player],
        config=config,
    )
