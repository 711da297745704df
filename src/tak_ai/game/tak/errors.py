"""Rule violations raised by the Tak state machine.

すべて ValueError のサブクラスで、呼び出し側が理由ごとに捕捉できる。
検証に失敗した場合、局面は一切変更されない。
"""

from __future__ import annotations


class RuleViolation(ValueError):
    """Base class for an illegal move; ``reason`` names the failed clause."""

    reason = "illegal move"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        message = self.reason if detail is None else f"{self.reason}: {detail}"
        super().__init__(message)


class OutOfBounds(RuleViolation):
    reason = "square is out of bounds"


class OpeningRuleViolation(RuleViolation):
    reason = "the first move of each side must place a flat stone"


class OccupiedSquare(RuleViolation):
    reason = "square is already occupied"


class InsufficientInventory(RuleViolation):
    reason = "no stones of that kind remaining"


class NotOwner(RuleViolation):
    reason = "player does not control the stack"


class InsufficientStack(RuleViolation):
    reason = "cannot pick up that many stones"


class InvalidDropPattern(RuleViolation):
    reason = "drop counts must be positive and add up to the pickup"


class BlockedPath(RuleViolation):
    reason = "a stone in the path is not flat"


class InvalidCapstoneFlatten(RuleViolation):
    reason = "only a lone capstone may flatten a standing stone"


class GameOver(RuleViolation):
    reason = "the game is over"


class NotationError(ValueError):
    """Raised when a move string is not valid Portable Tak Notation."""
