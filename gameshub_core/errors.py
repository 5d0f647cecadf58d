from __future__ import annotations


class GameRuleError(Exception):
    """An action that is well-formed but not allowed in the current game state."""


class LockedCellError(GameRuleError):
    pass


class NoHintsLeftError(GameRuleError):
    pass


class IllegalFlipError(GameRuleError):
    pass


class UnsolvableGridError(Exception):
    """The solver exhausted every branch; the grid has no completion."""
