"""
Custom exceptions shared by all layers.

Every error in the engine is a typed exception rooted at GameError, so the service/transport layers can catch
one base class and translate it into their own wire format.
"""

from typing import Optional


class GameError(Exception):
    """Top-level exception for anything going wrong inside the game engine."""


class InvalidConfigError(GameError):
    """Board size, number of players, or variant outside of what the engine supports."""


class InvalidRequestError(GameError):
    """Request coming from the transport layer could not be interpreted."""


class RepositoryError(GameError):
    """Persistence layer could not find / store the requested record."""


# --- PARSE ERRORS (position + transcript notation) ---
class ParseError(GameError):
    """Decoding of untrusted notation failed. Input is rejected as a whole."""

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class UnexpectedTokenError(ParseError):
    pass


class OutOfRangeError(ParseError):
    pass


class DuplicateCellError(ParseError):
    pass


class InconsistentStatusError(ParseError):
    pass


class UnsupportedVariantError(ParseError):
    pass


# --- RULE VIOLATIONS ---
class RuleViolation(GameError):
    """A move that the rules do not allow in the current state."""


class OutOfTurnError(RuleViolation):
    pass


class OutOfBoundsError(RuleViolation):
    pass


class CellOccupiedError(RuleViolation):
    pass


class SwapNotAvailableError(RuleViolation):
    pass


class GameAlreadyOverError(RuleViolation):
    pass


class NotYourSeatError(RuleViolation):
    """A human tried to submit a move for a seat that is controlled by a bot."""


class ReservedMoveError(RuleViolation):
    """Pass is only recorded for forfeited bot turns, nobody can play it directly."""


class IllegalTranscriptMoveError(ParseError):
    """A transcript replays a move that the rule engine rejects."""

    def __init__(self, violation: RuleViolation, line: Optional[int] = None) -> None:
        self.violation = violation
        super().__init__(
            f"illegal move ({type(violation).__name__}): {violation}", line=line
        )


# --- BOT ERRORS ---
class BotError(GameError):
    pass


class BotNotFoundError(BotError):
    pass


class BotTimeoutError(BotError):
    pass


class IllegalBotMoveError(BotError):
    pass


class RegistryFrozenError(BotError):
    """Bots can only be registered before any match starts."""
