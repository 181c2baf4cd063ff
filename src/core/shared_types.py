"""
Type definitions used across layers
"""

from enum import StrEnum


class Phase(StrEnum):
    """Lifecycle of a match as seen by the controller / service."""

    SETUP = "setup"
    IN_PROGRESS = "in progress"
    FINISHED = "finished"


class ForfeitPolicy(StrEnum):
    """What happens when a bot times out or answers with an illegal move."""

    SKIP_TURN = "skip_turn"
    LOSS = "loss"
