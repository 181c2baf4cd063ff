"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Hence, both the API layer (higher) and domain/db layers (lower) will use model(s) defined here to send to/receive from the Service
(Decouples the data model specific to the DB layer, API layer, or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass

# Type aliases to make MatchModel easier to read
Seat = str  # player id as string ("0", "1", ...)
BotName = str


@dataclass
class MatchModel:
    """Transport-safe representation of a match used between API, Service, DB, and Game layers."""

    transcript: str
    position: str
    bots: dict[Seat, BotName]
    phase: str
