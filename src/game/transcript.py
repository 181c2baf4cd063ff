"""
Transcript notation: configuration + the full, ordered move history of a match.

    config: size=<N> players=<N> variant=<tag>
    moves:
    P<player> <row>,<col>
    P<player> swap
    P<player> resign
    P<player> pass

One line per move, lines end with a newline. A transcript is derived data: replaying its moves from an empty
board reproduces the match state, so it can be regenerated from the history at any time.

Decoding replays every move through the rule engine. A transcript with a move that was not legal at the time
it was recorded is rejected as a whole (IllegalTranscriptMoveError wraps the rule violation).
"""

from dataclasses import dataclass, field
from typing import assert_never

from src.core.exceptions import (
    IllegalTranscriptMoveError,
    OutOfRangeError,
    ParseError,
    RuleViolation,
    UnexpectedTokenError,
)
from src.game import rules
from src.game.board import MAX_PLAYERS, MIN_PLAYERS, BoardState, Config
from src.game.coordinate import MAX_BOARD_SIZE, MIN_BOARD_SIZE, Coordinate
from src.game.moves import Action, ActionKind, Move, Placement
from src.game.position import parse_number, split_lines
from src.game.variant import Variant

CONFIG_PREFIX = "config:"
MOVES_HEADER = "moves:"


@dataclass
class Transcript:
    config: Config
    moves: list[Move] = field(default_factory=list)

    def replay(self) -> BoardState:
        return rules.replay(self.config, self.moves)

    def to_notation(self) -> str:
        return encode_transcript(self)

    @classmethod
    def from_notation(cls, text: str | bytes) -> "Transcript":
        transcript, _ = decode_transcript(text)
        return transcript


def encode_move(move: Move) -> str:
    match move:
        case Placement(player=player, coord=coord):
            return f"P{player} {coord.to_notation()}"
        case Action(player=player, kind=kind):
            return f"P{player} {kind.value}"
        case _:
            assert_never(move)


def encode_transcript(transcript: Transcript) -> str:
    config = transcript.config
    lines = [
        f"{CONFIG_PREFIX} size={config.size} players={config.num_players} variant={config.variant.value}",
        MOVES_HEADER,
        *(encode_move(move) for move in transcript.moves),
    ]
    return "\n".join(lines) + "\n"


def decode_transcript(text: str | bytes) -> tuple[Transcript, BoardState]:
    """Parse and validate a transcript. Returns the transcript and the state after its last move."""
    lines = split_lines(text)
    config = parse_config_line(lines[0])
    if len(lines) < 2 or lines[1] != MOVES_HEADER:
        raise UnexpectedTokenError(f"Expected {MOVES_HEADER!r}", line=2)

    moves: list[Move] = []
    # We own this state, so moves are applied in place instead of copying the board for every line.
    state = BoardState.new(config)
    for line_number, line in enumerate(lines[2:], start=3):
        move = parse_move_line(line, config, line_number)
        try:
            rules.apply_in_place(state, move)
        except RuleViolation as violation:
            raise IllegalTranscriptMoveError(violation, line=line_number) from violation
        moves.append(move)

    return Transcript(config, moves), state


def is_valid_transcript(text: str | bytes) -> bool:
    try:
        decode_transcript(text)
    except ParseError:
        return False
    return True


def parse_config_line(line: str) -> Config:
    """'config: size=7 players=2 variant=Standard'"""
    tokens = line.split(" ")
    if len(tokens) != 4 or tokens[0] != CONFIG_PREFIX:
        raise UnexpectedTokenError(
            f"Expected '{CONFIG_PREFIX} size=<N> players=<N> variant=<tag>', got {line[:40]!r}",
            line=1,
        )
    size = parse_number(_keyed_value(tokens[1], "size"), "size", line=1)
    if not (MIN_BOARD_SIZE <= size <= MAX_BOARD_SIZE):
        raise OutOfRangeError(
            f"size must be between {MIN_BOARD_SIZE} and {MAX_BOARD_SIZE}, got {size}",
            line=1,
        )
    num_players = parse_number(_keyed_value(tokens[2], "players"), "players", line=1)
    if not (MIN_PLAYERS <= num_players <= MAX_PLAYERS):
        raise OutOfRangeError(
            f"players must be between {MIN_PLAYERS} and {MAX_PLAYERS}, got {num_players}",
            line=1,
        )
    variant = Variant.from_tag(_keyed_value(tokens[3], "variant"))
    return Config(size=size, num_players=num_players, variant=variant)


def parse_move_line(line: str, config: Config, line_number: int) -> Move:
    """'P0 3,4' | 'P1 swap' | 'P0 resign' | 'P1 pass'"""
    tokens = line.split(" ")
    if len(tokens) != 2 or not tokens[0].startswith("P"):
        raise UnexpectedTokenError(
            f"Expected 'P<player> <move>', got {line[:40]!r}", line=line_number
        )
    player = parse_number(tokens[0][1:], "player", line=line_number)
    if player >= config.num_players:
        raise OutOfRangeError(
            f"Player {player} does not exist in a {config.num_players} player game",
            line=line_number,
        )

    body = tokens[1]
    actions = {kind.value: kind for kind in ActionKind}
    if body in actions:
        return Action(player, actions[body])

    row_text, separator, col_text = body.partition(",")
    if not separator:
        raise UnexpectedTokenError(
            f"Expected '<row>,<col>' or one of {sorted(actions)}, got {body[:20]!r}",
            line=line_number,
        )
    row = parse_number(row_text, "row", line=line_number)
    col = parse_number(col_text, "col", line=line_number)
    return Placement(player, Coordinate(row, col))


def _keyed_value(token: str, key: str) -> str:
    found_key, separator, value = token.partition("=")
    if not separator or found_key != key:
        raise UnexpectedTokenError(f"Expected '{key}=', got {token[:20]!r}", line=1)
    return value
