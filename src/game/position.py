"""
Position notation: a single board snapshot as text.

    size=<N>
    grid=<row 0>
    <row 1>
    ...
    <row N-1>
    turn=<PlayerId>
    status=<InProgress|Won:<PlayerId>|Resigned:<PlayerId>|Drawn>

Every row has N characters: '.' for an empty cell, a digit for the owning player. Lines end with a newline.

ex) 3x3 board after player 0 claimed the centre:

    size=3
    grid=...
    .0.
    ...
    turn=1
    status=InProgress

The decoder reads untrusted input (files, bot replies, requests). It never trusts a length or a number before
checking it, and any problem surfaces as a ParseError subclass.
"""

from typing import Iterable, Optional

from src.core.exceptions import (
    DuplicateCellError,
    InconsistentStatusError,
    OutOfRangeError,
    ParseError,
    UnexpectedTokenError,
)
from src.game.board import BoardState, Config
from src.game.connectivity import Connectivity
from src.game.coordinate import MAX_BOARD_SIZE, MIN_BOARD_SIZE, Coordinate
from src.game.moves import PlayerId, Status, StatusKind
from src.game.variant import Variant

EMPTY_CELL = "."
HEADER_KEYS = ("size", "grid", "turn", "status")
ASCII_DIGITS = "0123456789"
# Longer numbers are never valid anywhere in our notations; refuse them before calling int()
MAX_NUMBER_LENGTH = 6


def encode_position(state: BoardState) -> str:
    rows = [_row_to_notation(state, row) for row in range(state.size)]
    lines = [
        f"size={state.size}",
        f"grid={rows[0]}",
        *rows[1:],
        f"turn={state.current_player}",
        f"status={state.status.to_notation()}",
    ]
    return "\n".join(lines) + "\n"


def decode_position(
    text: str | bytes,
    num_players: int = 2,
    variant: Variant = Variant.STANDARD,
) -> BoardState:
    """
    Parse position notation. Number of players and variant are not part of the notation, so the caller supplies them.

    NOTE: the notation does not record how many moves were played, see _inferred_move_count().
    """
    lines = split_lines(text)
    cursor = _LineCursor(lines)

    size = parse_number(cursor.value("size"), "size", cursor.line_number)
    if not (MIN_BOARD_SIZE <= size <= MAX_BOARD_SIZE):
        raise OutOfRangeError(
            f"size must be between {MIN_BOARD_SIZE} and {MAX_BOARD_SIZE}, got {size}",
            line=cursor.line_number,
        )
    config = Config(size=size, num_players=num_players, variant=variant)

    cells: dict[Coordinate, PlayerId] = {}
    for row in range(size):
        row_text = cursor.value("grid") if row == 0 else cursor.raw()
        cells.update(_parse_row(row_text, row, config, cursor.line_number))

    turn = parse_number(cursor.value("turn"), "turn", cursor.line_number)
    if turn >= num_players:
        raise OutOfRangeError(
            f"turn must be a player id below {num_players}, got {turn}",
            line=cursor.line_number,
        )
    status = parse_status(cursor.value("status"), num_players, cursor.line_number)
    cursor.expect_end()

    return _build_state(config, cells, turn, status)


def is_valid_position(
    text: str | bytes, num_players: int = 2, variant: Variant = Variant.STANDARD
) -> bool:
    try:
        decode_position(text, num_players, variant)
    except ParseError:
        return False
    return True


def position_from_stones(
    config: Config,
    stones: Iterable[tuple[Coordinate, PlayerId]],
    turn: PlayerId,
    status: Status,
) -> BoardState:
    """Build a snapshot from an explicit list of stones (sparse form used by the transport layer)."""
    cells: dict[Coordinate, PlayerId] = {}
    for coord, player in stones:
        if not coord.is_within(config.size):
            raise OutOfRangeError(
                f"Stone at {coord} lies outside of a board of size {config.size}"
            )
        if not (0 <= player < config.num_players):
            raise OutOfRangeError(f"Stone at {coord} has unknown owner {player}")
        if coord in cells:
            raise DuplicateCellError(f"Cell {coord} is listed more than once")
        cells[coord] = player
    if not (0 <= turn < config.num_players):
        raise OutOfRangeError(f"turn must be a player id below {config.num_players}")
    if status.player is not None and not (0 <= status.player < config.num_players):
        raise OutOfRangeError(f"status refers to unknown player {status.player}")
    return _build_state(config, cells, turn, status)


def parse_number(token: str, field_name: str, line: Optional[int] = None) -> int:
    """Non-negative ASCII integer with a bounded number of digits."""
    if not token or any(character not in ASCII_DIGITS for character in token):
        raise UnexpectedTokenError(
            f"{field_name} must be a non-negative integer, got {token[:20]!r}",
            line=line,
        )
    if len(token) > MAX_NUMBER_LENGTH:
        raise OutOfRangeError(f"{field_name} has too many digits", line=line)
    return int(token)


def parse_status(token: str, num_players: int, line: Optional[int] = None) -> Status:
    kind_text, _, player_text = token.partition(":")
    kinds = {kind.value: kind for kind in StatusKind}
    if kind_text not in kinds:
        raise UnexpectedTokenError(f"Unknown status {token[:20]!r}", line=line)
    kind = kinds[kind_text]

    if kind in (StatusKind.IN_PROGRESS, StatusKind.DRAWN):
        if token != kind.value:
            raise UnexpectedTokenError(
                f"Status {kind.value} does not take a player", line=line
            )
        return Status(kind)

    player = parse_number(player_text, "status player", line)
    if player >= num_players:
        raise OutOfRangeError(
            f"status refers to player {player}, but there are only {num_players} players",
            line=line,
        )
    return Status(kind, player)


# -- PRIVATE HELPERS ---
class _LineCursor:
    """Walks over the lines one by one, with 1-based line numbers for the error messages."""

    def __init__(self, lines: list[str]) -> None:
        self.lines = lines
        self.line_number = 0

    def raw(self) -> str:
        if self.line_number >= len(self.lines):
            raise UnexpectedTokenError(
                "Unexpected end of input", line=self.line_number + 1
            )
        line = self.lines[self.line_number]
        self.line_number += 1
        return line

    def value(self, key: str) -> str:
        """Next line must read '<key>=<value>'"""
        line = self.raw()
        found_key, separator, value = line.partition("=")
        if separator and found_key == key:
            return value
        if separator and found_key in HEADER_KEYS:
            # a header repeated / out of place
            raise DuplicateCellError(
                f"Unexpected record {found_key!r}, expected {key!r}",
                line=self.line_number,
            )
        raise UnexpectedTokenError(
            f"Expected '{key}=', got {line[:20]!r}", line=self.line_number
        )

    def expect_end(self) -> None:
        if self.line_number < len(self.lines):
            line = self.lines[self.line_number]
            key, separator, _ = line.partition("=")
            if separator and key in HEADER_KEYS:
                raise DuplicateCellError(
                    f"Duplicate record {key!r}", line=self.line_number + 1
                )
            raise UnexpectedTokenError(
                f"Trailing content: {line[:20]!r}", line=self.line_number + 1
            )


def split_lines(text: str | bytes) -> list[str]:
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("utf-8")
        except UnicodeDecodeError as error:
            raise UnexpectedTokenError(f"Input is not valid UTF-8: {error}") from error
    if not isinstance(text, str):
        raise UnexpectedTokenError(f"Expected text, got {type(text).__name__}")
    if text.endswith("\n"):
        text = text[:-1]
    return text.split("\n")


def _row_to_notation(state: BoardState, row: int) -> str:
    characters: list[str] = []
    for col in range(state.size):
        owner = state.owner(Coordinate(row, col))
        characters.append(EMPTY_CELL if owner is None else str(owner))
    return "".join(characters)


def _parse_row(
    row_text: str, row: int, config: Config, line: int
) -> dict[Coordinate, PlayerId]:
    if len(row_text) != config.size:
        raise OutOfRangeError(
            f"Grid row {row} has {len(row_text)} cells, expected {config.size}",
            line=line,
        )
    cells: dict[Coordinate, PlayerId] = {}
    for col, character in enumerate(row_text):
        if character == EMPTY_CELL:
            continue
        if character not in ASCII_DIGITS:
            raise UnexpectedTokenError(
                f"Invalid character {character!r} in grid at row {row}, column {col}",
                line=line,
            )
        player = int(character)
        if player >= config.num_players:
            raise OutOfRangeError(
                f"Cell ({row}, {col}) owned by player {player}, but there are only {config.num_players} players",
                line=line,
            )
        cells[Coordinate(row, col)] = player
    return cells


def _build_state(
    config: Config, cells: dict[Coordinate, PlayerId], turn: PlayerId, status: Status
) -> BoardState:
    connectivity = Connectivity.from_cells(
        config.size, config.num_players, config.variant, cells
    )
    _check_consistency(config, cells, connectivity, turn, status)
    return BoardState(
        config=config,
        cells=cells,
        move_count=_inferred_move_count(cells, turn),
        current_player=turn,
        status=status,
        connectivity=connectivity,
    )


def _inferred_move_count(cells: dict[Coordinate, PlayerId], turn: PlayerId) -> int:
    """
    One move per stone, except for a lone stone that is not the opening position (player 0's stone, player 1
    to move): that one was swapped or came after a pass, so at least two moves were played and swap is gone.
    Passes cannot be told apart from the board, so a position reached through them may still count too few.
    """
    if len(cells) != 1:
        return len(cells)
    (owner,) = cells.values()
    return 1 if (owner == 0 and turn == 1) else 2


def _check_consistency(
    config: Config,
    cells: dict[Coordinate, PlayerId],
    connectivity: Connectivity,
    turn: PlayerId,
    status: Status,
) -> None:
    """
    The status must be one the rule engine could have produced for this board:
    * InProgress: nobody connected their edges and there is still an empty cell
    * Won:p     : p (and only p) connected their edges, and p is still the player on turn
    * Resigned:p: nobody connected, board not full, p is still the player on turn
    * Drawn     : board full, nobody connected
    """
    connected = connectivity.connected_players()
    is_full = len(cells) >= config.total_cells

    match status.kind:
        case StatusKind.IN_PROGRESS:
            if connected:
                raise InconsistentStatusError(
                    f"Status InProgress, but player {connected[0]} already connected their edges"
                )
            if is_full:
                raise InconsistentStatusError(
                    "Status InProgress, but the board is full"
                )
        case StatusKind.WON:
            if connected != [status.player]:
                raise InconsistentStatusError(
                    f"Status {status}, but connected players are {connected}"
                )
            if turn != status.player:
                raise InconsistentStatusError(
                    f"Status {status}, but turn is {turn}"
                )
        case StatusKind.RESIGNED:
            if connected or is_full:
                raise InconsistentStatusError(
                    f"Status {status}, but the game had already ended on the board"
                )
            if turn != status.player:
                raise InconsistentStatusError(
                    f"Status {status}, but turn is {turn}"
                )
        case StatusKind.DRAWN:
            if connected or not is_full:
                raise InconsistentStatusError(
                    "Status Drawn requires a full board without a connection"
                )
