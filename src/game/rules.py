"""
Rule engine: validate one move against a board state and produce the state after it.

apply() never mutates the state it is given. On a rule violation the exception propagates and the caller
still holds the untouched state (all-or-nothing).

Validation order
1. status must be InProgress                   -> GameAlreadyOverError
2. move.player must be the player to move      -> OutOfTurnError
3. Placement: coordinate within the board      -> OutOfBoundsError
              cell still empty                 -> CellOccupiedError
4. Swap: only as the reply to the first stone  -> SwapNotAvailableError
5. Resign / Pass: always legal while in progress
"""

from typing import Iterable, assert_never

from src.core.exceptions import (
    CellOccupiedError,
    GameAlreadyOverError,
    OutOfBoundsError,
    OutOfTurnError,
    SwapNotAvailableError,
)
from src.game.board import BoardState, Config
from src.game.coordinate import Coordinate
from src.game.moves import (
    Action,
    ActionKind,
    Move,
    Placement,
    PlayerId,
    Status,
    move_player,
)


def apply(state: BoardState, move: Move) -> BoardState:
    """Validate `move` and return the resulting state (a new object)."""
    validate(state, move)
    new_state = state.copy()
    _apply_validated(new_state, move)
    return new_state


def validate(state: BoardState, move: Move) -> None:
    """Raise the RuleViolation matching the first failing check. Returns None for a legal move."""
    if not state.status.is_in_progress:
        raise GameAlreadyOverError(
            f"Attempt to play '{move}' in a finished game (status: {state.status})"
        )

    player = move_player(move)
    if player != state.current_player:
        raise OutOfTurnError(
            f"Wrong player: expected player {state.current_player}, found player {player}"
        )

    match move:
        case Placement(coord=coord):
            if not coord.is_within(state.size):
                raise OutOfBoundsError(
                    f"Coordinate {coord} is outside of a board of size {state.size}"
                )
            if state.is_occupied(coord):
                raise CellOccupiedError(
                    f"Player {player} tries to place a stone on an occupied cell: {coord}"
                )
        case Action(kind=ActionKind.SWAP):
            if not is_swap_available(state):
                raise SwapNotAvailableError(
                    f"Swap is only allowed as the reply to the very first stone (move count: {state.move_count})"
                )
        case Action(kind=ActionKind.RESIGN) | Action(kind=ActionKind.PASS):
            pass
        case _:
            assert_never(move)


def is_swap_available(state: BoardState) -> bool:
    """
    Exactly one move has been played and it left a stone on the board.

    (The stone check only matters if the opening player's turn was forfeited with a pass.)
    """
    return (
        state.status.is_in_progress
        and state.move_count == 1
        and len(state.cells) == 1
    )


def legal_moves(state: BoardState) -> list[Move]:
    """Every move the player to move may make. Empty once the match is over."""
    if not state.status.is_in_progress:
        return []
    player = state.current_player
    moves: list[Move] = [Placement(player, coord) for coord in state.empty_cells()]
    if is_swap_available(state):
        moves.append(Action(player, ActionKind.SWAP))
    moves.append(Action(player, ActionKind.RESIGN))
    return moves


def replay(config: Config, moves: Iterable[Move]) -> BoardState:
    """Fold apply() over a move sequence starting from an empty board."""
    state = BoardState.new(config)
    for move in moves:
        apply_in_place(state, move)
    return state


def apply_in_place(state: BoardState, move: Move) -> None:
    """Same checks as apply(), but mutates `state`. Only for callers that own the state (replays, decoders)."""
    validate(state, move)
    _apply_validated(state, move)


# -- PRIVATE HELPERS ---
def _apply_validated(state: BoardState, move: Move) -> None:
    """Mutates `state`. Only ever called on a fresh copy, after validate() passed."""
    match move:
        case Placement(player=player, coord=coord):
            _place(state, player, coord)
        case Action(player=player, kind=ActionKind.SWAP):
            _swap(state, player)
        case Action(player=player, kind=ActionKind.RESIGN):
            state.status = Status.resigned(player)
        case Action(player=player, kind=ActionKind.PASS):
            state.current_player = state.next_player(player)
        case _:
            assert_never(move)
    state.move_count += 1


def _place(state: BoardState, player: PlayerId, coord: Coordinate) -> None:
    assert state.connectivity is not None
    state.cells[coord] = player
    won = state.connectivity.add_stone(coord, player, state.cells)
    if won:
        state.status = Status.won(player)
    elif state.is_full():
        state.status = Status.drawn()
    else:
        state.current_player = state.next_player(player)


def _swap(state: BoardState, player: PlayerId) -> None:
    """
    The single stone changes owner; no geometry changes.
    Play continues as if the swapping player had placed that stone: the opponent moves next.
    """
    (coord,) = state.cells
    state.cells[coord] = player
    state.rebuild_connectivity()
    state.current_player = state.next_player(player)
