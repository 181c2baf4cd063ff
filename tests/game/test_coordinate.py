"""Unit tests for src/game/coordinate.py"""

import pytest

from src.game.coordinate import Coordinate


@pytest.mark.parametrize(
    "index, size, expected",
    [
        (0, 5, Coordinate(0, 0)),
        (4, 5, Coordinate(0, 4)),
        (5, 5, Coordinate(1, 0)),
        (24, 5, Coordinate(4, 4)),
        (0, 1, Coordinate(0, 0)),
    ],
)
def test_from_index(index: int, size: int, expected: Coordinate) -> None:
    coord = Coordinate.from_index(index, size)
    assert coord == expected
    assert coord.index(size) == index


@pytest.mark.parametrize(
    "coord, size, expected",
    [
        (Coordinate(0, 0), 1, True),
        (Coordinate(2, 2), 3, True),
        (Coordinate(3, 0), 3, False),
        (Coordinate(0, 3), 3, False),
        (Coordinate(-1, 0), 3, False),
        (Coordinate(0, -1), 3, False),
    ],
)
def test_is_within(coord: Coordinate, size: int, expected: bool) -> None:
    assert coord.is_within(size) is expected


def test_shifted() -> None:
    assert Coordinate(2, 2).shifted((-1, 1)) == Coordinate(1, 3)


def test_ordering_is_row_major() -> None:
    coords = [Coordinate(1, 0), Coordinate(0, 2), Coordinate(0, 1)]
    assert sorted(coords) == [Coordinate(0, 1), Coordinate(0, 2), Coordinate(1, 0)]


def test_to_notation() -> None:
    assert Coordinate(3, 4).to_notation() == "3,4"
    assert str(Coordinate(3, 4)) == "(3, 4)"
