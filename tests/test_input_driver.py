"""Tests for translating keys and swipes into directions."""

import pytest

from board import Direction
from input_driver import direction_from_key, direction_from_swipe


@pytest.mark.parametrize(
    "key, expected",
    [
        ("ArrowUp", Direction.UP),
        ("ArrowDown", Direction.DOWN),
        ("ArrowLeft", Direction.LEFT),
        ("ArrowRight", Direction.RIGHT),
        ("w", Direction.UP),
        ("A", Direction.LEFT),
        ("s", Direction.DOWN),
        ("d", Direction.RIGHT),
    ],
)
def test_direction_from_key(key, expected):
    assert direction_from_key(key) is expected


@pytest.mark.parametrize("key", ["x", "Enter", "", "arrowup"])
def test_unknown_keys_are_ignored(key):
    assert direction_from_key(key) is None


@pytest.mark.parametrize(
    "dx, dy, expected",
    [
        (50, 10, Direction.RIGHT),
        (-50, 10, Direction.LEFT),
        (10, 50, Direction.DOWN),
        (10, -50, Direction.UP),
        (40, 40, Direction.DOWN),
    ],
)
def test_direction_from_swipe(dx, dy, expected):
    assert direction_from_swipe(dx, dy) is expected


def test_short_swipe_is_ignored():
    assert direction_from_swipe(29, -29) is None
    assert direction_from_swipe(5, 5, min_distance=4) is Direction.DOWN
