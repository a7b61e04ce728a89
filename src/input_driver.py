# input_driver.py
# Translates raw key presses and swipes into move directions before they reach the session.

from typing import Optional

from board import Direction

MIN_SWIPE_DISTANCE = 30

KEY_MAP = {
    "ArrowUp": Direction.UP,
    "ArrowDown": Direction.DOWN,
    "ArrowLeft": Direction.LEFT,
    "ArrowRight": Direction.RIGHT,
    "W": Direction.UP,
    "A": Direction.LEFT,
    "S": Direction.DOWN,
    "D": Direction.RIGHT,
}

def direction_from_key(key: str) -> Optional[Direction]:
    """
    Maps a key name to a direction.
    Args:
        key (str): An arrow key name ("ArrowUp", ...) or one of W/A/S/D in either case.
    Returns:
        Optional[Direction]: The direction, or None for any other key.
    """
    if len(key) == 1:
        key = key.upper()
    return KEY_MAP.get(key)

def direction_from_swipe(delta_x: float, delta_y: float,
                         min_distance: float = MIN_SWIPE_DISTANCE) -> Optional[Direction]:
    """
    Maps a swipe to a direction along its dominant axis.
    Args:
        delta_x (float): Horizontal travel, positive to the right.
        delta_y (float): Vertical travel, positive downwards.
        min_distance (float): Swipes shorter than this on both axes are ignored.
    Returns:
        Optional[Direction]: The direction, or None if the swipe was too short.
    """
    if abs(delta_x) < min_distance and abs(delta_y) < min_distance:
        return None
    if abs(delta_x) > abs(delta_y):
        return Direction.RIGHT if delta_x > 0 else Direction.LEFT
    return Direction.DOWN if delta_y > 0 else Direction.UP
