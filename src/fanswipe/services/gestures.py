"""Interpretation of card drag gestures into swipe directions."""
from fanswipe.schemas.discovery import SwipeDirection

# Pixels of travel that commit a swipe
SWIPE_THRESHOLD = 100
# Pixels per second that commit a swipe regardless of travel
SWIPE_VELOCITY_THRESHOLD = 500


def interpret_drag(
    offset_x: float,
    offset_y: float,
    velocity_x: float = 0,
    velocity_y: float = 0,
    *,
    threshold: float = SWIPE_THRESHOLD,
    velocity_threshold: float = SWIPE_VELOCITY_THRESHOLD,
) -> SwipeDirection | None:
    """
    Turn the end of a drag into a swipe direction.

    Upward drags win over horizontal ones. A short but fast horizontal fling
    counts in the direction of its velocity. Returns None when the card should
    snap back.
    """
    if offset_y < -threshold or velocity_y < -velocity_threshold:
        return "up"
    if offset_x > threshold:
        return "right"
    if offset_x < -threshold:
        return "left"
    if abs(velocity_x) > velocity_threshold:
        return "right" if velocity_x > 0 else "left"
    return None
